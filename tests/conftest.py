# Copyright (c) Syntropy Systems
"""Pytest fixtures for rldbench tests."""

from __future__ import annotations

import stat
import tempfile
import threading
from collections.abc import Generator, Sequence
from pathlib import Path

import pytest

from rldbench.tools import ToolError

GENERATOR_SCRIPT = """#!/bin/sh
echo "rld-gen $*" >> "$(dirname "$0")/calls.log"
modules=0
outdir=.
while [ $# -gt 0 ]; do
  case "$1" in
    --modules) modules=$2; shift 2;;
    --output-directory) outdir=$2; shift 2;;
    *) shift;;
  esac
done
i=0
while [ $i -lt $modules ]; do
  : > "$outdir/module$i.o"
  i=$((i+1))
done
: > "$REPOFILE"
"""

# Shared by the converter and both linkers: create whatever -o names.
OUTPUT_SCRIPT = """#!/bin/sh
echo "$(basename "$0") $*" >> "$(dirname "$0")/calls.log"
echo "$(basename "$0"): done"
out=
while [ $# -gt 0 ]; do
  case "$1" in
    -o) out=$2; shift 2;;
    *) shift;;
  esac
done
: > "$out"
"""

FAILING_SCRIPT = """#!/bin/sh
echo "$(basename "$0") $*" >> "$(dirname "$0")/calls.log"
echo "boom: cannot link" >&2
exit 3
"""


def write_script(path: Path, body: str) -> Path:
    """Write an executable shell script."""
    _ = path.write_text(body)
    path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return path


class FakeTools:
    """In-process stand-in for the toolchain."""

    def __init__(self, work_dir: Path, fail_on: Sequence[str] = ()) -> None:
        self.work_dir = work_dir
        self.fail_on = set(fail_on)
        self.ticket_override: int | None = None
        self.calls: list[tuple[object, ...]] = []
        self._lock = threading.Lock()

    def _record(self, *call: object) -> None:
        with self._lock:
            self.calls.append(call)

    def _maybe_fail(self, name: str) -> None:
        if name in self.fail_on:
            raise ToolError(name, [name], 1, f"{name} exploded")

    def generate(self, module_count: int, external_count: int, linkonce_count: int) -> None:
        self._record("generate", module_count, external_count, linkonce_count)
        self._maybe_fail("generate")
        count = module_count if self.ticket_override is None else self.ticket_override
        for i in range(count):
            _ = (self.work_dir / f"module{i}.o").write_text("ticket")
        _ = (self.work_dir / "repository.db").write_text("db")

    def convert(self, ticket: Path, output: Path) -> None:
        self._record("convert", ticket.name)
        self._maybe_fail("convert")
        _ = output.write_text("elf")

    def link_repo(self, inputs: Sequence[Path], output: Path) -> None:
        self._record("link_repo", [p.name for p in inputs])
        self._maybe_fail("link_repo")
        _ = output.write_text("exe")

    def link_traditional(self, inputs: Sequence[Path], output: Path) -> None:
        self._record("link_traditional", [p.name for p in inputs])
        self._maybe_fail("link_traditional")
        _ = output.write_text("exe")

    def names(self) -> list[object]:
        return [call[0] for call in self.calls]


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for testing."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def work_dir(temp_dir: Path) -> Path:
    """An empty work directory."""
    path = temp_dir / "work"
    path.mkdir()
    return path


@pytest.fixture
def fake_tools(work_dir: Path) -> FakeTools:
    """Fake toolchain writing into the work directory."""
    return FakeTools(work_dir)


@pytest.fixture
def fake_bin(temp_dir: Path) -> Path:
    """A bin directory holding shell-script versions of the toolchain."""
    bin_dir = temp_dir / "bin"
    bin_dir.mkdir()
    _ = write_script(bin_dir / "rld-gen", GENERATOR_SCRIPT)
    for name in ("repo2obj", "rld", "ld.lld"):
        _ = write_script(bin_dir / name, OUTPUT_SCRIPT)
    return bin_dir


@pytest.fixture
def calls_log(fake_bin: Path):
    """Read the commands the fake toolchain has seen so far."""

    def read() -> list[str]:
        log = fake_bin / "calls.log"
        if not log.exists():
            return []
        return log.read_text().splitlines()

    return read


@pytest.fixture
def break_tool(fake_bin: Path):
    """Replace one fake tool with a script that exits non-zero."""

    def replace(name: str) -> Path:
        return write_script(fake_bin / name, FAILING_SCRIPT)

    return replace
