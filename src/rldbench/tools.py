# Copyright (c) Syntropy Systems
"""Subprocess adapter for the generator, converter and linkers."""
from __future__ import annotations

import ctypes
import logging
import os
import shlex
import signal
import subprocess
import sys
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Sequence
    from pathlib import Path

    from rldbench.config import BenchConfig
    from rldbench.models.bench import RunConfig

logger = logging.getLogger(__name__)

# Environment variable through which the program repository tools find the database
REPOFILE_ENV = "REPOFILE"
STDERR_TAIL_LINES = 20


def setup_pdeathsig() -> None:
    """Set PDEATHSIG so a tool dies when the benchmark driver dies.

    Only works on Linux.
    """
    if sys.platform != "linux":
        return
    try:
        libc = ctypes.CDLL("libc.so.6", use_errno=True)
        pr_set_pdeathsig = 1
        libc.prctl(pr_set_pdeathsig, signal.SIGKILL)
    except (AttributeError, OSError):
        # Can't set PDEATHSIG, continue without it
        return


def _link_args(inputs: Sequence[Path], output: Path) -> list[str]:
    return ["-o", str(output.absolute()), *(str(p.absolute()) for p in inputs)]


class ToolError(RuntimeError):
    """An external tool exited with a non-zero status."""

    def __init__(
        self,
        tool: str,
        argv: Sequence[str],
        returncode: int,
        stderr: str = "",
    ) -> None:
        self.tool = tool
        self.argv = list(argv)
        self.returncode = returncode
        self.stderr = stderr
        message = f"{tool} failed with exit status {returncode}"
        tail = "\n".join(stderr.strip().splitlines()[-STDERR_TAIL_LINES:])
        if tail:
            message = f"{message}:\n{tail}"
        super().__init__(message)


class TicketCountError(RuntimeError):
    """The generator did not leave the expected number of ticket files."""

    def __init__(self, expected: int, found: int) -> None:
        self.expected = expected
        self.found = found
        super().__init__(f"generator produced {found} ticket file(s), expected {expected}")


class ToolRunner:
    """Runs the toolchain executables for one benchmark iteration.

    Every tool runs inside the work directory with REPOFILE pointing at the
    repository database. Paths are made absolute since tools run with the work
    directory as cwd. With verbose set, each command line is logged, tool
    stderr is inherited and tool stdout is copied to stderr; stdout stays
    reserved for results.
    """

    bin_dir: Path
    work_dir: Path
    repository_path: Path
    verbose: bool
    generator: str
    converter: str
    repo_linker: str
    traditional_linker: str
    env: dict[str, str]

    def __init__(  # noqa: PLR0913
        self,
        bin_dir: Path,
        work_dir: Path,
        repository_path: Path,
        verbose: bool = False,  # noqa: FBT001, FBT002
        generator: str = "rld-gen",
        converter: str = "repo2obj",
        repo_linker: str = "rld",
        traditional_linker: str = "ld.lld",
    ) -> None:
        self.bin_dir = bin_dir.absolute()
        self.work_dir = work_dir.absolute()
        self.repository_path = repository_path.absolute()
        self.verbose = verbose
        self.generator = generator
        self.converter = converter
        self.repo_linker = repo_linker
        self.traditional_linker = traditional_linker

        self.env = os.environ.copy()
        self.env[REPOFILE_ENV] = str(self.repository_path)

    @classmethod
    def from_config(
        cls,
        config: RunConfig,
        bench_config: BenchConfig | None = None,
    ) -> ToolRunner:
        """Build a runner for a run, taking tool names from bench_config."""
        names: dict[str, str] = {}
        if bench_config is not None:
            names = {
                "generator": bench_config.generator,
                "converter": bench_config.converter,
                "repo_linker": bench_config.repo_linker,
                "traditional_linker": bench_config.traditional_linker,
            }
        return cls(
            config.binary_directory,
            config.work_directory,
            config.repository_path,
            config.verbose,
            **names,
        )

    def tool_path(self, name: str) -> Path:
        """Full path of a tool executable."""
        return self.bin_dir / name

    def generate(self, module_count: int, external_count: int, linkonce_count: int) -> None:
        """Write module_count ticket files into the work directory."""
        self._invoke(
            self.generator,
            [
                "--modules", str(module_count),
                "--external", str(external_count),
                "--linkonce", str(linkonce_count),
                "--output-directory", str(self.work_dir),
            ],
        )

    def convert(self, ticket: Path, output: Path) -> None:
        """Convert one ticket file to a linkable object file."""
        self._invoke(self.converter, ["-o", str(output.absolute()), str(ticket.absolute())])

    def link_repo(self, inputs: Sequence[Path], output: Path) -> None:
        """Link ticket files with the repo-aware linker."""
        self._invoke(self.repo_linker, _link_args(inputs, output))

    def link_traditional(self, inputs: Sequence[Path], output: Path) -> None:
        """Link converted object files with a traditional linker."""
        self._invoke(self.traditional_linker, _link_args(inputs, output))

    def _invoke(self, tool: str, args: list[str]) -> None:
        argv = [str(self.tool_path(tool)), *args]
        if self.verbose:
            logger.info("%s", shlex.join(argv))
        else:
            logger.debug("%s", shlex.join(argv))

        result = subprocess.run(  # noqa: S603
            argv,
            cwd=str(self.work_dir),
            env=self.env,
            stdout=subprocess.PIPE,
            stderr=None if self.verbose else subprocess.PIPE,
            text=True,
            check=False,
            preexec_fn=setup_pdeathsig if sys.platform == "linux" else None,  # noqa: PLW1509
        )
        if self.verbose and result.stdout:
            _ = sys.stderr.write(result.stdout)
            sys.stderr.flush()
        if result.returncode != 0:
            raise ToolError(tool, argv, result.returncode, result.stderr or "")
