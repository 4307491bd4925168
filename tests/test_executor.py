# Copyright (c) Syntropy Systems
"""Tests for a single benchmark iteration."""

from __future__ import annotations

import threading
import time
from pathlib import Path

import pytest

from rldbench.executor import convert_tickets, single_run
from rldbench.models.bench import RunConfig
from rldbench.tools import TicketCountError, ToolError


def _config(work_dir: Path, linker: str = "repo", modules: int = 3) -> RunConfig:
    return RunConfig(
        binary_directory=Path("/nonexistent/bin"),
        work_directory=work_dir,
        module_count=modules,
        external_symbol_count=2000,
        linkonce_symbol_count=4000,
        linker=linker,
    )


class TestSingleRun:
    """Tests for single_run."""

    def test_repo_linker_links_tickets(self, work_dir, fake_tools):
        """The repo linker gets the ticket files without conversion."""
        elapsed = single_run(_config(work_dir), fake_tools)

        assert elapsed >= 0
        assert fake_tools.names() == ["generate", "link_repo"]
        assert fake_tools.calls[0] == ("generate", 3, 2000, 4000)
        assert fake_tools.calls[1] == ("link_repo", ["module0.o", "module1.o", "module2.o"])
        assert (work_dir / "a.out").exists()

    def test_traditional_linker_converts_first(self, work_dir, fake_tools):
        _ = single_run(_config(work_dir, linker="traditional"), fake_tools)

        names = fake_tools.names()
        assert names[0] == "generate"
        assert names[1:4] == ["convert"] * 3
        assert names[4] == "link_traditional"
        assert fake_tools.calls[4] == (
            "link_traditional",
            ["module0.o.elf", "module1.o.elf", "module2.o.elf"],
        )

    def test_stale_files_removed_before_generation(self, work_dir, fake_tools):
        """Leftovers from a previous run are gone when the generator starts."""
        for name in ("stale1.o", "stale2.o", "stale1.o.elf", "repository.db"):
            _ = (work_dir / name).write_text("old")
        seen_at_generate: list[list[str]] = []
        original = fake_tools.generate

        def generate(*args):
            seen_at_generate.append(sorted(p.name for p in work_dir.iterdir()))
            original(*args)

        fake_tools.generate = generate

        _ = single_run(_config(work_dir), fake_tools)

        assert seen_at_generate == [[]]

    def test_ticket_count_after_generation(self, work_dir, fake_tools):
        _ = single_run(_config(work_dir, modules=5), fake_tools)

        assert len(list(work_dir.glob("*.o"))) == 5

    def test_consecutive_runs_do_not_accumulate(self, work_dir, fake_tools):
        _ = single_run(_config(work_dir, modules=5, linker="traditional"), fake_tools)
        _ = single_run(_config(work_dir, modules=2, linker="traditional"), fake_tools)

        assert len(list(work_dir.glob("*.o"))) == 2
        assert len(list(work_dir.glob("*.o.elf"))) == 2

    def test_wrong_ticket_count(self, work_dir, fake_tools):
        fake_tools.ticket_override = 1

        with pytest.raises(TicketCountError, match="produced 1 ticket file"):
            _ = single_run(_config(work_dir), fake_tools)

        assert "link_repo" not in fake_tools.names()

    @pytest.mark.parametrize(
        ("failing", "linker"),
        [
            ("generate", "repo"),
            ("link_repo", "repo"),
            ("convert", "traditional"),
            ("link_traditional", "traditional"),
        ],
    )
    def test_tool_failure_propagates(self, work_dir, fake_tools, failing, linker):
        fake_tools.fail_on = {failing}

        with pytest.raises(ToolError, match=f"{failing} exploded"):
            _ = single_run(_config(work_dir, linker=linker), fake_tools)

    def test_conversion_failure_skips_link(self, work_dir, fake_tools):
        fake_tools.fail_on = {"convert"}

        with pytest.raises(ToolError):
            _ = single_run(_config(work_dir, linker="traditional"), fake_tools)

        assert "link_traditional" not in fake_tools.names()

    def test_elapsed_measures_link(self, work_dir, fake_tools):
        def slow_link(inputs, output):
            time.sleep(0.05)

        fake_tools.link_repo = slow_link

        elapsed = single_run(_config(work_dir), fake_tools)

        assert elapsed >= 40


class TestConvertTickets:
    """Tests for the bounded conversion fan-out."""

    def test_concurrency_is_bounded(self, work_dir, fake_tools):
        tickets = [work_dir / f"m{i}.o" for i in range(12)]
        active = 0
        peak = 0
        lock = threading.Lock()

        def convert(ticket, output):
            nonlocal active, peak
            with lock:
                active += 1
                peak = max(peak, active)
            time.sleep(0.02)
            with lock:
                active -= 1

        fake_tools.convert = convert

        outputs = convert_tickets(fake_tools, tickets, max_workers=3)

        assert 1 <= peak <= 3
        assert outputs == [work_dir / f"m{i}.o.elf" for i in range(12)]

    def test_no_tickets(self, fake_tools):
        assert convert_tickets(fake_tools, []) == []

    def test_first_failure_cancels_pending(self, work_dir, fake_tools):
        """Conversions queued behind a failure never start."""
        tickets = [work_dir / f"m{i}.o" for i in range(20)]
        started: list[str] = []

        def convert(ticket, output):
            started.append(ticket.name)
            if ticket.name == "m0.o":
                msg = "repo2obj failed"
                raise ToolError("repo2obj", ["repo2obj"], 1, msg)
            time.sleep(0.05)

        fake_tools.convert = convert

        with pytest.raises(ToolError, match="repo2obj failed"):
            _ = convert_tickets(fake_tools, tickets, max_workers=1)

        assert started[0] == "m0.o"
        assert len(started) < len(tickets)
