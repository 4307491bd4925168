# Copyright (c) Syntropy Systems
"""A single benchmark iteration: clean, generate, convert, link, time."""
from __future__ import annotations

import logging
import os
import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import TYPE_CHECKING, Protocol

from rldbench.tools import TicketCountError
from rldbench.workspace import clean_workspace, converted_path, find_tickets

if TYPE_CHECKING:
    from collections.abc import Sequence
    from pathlib import Path

    from rldbench.models.bench import RunConfig

logger = logging.getLogger(__name__)


class Toolchain(Protocol):
    def generate(self, module_count: int, external_count: int, linkonce_count: int) -> None:
        ...

    def convert(self, ticket: Path, output: Path) -> None:
        ...

    def link_repo(self, inputs: Sequence[Path], output: Path) -> None:
        ...

    def link_traditional(self, inputs: Sequence[Path], output: Path) -> None:
        ...


def conversion_workers() -> int:
    """Number of conversions allowed to run at once."""
    return os.cpu_count() or 1


def convert_tickets(
    tools: Toolchain,
    tickets: Sequence[Path],
    max_workers: int | None = None,
) -> list[Path]:
    """Convert every ticket to an object file, several at a time.

    Returns the object files in ticket order. The first failure cancels
    conversions that have not started yet and is re-raised; conversions
    already running are left to finish.
    """
    if max_workers is None:
        max_workers = conversion_workers()
    outputs = [converted_path(ticket) for ticket in tickets]
    if not tickets:
        return outputs

    with ThreadPoolExecutor(max_workers=max_workers) as pool:
        fut2ticket = {
            pool.submit(tools.convert, ticket, output): ticket
            for ticket, output in zip(tickets, outputs)
        }
        try:
            for future in as_completed(fut2ticket):
                _ = future.result()
                logger.debug("Converted %s", fut2ticket[future].name)
        except Exception:
            for future in fut2ticket:
                _ = future.cancel()
            raise

    return outputs


def single_run(config: RunConfig, tools: Toolchain) -> int:
    """Run one benchmark iteration and return the link time in milliseconds.

    Any tool failure propagates unchanged.
    """
    work_dir = config.work_directory

    _ = clean_workspace(work_dir, config.repository_db_name)

    tools.generate(
        config.module_count,
        config.external_symbol_count,
        config.linkonce_symbol_count,
    )

    tickets = find_tickets(work_dir)
    if len(tickets) != config.module_count:
        raise TicketCountError(config.module_count, len(tickets))

    if config.uses_repo_linker:
        inputs = tickets
        link = tools.link_repo
    else:
        logger.debug("Converting %d ticket file(s)", len(tickets))
        inputs = convert_tickets(tools, tickets)
        link = tools.link_traditional

    start = time.perf_counter()
    link(inputs, config.output_path)
    elapsed = time.perf_counter() - start

    elapsed_ms = round(elapsed * 1000)
    logger.debug(
        "Linked %d input(s) in %d ms (external=%d, linkonce=%d)",
        len(inputs),
        elapsed_ms,
        config.external_symbol_count,
        config.linkonce_symbol_count,
    )
    return elapsed_ms
