# Copyright (c) Syntropy Systems
"""Work directory validation and cleanup."""
from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pathlib import Path

logger = logging.getLogger(__name__)

TICKET_PATTERN = "*.o"
CONVERTED_SUFFIX = ".elf"
CONVERTED_PATTERN = TICKET_PATTERN + CONVERTED_SUFFIX


class WorkDirectoryError(RuntimeError):
    """The work directory cannot be used for a benchmark sweep."""


def find_tickets(work_dir: Path) -> list[Path]:
    """Return the ticket files in work_dir, sorted by name."""
    return sorted(work_dir.glob(TICKET_PATTERN))


def converted_path(ticket: Path) -> Path:
    """Path of the object file that repo2obj produces for a ticket."""
    return ticket.with_name(ticket.name + CONVERTED_SUFFIX)


def clean_workspace(work_dir: Path, repo_name: str) -> int:
    """Delete tickets, converted objects and the repository database.

    Files that are already gone are skipped; any other OSError propagates.
    Returns the number of files removed.
    """
    stale = [
        *work_dir.glob(TICKET_PATTERN),
        *work_dir.glob(CONVERTED_PATTERN),
        work_dir / repo_name,
    ]

    removed = 0
    for path in stale:
        try:
            path.unlink()
        except FileNotFoundError:
            continue
        removed += 1

    if removed:
        logger.debug("Removed %d stale file(s) from %s", removed, work_dir)
    return removed


def check_work_directory(work_dir: Path, *, force: bool = False) -> None:
    """Check that work_dir exists, is a directory and, unless force, is empty.

    Raises WorkDirectoryError otherwise.
    """
    if not work_dir.exists():
        msg = f"The specified work directory does not exist: {work_dir}"
        raise WorkDirectoryError(msg)
    if not work_dir.is_dir():
        msg = f"The specified work directory is not a directory: {work_dir}"
        raise WorkDirectoryError(msg)
    if not force and any(work_dir.iterdir()):
        msg = (
            f"The specified work directory was not empty: {work_dir} "
            "(--force to continue anyway)"
        )
        raise WorkDirectoryError(msg)
