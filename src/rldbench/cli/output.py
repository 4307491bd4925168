# Copyright (c) Syntropy Systems
"""Console and logging setup shared by rldbench commands."""
from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler

# Standard output is reserved for the result table.
err_console = Console(stderr=True)


def configure_logging(*, verbose: bool = False, debug: bool = False) -> None:
    """Route log records to stderr through rich."""
    if debug:
        level = logging.DEBUG
    elif verbose:
        level = logging.INFO
    else:
        level = logging.WARNING

    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )
