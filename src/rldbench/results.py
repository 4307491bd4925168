# Copyright (c) Syntropy Systems
"""Rendering sweep results for plotting tools such as gnuplot."""
from __future__ import annotations

import sys
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable

    from rldbench.models.bench import RunResult

HEADER = ("external", "linkonce", "time")
STDOUT = "-"


def format_results(results: Iterable[RunResult]) -> str:
    """Render results as a space separated table with a header row.

    Rows keep the order of the input.
    """
    lines = [" ".join(HEADER)]
    lines.extend(
        f"{r.external_symbol_count} {r.linkonce_symbol_count} {r.elapsed_milliseconds}"
        for r in results
    )
    return "\n".join(lines) + "\n"


def write_results(text: str, output: str) -> None:
    """Write rendered results to a file, or to stdout when output is '-'."""
    if output == STDOUT:
        _ = sys.stdout.write(text)
        sys.stdout.flush()
        return
    _ = Path(output).write_text(text)
