# Copyright (c) Syntropy Systems
"""Parameter grid for symbol-count sweeps."""
from __future__ import annotations

import itertools

from rldbench.models.bench import GridPoint


def symbol_counts(maximum: int, increment: int) -> range:
    """Multiples of increment from increment up to and including maximum."""
    return range(increment, maximum + 1, increment)


def grid_size(external_max: int, linkonce_max: int, increment: int) -> int:
    """Number of points build_grid() produces for the same bounds."""
    return (external_max // increment) * (linkonce_max // increment)


def build_grid(external_max: int, linkonce_max: int, increment: int) -> list[GridPoint]:
    """Build the ordered list of grid points for a sweep.

    External counts form the outer loop and linkonce counts the inner one,
    so consecutive points differ in linkonce first. A maximum smaller than
    the increment yields an empty grid.
    """
    for name, value in (
        ("external_max", external_max),
        ("linkonce_max", linkonce_max),
        ("increment", increment),
    ):
        if value <= 0:
            msg = f"{name} must be a positive integer, got {value}"
            raise ValueError(msg)

    return [
        GridPoint(external_symbol_count=external, linkonce_symbol_count=linkonce)
        for external, linkonce in itertools.product(
            symbol_counts(external_max, increment),
            symbol_counts(linkonce_max, increment),
        )
    ]
