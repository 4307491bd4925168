# Copyright (c) Syntropy Systems
"""Strictly sequential task execution."""
from __future__ import annotations

from typing import TYPE_CHECKING, TypeVar

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

T = TypeVar("T")


def run_serially(
    tasks: Iterable[Callable[[], T]],
    on_result: Callable[[int, T], None] | None = None,
) -> list[T]:
    """Run zero-argument tasks one after another and collect their results.

    A task starts only once the previous one has returned, so benchmark
    iterations never compete for CPU or disk. The first exception stops the
    sequence and propagates; no partial result list is returned.
    """
    results: list[T] = []
    for index, task in enumerate(tasks):
        result = task()
        results.append(result)
        if on_result is not None:
            on_result(index, result)
    return results
