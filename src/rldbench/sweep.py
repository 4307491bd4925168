# Copyright (c) Syntropy Systems
"""Sweep orchestration: one serial benchmark run per grid point."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import partial
from typing import TYPE_CHECKING

from rldbench.executor import single_run
from rldbench.models.bench import DEFAULT_REPO_NAME, RunConfig, RunResult
from rldbench.serial import run_serially
from rldbench.tools import ToolRunner

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence
    from pathlib import Path

    from rldbench.executor import Toolchain
    from rldbench.models.base import LinkerKind
    from rldbench.models.bench import GridPoint

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SweepSettings:
    """Settings shared by every run of a sweep.

    The module count stays fixed while the symbol counts vary.
    """

    bin_dir: Path
    work_dir: Path
    module_count: int
    linker: LinkerKind = "repo"
    repo_name: str = DEFAULT_REPO_NAME
    verbose: bool = False

    def run_config(self, point: GridPoint) -> RunConfig:
        """RunConfig for one grid point."""
        return RunConfig(
            binary_directory=self.bin_dir,
            work_directory=self.work_dir,
            repository_db_name=self.repo_name,
            module_count=self.module_count,
            external_symbol_count=point.external_symbol_count,
            linkonce_symbol_count=point.linkonce_symbol_count,
            linker=self.linker,
            verbose=self.verbose,
        )


def _run_point(
    settings: SweepSettings,
    point: GridPoint,
    tools_factory: Callable[[RunConfig], Toolchain],
) -> RunResult:
    config = settings.run_config(point)
    elapsed = single_run(config, tools_factory(config))
    return RunResult.for_point(point, elapsed)


def run_sweep(
    settings: SweepSettings,
    points: Sequence[GridPoint],
    tools_factory: Callable[[RunConfig], Toolchain] = ToolRunner.from_config,
    on_result: Callable[[int, RunResult], None] | None = None,
) -> list[RunResult]:
    """Benchmark every grid point in order and return the results.

    Runs never overlap. The first failure aborts the sweep.
    """
    logger.info(
        "Sweeping %d point(s) with %d module(s) using the %s linker",
        len(points),
        settings.module_count,
        settings.linker,
    )
    tasks = [partial(_run_point, settings, point, tools_factory) for point in points]
    return run_serially(tasks, on_result=on_result)
