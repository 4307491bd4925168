# Copyright (c) Syntropy Systems
"""Pydantic models for benchmark runs and their results."""

from __future__ import annotations

from pathlib import Path

from pydantic import Field, NonNegativeInt, PositiveInt

from .base import FrozenModel, LinkerKind

DEFAULT_REPO_NAME = "repository.db"
LINK_OUTPUT_NAME = "a.out"


class RunConfig(FrozenModel):
    """Everything a single benchmark iteration needs to know.

    Built fresh for each grid point and never mutated.
    """

    binary_directory: Path
    work_directory: Path
    repository_db_name: str = DEFAULT_REPO_NAME
    module_count: PositiveInt
    external_symbol_count: PositiveInt
    linkonce_symbol_count: PositiveInt
    linker: LinkerKind = "repo"
    verbose: bool = False

    @property
    def repository_path(self) -> Path:
        """Path of the program repository database."""
        return self.work_directory / self.repository_db_name

    @property
    def output_path(self) -> Path:
        """Path of the linked executable."""
        return self.work_directory / LINK_OUTPUT_NAME

    @property
    def uses_repo_linker(self) -> bool:
        return self.linker == "repo"


class GridPoint(FrozenModel):
    """One (external, linkonce) combination in a sweep."""

    external_symbol_count: PositiveInt
    linkonce_symbol_count: PositiveInt


class RunResult(FrozenModel):
    """Link time measured for one grid point."""

    external_symbol_count: PositiveInt
    linkonce_symbol_count: PositiveInt
    elapsed_milliseconds: NonNegativeInt = Field(
        description="Wall-clock duration of the link step",
    )

    @classmethod
    def for_point(cls, point: GridPoint, elapsed_milliseconds: int) -> RunResult:
        return cls(
            external_symbol_count=point.external_symbol_count,
            linkonce_symbol_count=point.linkonce_symbol_count,
            elapsed_milliseconds=elapsed_milliseconds,
        )
