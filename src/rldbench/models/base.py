# Copyright (c) Syntropy Systems
"""Shared Pydantic model helpers for rldbench."""

from __future__ import annotations

from typing import ClassVar, Literal

from pydantic import BaseModel, ConfigDict
from typing_extensions import TypeAlias

LinkerKind: TypeAlias = Literal["repo", "traditional"]


class FrozenModel(BaseModel):
    """Immutable base model shared by rldbench records."""

    model_config: ClassVar[ConfigDict] = ConfigDict(
        frozen=True,
        extra="forbid",
    )
