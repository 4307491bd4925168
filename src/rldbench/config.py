# Copyright (c) Syntropy Systems
"""Configuration management for rldbench."""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import cast

import yaml

from rldbench.models.bench import DEFAULT_REPO_NAME

CONFIG_FILENAME = "rldbench.yaml"


class Linker(str, Enum):
    """Linker under test."""

    repo = "repo"
    traditional = "traditional"


LINKER_KINDS = tuple(kind.value for kind in Linker)


@dataclass
class BenchConfig:
    """Configuration for rldbench."""

    # Directory containing the toolchain executables
    bin_dir: Path = Path("/usr/bin")

    # "repo" links ticket files directly, "traditional" converts them first
    linker: str = "repo"

    # Name of the program repository database inside the work directory
    repo_name: str = DEFAULT_REPO_NAME

    # Executable names, resolved against bin_dir
    generator: str = "rld-gen"
    converter: str = "repo2obj"
    repo_linker: str = "rld"
    traditional_linker: str = "ld.lld"


def get_global_config_dir() -> Path:
    """Get the global rldbench config directory (~/.rldbench)."""
    return Path.home() / ".rldbench"


def find_config_file(explicit: Path | None = None) -> Path | None:
    """Locate the configuration file to use.

    Looks for config in:
    1. Provided path
    2. ./rldbench.yaml
    3. ~/.rldbench/config.yaml

    Returns None if none of them exists.
    """
    if explicit is not None:
        return explicit

    local = Path.cwd() / CONFIG_FILENAME
    if local.is_file():
        return local

    global_config = get_global_config_dir() / "config.yaml"
    if global_config.is_file():
        return global_config

    return None


def load_config(path: Path | None = None) -> BenchConfig:
    """Load configuration from a YAML file or defaults.

    An explicitly given path must exist. Keys with a value of the wrong
    type are ignored.
    """
    config = BenchConfig()

    config_path = find_config_file(path)
    if config_path is None:
        return config

    with config_path.open() as f:
        loaded = yaml.safe_load(f) or {}
    if not isinstance(loaded, dict):
        msg = f"Configuration file {config_path} must contain a mapping"
        raise ValueError(msg)
    data = cast("dict[str, object]", loaded)

    bin_dir = data.get("bin_dir")
    if isinstance(bin_dir, str):
        config.bin_dir = Path(bin_dir).expanduser()

    linker = data.get("linker")
    if linker is not None:
        if linker not in LINKER_KINDS:
            msg = f"Unknown linker '{linker}' (expected one of: {', '.join(LINKER_KINDS)})"
            raise ValueError(msg)
        config.linker = cast("str", linker)

    repo_name = data.get("repo_name")
    if isinstance(repo_name, str):
        config.repo_name = repo_name

    tools = data.get("tools")
    if isinstance(tools, dict):
        tool_names = cast("dict[str, object]", tools)
        for field_name in ("generator", "converter", "repo_linker", "traditional_linker"):
            value = tool_names.get(field_name)
            if isinstance(value, str):
                setattr(config, field_name, value)

    return config
