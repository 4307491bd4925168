# Copyright (c) Syntropy Systems
"""rldbench doctor command."""
from __future__ import annotations

import os
import tempfile
from pathlib import Path

import typer
import yaml
from rich.console import Console

from rldbench.config import BenchConfig, Linker, load_config

console = Console()


def _required_tools(config: BenchConfig, linker: str) -> list[tuple[str, str]]:
    """(role, executable) pairs needed for the given linker."""
    tools = [("generator", config.generator)]
    if linker == "traditional":
        tools.append(("converter", config.converter))
        tools.append(("traditional linker", config.traditional_linker))
    else:
        tools.append(("repo linker", config.repo_linker))
    return tools


def doctor(
    bin_dir: Path | None = typer.Option(
        None,
        "--bin-dir",
        help="The directory containing the toolchain executables",
    ),
    work_dir: Path = typer.Option(
        Path(tempfile.gettempdir()),
        "--work-dir",
        help="The directory to be used for intermediate (work) files",
    ),
    linker: Linker | None = typer.Option(
        None,
        "--linker",
        help="Check the tools needed by this linker (default: repo)",
    ),
    config_file: Path | None = typer.Option(
        None,
        "--config",
        exists=True,
        dir_okay=False,
        help="Configuration file",
    ),
) -> None:
    """Check the benchmark setup and diagnose issues.

    Verifies:
    - configuration file is readable
    - toolchain executables exist and are executable
    - work directory is usable
    """
    issues: list[str] = []

    try:
        config = load_config(config_file)
    except (OSError, ValueError, yaml.YAMLError) as e:
        console.print(f"[red]✗[/red] Configuration: {e}")
        raise typer.Exit(1) from e

    bin_dir = bin_dir or config.bin_dir
    linker_name = linker.value if linker is not None else config.linker
    console.print(f"[green]✓[/green] Linker: {linker_name}")

    # Check tools
    for role, name in _required_tools(config, linker_name):
        path = bin_dir / name
        if path.is_file() and os.access(path, os.X_OK):
            console.print(f"[green]✓[/green] {role}: {path}")
        else:
            console.print(f"[red]✗[/red] {role} not found: {path}")
            issues.append(f"Missing {role}")

    # Check work directory
    if not work_dir.is_dir():
        console.print(f"[red]✗[/red] Work directory not found: {work_dir}")
        issues.append("Work directory missing")
    else:
        entries = sum(1 for _ in work_dir.iterdir())
        if entries:
            console.print(
                f"[yellow]⚠[/yellow] Work directory: {work_dir} "
                f"has {entries} entries (use --force)"
            )
        else:
            console.print(f"[green]✓[/green] Work directory: {work_dir}")

    # Summary
    console.print()
    if issues:
        console.print(f"[red]{len(issues)} issue(s) found[/red]")
        raise typer.Exit(1)
    console.print("[green]All checks passed[/green]")
