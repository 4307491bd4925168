# Copyright (c) Syntropy Systems
"""rldbench run command."""
from __future__ import annotations

import logging
import tempfile
from functools import partial
from pathlib import Path

import typer
import yaml
from rich.table import Table

from rldbench.cli.output import configure_logging, err_console
from rldbench.config import Linker, load_config
from rldbench.grid import build_grid
from rldbench.models.bench import RunResult
from rldbench.results import STDOUT, format_results, write_results
from rldbench.sweep import SweepSettings, run_sweep
from rldbench.tools import ToolRunner
from rldbench.workspace import check_work_directory

logger = logging.getLogger(__name__)


def run(  # noqa: PLR0913
    work_dir: Path = typer.Option(
        Path(tempfile.gettempdir()),
        "--work-dir",
        help="The directory to be used for intermediate (work) files",
    ),
    bin_dir: Path | None = typer.Option(
        None,
        "--bin-dir",
        help="The directory containing the toolchain executables (default: /usr/bin)",
    ),
    output: str = typer.Option(
        STDOUT,
        "--output", "-o",
        help="The file to which the results will be written ('-' for stdout)",
    ),
    force: bool = typer.Option(
        False,
        "--force", "-f",
        help="Continue even if the work directory is not empty",
    ),
    increment: int = typer.Option(
        1000,
        "--increment",
        min=1,
        help="The number by which the symbol counts are incremented on each run",
    ),
    external: int = typer.Option(
        2000,
        "--external",
        min=1,
        help="The maximum number of external symbols defined by each module",
    ),
    linkonce: int = typer.Option(
        2000,
        "--linkonce",
        min=1,
        help="The maximum number of linkonce symbols defined by each module",
    ),
    modules: int = typer.Option(
        10,
        "--modules",
        min=1,
        help="The number of modules to be created",
    ),
    linker: Linker | None = typer.Option(
        None,
        "--linker",
        help="Link tickets directly (repo) or convert them first (traditional) (default: repo)",
    ),
    repo_name: str | None = typer.Option(
        None,
        "--repo-name",
        help="File name of the program repository database (default: repository.db)",
    ),
    config_file: Path | None = typer.Option(
        None,
        "--config",
        exists=True,
        dir_okay=False,
        help="Configuration file (default: ./rldbench.yaml or ~/.rldbench/config.yaml)",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose", "-v",
        help="Log every tool invocation and show tool output",
    ),
    debug: bool = typer.Option(
        False,
        "--debug",
        help="Print a full traceback on failure",
    ),
    dry_run: bool = typer.Option(
        False,
        "--dry-run", "-n",
        help="Show the sweep grid without running anything",
    ),
) -> None:
    r"""Measure link time across a grid of external and linkonce symbol counts.

    Results are written as a table that gnuplot can display:

    \b
        external linkonce time
        1000 1000 152
        1000 2000 297
    """
    configure_logging(verbose=verbose, debug=debug)

    # Tools run inside the work directory; every path handed to them is absolute
    work_dir = work_dir.absolute()

    try:
        bench_config = load_config(config_file)
    except (OSError, ValueError, yaml.YAMLError) as e:
        err_console.print(f"[red]Error loading config:[/red] {e}")
        raise typer.Exit(1) from e

    settings = SweepSettings(
        bin_dir=(bin_dir or bench_config.bin_dir).absolute(),
        work_dir=work_dir,
        module_count=modules,
        linker="traditional" if (linker or bench_config.linker) == "traditional" else "repo",
        repo_name=repo_name or bench_config.repo_name,
        verbose=verbose,
    )
    points = build_grid(external, linkonce, increment)

    if dry_run:
        table = Table(title="Sweep grid")
        table.add_column("#", style="dim")
        table.add_column("External")
        table.add_column("Linkonce")
        for i, point in enumerate(points):
            table.add_row(
                str(i),
                str(point.external_symbol_count),
                str(point.linkonce_symbol_count),
            )
        err_console.print(table)
        err_console.print(f"\n[bold]{len(points)} run(s)[/bold] of {modules} module(s) each")
        err_console.print(f"[dim]linker:[/dim] {settings.linker}")
        err_console.print(f"[dim]bin dir:[/dim] {settings.bin_dir}")
        err_console.print("\n[yellow]Dry run - nothing executed[/yellow]")
        return

    if not points:
        logger.warning("The sweep grid is empty (a maximum is below the increment)")

    def report(index: int, result: RunResult) -> None:
        logger.info(
            "[%d/%d] external=%d linkonce=%d: %d ms",
            index + 1,
            len(points),
            result.external_symbol_count,
            result.linkonce_symbol_count,
            result.elapsed_milliseconds,
        )

    try:
        check_work_directory(work_dir, force=force)
        results = run_sweep(
            settings,
            points,
            tools_factory=partial(ToolRunner.from_config, bench_config=bench_config),
            on_result=report,
        )
        write_results(format_results(results), output)
    except Exception as e:  # noqa: BLE001
        if debug:
            err_console.print_exception()
        else:
            err_console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1) from e

    if output != STDOUT:
        err_console.print(f"[green]Wrote {len(results)} result(s) to {output}[/green]")
