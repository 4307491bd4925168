# Copyright (c) Syntropy Systems
"""Main CLI entry point for rldbench."""

import typer

from rldbench.cli.doctor import doctor
from rldbench.cli.run_cmd import run

app = typer.Typer(
    name="rldbench",
    help=(
        "Linker scalability benchmarks. Sweep symbol counts, link synthetic "
        "modules, plot the timings."
    ),
    no_args_is_help=True,
    add_completion=False,
)

# Register commands
_ = app.command()(run)
_ = app.command()(doctor)


if __name__ == "__main__":
    app()
