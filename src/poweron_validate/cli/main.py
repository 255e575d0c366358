# Copyright (c) Syntropy Systems
"""Main CLI entry point for validate-poweron."""

import typer

from poweron_validate.cli.doctor import doctor
from poweron_validate.cli.files import files
from poweron_validate.cli.run_cmd import run

app = typer.Typer(
    name="validate-poweron",
    help=(
        "Validate the PowerOn specfiles a change touches against a "
        "Symitar host."
    ),
    no_args_is_help=True,
    add_completion=False,
)

# Register commands
_ = app.command()(run)
_ = app.command()(files)
_ = app.command()(doctor)


if __name__ == "__main__":
    app()
