# src/opmon/cli/main.py
"""
This module is the main entry point for the opmon CLI.

It aggregates all commands from the submodules.
"""

import logging

import typer

from ..core.config import config
from . import setup as setup_commands

# --- Setup Logger ---
logging.basicConfig(
    level=config.LOG_LEVEL.upper(),
    format="%(asctime)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


app = typer.Typer(
    name="opmon",
    help="Prepare an OpenShift cluster so Dynatrace can monitor cluster operators through Prometheus.",
    add_completion=False,
)


def version_callback(value: bool):
    """
    Prints the version of opmon.
    """
    if value:
        from .. import __version__

        typer.echo(f"opmon version: {__version__}")
        raise typer.Exit()


@app.command()
def version():
    """
    Show the version of opmon.
    """
    from .. import __version__

    typer.echo(f"opmon version: {__version__}")


@app.callback()
def main(
    version: bool = typer.Option(
        None,
        "--version",
        callback=version_callback,
        is_eager=True,
        help="Show the version and exit.",
    ),
):
    """
    opmon CLI main entry point.
    """
    pass


app.command(name="setup")(setup_commands.setup)
app.command(name="check")(setup_commands.check)


if __name__ == "__main__":
    app()
