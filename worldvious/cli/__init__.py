"""CLI tools: worldvious config, worldvious check."""

import logging

import typer

from worldvious.cli.check_version import check_version_command
from worldvious.cli.show_config import show_config_command

app = typer.Typer(
    name="worldvious",
    help="Worldvious client: inspect reporting configuration and query the collector.",
    no_args_is_help=True,
)


@app.callback()
def main_callback(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@app.command("config")
def config_command() -> None:
    """Show the configuration resolved from the environment."""
    show_config_command()


@app.command("check")
def check_command(
    process: str = typer.Option(..., "--process", help="Reporting process name"),
    version: str = typer.Option(..., "--version", help="Reporting process version"),
) -> None:
    """Run one version check and print the returned notifications."""
    check_version_command(process=process, version=version)


def main() -> None:
    """Console script entrypoint."""
    app()
