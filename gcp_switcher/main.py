#!/usr/bin/env python3
"""
Main CLI entry point for gcp-switcher
"""

import logging
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console

from gcp_switcher import get_version_info
from gcp_switcher.config import load_config
from gcp_switcher.core.state_machine import to_dot
from gcp_switcher.exceptions import ConfigurationError
from gcp_switcher.ui.app import run_switcher
from gcp_switcher.utils.logging_utils import setup_logging

logger = logging.getLogger(__name__)

console = Console()

app = typer.Typer(add_completion=False)


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(get_version_info())
        raise typer.Exit()


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    debug: bool = typer.Option(
        False, "--debug", help="Write diagnostic logs to ~/.config/gcp-switcher/gcp-switcher.log"
    ),
    config_path: Optional[Path] = typer.Option(
        None, "--config", help="Read settings from this JSON file"
    ),
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
):
    """
    gcp-switcher - inspect and switch gcloud accounts and projects

    Run without a command to open the interactive switcher.

    [bold]Examples:[/bold]

    Open the switcher:
        [cyan]gcp-switcher[/cyan]

    Open it with debug logging:
        [cyan]gcp-switcher --debug[/cyan]

    Render the navigation state machine:
        [cyan]gcp-switcher graph | dot -Tsvg > states.svg[/cyan]
    """
    if ctx.invoked_subcommand is not None:
        return

    try:
        config = load_config(path=config_path, debug=True if debug else None)
    except ConfigurationError as e:
        console.print(f"❌ Configuration error: {e.message}", style="red")
        raise typer.Exit(1) from e

    setup_logging(config)

    try:
        exit_code = run_switcher(config)
    except KeyboardInterrupt:
        return
    except Exception as e:
        logger.exception("Switcher exited with an error")
        console.print(f"❌ Error: {e}", style="red")
        raise typer.Exit(1) from e

    if exit_code:
        logger.error(f"Switcher run loop failed with exit status {exit_code}")
        console.print(f"❌ Error: switcher exited with status {exit_code}", style="red")
        raise typer.Exit(exit_code)


@app.command()
def graph():
    """Print the navigation state machine as a Graphviz DOT document."""
    typer.echo(to_dot())


def run():
    """Entry point for the CLI"""
    app()


if __name__ == "__main__":
    run()
