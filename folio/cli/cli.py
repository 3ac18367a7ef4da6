# folio/cli/cli.py
"""
Folio CLI - Main application.

Commands:
    folio open      Open a publication and print its manifest summary
    folio plugins   List discovered parser and protection plugins
    folio config    Show the effective streamer configuration

NOTE: Commands use lazy loading - imports only happen when a command is invoked.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer

app = typer.Typer(
    name="folio",
    help="Folio - open Readium WebPub packages and image comics (CBZ) from local files.",
    no_args_is_help=True,
    add_completion=False,
)


# =============================================================================
# LAZY COMMANDS
# =============================================================================


@app.command("open")
def open_cmd(
    path: Path = typer.Argument(..., help="Publication file (archive, folder or single file)."),
    password: Optional[str] = typer.Option(None, "--password", "-p", help="Archive password or credentials."),
    title: Optional[str] = typer.Option(None, "--title", "-t", help="Fallback title when the format declares none."),
    config: Optional[Path] = typer.Option(None, "--config", "-c", help="Streamer config file (YAML)."),
    no_interaction: bool = typer.Option(False, "--no-interaction", help="Forbid protections from prompting."),
    timeout: Optional[float] = typer.Option(None, "--timeout", help="Seconds to wait for the opening."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logs."),
) -> None:
    """Open a publication and print a summary of its manifest."""
    from folio.cli.commands import open as mod

    mod.command(
        path=path,
        password=password,
        title=title,
        config=config,
        no_interaction=no_interaction,
        timeout=timeout,
        verbose=verbose,
    )


@app.command("plugins")
def plugins() -> None:
    """List all discovered plugins."""
    from folio.cli.commands import plugins as mod

    mod.command()


@app.command("config")
def config(
    path: Optional[Path] = typer.Option(None, "--config", "-c", help="Streamer config file (YAML)."),
    as_json: bool = typer.Option(False, "--json", help="Output as JSON."),
) -> None:
    """Show the effective streamer configuration (defaults + overrides)."""
    from folio.cli.commands import config as mod

    mod.command(path=path, as_json=as_json)


if __name__ == "__main__":
    app()
