# folio/cli/commands/plugins.py
"""
Plugins command for Folio CLI.

Lists all discovered plugins across all registries.

Usage:
    folio plugins
"""

import typer


def command() -> None:
    """
    List all discovered plugins.

    Shows available plugins for:
    - Parsers (publication formats)
    - Content protections (DRM schemes)
    """
    from folio.core.registry import available_parser_plugins, available_protection_plugins

    typer.echo()
    typer.echo("=" * 50)
    typer.echo("DISCOVERED PLUGINS")
    typer.echo("=" * 50)

    def show(title: str, names: list) -> None:
        typer.echo()
        typer.echo(f"{title}:")
        if not names:
            typer.echo("  (none)")
        else:
            for name in sorted(names):
                typer.echo(f"  - {name}")

    show("Parsers", available_parser_plugins())
    show("Content protections", available_protection_plugins())

    typer.echo()
