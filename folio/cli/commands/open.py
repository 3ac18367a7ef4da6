# folio/cli/commands/open.py
"""
Open command for Folio CLI.

Opens a publication with a Streamer built from the configuration, and
prints its title, protection and reading order.

Usage:
    folio open comic.cbz
    folio open book.webpub --password secret --title "My book"
"""

from __future__ import annotations

from concurrent.futures import TimeoutError as FutureTimeoutError
from pathlib import Path
from typing import Optional

import typer

from folio.core.exceptions import ConfigError, FolioError, OpeningError
from folio.core.file import File
from folio.core.publication import Publication
from folio.core.warnings import ListWarningLogger
from folio.logging.logger import configure_logging, get_logger
from folio.logging.tags import CLI

logger = get_logger(__name__)


def command(
    path: Path,
    password: Optional[str] = None,
    title: Optional[str] = None,
    config: Optional[Path] = None,
    no_interaction: bool = False,
    timeout: Optional[float] = None,
    verbose: bool = False,
) -> None:
    """Open `path` and print a summary, exiting 1 on failure."""
    from folio.config.loader import load_streamer_config
    from folio.streamer import Streamer

    try:
        streamer_config = load_streamer_config(config)
    except ConfigError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1)

    configure_logging("DEBUG" if verbose else streamer_config.logging.level)

    warnings = ListWarningLogger()
    try:
        streamer = Streamer.from_config(streamer_config)
    except FolioError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1)

    task = streamer.open(
        File(path),
        allow_user_interaction=not no_interaction,
        fallback_title=title,
        credentials=password,
        warnings=warnings,
    )
    try:
        publication = task.result(timeout=timeout)
    except OpeningError as e:
        streamer.close()
        typer.echo(f"Error [{e.code}]: {e}", err=True)
        raise typer.Exit(code=1)
    except FutureTimeoutError:
        # Do not wait for the stuck stage: it releases its fetcher once it returns
        task.cancel()
        streamer.close(wait=False)
        typer.echo(f"Error: opening {path} timed out after {timeout}s", err=True)
        raise typer.Exit(code=1)
    streamer.close()

    try:
        _print_summary(publication, warnings)
    finally:
        publication.close()


def _print_summary(publication: Publication, warnings: ListWarningLogger) -> None:
    metadata = publication.metadata

    typer.echo(f"Title: {publication.title}")
    if metadata.authors:
        typer.echo(f"Authors: {', '.join(metadata.authors)}")
    if metadata.identifier:
        typer.echo(f"Identifier: {metadata.identifier}")

    protection = publication.protection
    if protection is not None:
        state = "restricted" if protection.is_restricted else "unlocked"
        typer.echo(f"Protection: {protection.name or protection.scheme} ({state})")

    typer.echo(f"Reading order ({len(publication.reading_order)}):")
    for link in publication.reading_order:
        typer.echo(f"  - {link.href}")

    if len(warnings):
        typer.echo(f"Warnings ({len(warnings)}):")
        for warning in warnings.warnings:
            typer.echo(f"  - {warning}")

    logger.debug(f"{CLI} Printed summary for {publication!r}")
