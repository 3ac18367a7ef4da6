# folio/cli/commands/config.py
"""
Config command for Folio CLI.

Usage:
    folio config
    folio config --config my.yaml --json
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Optional

import typer
import yaml

from folio.core.exceptions import ConfigError
from folio.logging.logger import get_logger
from folio.logging.tags import CLI

logger = get_logger(__name__)


def command(path: Optional[Path] = None, as_json: bool = False) -> None:
    """Print the effective configuration."""
    from folio.config.loader import load_streamer_config, resolve_user_config_path

    try:
        config = load_streamer_config(path)
    except ConfigError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1)

    data = config.model_dump()
    if as_json:
        typer.echo(json.dumps(data, indent=2))
        return

    source = resolve_user_config_path(path)
    logger.debug(f"{CLI} Config source: {source or 'defaults'}")
    typer.echo(f"# Source: {source or 'package defaults'}")
    typer.echo(yaml.safe_dump({"streamer": data}, sort_keys=False).rstrip())
