# folio/logging/logger.py
"""
Unified logging setup for Folio.

All modules use:
    from folio.logging.logger import get_logger
    logger = get_logger(__name__)

Configuration happens once, in configure_logging() (CLI entrypoint or the
host application). Library code never installs handlers by itself.
"""

from __future__ import annotations

import logging
import sys
from typing import TextIO

DEFAULT_FORMAT = "[%(levelname)s] %(name)s - %(message)s"


def configure_logging(
    level: int | str = logging.INFO,
    fmt: str = DEFAULT_FORMAT,
    stream: TextIO = sys.stderr,
) -> None:
    """
    Configure the root logging handler.

    Safe to call multiple times - handler duplication is prevented.
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())

    root = logging.getLogger()
    if not root.handlers:
        handler = logging.StreamHandler(stream)
        handler.setFormatter(logging.Formatter(fmt))
        root.addHandler(handler)

    root.setLevel(level)


def get_logger(name: str) -> logging.Logger:
    """
    Modules call this to get a logger.

    Example:
        logger = get_logger(__name__)
    """
    return logging.getLogger(name)
