# folio/core/warnings.py
"""
Warning sinks for non-fatal parsing diagnostics.

Parsers report authoring mistakes (missing title, dangling links, ...) here
instead of failing. A sink accepts any number of warnings and never answers.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Protocol, runtime_checkable


class WarningSeverity(Enum):
    """How much a warning may affect rendering."""

    MINOR = "minor"
    MODERATE = "moderate"
    MAJOR = "major"


@dataclass(frozen=True)
class ParserWarning:
    """A non-fatal diagnostic raised while parsing a publication."""

    message: str
    severity: WarningSeverity = WarningSeverity.MINOR
    source: Optional[str] = None  # Parser plugin name or resource href

    def __str__(self) -> str:
        prefix = f"{self.source}: " if self.source else ""
        return f"{prefix}{self.message}"


@runtime_checkable
class WarningLogger(Protocol):
    """Append-only channel receiving parser warnings."""

    def log(self, warning: ParserWarning) -> None:
        ...


class ListWarningLogger:
    """Collects warnings in memory."""

    def __init__(self) -> None:
        self._warnings: List[ParserWarning] = []
        self._lock = threading.Lock()

    def log(self, warning: ParserWarning) -> None:
        with self._lock:
            self._warnings.append(warning)

    @property
    def warnings(self) -> List[ParserWarning]:
        with self._lock:
            return list(self._warnings)

    def __len__(self) -> int:
        return len(self.warnings)


class LoggingWarningLogger:
    """Forwards warnings to a stdlib logger, MAJOR ones at WARNING level."""

    def __init__(self, logger: logging.Logger) -> None:
        self._logger = logger

    def log(self, warning: ParserWarning) -> None:
        level = logging.WARNING if warning.severity is WarningSeverity.MAJOR else logging.INFO
        self._logger.log(level, f"Publication warning ({warning.severity.value}): {warning}")


__all__ = [
    "WarningSeverity",
    "ParserWarning",
    "WarningLogger",
    "ListWarningLogger",
    "LoggingWarningLogger",
]
