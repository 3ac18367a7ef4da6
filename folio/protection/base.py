# folio/protection/base.py
"""
ContentProtection protocol for unlocking protected publications.

Protections handle the "unlock" step of opening - they recognize a
protection scheme (DRM, password) and, when they can, hand back a fetcher
giving access to the clear content.

Flow: Fetcher → ContentProtection.open() → ProtectedFile → Parser
"""

from __future__ import annotations

from concurrent.futures import Future
from dataclasses import dataclass
from typing import Any, Optional, Protocol, Union, runtime_checkable

from folio.core.file import File
from folio.core.publication import Transform
from folio.fetcher.base import Fetcher


@dataclass(frozen=True)
class ProtectedFile:
    """
    A file unlocked by a ContentProtection.

    Attributes:
        file: The file to parse (usually the original one).
        fetcher: Fetcher giving access to the unlocked content.
        on_create_publication: Transform applied to the parsed builder, before
            the caller's own transform. Typically registers a
            ContentProtectionService.
    """

    file: File
    fetcher: Fetcher
    on_create_publication: Optional[Transform] = None


ProtectionOutcome = Union[Optional[ProtectedFile], "Future[Optional[ProtectedFile]]"]


@runtime_checkable
class ContentProtection(Protocol):
    """
    Protocol for content protection plugins.

    A protection answers one of three ways:
    - returns None: the file is not protected with this scheme (declined)
    - returns a ProtectedFile: the file was unlocked
    - raises an OpeningError: the scheme was recognized but unlocking failed
      (e.g. IncorrectCredentialsError). This is fatal for the opening.

    The answer may also be a concurrent.futures.Future resolving the same way,
    for protections that need to prompt the user or reach a server.
    """

    plugin_name: str

    def open(
        self,
        file: File,
        fetcher: Fetcher,
        allow_user_interaction: bool,
        credentials: Optional[str],
        sender: Any,
    ) -> ProtectionOutcome:
        ...


__all__ = [
    "ProtectedFile",
    "ProtectionOutcome",
    "ContentProtection",
]
