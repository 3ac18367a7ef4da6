# folio/parser/base.py
"""
PublicationParser protocol for publication format understanding.

Parsers handle the "how" of opening - turning the resources exposed by a
fetcher into a PublicationBuilder for one specific format.

Flow: ProtectedFile → PublicationParser.parse() → PublicationBuilder → Publication
"""

from __future__ import annotations

from typing import Optional, Protocol, runtime_checkable

from folio.core.file import File
from folio.core.publication import PublicationBuilder
from folio.core.warnings import WarningLogger
from folio.fetcher.base import Fetcher


@runtime_checkable
class PublicationParser(Protocol):
    """
    Protocol for publication parsers.

    A parser answers one of three ways:
    - returns None: not a format this parser handles (declined)
    - returns a PublicationBuilder: the publication was parsed
    - raises: the format was recognized but the publication is invalid.
      This is fatal for the opening - no other parser is tried.

    Example implementations:
    - WebPubParser: Readium Web Publication manifests
    - ImageParser: comic archives (CBZ) made of bitmaps
    """

    plugin_name: str

    def parse(
        self,
        file: File,
        fetcher: Fetcher,
        fallback_title: str,
        warnings: Optional[WarningLogger] = None,
    ) -> Optional[PublicationBuilder]:
        ...


__all__ = ["PublicationParser"]
