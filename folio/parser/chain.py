# folio/parser/chain.py
"""
ParserChain - parses a file with the first parser returning a builder.

Unlike protections, a parser that raises stops the chain: only returning
None lets the next parser try.
"""

from __future__ import annotations

from typing import Optional, Sequence

from folio.core.exceptions import ParsingFailedError, UnsupportedFormatError
from folio.core.file import File
from folio.core.publication import PublicationBuilder
from folio.core.warnings import WarningLogger
from folio.fetcher.base import Fetcher
from folio.logging.logger import get_logger
from folio.logging.tags import PARSER
from folio.parser.base import PublicationParser

logger = get_logger(__name__)


class ParserChain:
    """
    Ordered list of publication parsers.

    Example:
        chain = ParserChain(make_default_parsers())
        builder = chain.parse(file, fetcher, fallback_title="Untitled")
    """

    def __init__(self, parsers: Sequence[PublicationParser] = ()) -> None:
        self.parsers = list(parsers)

    def parse(
        self,
        file: File,
        fetcher: Fetcher,
        fallback_title: str,
        warnings: Optional[WarningLogger] = None,
    ) -> PublicationBuilder:
        """
        Parse `file` with the first parser that recognizes it.

        Raises:
            ParsingFailedError: If a parser raised (later parsers are skipped).
            UnsupportedFormatError: If every parser declined.
        """
        for parser in self.parsers:
            name = getattr(parser, "plugin_name", type(parser).__name__)
            try:
                builder = parser.parse(file, fetcher, fallback_title, warnings)
            except Exception as e:
                logger.warning(f"{PARSER} '{name}' failed to parse {file.name}: {e}")
                raise ParsingFailedError(e) from e

            if builder is not None:
                logger.debug(f"{PARSER} Parsed {file.name} with '{name}'")
                return builder

            logger.debug(f"{PARSER} '{name}' declined {file.name}")

        raise UnsupportedFormatError(f"No parser can open {file.name}")


__all__ = ["ParserChain"]
