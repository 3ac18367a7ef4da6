# folio/parser/__init__.py
"""
Publication parsers for format understanding.

Parsers handle the "how" of opening - converting the resources of a file
into a PublicationBuilder for one specific format.
"""

from typing import List

from folio.parser.base import PublicationParser
from folio.parser.chain import ParserChain
from folio.parser.plugins.image import ImageParser
from folio.parser.plugins.webpub import ManifestError, WebPubParser


def make_default_parsers() -> List[PublicationParser]:
    """Parsers used by the Streamer unless `ignore_default_parsers` is set."""
    return [
        WebPubParser(),
        ImageParser(),
    ]


__all__ = [
    "PublicationParser",
    "ParserChain",
    "WebPubParser",
    "ManifestError",
    "ImageParser",
    "make_default_parsers",
]
