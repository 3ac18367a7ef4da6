# folio/__init__.py
"""
Folio - open publications through pluggable fetchers, protections and parsers.

Public API:
    - Streamer: Opens a Publication from a File
    - File: Reference to a publication file on disk
    - Publication / PublicationBuilder: The opened document and its builder
    - OpeningError: Base of the terminal error taxonomy

Examples:
    >>> from folio import File, Streamer
    >>> with Streamer() as streamer:
    ...     publication = streamer.open(File("comic.cbz"), allow_user_interaction=False).result()
    >>> publication.title
    'comic.cbz'
"""

from folio.core.exceptions import (
    ForbiddenError,
    IncorrectCredentialsError,
    NotFoundError,
    OpeningCancelledError,
    OpeningError,
    ParsingFailedError,
    UnavailableError,
    UnsupportedFormatError,
)
from folio.core.file import File
from folio.core.publication import Publication, PublicationBuilder
from folio.streamer import OpeningResult, OpeningTask, Streamer

__version__ = "0.1.0"

__all__ = [
    "Streamer",
    "OpeningTask",
    "OpeningResult",
    "File",
    "Publication",
    "PublicationBuilder",
    "OpeningError",
    "NotFoundError",
    "IncorrectCredentialsError",
    "UnsupportedFormatError",
    "ParsingFailedError",
    "OpeningCancelledError",
    "ForbiddenError",
    "UnavailableError",
]
