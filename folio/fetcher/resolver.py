# folio/fetcher/resolver.py
"""
FetcherResolver - creates the leaf fetcher passed to protections and parsers.

We attempt to open an ArchiveFetcher, and fall back on a FileFetcher if the
file is not an archive. A rejected password is the only fatal archive error.

Blocking I/O: the Streamer runs resolve() on its worker pool.
"""

from __future__ import annotations

from typing import Optional

from folio.core.exceptions import IncorrectCredentialsError, NotFoundError
from folio.core.file import File
from folio.fetcher.archive import (
    ArchiveFactory,
    ArchiveFetcher,
    InvalidPasswordError,
    open_zip_archive,
)
from folio.fetcher.base import Fetcher
from folio.fetcher.file import FileFetcher
from folio.logging.logger import get_logger
from folio.logging.tags import FETCHER

logger = get_logger(__name__)


class FetcherResolver:
    """
    Resolves a File into a Fetcher.

    Example:
        resolver = FetcherResolver()
        fetcher = resolver.resolve(File("comic.cbz"), password=None)
    """

    def __init__(self, open_archive: ArchiveFactory = open_zip_archive) -> None:
        self.open_archive = open_archive

    def resolve(self, file: File, password: Optional[str] = None) -> Fetcher:
        """
        Create the fetcher for `file`.

        Raises:
            NotFoundError: If the file is not reachable.
            IncorrectCredentialsError: If the archive rejected `password`.
        """
        if not file.exists():
            logger.debug(f"{FETCHER} File not found: {file.path}")
            raise NotFoundError(f"Publication file not found: {file.path}")

        try:
            fetcher = ArchiveFetcher.open(file.path, password, self.open_archive)
        except InvalidPasswordError as e:
            raise IncorrectCredentialsError(str(e), cause=e) from e
        except Exception as e:
            # Not an archive, or one we cannot read: serve the file as-is
            logger.debug(f"{FETCHER} {file.name} is not an archive ({e}), using a file fetcher")
            return FileFetcher(href=f"/{file.name}", path=file.path)

        return fetcher


__all__ = ["FetcherResolver"]
