# folio/fetcher/__init__.py
"""
Fetchers give access to the resources inside a publication file.

Fetchers handle the "where" of opening - archive entries, a single file, or
a proxy substituted by a content protection.
"""

from folio.fetcher.archive import (
    Archive,
    ArchiveEntry,
    ArchiveError,
    ArchiveFactory,
    ArchiveFetcher,
    InvalidPasswordError,
    ZipArchive,
    open_zip_archive,
)
from folio.fetcher.base import (
    BytesResource,
    Fetcher,
    Resource,
    ResourceError,
    ResourceNotFoundError,
    ResourceUnavailableError,
)
from folio.fetcher.file import FileFetcher
from folio.fetcher.proxy import ProxyFetcher, map_bytes
from folio.fetcher.resolver import FetcherResolver

__all__ = [
    "Fetcher",
    "Resource",
    "BytesResource",
    "ResourceError",
    "ResourceNotFoundError",
    "ResourceUnavailableError",
    "Archive",
    "ArchiveEntry",
    "ArchiveError",
    "ArchiveFactory",
    "ArchiveFetcher",
    "InvalidPasswordError",
    "ZipArchive",
    "open_zip_archive",
    "FileFetcher",
    "ProxyFetcher",
    "map_bytes",
    "FetcherResolver",
]
