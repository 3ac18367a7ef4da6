# folio/fetcher/base.py
"""
Fetcher protocol for reading the resources of a publication file.

Fetchers handle the "where" of opening - they expose the logical resources
inside a file (archive entries, or the file itself) behind hrefs.

Flow: File → FetcherResolver → Fetcher → ContentProtection → Parser
"""

from __future__ import annotations

from pathlib import Path
from typing import Callable, List, Optional, Protocol, runtime_checkable

from folio.core.exceptions import FolioError
from folio.core.publication import Link

# =============================================================================
# Errors
# =============================================================================


class ResourceError(FolioError):
    """Base error for resource access."""

    def __init__(self, message: str, href: str, cause: Exception | None = None):
        super().__init__(message)
        self.href = href
        self.cause = cause


class ResourceNotFoundError(ResourceError):
    """No resource exists at the requested href."""

    pass


class ResourceUnavailableError(ResourceError):
    """The resource exists but cannot be read."""

    pass


# =============================================================================
# Resource
# =============================================================================


@runtime_checkable
class Resource(Protocol):
    """A single readable resource of a publication."""

    @property
    def link(self) -> Link:
        ...

    def length(self) -> int:
        ...

    def read(self) -> bytes:
        """
        Read the whole resource.

        Raises:
            ResourceError: If the resource cannot be read.
        """
        ...

    def read_text(self, encoding: str = "utf-8") -> str:
        ...

    def close(self) -> None:
        ...


class BytesResource:
    """Resource backed by a lazily-evaluated bytes factory."""

    def __init__(self, link: Link, read: Callable[[], bytes]) -> None:
        self._link = link
        self._read = read
        self._data: Optional[bytes] = None

    @property
    def link(self) -> Link:
        return self._link

    def length(self) -> int:
        return len(self.read())

    def read(self) -> bytes:
        if self._data is None:
            self._data = self._read()
        return self._data

    def read_text(self, encoding: str = "utf-8") -> str:
        return self.read().decode(encoding)

    def close(self) -> None:
        self._data = None

    def __repr__(self) -> str:
        return f"BytesResource({self._link.href!r})"


class FailureResource:
    """Resource that raises its error on every read."""

    def __init__(self, link: Link, error: ResourceError) -> None:
        self._link = link
        self._error = error

    @property
    def link(self) -> Link:
        return self._link

    def length(self) -> int:
        raise self._error

    def read(self) -> bytes:
        raise self._error

    def read_text(self, encoding: str = "utf-8") -> str:
        raise self._error

    def close(self) -> None:
        pass


class FileResource:
    """Resource backed by a file on disk."""

    def __init__(self, link: Link, path: Path) -> None:
        self._link = link
        self._path = path

    @property
    def link(self) -> Link:
        return self._link

    def length(self) -> int:
        return self._stat(lambda: self._path.stat().st_size)

    def read(self) -> bytes:
        return self._stat(self._path.read_bytes)

    def read_text(self, encoding: str = "utf-8") -> str:
        return self.read().decode(encoding)

    def close(self) -> None:
        pass

    def _stat(self, fn):
        try:
            return fn()
        except FileNotFoundError as e:
            raise ResourceNotFoundError(
                f"File not found: {self._path}", href=self._link.href, cause=e
            ) from e
        except OSError as e:
            raise ResourceUnavailableError(
                f"Cannot read {self._path}: {e}", href=self._link.href, cause=e
            ) from e

    def __repr__(self) -> str:
        return f"FileResource({self._link.href!r})"


# =============================================================================
# Fetcher
# =============================================================================


@runtime_checkable
class Fetcher(Protocol):
    """
    Protocol for resource fetchers.

    Example implementations:
    - ArchiveFetcher: entries of a ZIP archive (optionally password-protected)
    - FileFetcher: a single file, or a directory tree
    - ProxyFetcher: wraps another fetcher (e.g. to decrypt its resources)
    """

    @property
    def links(self) -> List[Link]:
        """Known resources available in this fetcher."""
        ...

    def get(self, href: str) -> Resource:
        """
        Return the resource at `href`.

        Never raises for a missing resource: the returned resource fails on
        read with ResourceNotFoundError instead.
        """
        ...

    def close(self) -> None:
        ...


def not_found(href: str) -> FailureResource:
    return FailureResource(
        Link(href=href),
        ResourceNotFoundError(f"No resource at {href!r}", href=href),
    )


def normalize_href(href: str) -> str:
    """Hrefs are absolute, rooted at '/'."""
    return href if href.startswith("/") else f"/{href}"


__all__ = [
    "ResourceError",
    "ResourceNotFoundError",
    "ResourceUnavailableError",
    "Resource",
    "BytesResource",
    "FailureResource",
    "FileResource",
    "Fetcher",
    "not_found",
    "normalize_href",
]
