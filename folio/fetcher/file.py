# folio/fetcher/file.py
"""
Flat fetcher: serves a file on disk as a single resource.

When the path is a directory (an exploded publication), every file below it
is served under the root href.
"""

from __future__ import annotations

import mimetypes
from pathlib import Path
from typing import List, Optional

from folio.core.publication import Link
from folio.fetcher.base import FileResource, Resource, normalize_href, not_found
from folio.logging.logger import get_logger

logger = get_logger(__name__)


class FileFetcher:
    """
    Fetcher rooted at `href`, backed by `path`.

    Example:
        fetcher = FileFetcher(href="/alice.txt", path=Path("books/alice.txt"))
        fetcher.get("/alice.txt").read()
    """

    def __init__(self, href: str, path: Path) -> None:
        self.href = normalize_href(href).rstrip("/") or "/"
        self.path = Path(path)
        self._links: Optional[List[Link]] = None

    @property
    def links(self) -> List[Link]:
        if self._links is None:
            self._links = self._compute_links()
        return list(self._links)

    def get(self, href: str) -> Resource:
        href = normalize_href(href)

        if self.path.is_dir():
            prefix = self.href.rstrip("/") + "/"
            if href.startswith(prefix):
                target = (self.path / href[len(prefix):]).resolve()
                # Refuse hrefs escaping the root directory
                if self.path.resolve() in target.parents and target.is_file():
                    return FileResource(self._link(href, target), target)
        elif href == self.href:
            return FileResource(self._link(href, self.path), self.path)

        logger.debug(f"Resource not found in {self!r}: {href}")
        return not_found(href)

    def close(self) -> None:
        pass

    def _compute_links(self) -> List[Link]:
        if self.path.is_file():
            return [self._link(self.href, self.path)]
        if not self.path.is_dir():
            return []

        prefix = self.href.rstrip("/")
        links = []
        for path in sorted(self.path.rglob("*")):
            if path.is_file():
                rel = path.relative_to(self.path).as_posix()
                links.append(self._link(f"{prefix}/{rel}", path))
        return links

    @staticmethod
    def _link(href: str, path: Path) -> Link:
        media_type, _ = mimetypes.guess_type(path.name)
        return Link(href=href, type=media_type)

    def __repr__(self) -> str:
        return f"FileFetcher({self.href!r} -> {str(self.path)!r})"


__all__ = ["FileFetcher"]
