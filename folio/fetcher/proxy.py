# folio/fetcher/proxy.py
"""Fetcher wrapping another one, used by protections that substitute a fetcher."""

from __future__ import annotations

from typing import Callable, List, Optional

from folio.core.publication import Link
from folio.fetcher.base import BytesResource, Fetcher, Resource


class ProxyFetcher:
    """
    Delegates to `fetcher`, passing every resource through `transform`.

    Example:
        # Decrypt every resource read from the archive
        ProxyFetcher(archive_fetcher, lambda r: BytesResource(r.link, lambda: decrypt(r.read())))
    """

    def __init__(
        self,
        fetcher: Fetcher,
        transform: Callable[[Resource], Resource],
        links: Optional[List[Link]] = None,
    ) -> None:
        self.fetcher = fetcher
        self.transform = transform
        self._links = links

    @property
    def links(self) -> List[Link]:
        if self._links is not None:
            return list(self._links)
        return self.fetcher.links

    def get(self, href: str) -> Resource:
        return self.transform(self.fetcher.get(href))

    def close(self) -> None:
        self.fetcher.close()


def map_bytes(fn: Callable[[bytes], bytes]) -> Callable[[Resource], Resource]:
    """Resource transform applying `fn` to the resource content."""

    def transform(resource: Resource) -> Resource:
        return BytesResource(resource.link, lambda: fn(resource.read()))

    return transform


__all__ = ["ProxyFetcher", "map_bytes"]
