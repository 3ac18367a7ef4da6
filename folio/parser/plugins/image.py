# folio/parser/plugins/image.py
"""
Image parser for comic archives (CBZ) and single bitmaps.

Formats made only of images have no metadata: the title is always the
fallback title and the reading order follows the entry names.
"""

from __future__ import annotations

import posixpath
import re
from dataclasses import dataclass, field, replace
from typing import List, Optional, Set

from folio.core.file import File
from folio.core.publication import Link, Manifest, Metadata, PublicationBuilder
from folio.core.warnings import WarningLogger
from folio.fetcher.base import Fetcher

DIVINA_PROFILE = "https://readium.org/webpub-manifest/profiles/divina"

BITMAP_EXTENSIONS: Set[str] = {
    ".bmp",
    ".dib",
    ".gif",
    ".jpg",
    ".jpeg",
    ".jxl",
    ".png",
    ".tif",
    ".tiff",
    ".webp",
    ".avif",
}

# Entries tolerated next to the images
IGNORED_NAMES: Set[str] = {"comicinfo.xml", "thumbs.db"}


@dataclass
class ImageParser:
    """
    Parser for publications made of bitmaps only.

    Declines as soon as one entry is not a bitmap (hidden files and
    ComicInfo.xml excepted).
    """

    plugin_name: str = field(default="image", repr=False)
    supported_extensions: Set[str] = field(default_factory=lambda: set(BITMAP_EXTENSIONS))

    def parse(
        self,
        file: File,
        fetcher: Fetcher,
        fallback_title: str,
        warnings: Optional[WarningLogger] = None,
    ) -> Optional[PublicationBuilder]:
        images: List[Link] = []
        for link in fetcher.links:
            if self._is_ignored(link.href):
                continue
            if posixpath.splitext(link.href)[1].lower() not in self.supported_extensions:
                return None
            images.append(link)

        if not images:
            return None

        images.sort(key=lambda link: _natural_key(link.href))
        images[0] = replace(images[0], rels=(*images[0].rels, "cover"))

        manifest = Manifest(
            metadata=Metadata(title=fallback_title, conforms_to=(DIVINA_PROFILE,)),
            reading_order=tuple(images),
        )
        return PublicationBuilder(manifest=manifest, fetcher=fetcher)

    @staticmethod
    def _is_ignored(href: str) -> bool:
        parts = href.strip("/").split("/")
        if any(part.startswith(".") or part == "__MACOSX" for part in parts):
            return True
        return parts[-1].lower() in IGNORED_NAMES


def _natural_key(href: str) -> list:
    """Sort 'page2' before 'page10'."""
    return [int(chunk) if chunk.isdecimal() else chunk.lower() for chunk in re.split(r"(\d+)", href)]


__all__ = ["ImageParser", "BITMAP_EXTENSIONS", "DIVINA_PROFILE"]
