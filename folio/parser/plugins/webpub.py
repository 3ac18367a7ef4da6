# folio/parser/plugins/webpub.py
"""
Readium Web Publication parser.

Handles publications described by a `manifest.json` (RWPM), either packaged
in an archive (.webpub, .audiobook, .lcpa, ...) or in an exploded directory.
Relative hrefs are resolved against the manifest location.
"""

from __future__ import annotations

import json
import posixpath
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from folio.core.file import File
from folio.core.publication import Link, Manifest, Metadata, PublicationBuilder
from folio.core.warnings import ParserWarning, WarningLogger, WarningSeverity
from folio.fetcher.base import Fetcher
from folio.logging.logger import get_logger
from folio.logging.tags import PARSER

logger = get_logger(__name__)

MANIFEST_NAME = "manifest.json"


class ManifestError(ValueError):
    """The manifest is not a valid Readium Web Publication Manifest."""

    pass


@dataclass
class WebPubParser:
    """
    Parser for Readium Web Publication manifests.

    Declines files without a manifest.json at their root. A manifest that
    exists but is not valid JSON, or is not an object, fails the opening.

    Example:
        parser = WebPubParser()
        builder = parser.parse(file, fetcher, fallback_title="Untitled")
    """

    plugin_name: str = field(default="webpub", repr=False)
    manifest_name: str = MANIFEST_NAME

    def parse(
        self,
        file: File,
        fetcher: Fetcher,
        fallback_title: str,
        warnings: Optional[WarningLogger] = None,
    ) -> Optional[PublicationBuilder]:
        manifest_href = self._find_manifest(file, fetcher)
        if manifest_href is None:
            return None

        raw = fetcher.get(manifest_href).read()
        try:
            data = json.loads(raw.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise ManifestError(f"{manifest_href} is not valid JSON: {e}") from e
        if not isinstance(data, dict):
            raise ManifestError(f"{manifest_href} must contain a JSON object")

        base = posixpath.dirname(manifest_href)
        report = _Reporter(warnings, self.plugin_name)

        manifest = Manifest(
            metadata=self._parse_metadata(data.get("metadata"), fallback_title, report),
            links=tuple(self._parse_links(data.get("links"), base, "links", report)),
            reading_order=tuple(self._parse_reading_order(data, base, report)),
            resources=tuple(self._parse_links(data.get("resources"), base, "resources", report)),
        )
        self._check_packaged(manifest, fetcher, report)

        logger.debug(
            f"{PARSER} Parsed manifest of {file.name}: {len(manifest.reading_order)} items"
        )
        return PublicationBuilder(manifest=manifest, fetcher=fetcher)

    def _find_manifest(self, file: File, fetcher: Fetcher) -> Optional[str]:
        candidates = {f"/{self.manifest_name}", f"/{file.name}/{self.manifest_name}"}
        for link in fetcher.links:
            if link.href in candidates:
                return link.href
        return None

    def _parse_metadata(
        self, raw: Any, fallback_title: str, report: "_Reporter"
    ) -> Metadata:
        if not isinstance(raw, dict):
            report(f"Missing metadata, using title {fallback_title!r}", WarningSeverity.MAJOR)
            return Metadata(title=fallback_title)

        title = _localized(raw.get("title"))
        if not title:
            report(f"Missing title, using {fallback_title!r}", WarningSeverity.MODERATE)
            title = fallback_title

        known = {"title", "identifier", "language", "author", "conformsTo"}
        return Metadata(
            title=title,
            identifier=raw.get("identifier"),
            languages=_strings(raw.get("language")),
            authors=tuple(
                name for name in (_contributor(c) for c in _as_list(raw.get("author"))) if name
            ),
            conforms_to=_strings(raw.get("conformsTo")),
            other={k: v for k, v in raw.items() if k not in known},
        )

    def _parse_reading_order(
        self, data: Dict[str, Any], base: str, report: "_Reporter"
    ) -> List[Link]:
        # "spine" is the deprecated name of the reading order
        raw = data.get("readingOrder", data.get("spine"))
        if raw is None:
            report("Missing reading order", WarningSeverity.MAJOR)
            return []
        return self._parse_links(raw, base, "readingOrder", report)

    def _parse_links(
        self, raw: Any, base: str, key: str, report: "_Reporter"
    ) -> List[Link]:
        links: List[Link] = []
        for index, item in enumerate(_as_list(raw)):
            if not isinstance(item, dict) or not isinstance(item.get("href"), str):
                report(f"{key}[{index}] has no href, ignored", WarningSeverity.MINOR)
                continue
            links.append(
                Link(
                    href=_resolve_href(base, item["href"]),
                    type=item.get("type"),
                    title=item.get("title"),
                    rels=_strings(item.get("rel")),
                    properties=item.get("properties") or {},
                )
            )
        return links

    def _check_packaged(self, manifest: Manifest, fetcher: Fetcher, report: "_Reporter") -> None:
        available = {link.href for link in fetcher.links}
        for link in manifest.reading_order:
            if link.href.startswith("/") and link.href not in available:
                report(f"{link.href} is not in the package", WarningSeverity.MINOR)


class _Reporter:
    """Sends warnings to the sink, if any."""

    def __init__(self, warnings: Optional[WarningLogger], source: str) -> None:
        self.warnings = warnings
        self.source = source

    def __call__(self, message: str, severity: WarningSeverity) -> None:
        if self.warnings is not None:
            self.warnings.log(ParserWarning(message, severity, self.source))


def _resolve_href(base: str, href: str) -> str:
    if "://" in href or href.startswith("/"):
        return href
    return posixpath.normpath(posixpath.join(base or "/", href))


def _as_list(value: Any) -> List[Any]:
    if value is None:
        return []
    if isinstance(value, list):
        return value
    return [value]


def _strings(value: Any) -> Tuple[str, ...]:
    return tuple(str(v) for v in _as_list(value))


def _localized(value: Any) -> Optional[str]:
    """Title may be a string or a {language: string} map."""
    if isinstance(value, str):
        return value or None
    if isinstance(value, dict):
        for text in value.values():
            if isinstance(text, str) and text:
                return text
    return None


def _contributor(value: Any) -> Optional[str]:
    if isinstance(value, dict):
        return _localized(value.get("name"))
    return _localized(value)


__all__ = ["WebPubParser", "ManifestError", "MANIFEST_NAME"]
