# folio/protection/plugins/fallback.py
"""
Fallback content protections for DRM schemes Folio cannot decrypt.

They recognize a scheme from marker resources and unlock the file without
decrypting it: the publication still opens (metadata, cover, table of
contents) but is marked restricted, with a ForbiddenError explaining why.
Register a real decrypting protection before them to take precedence.
"""

from __future__ import annotations

from typing import Any, FrozenSet, Optional

from folio.core.exceptions import ForbiddenError
from folio.core.file import File
from folio.core.publication import (
    CONTENT_PROTECTION_SERVICE,
    ContentProtectionService,
    PublicationBuilder,
    PublicationContext,
    Transform,
)
from folio.fetcher.base import Fetcher, ResourceError
from folio.logging.logger import get_logger
from folio.logging.tags import PROTECTION
from folio.protection.base import ProtectedFile

logger = get_logger(__name__)

ADOBE_ADEPT_NAMESPACE = "http://ns.adobe.com/adept"


def restricted_service(scheme: str, name: str) -> Transform:
    """Transform registering a restricted ContentProtectionService."""
    error = ForbiddenError(f"Publication is protected with {name}, which is not supported")

    def factory(context: PublicationContext) -> ContentProtectionService:
        return ContentProtectionService(scheme=scheme, is_restricted=True, error=error, name=name)

    def transform(builder: PublicationBuilder) -> PublicationBuilder:
        return builder.set_service(CONTENT_PROTECTION_SERVICE, factory)

    return transform


class _FallbackProtection:
    """Recognizes a scheme by the presence of marker hrefs."""

    plugin_name: str = ""
    scheme: str = ""
    scheme_name: str = ""
    markers: FrozenSet[str] = frozenset()

    def __init__(self, **_: Any) -> None:
        pass

    def open(
        self,
        file: File,
        fetcher: Fetcher,
        allow_user_interaction: bool,
        credentials: Optional[str],
        sender: Any,
    ) -> Optional[ProtectedFile]:
        if not self.is_protected(fetcher):
            return None

        logger.info(f"{PROTECTION} {file.name} is protected with {self.scheme_name}")
        return ProtectedFile(
            file=file,
            fetcher=fetcher,
            on_create_publication=restricted_service(self.scheme, self.scheme_name),
        )

    def is_protected(self, fetcher: Fetcher) -> bool:
        hrefs = {link.href for link in fetcher.links}
        return bool(hrefs & self.markers)


class LcpFallbackProtection(_FallbackProtection):
    """Readium LCP: a license document is packaged with the publication."""

    plugin_name = "lcp_fallback"
    scheme = "http://readium.org/2014/01/lcp"
    scheme_name = "Readium LCP"
    markers = frozenset({"/license.lcpl", "/META-INF/license.lcpl"})


class AdeptFallbackProtection(_FallbackProtection):
    """Adobe ADEPT: rights.xml, or Adobe-namespaced encryption.xml."""

    plugin_name = "adept_fallback"
    scheme = ADOBE_ADEPT_NAMESPACE
    scheme_name = "Adobe ADEPT"
    markers = frozenset({"/META-INF/rights.xml"})

    def is_protected(self, fetcher: Fetcher) -> bool:
        if super().is_protected(fetcher):
            return True

        try:
            encryption = fetcher.get("/META-INF/encryption.xml").read_text()
        except (ResourceError, UnicodeDecodeError):
            return False
        return ADOBE_ADEPT_NAMESPACE in encryption


__all__ = [
    "LcpFallbackProtection",
    "AdeptFallbackProtection",
    "restricted_service",
]
