# folio/core/publication.py
"""
Publication model: manifest types, the mutable builder and the final document.

Flow: Parser → PublicationBuilder → transforms → build() → Publication

The builder is a single-owner accumulator. Transforms are functions from a
builder to a builder, so the order in which they are applied is explicit:

    builder.apply(t1).apply(t2)  ==  builder.apply(compose_transforms(t1, t2))

build() consumes the builder; the returned Publication is immutable.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING, Any, Callable, Dict, Mapping, Optional, Tuple

from folio.core.exceptions import BuilderConsumedError

if TYPE_CHECKING:
    from folio.fetcher.base import Fetcher, Resource


# =============================================================================
# Manifest Types
# =============================================================================


@dataclass(frozen=True)
class Link:
    """A link to a resource of the publication."""

    href: str
    type: Optional[str] = None
    title: Optional[str] = None
    rels: Tuple[str, ...] = ()
    properties: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class Metadata:
    """
    Publication metadata.

    The title is mandatory: formats that cannot declare one (e.g. CBZ) use the
    fallback title given to Streamer.open().
    """

    title: str
    identifier: Optional[str] = None
    languages: Tuple[str, ...] = ()
    authors: Tuple[str, ...] = ()
    conforms_to: Tuple[str, ...] = ()
    other: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class Manifest:
    """Everything the publication declares about itself."""

    metadata: Metadata
    links: Tuple[Link, ...] = ()
    reading_order: Tuple[Link, ...] = ()
    resources: Tuple[Link, ...] = ()

    def link_with_href(self, href: str) -> Optional[Link]:
        for link in (*self.reading_order, *self.resources, *self.links):
            if link.href == href:
                return link
        return None


# =============================================================================
# Services
# =============================================================================


@dataclass(frozen=True)
class PublicationContext:
    """What a service factory receives when the publication is built."""

    manifest: Manifest
    fetcher: "Fetcher"


ServiceFactory = Callable[[PublicationContext], Any]

CONTENT_PROTECTION_SERVICE = "content_protection"


@dataclass(frozen=True)
class ContentProtectionService:
    """
    Describes the protection applied to a publication.

    Registered by content protections so the reading app can tell whether the
    publication is locked, and why.
    """

    scheme: str
    is_restricted: bool = False
    credentials: Optional[str] = None
    error: Optional[Exception] = None
    name: Optional[str] = None


# =============================================================================
# Builder
# =============================================================================


@dataclass
class PublicationBuilder:
    """
    Mutable accumulator for a Publication.

    Owned by one stage at a time: the parser creates it, transforms adjust it,
    build() consumes it.
    """

    manifest: Manifest
    fetcher: "Fetcher"
    services: Dict[str, ServiceFactory] = field(default_factory=dict)
    _consumed: bool = field(default=False, repr=False, compare=False)

    def apply(self, transform: Optional["Transform"]) -> "PublicationBuilder":
        """Return the builder produced by `transform` (identity when None)."""
        self._check_not_consumed()
        if transform is None:
            return self
        result = transform(self)
        if not isinstance(result, PublicationBuilder):
            raise TypeError(
                f"Transform {transform!r} returned {type(result).__name__}, "
                "expected PublicationBuilder"
            )
        return result

    def set_service(self, name: str, factory: Optional[ServiceFactory]) -> "PublicationBuilder":
        """Return a builder with the service `name` registered (or removed when None)."""
        self._check_not_consumed()
        services = dict(self.services)
        if factory is None:
            services.pop(name, None)
        else:
            services[name] = factory
        return replace(self, services=services)

    def build(self) -> "Publication":
        """Consume the builder and return the immutable Publication."""
        self._check_not_consumed()
        self._consumed = True

        context = PublicationContext(manifest=self.manifest, fetcher=self.fetcher)
        services = {name: factory(context) for name, factory in self.services.items()}
        return Publication(manifest=self.manifest, fetcher=self.fetcher, services=services)

    def _check_not_consumed(self) -> None:
        if self._consumed:
            raise BuilderConsumedError("PublicationBuilder was already built")


Transform = Callable[[PublicationBuilder], PublicationBuilder]


def compose_transforms(*transforms: Optional[Transform]) -> Optional[Transform]:
    """
    Compose transforms left to right, skipping None.

    compose_transforms(t1, t2)(builder) == t2(t1(builder))
    """
    present = [t for t in transforms if t is not None]
    if not present:
        return None
    if len(present) == 1:
        return present[0]

    def composed(builder: PublicationBuilder) -> PublicationBuilder:
        for transform in present:
            builder = builder.apply(transform)
        return builder

    return composed


def set_title(title: str) -> Transform:
    """Transform replacing the publication title."""

    def transform(builder: PublicationBuilder) -> PublicationBuilder:
        metadata = replace(builder.manifest.metadata, title=title)
        return replace(builder, manifest=replace(builder.manifest, metadata=metadata))

    return transform


# =============================================================================
# Publication
# =============================================================================


@dataclass(frozen=True)
class Publication:
    """
    An opened publication.

    Immutable: manifest, fetcher and services are fixed at build time.
    """

    manifest: Manifest
    fetcher: "Fetcher"
    services: Mapping[str, Any] = field(default_factory=dict)

    @property
    def metadata(self) -> Metadata:
        return self.manifest.metadata

    @property
    def title(self) -> str:
        return self.manifest.metadata.title

    @property
    def reading_order(self) -> Tuple[Link, ...]:
        return self.manifest.reading_order

    @property
    def resources(self) -> Tuple[Link, ...]:
        return self.manifest.resources

    @property
    def links(self) -> Tuple[Link, ...]:
        return self.manifest.links

    @property
    def protection(self) -> Optional[ContentProtectionService]:
        """The content protection service, if a protection registered one."""
        return self.find_service(CONTENT_PROTECTION_SERVICE)

    @property
    def is_restricted(self) -> bool:
        protection = self.protection
        return bool(protection and protection.is_restricted)

    def link_with_href(self, href: str) -> Optional[Link]:
        return self.manifest.link_with_href(href)

    def find_service(self, name: str) -> Optional[Any]:
        return self.services.get(name)

    def get(self, href: str) -> "Resource":
        """Return the resource at `href`, read through the publication's fetcher."""
        return self.fetcher.get(href)

    def close(self) -> None:
        self.fetcher.close()

    def __repr__(self) -> str:
        return f"Publication({self.title!r}, {len(self.reading_order)} items)"


__all__ = [
    "Link",
    "Metadata",
    "Manifest",
    "PublicationContext",
    "ServiceFactory",
    "CONTENT_PROTECTION_SERVICE",
    "ContentProtectionService",
    "PublicationBuilder",
    "Transform",
    "compose_transforms",
    "set_title",
    "Publication",
]
