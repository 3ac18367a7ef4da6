# folio/core/__init__.py
"""
Folio Core - the types every stage of the opening pipeline shares.

Public API:
    - File: Reference to a publication file
    - Publication / PublicationBuilder / Manifest / Metadata / Link
    - Transform helpers: compose_transforms, set_title
    - Warnings: ParserWarning, WarningLogger, ListWarningLogger
    - Exceptions: OpeningError and its variants
"""

from .exceptions import (
    BuilderConsumedError,
    ConfigError,
    FolioError,
    ForbiddenError,
    IncorrectCredentialsError,
    NotFoundError,
    OpeningCancelledError,
    OpeningError,
    ParsingFailedError,
    UnavailableError,
    UnsupportedFormatError,
)
from .file import File
from .publication import (
    CONTENT_PROTECTION_SERVICE,
    ContentProtectionService,
    Link,
    Manifest,
    Metadata,
    Publication,
    PublicationBuilder,
    PublicationContext,
    Transform,
    compose_transforms,
    set_title,
)
from .warnings import (
    ListWarningLogger,
    LoggingWarningLogger,
    ParserWarning,
    WarningLogger,
    WarningSeverity,
)

__all__ = [
    # Types
    "File",
    "Link",
    "Metadata",
    "Manifest",
    "Publication",
    "PublicationBuilder",
    "PublicationContext",
    "Transform",
    "compose_transforms",
    "set_title",
    # Services
    "CONTENT_PROTECTION_SERVICE",
    "ContentProtectionService",
    # Warnings
    "ParserWarning",
    "WarningSeverity",
    "WarningLogger",
    "ListWarningLogger",
    "LoggingWarningLogger",
    # Exceptions
    "FolioError",
    "OpeningError",
    "NotFoundError",
    "IncorrectCredentialsError",
    "UnsupportedFormatError",
    "ParsingFailedError",
    "OpeningCancelledError",
    "ForbiddenError",
    "UnavailableError",
    "BuilderConsumedError",
    "ConfigError",
]
