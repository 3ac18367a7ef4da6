# folio/core/exceptions.py
"""
All exceptions raised while opening a publication.

Hierarchy:
    FolioError
    ├── OpeningError - Terminal result of Streamer.open()
    │   ├── NotFoundError - The file is unreachable
    │   ├── IncorrectCredentialsError - Archive or protection rejected the credentials
    │   ├── UnsupportedFormatError - No parser claimed the content
    │   ├── ParsingFailedError - A parser recognized the format but failed
    │   ├── OpeningCancelledError - The caller cancelled the operation
    │   ├── ForbiddenError - The publication may not be opened (e.g. DRM rights)
    │   └── UnavailableError - A required service or resource is unavailable
    ├── ArchiveError - Archive layer failures (see folio.fetcher.archive)
    ├── ResourceError - Resource read failures (see folio.fetcher.base)
    ├── BuilderConsumedError - PublicationBuilder reused after build()
    └── ConfigError - Invalid configuration
"""

from __future__ import annotations

from typing import Optional


class FolioError(Exception):
    """Base error for the whole package."""

    pass


# =============================================================================
# Opening Errors
# =============================================================================


class OpeningError(FolioError):
    """
    Terminal failure of a publication opening.

    Subclasses carry a stable ``code`` so callers can switch on the variant
    without importing every class.
    """

    code: str = "opening_error"
    default_message: str = "The publication could not be opened"

    def __init__(self, message: Optional[str] = None, cause: Optional[BaseException] = None):
        super().__init__(message or self.default_message)
        self.cause = cause


class NotFoundError(OpeningError):
    """The publication file was not found."""

    code = "not_found"
    default_message = "Publication file not found"


class IncorrectCredentialsError(OpeningError):
    """The provided credentials are incorrect."""

    code = "incorrect_credentials"
    default_message = "Incorrect credentials"


class UnsupportedFormatError(OpeningError):
    """No parser is able to open this publication format."""

    code = "unsupported_format"
    default_message = "Unsupported publication format"


class ParsingFailedError(OpeningError):
    """The publication could not be parsed."""

    code = "parsing_failed"

    def __init__(self, cause: BaseException, message: Optional[str] = None):
        super().__init__(message or f"Parsing failed: {cause}", cause=cause)


class OpeningCancelledError(OpeningError):
    """The opening was cancelled."""

    code = "cancelled"
    default_message = "Opening cancelled"


class ForbiddenError(OpeningError):
    """Opening this publication is forbidden."""

    code = "forbidden"
    default_message = "Opening this publication is forbidden"


class UnavailableError(OpeningError):
    """A service required to open this publication is unavailable."""

    code = "unavailable"
    default_message = "A required service is unavailable"


# =============================================================================
# Other Errors
# =============================================================================


class BuilderConsumedError(FolioError):
    """A PublicationBuilder was used after build() consumed it."""

    pass


class ConfigError(FolioError):
    """Configuration error."""

    pass


__all__ = [
    "FolioError",
    # Opening
    "OpeningError",
    "NotFoundError",
    "IncorrectCredentialsError",
    "UnsupportedFormatError",
    "ParsingFailedError",
    "OpeningCancelledError",
    "ForbiddenError",
    "UnavailableError",
    # Other
    "BuilderConsumedError",
    "ConfigError",
]
