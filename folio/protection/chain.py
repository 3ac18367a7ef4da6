# folio/protection/chain.py
"""
ProtectionChain - unlocks a file with the first matching ContentProtection.

    ┌──────────┐  None   ┌──────────┐  None   ┌──────────┐  None
    │    A     │ ──────▶ │    B     │ ──────▶ │    C     │ ──────▶ unprotected
    └──────────┘         └──────────┘         └──────────┘
         │ ProtectedFile / error: stop, no other protection is tried

Protections are tried in list order, one at a time, each only once the
previous one has answered.
"""

from __future__ import annotations

from collections import deque
from concurrent.futures import CancelledError, Future
from dataclasses import dataclass
from typing import Any, Deque, Optional, Sequence

from folio.core.exceptions import OpeningCancelledError, OpeningError, UnavailableError
from folio.core.file import File
from folio.core.futures import as_future, on_complete
from folio.fetcher.base import Fetcher
from folio.logging.logger import get_logger
from folio.logging.tags import PROTECTION
from folio.protection.base import ContentProtection, ProtectedFile

logger = get_logger(__name__)


@dataclass(frozen=True)
class _Attempt:
    """Arguments forwarded untouched to every protection."""

    file: File
    fetcher: Fetcher
    allow_user_interaction: bool
    credentials: Optional[str]
    sender: Any


class ProtectionChain:
    """
    Ordered, first-match-wins list of content protections.

    Example:
        chain = ProtectionChain([LcpFallbackProtection(), AdeptFallbackProtection()])
        protected = chain.unlock(file, fetcher, False, None, None).result()
    """

    def __init__(self, protections: Sequence[ContentProtection] = ()) -> None:
        self.protections = list(protections)

    def unlock(
        self,
        file: File,
        fetcher: Fetcher,
        allow_user_interaction: bool,
        credentials: Optional[str] = None,
        sender: Any = None,
    ) -> "Future[Optional[ProtectedFile]]":
        """
        Try each protection in order.

        Returns:
            Future resolving with the winning ProtectedFile, or None when no
            protection recognized the file. It fails with the OpeningError of
            the first protection that failed.
        """
        result: Future = Future()
        attempt = _Attempt(file, fetcher, allow_user_interaction, credentials, sender)
        self._try_next(deque(self.protections), attempt, result)
        return result

    def _try_next(
        self,
        remaining: Deque[ContentProtection],
        attempt: _Attempt,
        result: Future,
    ) -> None:
        if not remaining:
            # No Content Protection applied, this file is probably not protected.
            logger.debug(f"{PROTECTION} No protection recognized {attempt.file.name}")
            result.set_result(None)
            return

        protection = remaining.popleft()
        name = _plugin_name(protection)

        try:
            outcome = as_future(
                protection.open(
                    attempt.file,
                    attempt.fetcher,
                    attempt.allow_user_interaction,
                    attempt.credentials,
                    attempt.sender,
                )
            )
        except Exception as e:
            result.set_exception(_as_opening_error(e, name))
            return

        def on_success(protected: Optional[ProtectedFile]) -> None:
            if protected is None:
                logger.debug(f"{PROTECTION} '{name}' declined {attempt.file.name}")
                self._try_next(remaining, attempt, result)
                return
            logger.info(f"{PROTECTION} '{name}' unlocked {attempt.file.name}")
            result.set_result(protected)

        def on_failure(error: BaseException) -> None:
            logger.warning(f"{PROTECTION} '{name}' failed on {attempt.file.name}: {error}")
            result.set_exception(_as_opening_error(error, name))

        on_complete(outcome, on_success, on_failure)


def _as_opening_error(error: BaseException, name: str) -> OpeningError:
    """OpeningErrors pass through verbatim; anything else is wrapped."""
    if isinstance(error, OpeningError):
        return error
    if isinstance(error, CancelledError):
        return OpeningCancelledError(f"Protection '{name}' was cancelled", cause=error)
    return UnavailableError(f"Protection '{name}' failed: {error}", cause=error)


def _plugin_name(protection: ContentProtection) -> str:
    return getattr(protection, "plugin_name", type(protection).__name__)


__all__ = ["ProtectionChain"]
