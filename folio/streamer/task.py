# folio/streamer/task.py
"""
OpeningTask - the single terminal slot of a Streamer.open() call.

The first result written wins (success, failure or cancellation); later
writes are ignored. The winning result is handed to the completion callback
on the delivery executor, exactly once.
"""

from __future__ import annotations

import threading
from concurrent.futures import Executor
from concurrent.futures import TimeoutError as FutureTimeoutError
from dataclasses import dataclass
from typing import Callable, Optional

from folio.core.exceptions import OpeningCancelledError, OpeningError
from folio.core.publication import Publication
from folio.logging.logger import get_logger
from folio.logging.tags import STREAMER

logger = get_logger(__name__)


@dataclass(frozen=True)
class OpeningResult:
    """
    Terminal result of an opening: a Publication or an OpeningError.

    Example:
        def completion(result: OpeningResult) -> None:
            if result.is_success:
                show(result.publication)
            elif not result.is_cancelled:
                alert(result.error)
    """

    publication: Optional[Publication] = None
    error: Optional[OpeningError] = None

    @classmethod
    def success(cls, publication: Publication) -> "OpeningResult":
        return cls(publication=publication)

    @classmethod
    def failure(cls, error: OpeningError) -> "OpeningResult":
        return cls(error=error)

    @property
    def is_success(self) -> bool:
        return self.error is None

    @property
    def is_cancelled(self) -> bool:
        return isinstance(self.error, OpeningCancelledError)

    def unwrap(self) -> Publication:
        """Return the Publication, or raise the OpeningError."""
        if self.error is not None:
            raise self.error
        return self.publication


Completion = Callable[[OpeningResult], None]


class OpeningTask:
    """
    Handle on a running Streamer.open() call.

    Example:
        task = streamer.open(File("comic.cbz"), allow_user_interaction=False)
        publication = task.result(timeout=10)
    """

    def __init__(self, name: str, delivery: Executor, completion: Optional[Completion] = None) -> None:
        self.name = name
        self._delivery = delivery
        self._completion = completion
        self._lock = threading.Lock()
        self._result: Optional[OpeningResult] = None
        self._delivered = threading.Event()

    # -------------------------------------------------------------------------
    # Caller side
    # -------------------------------------------------------------------------

    def cancel(self) -> bool:
        """
        Withdraw interest in the opening.

        Delivers OpeningCancelledError unless a result was already written.
        Returns True if the cancellation won.
        """
        return self.resolve(OpeningResult.failure(OpeningCancelledError()))

    @property
    def cancelled(self) -> bool:
        with self._lock:
            return self._result is not None and self._result.is_cancelled

    def done(self) -> bool:
        """True once the completion has run."""
        return self._delivered.is_set()

    def result(self, timeout: Optional[float] = None) -> Publication:
        """
        Block until the completion has run.

        Returns:
            The opened Publication.

        Raises:
            OpeningError: The terminal error of the opening.
            concurrent.futures.TimeoutError: If `timeout` elapsed first.
        """
        if not self._delivered.wait(timeout):
            raise FutureTimeoutError(f"Opening {self.name} did not complete in {timeout}s")
        return self._result.unwrap()

    # -------------------------------------------------------------------------
    # Pipeline side
    # -------------------------------------------------------------------------

    @property
    def is_resolved(self) -> bool:
        """True once a result was written; later stages should stop."""
        with self._lock:
            return self._result is not None

    def succeed(self, publication: Publication) -> bool:
        return self.resolve(OpeningResult.success(publication))

    def fail(self, error: OpeningError) -> bool:
        return self.resolve(OpeningResult.failure(error))

    def resolve(self, result: OpeningResult) -> bool:
        """Write `result` if the slot is empty and schedule its delivery."""
        with self._lock:
            if self._result is not None:
                logger.debug(f"{STREAMER} Ignoring late result for {self.name}")
                return False
            self._result = result

        try:
            self._delivery.submit(self._deliver, result)
        except RuntimeError:
            # Delivery executor shut down: run the completion here rather than lose it
            logger.warning(f"{STREAMER} Delivery executor unavailable for {self.name}")
            self._deliver(result)
        return True

    def _deliver(self, result: OpeningResult) -> None:
        try:
            if self._completion is not None:
                self._completion(result)
        except Exception:
            logger.exception(f"{STREAMER} Completion callback failed for {self.name}")
        finally:
            self._delivered.set()

    def __repr__(self) -> str:
        return f"OpeningTask({self.name!r}, done={self.done()})"


__all__ = ["OpeningResult", "OpeningTask", "Completion"]
