# folio/core/futures.py
"""
Small helpers over concurrent.futures.Future.

Every asynchronous stage of the Streamer is a Future that resolves once,
with a value or an exception. These helpers chain them without blocking.
"""

from __future__ import annotations

from concurrent.futures import CancelledError, Future
from typing import Any, Callable, TypeVar

T = TypeVar("T")


def completed(value: T) -> "Future[T]":
    """A Future already resolved with `value`."""
    future: Future = Future()
    future.set_result(value)
    return future


def failed(error: BaseException) -> "Future[Any]":
    """A Future already resolved with `error`."""
    future: Future = Future()
    future.set_exception(error)
    return future


def as_future(value: Any) -> Future:
    """Wrap a plain value in a resolved Future; Futures pass through."""
    if isinstance(value, Future):
        return value
    return completed(value)


def on_complete(
    future: "Future[T]",
    on_success: Callable[[T], None],
    on_failure: Callable[[BaseException], None],
) -> None:
    """
    Run `on_success(value)` or `on_failure(error)` once `future` resolves.

    Callbacks run on the thread resolving the future (or immediately, if it
    already is). A cancelled future counts as a failure.
    """

    def callback(done: "Future[T]") -> None:
        if done.cancelled():
            on_failure(CancelledError())
            return
        error = done.exception()
        if error is not None:
            on_failure(error)
        else:
            on_success(done.result())

    future.add_done_callback(callback)


__all__ = ["completed", "failed", "as_future", "on_complete"]
