# folio/streamer/engine.py
"""
Streamer - opens a Publication from a File.

Pipeline (each arrow is a Future; any failure short-circuits to the task):

    open(file)
      │
      ├─▶ FetcherResolver.resolve()      [worker pool]   File → Fetcher
      ├─▶ ProtectionChain.unlock()       [protections]   Fetcher → ProtectedFile
      ├─▶ ParserChain.parse() + finalize [worker pool]   ProtectedFile → Publication
      │
      └─▶ OpeningTask ──▶ completion(result)   [delivery executor, exactly once]

Ownership of the fetcher moves forward with each stage; a stage that finds
the task already resolved (cancelled) closes what it holds and stops.
"""

from __future__ import annotations

from concurrent.futures import CancelledError, Executor, ThreadPoolExecutor
from typing import TYPE_CHECKING, Any, Callable, List, Optional, Sequence

from folio.core.exceptions import OpeningCancelledError, OpeningError, UnavailableError
from folio.core.file import File
from folio.core.futures import on_complete
from folio.core.publication import Publication, Transform
from folio.core.warnings import WarningLogger
from folio.fetcher.archive import ArchiveFactory, open_zip_archive
from folio.fetcher.base import Fetcher
from folio.fetcher.resolver import FetcherResolver
from folio.logging.logger import get_logger
from folio.logging.tags import STREAMER
from folio.parser import make_default_parsers
from folio.parser.base import PublicationParser
from folio.parser.chain import ParserChain
from folio.protection.base import ContentProtection, ProtectedFile
from folio.protection.chain import ProtectionChain
from folio.streamer.finalize import finalize
from folio.streamer.task import Completion, OpeningTask

if TYPE_CHECKING:
    from folio.config.schema import StreamerConfig

logger = get_logger(__name__)

DEFAULT_WORKERS = 4
DEFAULT_DELIVERY_THREAD_NAME = "folio-delivery"
WORKER_THREAD_NAME = "folio-worker"


class Streamer:
    """
    Opens publications using a list of parsers and content protections.

    The Streamer uses the default parsers, which you can bypass using
    `ignore_default_parsers`. Additional `parsers` take precedence over the
    default ones.

    Args:
        parsers: Parsers tried before the default parsers.
        ignore_default_parsers: When True, only `parsers` are used.
        content_protections: Protections used to unlock publications, tried in
            the given order.
        open_archive: Opens an archive, optionally protected by a password.
        on_create_publication: Transform applied to every parsed builder,
            after the content protection's own transform.
        executor: Worker pool for blocking stages. Created (and owned) when None.
        delivery: Executor running completions. A single-thread executor is
            created (and owned) when None.
        workers: Size of the owned worker pool.
        delivery_thread_name: Thread name prefix of the owned delivery executor.

    Example:
        with Streamer(content_protections=[LcpFallbackProtection()]) as streamer:
            task = streamer.open(File("book.webpub"), allow_user_interaction=False)
            publication = task.result()
    """

    make_default_parsers = staticmethod(make_default_parsers)

    def __init__(
        self,
        parsers: Sequence[PublicationParser] = (),
        ignore_default_parsers: bool = False,
        content_protections: Sequence[ContentProtection] = (),
        open_archive: ArchiveFactory = open_zip_archive,
        on_create_publication: Optional[Transform] = None,
        executor: Optional[Executor] = None,
        delivery: Optional[Executor] = None,
        workers: int = DEFAULT_WORKERS,
        delivery_thread_name: str = DEFAULT_DELIVERY_THREAD_NAME,
    ) -> None:
        self.parsers: List[PublicationParser] = list(parsers) + (
            [] if ignore_default_parsers else make_default_parsers()
        )
        self.content_protections: List[ContentProtection] = list(content_protections)
        self.on_create_publication = on_create_publication

        self._resolver = FetcherResolver(open_archive)
        self._protection_chain = ProtectionChain(self.content_protections)
        self._parser_chain = ParserChain(self.parsers)

        self._owned: List[ThreadPoolExecutor] = []
        if executor is None:
            executor = ThreadPoolExecutor(max_workers=workers, thread_name_prefix=WORKER_THREAD_NAME)
            self._owned.append(executor)
        if delivery is None:
            delivery = ThreadPoolExecutor(max_workers=1, thread_name_prefix=delivery_thread_name)
            self._owned.append(delivery)
        self._executor = executor
        self._delivery = delivery

        logger.debug(
            f"{STREAMER} Streamer initialized with {len(self.parsers)} parser(s) "
            f"and {len(self.content_protections)} protection(s)"
        )

    @classmethod
    def from_config(cls, config: "StreamerConfig", **overrides: Any) -> "Streamer":
        """
        Build a Streamer from configuration, resolving plugins by name.

        Keyword `overrides` are passed to the constructor as-is (e.g. a
        caller-supplied `delivery` executor or `on_create_publication`).
        """
        from folio.core.registry import get_parser_plugin, get_protection_plugin

        kwargs: dict = {
            "parsers": [get_parser_plugin(p.plugin_name)(**p.kwargs) for p in config.parsers],
            "ignore_default_parsers": config.ignore_default_parsers,
            "content_protections": [
                get_protection_plugin(p.plugin_name)(**p.kwargs)
                for p in config.content_protections
            ],
            "workers": config.workers,
            "delivery_thread_name": config.delivery_thread_name,
        }
        kwargs.update(overrides)
        return cls(**kwargs)

    # -------------------------------------------------------------------------
    # Opening
    # -------------------------------------------------------------------------

    def open(
        self,
        file: File,
        allow_user_interaction: bool,
        fallback_title: Optional[str] = None,
        credentials: Optional[str] = None,
        sender: Any = None,
        warnings: Optional[WarningLogger] = None,
        completion: Optional[Completion] = None,
    ) -> OpeningTask:
        """
        Open a Publication from `file`.

        If you are opening the publication to render it, set
        `allow_user_interaction` to True so protections may prompt the user
        for credentials. Set it to False to import a publication silently.

        Args:
            file: The publication file.
            allow_user_interaction: Whether the user can be prompted during opening.
            fallback_title: Title used when the format declares none
                (e.g. CBZ). Defaults to the file name.
            credentials: Credentials (e.g. a password) used to unlock the file.
            sender: Free object forwarded to protections, giving UX context.
            warnings: Sink receiving non-fatal parsing warnings.
            completion: Called exactly once with the OpeningResult, on the
                delivery executor.

        Returns:
            The OpeningTask, to wait for or cancel the opening.
        """
        fallback_title = fallback_title or file.name
        task = OpeningTask(file.name, self._delivery, completion)

        logger.info(f"{STREAMER} Open {file.name}")

        def fail(error: BaseException) -> None:
            error = _as_opening_error(error)
            if not isinstance(error, OpeningCancelledError):
                logger.warning(f"{STREAMER} Opening {file.name} failed: {error}")
            task.fail(error)

        def unlock(fetcher: Fetcher) -> None:
            if task.is_resolved:
                fetcher.close()
                return
            # Unlocks any protected file with the Content Protections.
            unlocking = self._protection_chain.unlock(
                file, fetcher, allow_user_interaction, credentials, sender
            )
            on_complete(
                unlocking,
                _guarded(lambda protected: parse(protected or ProtectedFile(file, fetcher), fetcher), fail),
                _closing([fetcher], fail),
            )

        def parse(protected: ProtectedFile, fetcher: Fetcher) -> None:
            # A protection may substitute a fetcher that does not wrap the original one
            held = _unique(protected.fetcher, fetcher)
            if task.is_resolved:
                _close_all(held)
                return
            # Parses the Publication using the parsers.
            parsing = self._executor.submit(
                self._parse_publication, protected, fallback_title, warnings
            )
            on_complete(
                parsing,
                _guarded(lambda publication: deliver(publication, held), fail),
                _closing(held, fail),
            )

        def deliver(publication: Publication, held: List[Fetcher]) -> None:
            if not task.succeed(publication):
                _close_all(held)
                return
            logger.debug(f"{STREAMER} Opened {file.name} as {publication!r}")

        try:
            fetching = self._executor.submit(self._resolver.resolve, file, credentials)
        except RuntimeError as e:
            fail(UnavailableError("Streamer is closed", cause=e))
            return task

        on_complete(fetching, _guarded(unlock, fail), fail)
        return task

    def _parse_publication(
        self,
        protected: ProtectedFile,
        fallback_title: str,
        warnings: Optional[WarningLogger],
    ) -> Publication:
        builder = self._parser_chain.parse(
            protected.file, protected.fetcher, fallback_title, warnings
        )
        return finalize(builder, protected.on_create_publication, self.on_create_publication)

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def close(self, wait: bool = True) -> None:
        """
        Shut down the executors owned by this Streamer.

        With `wait=False`, stages not started yet are dropped (their openings
        fail as cancelled) and running ones finish in the background. Pending
        completions are always delivered.
        """
        for executor in self._owned:
            dropping = not wait and executor is self._executor
            executor.shutdown(wait=wait, cancel_futures=dropping)
        self._owned = []

    def __enter__(self) -> "Streamer":
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()

    def __repr__(self) -> str:
        names = [getattr(p, "plugin_name", type(p).__name__) for p in self.parsers]
        return f"Streamer(parsers={names})"


def _as_opening_error(error: BaseException) -> OpeningError:
    if isinstance(error, OpeningError):
        return error
    if isinstance(error, CancelledError):
        return OpeningCancelledError(cause=error)
    return UnavailableError(f"Unexpected error: {error}", cause=error)


def _guarded(step: Callable[[Any], None], fail: Callable[[BaseException], None]) -> Callable[[Any], None]:
    """Route exceptions raised by a stage callback to `fail`."""

    def run(value: Any) -> None:
        try:
            step(value)
        except Exception as e:
            fail(e)

    return run


def _unique(*fetchers: Fetcher) -> List[Fetcher]:
    held: List[Fetcher] = []
    for fetcher in fetchers:
        if all(fetcher is not other for other in held):
            held.append(fetcher)
    return held


def _close_all(fetchers: Sequence[Fetcher]) -> None:
    for fetcher in fetchers:
        try:
            fetcher.close()
        except Exception as e:
            logger.debug(f"{STREAMER} Failed to close {fetcher!r}: {e}")


def _closing(
    fetchers: Sequence[Fetcher], fail: Callable[[BaseException], None]
) -> Callable[[BaseException], None]:
    """Failure callback releasing `fetchers` before reporting the error."""

    def run(error: BaseException) -> None:
        _close_all(fetchers)
        fail(error)

    return run


__all__ = ["Streamer", "DEFAULT_WORKERS", "DEFAULT_DELIVERY_THREAD_NAME"]
