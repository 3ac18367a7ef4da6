# tests/test_streamer.py
"""
End-to-end tests for Streamer.open().

Verifies:
1. Success path for archives (CBZ, packaged WebPub) and fallback titles
2. Each OpeningError variant reaches the completion
3. The completion runs exactly once, on the delivery executor
4. Cancellation delivers OpeningCancelledError and releases the fetcher
5. Protection and caller transforms are applied in order
6. Protections decide which fetcher the parsers read, and every fetcher is released
7. close(wait=False) does not wait for running stages
"""

from __future__ import annotations

import json
import threading
import time
from concurrent.futures import Future
from concurrent.futures import TimeoutError as FutureTimeoutError
from pathlib import Path
from typing import List, Optional

import pytest

from folio.config.schema import PluginConfig, StreamerConfig
from folio.core.exceptions import (
    IncorrectCredentialsError,
    NotFoundError,
    OpeningCancelledError,
    ParsingFailedError,
    UnavailableError,
    UnsupportedFormatError,
)
from folio.core.file import File
from folio.core.publication import set_title
from folio.core.warnings import ListWarningLogger
from folio.fetcher.archive import ArchiveEntry, ArchiveFetcher, InvalidPasswordError
from folio.fetcher.base import Fetcher
from folio.protection.base import ProtectedFile
from folio.protection.plugins.fallback import LcpFallbackProtection
from folio.streamer import OpeningResult, Streamer

pytestmark = pytest.mark.tier2

TIMEOUT = 5
PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 16
LOCKED_CBZ = Path(__file__).parent / "fixtures" / "locked_deflated.cbz"


# =============================================================================
# Helpers
# =============================================================================


class Recorder:
    """Completion recording every result and the thread it ran on."""

    def __init__(self) -> None:
        self.results: List[OpeningResult] = []
        self.threads: List[str] = []
        self.called = threading.Event()

    def __call__(self, result: OpeningResult) -> None:
        self.results.append(result)
        self.threads.append(threading.current_thread().name)
        self.called.set()

    @property
    def error(self):
        assert len(self.results) == 1
        return self.results[0].error


class RecordingProtection:
    plugin_name = "recording"

    def __init__(self) -> None:
        self.calls = 0

    def open(self, file, fetcher, allow_user_interaction, credentials, sender):
        self.calls += 1
        return None


class RecordingParser:
    plugin_name = "recording"

    def __init__(self, raises: Optional[Exception] = None) -> None:
        self.calls = 0
        self.fetchers: List[Fetcher] = []
        self.raises = raises

    def parse(self, file, fetcher, fallback_title, warnings=None):
        self.calls += 1
        self.fetchers.append(fetcher)
        if self.raises is not None:
            raise self.raises
        return None


class SubstitutingProtection:
    """Protection serving the file through its own fetcher."""

    plugin_name = "substituting"

    def __init__(self, fetcher: Fetcher) -> None:
        self.fetcher = fetcher

    def open(self, file, fetcher, allow_user_interaction, credentials, sender):
        return ProtectedFile(file=file, fetcher=self.fetcher)


class RejectingProtection:
    plugin_name = "rejecting"

    def __init__(self) -> None:
        self.calls = 0

    def open(self, file, fetcher, allow_user_interaction, credentials, sender):
        self.calls += 1
        raise IncorrectCredentialsError("Wrong passphrase")


class FakeArchive:
    """Archive with one entry; signals when closed."""

    def __init__(self) -> None:
        self.closed = threading.Event()

    @property
    def entries(self) -> List[ArchiveEntry]:
        return [ArchiveEntry(path="page1.png", length=len(PNG_BYTES))]

    def read(self, path: str) -> bytes:
        return PNG_BYTES

    def close(self) -> None:
        self.closed.set()


class GatedProtection:
    """Protection whose answer waits for `release`."""

    plugin_name = "gated"

    def __init__(self, substitute: Optional[Fetcher] = None) -> None:
        self.substitute = substitute
        self.started = threading.Event()
        self.release = threading.Event()

    def open(self, file, fetcher, allow_user_interaction, credentials, sender) -> Future:
        future: Future = Future()

        def answer() -> None:
            self.release.wait(TIMEOUT)
            future.set_result(ProtectedFile(file=file, fetcher=self.substitute or fetcher))

        threading.Thread(target=answer, daemon=True).start()
        self.started.set()
        return future


class GatedParser:
    """Parser blocking its worker thread until `release`, then declining."""

    plugin_name = "gated"

    def __init__(self) -> None:
        self.started = threading.Event()
        self.release = threading.Event()

    def parse(self, file, fetcher, fallback_title, warnings=None):
        self.started.set()
        self.release.wait(TIMEOUT)
        return None


def fake_archive_file(tmp_path: Path) -> File:
    """A file the test's archive factory opens as a FakeArchive."""
    path = tmp_path / "comic.cbz"
    path.write_bytes(b"opened by the fake archive factory")
    return File(path)


def webpub_manifest(title: str = "Moby Dick") -> str:
    return json.dumps(
        {
            "metadata": {"title": title, "author": ["Herman Melville"]},
            "readingOrder": [{"href": "chapter1.html", "type": "text/html"}],
        }
    )


# =============================================================================
# Success
# =============================================================================


class TestOpenSuccess:
    """Publications open and reach the completion."""

    def test_comic_uses_fallback_title(self, streamer, comic_cbz):
        recorder = Recorder()

        task = streamer.open(
            File(comic_cbz), allow_user_interaction=False, fallback_title="My Comic", completion=recorder
        )
        publication = task.result(timeout=TIMEOUT)

        try:
            assert publication.title == "My Comic"
            assert [link.href for link in publication.reading_order] == [
                "/page1.jpg",
                "/page2.png",
                "/page10.png",
            ]
            assert recorder.results[0].publication is publication
        finally:
            publication.close()

    def test_fallback_title_defaults_to_file_name(self, streamer, comic_cbz):
        publication = streamer.open(File(comic_cbz), allow_user_interaction=False).result(timeout=TIMEOUT)

        assert publication.title == "comic.cbz"
        publication.close()

    def test_packaged_webpub(self, streamer, make_zip):
        path = make_zip(
            "moby.webpub",
            {"manifest.json": webpub_manifest(), "chapter1.html": "<p>Call me Ishmael.</p>"},
        )
        warnings = ListWarningLogger()

        publication = streamer.open(
            File(path), allow_user_interaction=False, warnings=warnings
        ).result(timeout=TIMEOUT)

        try:
            assert publication.title == "Moby Dick"
            assert publication.metadata.authors == ("Herman Melville",)
            assert publication.get("/chapter1.html").read_text() == "<p>Call me Ishmael.</p>"
            assert len(warnings) == 0
        finally:
            publication.close()

    def test_protection_then_caller_transform(self, streamer_factory, make_zip):
        path = make_zip(
            "locked.webpub",
            {"manifest.json": webpub_manifest(), "license.lcpl": "{}", "chapter1.html": ""},
        )
        streamer = streamer_factory(
            content_protections=[LcpFallbackProtection()],
            on_create_publication=set_title("Renamed by app"),
        )

        publication = streamer.open(File(path), allow_user_interaction=False).result(timeout=TIMEOUT)

        try:
            assert publication.title == "Renamed by app"
            assert publication.is_restricted
            assert publication.protection.name == "Readium LCP"
        finally:
            publication.close()


# =============================================================================
# Failures
# =============================================================================


class TestOpenFailures:
    """Every failure is delivered as a typed OpeningError."""

    def test_not_found_invokes_no_plugin(self, streamer_factory, tmp_path):
        protection = RecordingProtection()
        parser = RecordingParser()
        streamer = streamer_factory(content_protections=[protection], parsers=[parser])
        recorder = Recorder()

        task = streamer.open(File(tmp_path / "missing.cbz"), False, completion=recorder)

        with pytest.raises(NotFoundError):
            task.result(timeout=TIMEOUT)
        assert isinstance(recorder.error, NotFoundError)
        assert protection.calls == 0
        assert parser.calls == 0

    def test_wrong_password(self, streamer_factory, text_file):
        def open_archive(path: Path, password):
            raise InvalidPasswordError("bad password")

        protection = RecordingProtection()
        streamer = streamer_factory(open_archive=open_archive, content_protections=[protection])

        task = streamer.open(File(text_file), False, credentials="wrong")

        with pytest.raises(IncorrectCredentialsError):
            task.result(timeout=TIMEOUT)
        assert protection.calls == 0

    def test_unsupported_format(self, streamer, text_file):
        recorder = Recorder()

        task = streamer.open(File(text_file), False, completion=recorder)

        with pytest.raises(UnsupportedFormatError):
            task.result(timeout=TIMEOUT)
        assert recorder.error.code == "unsupported_format"

    def test_parser_failure_skips_defaults(self, streamer_factory, comic_cbz):
        cause = RuntimeError("boom")
        streamer = streamer_factory(parsers=[RecordingParser(raises=cause)])

        with pytest.raises(ParsingFailedError) as exc_info:
            streamer.open(File(comic_cbz), False).result(timeout=TIMEOUT)

        assert exc_info.value.cause is cause

    def test_invalid_manifest_is_parsing_failure(self, streamer, make_zip):
        path = make_zip("broken.webpub", {"manifest.json": "{not json"})

        with pytest.raises(ParsingFailedError):
            streamer.open(File(path), False).result(timeout=TIMEOUT)

    def test_ignore_default_parsers(self, streamer_factory, comic_cbz):
        streamer = streamer_factory(ignore_default_parsers=True)

        with pytest.raises(UnsupportedFormatError):
            streamer.open(File(comic_cbz), False).result(timeout=TIMEOUT)

    def test_transform_error_is_unavailable(self, streamer_factory, comic_cbz):
        def broken(builder):
            raise KeyError("missing")

        streamer = streamer_factory(on_create_publication=broken)

        with pytest.raises(UnavailableError):
            streamer.open(File(comic_cbz), False).result(timeout=TIMEOUT)

    def test_closed_streamer_is_unavailable(self, comic_cbz):
        streamer = Streamer()
        streamer.close()
        recorder = Recorder()

        task = streamer.open(File(comic_cbz), False, completion=recorder)

        assert recorder.called.wait(TIMEOUT)
        assert isinstance(recorder.error, UnavailableError)
        assert task.done()


# =============================================================================
# Delivery
# =============================================================================


class TestDelivery:
    """Exactly once, on the delivery executor."""

    def test_completion_on_delivery_thread(self, streamer, comic_cbz, tmp_path, delivery_thread_name):
        success = Recorder()
        failure = Recorder()

        streamer.open(File(comic_cbz), False, completion=success).result(timeout=TIMEOUT).close()
        with pytest.raises(NotFoundError):
            streamer.open(File(tmp_path / "nope"), False, completion=failure).result(timeout=TIMEOUT)

        assert success.threads[0].startswith(delivery_thread_name)
        assert failure.threads[0].startswith(delivery_thread_name)

    def test_owned_delivery_thread_name(self, comic_cbz):
        recorder = Recorder()

        with Streamer(delivery_thread_name="reader-ui") as streamer:
            streamer.open(File(comic_cbz), False, completion=recorder).result(timeout=TIMEOUT).close()

        assert recorder.threads[0].startswith("reader-ui")

    def test_completion_runs_exactly_once(self, streamer, comic_cbz):
        recorder = Recorder()

        task = streamer.open(File(comic_cbz), False, completion=recorder)
        task.result(timeout=TIMEOUT).close()

        assert task.cancel() is False
        assert not task.cancelled
        assert len(recorder.results) == 1

    def test_completion_error_does_not_break_task(self, streamer, comic_cbz):
        def completion(result):
            raise ValueError("app bug")

        task = streamer.open(File(comic_cbz), False, completion=completion)

        task.result(timeout=TIMEOUT).close()
        assert task.done()

    def test_from_config(self, delivery, comic_cbz):
        config = StreamerConfig(
            content_protections=[PluginConfig(plugin_name="lcp_fallback")],
            workers=1,
        )

        with Streamer.from_config(config, delivery=delivery) as streamer:
            assert [p.plugin_name for p in streamer.content_protections] == ["lcp_fallback"]
            publication = streamer.open(File(comic_cbz), False).result(timeout=TIMEOUT)
            assert not publication.is_restricted
            publication.close()


# =============================================================================
# Cancellation
# =============================================================================


class TestCancellation:
    """Cancellation wins over in-flight stages."""

    def test_cancel_delivers_cancelled_and_closes_fetcher(self, streamer_factory, tmp_path):
        archive = FakeArchive()
        protection = GatedProtection()
        streamer = streamer_factory(
            open_archive=lambda path, password: archive,
            content_protections=[protection],
        )
        path = tmp_path / "comic.cbz"
        path.write_bytes(b"opened by the fake archive factory")
        recorder = Recorder()

        task = streamer.open(File(path), False, completion=recorder)
        assert protection.started.wait(TIMEOUT)

        assert task.cancel() is True
        assert task.cancelled
        with pytest.raises(OpeningCancelledError):
            task.result(timeout=TIMEOUT)

        protection.release.set()
        assert archive.closed.wait(TIMEOUT)
        assert len(recorder.results) == 1
        assert recorder.results[0].is_cancelled

    def test_cancel_twice(self, streamer, comic_cbz):
        task = streamer.open(File(comic_cbz), False)

        first = task.cancel()
        second = task.cancel()

        assert second is False
        if first:
            with pytest.raises(OpeningCancelledError):
                task.result(timeout=TIMEOUT)
        else:
            task.result(timeout=TIMEOUT).close()

    def test_cancel_releases_original_and_substituted_fetchers(self, streamer_factory, tmp_path):
        original = FakeArchive()
        substituted = FakeArchive()
        protection = GatedProtection(substitute=ArchiveFetcher(substituted))
        streamer = streamer_factory(
            open_archive=lambda path, password: original,
            content_protections=[protection],
        )

        task = streamer.open(fake_archive_file(tmp_path), False)
        assert protection.started.wait(TIMEOUT)
        assert task.cancel() is True

        protection.release.set()
        assert original.closed.wait(TIMEOUT)
        assert substituted.closed.wait(TIMEOUT)


# =============================================================================
# Protections
# =============================================================================


class TestProtections:
    """The protection chain sits between the archive and the parsers."""

    def test_substituted_fetcher_reaches_parser(self, streamer_factory, tmp_path):
        substituted = FakeArchive()
        fetcher = ArchiveFetcher(substituted)
        parser = RecordingParser()
        streamer = streamer_factory(
            open_archive=lambda path, password: FakeArchive(),
            content_protections=[SubstitutingProtection(fetcher)],
            parsers=[parser],
        )

        publication = streamer.open(fake_archive_file(tmp_path), False).result(timeout=TIMEOUT)

        try:
            assert parser.fetchers == [fetcher]
            assert publication.get("/page1.png").read() == PNG_BYTES
        finally:
            publication.close()
        assert substituted.closed.is_set()

    def test_parsing_failure_releases_both_fetchers(self, streamer_factory, tmp_path):
        original = FakeArchive()
        substituted = FakeArchive()
        streamer = streamer_factory(
            open_archive=lambda path, password: original,
            content_protections=[SubstitutingProtection(ArchiveFetcher(substituted))],
            parsers=[RecordingParser(raises=ValueError("garbage"))],
        )

        with pytest.raises(ParsingFailedError):
            streamer.open(fake_archive_file(tmp_path), False).result(timeout=TIMEOUT)

        assert original.closed.wait(TIMEOUT)
        assert substituted.closed.wait(TIMEOUT)

    def test_protection_rejecting_credentials_skips_parsers(self, streamer_factory, tmp_path):
        archive = FakeArchive()
        protection = RejectingProtection()
        parser = RecordingParser()
        streamer = streamer_factory(
            open_archive=lambda path, password: archive,
            content_protections=[protection],
            parsers=[parser],
        )
        recorder = Recorder()

        task = streamer.open(fake_archive_file(tmp_path), True, credentials="guess", completion=recorder)

        with pytest.raises(IncorrectCredentialsError, match="Wrong passphrase"):
            task.result(timeout=TIMEOUT)
        assert recorder.called.wait(TIMEOUT)
        assert isinstance(recorder.error, IncorrectCredentialsError)
        assert protection.calls == 1
        assert parser.calls == 0
        assert archive.closed.wait(TIMEOUT)

    def test_archive_password_then_protections(self, streamer_factory):
        protection = RecordingProtection()
        streamer = streamer_factory(content_protections=[protection])

        publication = streamer.open(File(LOCKED_CBZ), False, credentials="right").result(timeout=TIMEOUT)

        try:
            assert protection.calls == 1
            assert [link.href for link in publication.reading_order] == ["/page1.png", "/page2.png"]
            assert publication.get("/page1.png").read().startswith(b"\x89PNG")
        finally:
            publication.close()

    @pytest.mark.parametrize("credentials", [None, "wrong", "wrong120"])
    def test_rejected_archive_password_skips_protections(self, streamer_factory, credentials):
        protection = RecordingProtection()
        streamer = streamer_factory(content_protections=[protection])

        task = streamer.open(File(LOCKED_CBZ), False, credentials=credentials)

        with pytest.raises(IncorrectCredentialsError):
            task.result(timeout=TIMEOUT)
        assert protection.calls == 0


# =============================================================================
# Closing
# =============================================================================


class TestClose:
    """Shutting down a Streamer with openings in flight."""

    def test_close_without_waiting_returns_while_parser_runs(self, streamer_factory, tmp_path):
        archive = FakeArchive()
        parser = GatedParser()
        streamer = streamer_factory(
            open_archive=lambda path, password: archive,
            parsers=[parser],
            ignore_default_parsers=True,
        )

        try:
            task = streamer.open(fake_archive_file(tmp_path), False)
            assert parser.started.wait(TIMEOUT)
            with pytest.raises(FutureTimeoutError):
                task.result(timeout=0.1)
            task.cancel()

            started = time.monotonic()
            streamer.close(wait=False)
            assert time.monotonic() - started < TIMEOUT / 2
        finally:
            parser.release.set()

        with pytest.raises(OpeningCancelledError):
            task.result(timeout=TIMEOUT)
        # The parsing stage releases its fetcher once it returns
        assert archive.closed.wait(TIMEOUT)

    def test_close_without_waiting_cancels_queued_openings(self, streamer_factory, tmp_path, comic_cbz):
        parser = GatedParser()
        streamer = streamer_factory(
            open_archive=lambda path, password: FakeArchive(),
            parsers=[parser],
            ignore_default_parsers=True,
            workers=1,
        )
        recorder = Recorder()

        try:
            running = streamer.open(fake_archive_file(tmp_path), False)
            assert parser.started.wait(TIMEOUT)
            queued = streamer.open(File(comic_cbz), False, completion=recorder)

            streamer.close(wait=False)

            with pytest.raises(OpeningCancelledError):
                queued.result(timeout=TIMEOUT)
            assert recorder.called.wait(TIMEOUT)
            assert recorder.results[0].is_cancelled
        finally:
            parser.release.set()

        with pytest.raises(UnsupportedFormatError):
            running.result(timeout=TIMEOUT)
