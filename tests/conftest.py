# tests/conftest.py
"""
Root conftest - shared fixtures for the Folio test-suite.

Test Tiers:
=====================================
- tier1: Critical path tests - pure logic, no I/O
         Run: pytest -m tier1
- tier2: Tests touching the filesystem or thread pools
         Run: pytest -m "tier1 or tier2"
"""

from __future__ import annotations

import zipfile
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Callable, Dict, Iterator, Union

import pytest

from folio.streamer import Streamer

DELIVERY_THREAD_NAME = "test-delivery"

# Smallest valid bitmap headers; parsers only look at entry names
PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 16
JPEG_BYTES = b"\xff\xd8\xff\xe0" + b"\x00" * 16


# =============================================================================
# Files
# =============================================================================


@pytest.fixture
def make_zip(tmp_path: Path) -> Callable[..., Path]:
    """Write a ZIP archive from {entry_name: content}."""

    def factory(name: str, entries: Dict[str, Union[bytes, str]]) -> Path:
        path = tmp_path / name
        with zipfile.ZipFile(path, "w") as zf:
            for entry, content in entries.items():
                zf.writestr(entry, content)
        return path

    return factory


@pytest.fixture
def comic_cbz(make_zip: Callable[..., Path]) -> Path:
    return make_zip(
        "comic.cbz",
        {
            "page10.png": PNG_BYTES,
            "page2.png": PNG_BYTES,
            "page1.jpg": JPEG_BYTES,
            "ComicInfo.xml": "<ComicInfo/>",
        },
    )


@pytest.fixture
def text_file(tmp_path: Path) -> Path:
    path = tmp_path / "notes.txt"
    path.write_text("Not a publication", encoding="utf-8")
    return path


# =============================================================================
# Streamer
# =============================================================================


@pytest.fixture
def delivery() -> Iterator[ThreadPoolExecutor]:
    executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix=DELIVERY_THREAD_NAME)
    yield executor
    executor.shutdown(wait=True)


@pytest.fixture
def streamer_factory(delivery: ThreadPoolExecutor) -> Iterator[Callable[..., Streamer]]:
    """Build Streamers delivering on the shared `delivery` executor; closed at teardown."""
    created = []

    def factory(**kwargs) -> Streamer:
        kwargs.setdefault("delivery", delivery)
        kwargs.setdefault("workers", 2)
        streamer = Streamer(**kwargs)
        created.append(streamer)
        return streamer

    yield factory

    for streamer in created:
        streamer.close()


@pytest.fixture
def streamer(streamer_factory: Callable[..., Streamer]) -> Streamer:
    return streamer_factory()


@pytest.fixture
def delivery_thread_name() -> str:
    return DELIVERY_THREAD_NAME
