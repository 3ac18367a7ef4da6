# folio/fetcher/archive.py
"""
Archive-backed fetcher.

The archive layer is pluggable through an ArchiveFactory:

    open_archive(path, password) -> Archive

A factory raises InvalidPasswordError when the archive is protected and the
password is missing or wrong, and a plain ArchiveError for anything else
(not an archive, corrupt archive). Only the first one is fatal when
resolving a fetcher - see folio.fetcher.resolver.
"""

from __future__ import annotations

import mimetypes
import zipfile
import zlib
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, List, Optional, Protocol, runtime_checkable

from folio.core.exceptions import FolioError
from folio.core.publication import Link
from folio.fetcher.base import (
    BytesResource,
    Resource,
    ResourceNotFoundError,
    ResourceUnavailableError,
    normalize_href,
    not_found,
)
from folio.logging.logger import get_logger
from folio.logging.tags import FETCHER

logger = get_logger(__name__)

# ZIP general purpose flag: entry is encrypted
_ZIP_ENCRYPTED_FLAG = 0x1


# =============================================================================
# Errors
# =============================================================================


class ArchiveError(FolioError):
    """The file cannot be opened as an archive."""

    def __init__(self, message: str, cause: Exception | None = None):
        super().__init__(message)
        self.cause = cause


class InvalidPasswordError(ArchiveError):
    """The archive is protected and the password is missing or incorrect."""

    pass


# =============================================================================
# Archive Protocol
# =============================================================================


@dataclass(frozen=True)
class ArchiveEntry:
    """An entry of an archive."""

    path: str
    length: int
    compressed_length: Optional[int] = None
    is_encrypted: bool = False


@runtime_checkable
class Archive(Protocol):
    """Read access to the entries of an archive."""

    @property
    def entries(self) -> List[ArchiveEntry]:
        ...

    def read(self, path: str) -> bytes:
        """
        Read the entry at `path` (relative, no leading slash).

        Raises:
            KeyError: If no such entry exists.
        """
        ...

    def close(self) -> None:
        ...


ArchiveFactory = Callable[[Path, Optional[str]], Archive]


# =============================================================================
# ZIP Implementation
# =============================================================================


class ZipArchive:
    """Archive backed by the stdlib zipfile module (ZipCrypto passwords)."""

    def __init__(self, zip_file: zipfile.ZipFile, password: Optional[str] = None) -> None:
        self._zip = zip_file
        self._pwd = password.encode("utf-8") if password else None

    @property
    def entries(self) -> List[ArchiveEntry]:
        return [
            ArchiveEntry(
                path=info.filename,
                length=info.file_size,
                compressed_length=info.compress_size,
                is_encrypted=bool(info.flag_bits & _ZIP_ENCRYPTED_FLAG),
            )
            for info in self._zip.infolist()
            if not info.is_dir()
        ]

    def read(self, path: str) -> bytes:
        return self._zip.read(path, pwd=self._pwd)

    def close(self) -> None:
        self._zip.close()


def open_zip_archive(path: Path, password: Optional[str] = None) -> ZipArchive:
    """
    Default ArchiveFactory: open `path` as a ZIP archive.

    Raises:
        InvalidPasswordError: If encrypted entries cannot be opened with `password`.
        ArchiveError: If the file is not a readable ZIP archive.
    """
    try:
        zip_file = zipfile.ZipFile(path, "r")
    except Exception as e:
        # BadZipFile, OSError, but also NotImplementedError / ValueError on corrupt headers
        raise ArchiveError(f"Not a ZIP archive: {path}", cause=e) from e

    encrypted = [info for info in zip_file.infolist() if info.flag_bits & _ZIP_ENCRYPTED_FLAG]
    if encrypted:
        if not password:
            zip_file.close()
            raise InvalidPasswordError(f"Archive {path.name} requires a password")

        try:
            _check_password(zip_file, encrypted, password.encode("utf-8"))
        except InvalidPasswordError as e:
            zip_file.close()
            raise InvalidPasswordError(f"Incorrect password for {path.name}", cause=e.cause) from e
        except Exception as e:
            zip_file.close()
            raise ArchiveError(f"Cannot open encrypted entries of {path.name}", cause=e) from e

    return ZipArchive(zip_file, password)


def _check_password(zip_file: zipfile.ZipFile, encrypted: List[zipfile.ZipInfo], pwd: bytes) -> None:
    """
    Read the smallest encrypted entry in full.

    The ZipCrypto header only holds a one-byte check, so about one wrong
    password in 256 gets past zip_file.open(). Only the CRC of the decrypted
    content (or the deflate stream failing on garbage) rejects those.
    """
    smallest = min(encrypted, key=lambda info: info.compress_size)
    try:
        zip_file.read(smallest, pwd=pwd)
    except (RuntimeError, zipfile.BadZipFile, zlib.error, EOFError) as e:
        # RuntimeError: header check failed. Others: it passed by chance
        raise InvalidPasswordError("Incorrect password", cause=e) from e


# =============================================================================
# Fetcher
# =============================================================================


class ArchiveFetcher:
    """
    Fetcher exposing the entries of an archive.

    Entry `OEBPS/ch1.xhtml` is served at href `/OEBPS/ch1.xhtml`.
    """

    def __init__(self, archive: Archive) -> None:
        self.archive = archive

    @classmethod
    def open(
        cls,
        path: Path,
        password: Optional[str] = None,
        open_archive: ArchiveFactory = open_zip_archive,
    ) -> "ArchiveFetcher":
        """
        Open `path` with `open_archive`.

        Raises:
            InvalidPasswordError: Propagated from the archive factory.
            ArchiveError: If the file is not an archive.
        """
        archive = open_archive(Path(path), password)
        logger.debug(f"{FETCHER} Opened archive {Path(path).name}")
        return cls(archive)

    @property
    def links(self) -> List[Link]:
        return [
            Link(
                href=normalize_href(entry.path),
                type=mimetypes.guess_type(entry.path)[0],
                properties={"compressed_length": entry.compressed_length} if entry.compressed_length is not None else {},
            )
            for entry in self.archive.entries
        ]

    def get(self, href: str) -> Resource:
        href = normalize_href(href)
        path = href.lstrip("/")

        link = next((link for link in self.links if link.href == href), None)
        if link is None:
            return not_found(href)

        def read() -> bytes:
            try:
                return self.archive.read(path)
            except KeyError as e:
                raise ResourceNotFoundError(f"No entry {path!r}", href=href, cause=e) from e
            except Exception as e:
                raise ResourceUnavailableError(
                    f"Cannot read entry {path!r}: {e}", href=href, cause=e
                ) from e

        return BytesResource(link, read)

    def close(self) -> None:
        self.archive.close()

    def __repr__(self) -> str:
        return f"ArchiveFetcher({len(self.archive.entries)} entries)"


__all__ = [
    "ArchiveError",
    "InvalidPasswordError",
    "ArchiveEntry",
    "Archive",
    "ArchiveFactory",
    "ZipArchive",
    "open_zip_archive",
    "ArchiveFetcher",
]
