# folio/core/file.py
"""
File reference handed to the Streamer.

A File is read-only: it names a path on disk and how to display it.
It never holds an open handle - fetchers open what they need.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional


@dataclass(frozen=True)
class File:
    """
    Reference to a publication file on disk.

    Args:
        path: Location of the file (or exploded directory).
        name: Display name, defaults to the path's file name.
        media_type: Optional media type hint provided by the caller.

    Example:
        >>> file = File("books/alice.cbz")
        >>> file.name
        'alice.cbz'
    """

    path: Path
    name: str = ""
    media_type: Optional[str] = None

    def __post_init__(self) -> None:
        # Accept str paths; frozen, so go through object.__setattr__
        path = Path(self.path)
        object.__setattr__(self, "path", path)
        if not self.name:
            object.__setattr__(self, "name", path.name)

    @property
    def url(self) -> str:
        """Absolute file:// URI of the file."""
        return self.path.resolve().as_uri()

    @property
    def extension(self) -> str:
        """File extension (lowercase, with dot)."""
        return self.path.suffix.lower()

    def exists(self) -> bool:
        """True if the file is reachable on disk."""
        return self.path.exists()

    def __repr__(self) -> str:
        return f"File({str(self.path)!r})"


__all__ = ["File"]
