# folio/streamer/__init__.py
"""
The Streamer orchestrates the opening pipeline.

File → Fetcher → (ContentProtection) → Parser → transforms → Publication
"""

from folio.streamer.engine import Streamer
from folio.streamer.finalize import finalize
from folio.streamer.task import Completion, OpeningResult, OpeningTask

__all__ = [
    "Streamer",
    "OpeningTask",
    "OpeningResult",
    "Completion",
    "finalize",
]
