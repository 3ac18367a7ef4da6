# folio/streamer/finalize.py
"""Builder transform pipeline: protection transform, then caller transform, then build."""

from __future__ import annotations

from typing import Optional

from folio.core.publication import Publication, PublicationBuilder, Transform


def finalize(
    builder: PublicationBuilder,
    protection_transform: Optional[Transform] = None,
    caller_transform: Optional[Transform] = None,
) -> Publication:
    """
    Apply the transforms in a fixed order and build the Publication.

    The caller's transform runs last, so it sees (and may override) what the
    content protection registered.
    """
    # Transform from the Content Protection.
    builder = builder.apply(protection_transform)
    # Transform provided by the reading app.
    builder = builder.apply(caller_transform)
    return builder.build()


__all__ = ["finalize"]
