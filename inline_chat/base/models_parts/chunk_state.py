"""Mutable write state owned by the active session's chunk buffer."""
from __future__ import annotations

from dataclasses import dataclass


@dataclass
class ChunkState:
    """Buffered text plus the sink cursor.

    Attributes:
        buffer: Text received but not yet flushed.
        cursor: Sink offset where the next flush inserts; never decreases.
        total_written: Characters flushed to the sink so far.
    """

    buffer: str = ""
    cursor: int = 0
    total_written: int = 0


__all__ = ["ChunkState"]
