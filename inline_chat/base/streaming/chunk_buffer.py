"""Chunked delivery of text deltas into the document sink.

Deltas accumulate in ``ChunkState.buffer``; ``append`` reports when the buffer
reached the flush threshold and the session then calls ``flush`` (after
polling cancellation). The session also flushes whatever is left once the
frame source is exhausted. ``flush`` inserts at the cursor through the
provided ``insert`` callable, which the session binds to its serialized edit
executor.
"""

from __future__ import annotations

from typing import Callable

from ...config.defaults import CHUNK_FLUSH_THRESHOLD, PROGRESS_CAP, PROGRESS_SCALE_CHARS
from ..models import ChunkState


class ChunkBuffer:
    """Owns the ``ChunkState`` of one session."""

    def __init__(
        self,
        insert: Callable[[int, str], int],
        start_offset: int,
        *,
        threshold: int = CHUNK_FLUSH_THRESHOLD,
    ) -> None:
        self._insert = insert
        self._threshold = threshold
        self.state = ChunkState(cursor=start_offset)
        self.flushes = 0
        self._fraction = 0.0

    @property
    def total_written(self) -> int:
        return self.state.total_written

    @property
    def cursor(self) -> int:
        return self.state.cursor

    @property
    def pending(self) -> str:
        return self.state.buffer

    def append(self, text: str) -> bool:
        """Buffer ``text``; return True when a flush is due."""
        if text:
            self.state.buffer += text
        return len(self.state.buffer) >= self._threshold

    def flush(self) -> int:
        """Write the buffer at the cursor; return the number of characters written."""
        text = self.state.buffer
        if not text:
            return 0
        new_cursor = self._insert(self.state.cursor, text)
        if new_cursor < self.state.cursor:
            raise RuntimeError(f"sink moved cursor backwards: {self.state.cursor} -> {new_cursor}")
        self.state.cursor = new_cursor
        self.state.total_written += len(text)
        self.state.buffer = ""
        self.flushes += 1
        return len(text)

    def discard(self) -> str:
        """Drop the unflushed buffer (cancellation path) and return it."""
        text, self.state.buffer = self.state.buffer, ""
        return text

    def fraction(self) -> float:
        """Progress estimate ``min(total / scale, cap)``, never decreasing."""
        value = min(self.state.total_written / PROGRESS_SCALE_CHARS, PROGRESS_CAP)
        self._fraction = max(self._fraction, value)
        return self._fraction


__all__ = ["ChunkBuffer"]
