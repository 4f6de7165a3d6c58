"""Per-offset marker registry.

Markers are keyed by their offset, not by object identity: placing a marker
where one already exists replaces it, and removal is by offset. Text edits
move markers the way zero-width editor markers move: an insertion shifts the
markers after the insertion point (a marker exactly at the point stays where
it is, so a response marker keeps pointing at the start of the response), and
a deletion pulls later markers back and drops those inside the deleted range.
"""

from __future__ import annotations

from threading import RLock
from typing import Dict, List, Optional, Tuple

from ..base.models import MarkerInfo


class MarkerRegistry:
    """Thread-safe ``offset -> MarkerInfo`` mapping."""

    def __init__(self) -> None:
        self._lock = RLock()
        self._markers: Dict[int, MarkerInfo] = {}

    def add(self, offset: int, info: MarkerInfo) -> Optional[MarkerInfo]:
        """Place ``info`` at ``offset``; return the marker it replaced, if any."""
        with self._lock:
            previous = self._markers.get(offset)
            self._markers[offset] = info
            return previous

    def remove(self, offset: int) -> bool:
        with self._lock:
            return self._markers.pop(offset, None) is not None

    def get(self, offset: int) -> Optional[MarkerInfo]:
        with self._lock:
            return self._markers.get(offset)

    def items(self) -> List[Tuple[int, MarkerInfo]]:
        with self._lock:
            return sorted(self._markers.items())

    def __len__(self) -> int:
        with self._lock:
            return len(self._markers)

    def __contains__(self, offset: object) -> bool:
        with self._lock:
            return offset in self._markers

    def clear(self) -> None:
        with self._lock:
            self._markers.clear()

    # -- edit tracking --------------------------------------------------
    def on_insert(self, offset: int, length: int) -> None:
        if length <= 0:
            return
        with self._lock:
            self._markers = {
                (pos + length if pos > offset else pos): info for pos, info in self._markers.items()
            }

    def on_delete(self, start: int, end: int) -> None:
        if end <= start:
            return
        width = end - start
        with self._lock:
            moved: Dict[int, MarkerInfo] = {}
            for pos, info in sorted(self._markers.items()):
                if pos <= start:
                    moved[pos] = info
                elif pos >= end:
                    moved.setdefault(pos - width, info)
            self._markers = moved


__all__ = ["MarkerRegistry"]
