"""In-memory text document implementing the ``DocumentSink`` protocol.

Used by the command-line front end (load a file, stream into it, save it) and
by the test-suite. All methods take the document lock, so the document is safe
to share even though the session only ever touches it from its edit executor.
"""

from __future__ import annotations

from pathlib import Path
from threading import RLock
from typing import List, Optional, Tuple

from ..base.models import MarkerInfo
from .markers import MarkerRegistry


class TextDocument:
    """Mutable text plus an optional selection and a marker registry."""

    def __init__(self, text: str = "", *, path: Optional[Path] = None) -> None:
        self._lock = RLock()
        self._text = text
        self._selection: Optional[Tuple[int, int]] = None
        self.path = path
        self.markers = MarkerRegistry()

    @classmethod
    def from_file(cls, path: Path | str) -> "TextDocument":
        p = Path(path)
        text = p.read_text(encoding="utf-8") if p.exists() else ""
        return cls(text, path=p)

    def save(self, path: Path | str | None = None) -> Path:
        target = Path(path) if path is not None else self.path
        if target is None:
            raise ValueError("document has no path to save to")
        with self._lock:
            target.write_text(self._text, encoding="utf-8")
        return target

    # -- DocumentSink ---------------------------------------------------
    def text(self) -> str:
        with self._lock:
            return self._text

    def length(self) -> int:
        with self._lock:
            return len(self._text)

    def selected_text(self) -> Optional[str]:
        with self._lock:
            if self._selection is None:
                return None
            start, end = self._selection
            return self._text[start:end] or None

    def insert(self, offset: int, text: str) -> int:
        with self._lock:
            if not 0 <= offset <= len(self._text):
                raise IndexError(f"insert offset {offset} outside 0..{len(self._text)}")
            self._text = self._text[:offset] + text + self._text[offset:]
            self.markers.on_insert(offset, len(text))
            return offset + len(text)

    def delete(self, start: int, end: int) -> None:
        with self._lock:
            start = max(start, 0)
            end = min(end, len(self._text))
            if end <= start:
                return
            self._text = self._text[:start] + self._text[end:]
            self.markers.on_delete(start, end)

    def add_marker(self, offset: int, info: MarkerInfo) -> None:
        self.markers.add(offset, info)

    def remove_marker(self, offset: int) -> bool:
        return self.markers.remove(offset)

    def marker_at(self, offset: int) -> Optional[MarkerInfo]:
        return self.markers.get(offset)

    # -- selection ------------------------------------------------------
    def select(self, start: int, end: int) -> None:
        with self._lock:
            if not 0 <= start <= end <= len(self._text):
                raise IndexError(f"selection {start}:{end} outside 0..{len(self._text)}")
            self._selection = (start, end)

    def clear_selection(self) -> None:
        with self._lock:
            self._selection = None

    def marker_tooltips(self) -> List[str]:
        return [f"{offset}: {info.tooltip}" for offset, info in self.markers.items()]


__all__ = ["TextDocument"]
