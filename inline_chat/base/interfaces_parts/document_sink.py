"""DocumentSink Protocol (single-class module).

Text-insertion target a session writes into. Implementations are not required
to be thread-safe: the session funnels every call through its serialized edit
executor.
"""

from __future__ import annotations

from typing import Optional, Protocol, runtime_checkable

from ..models import MarkerInfo


@runtime_checkable
class DocumentSink(Protocol):
    """Editable text with a per-offset marker registry."""

    def text(self) -> str:
        """Return the full current text."""
        ...

    def length(self) -> int:
        """Return the current text length."""
        ...

    def selected_text(self) -> Optional[str]:
        """Return the current selection, or ``None`` when nothing is selected."""
        ...

    def insert(self, offset: int, text: str) -> int:
        """Insert ``text`` at ``offset`` and return the offset just after it."""
        ...

    def delete(self, start: int, end: int) -> None:
        """Delete the half-open range ``[start, end)``."""
        ...

    def add_marker(self, offset: int, info: MarkerInfo) -> None:
        """Place a zero-width marker at ``offset``, replacing any marker there."""
        ...

    def remove_marker(self, offset: int) -> bool:
        """Remove the marker at ``offset``; return whether one existed."""
        ...

    def marker_at(self, offset: int) -> Optional[MarkerInfo]:
        """Return the marker at ``offset`` if any."""
        ...
