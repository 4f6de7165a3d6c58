"""Metadata of a response marker placed in the sink."""
from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class MarkerInfo:
    """Annotation recording where a model response began.

    Attributes:
        model_id: Model that produced the response.
        timestamp: Wall clock time the session started, ``HH:MM:SS``.
    """

    model_id: str
    timestamp: str

    @property
    def tooltip(self) -> str:
        return f"{self.model_id} Response ({self.timestamp})"


__all__ = ["MarkerInfo"]
