"""
Structured stream error exception type.

Wraps every failure a session can surface with a normalized ``ErrorCode`` so
the orchestrator can decide between fatal, skipped, and rate-limited handling
and log one consistent payload.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .error_code import ErrorCode


@dataclass
class StreamError(Exception):
    """Represents a structured streaming failure with a normalized error code.

    Attributes:
        code: Normalized :class:`ErrorCode` classification for the failure.
        message: Human-readable error message suitable for the notifier.
        model: Optional model id associated with the failure.
        status: HTTP status code when the failure came from the transport.
        raw: Optional original exception for diagnostics.
    """

    code: ErrorCode
    message: str
    model: Optional[str] = None
    status: Optional[int] = None
    raw: Optional[Exception] = None

    def __str__(self) -> str:  # pragma: no cover - trivial
        return f"{self.model or '-'} {self.code.value}: {self.message}"


__all__ = ["StreamError"]
