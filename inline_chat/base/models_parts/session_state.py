"""Session lifecycle states and the SSE decode outcome."""
from __future__ import annotations

from enum import Enum


class SessionState(str, Enum):
    """States of the stream session state machine."""

    IDLE = "idle"
    REQUESTING = "requesting"
    STREAMING = "streaming"
    RATE_LIMITED = "rate_limited"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    FAILED = "failed"

    @property
    def active(self) -> bool:
        """True while a request is in flight."""
        return self in (SessionState.REQUESTING, SessionState.STREAMING)


class DecodeOutcome(str, Enum):
    """How an SSE frame sequence ended."""

    PENDING = "pending"
    DONE = "done"
    EXHAUSTED = "exhausted"
    CANCELLED = "cancelled"


__all__ = ["SessionState", "DecodeOutcome"]
