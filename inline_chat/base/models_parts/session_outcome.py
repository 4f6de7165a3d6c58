"""
Result of one stream session invocation.

Returned by ``StreamSession.invoke`` (and exposed by ``StreamController``) so
callers and tests can inspect how the session settled without reaching into
its internals.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..errors import StreamError
from .session_state import DecodeOutcome, SessionState


@dataclass(frozen=True)
class SessionOutcome:
    """Terminal summary of a session.

    Attributes:
        state: One of ``COMPLETED``, ``CANCELLED``, ``FAILED``, ``RATE_LIMITED``.
        total_written: Characters inserted into the sink.
        start_offset: Offset of the response marker, ``None`` if never placed.
        decode: How the frame sequence ended (``PENDING`` if decoding never ran).
        error: The fatal error surfaced to the user, if any.
        retry_after_seconds: Countdown length when rate limited.
        skipped_frames: Frames dropped under the partial-output policy.
    """

    state: SessionState
    total_written: int = 0
    start_offset: Optional[int] = None
    decode: DecodeOutcome = DecodeOutcome.PENDING
    error: Optional[StreamError] = None
    retry_after_seconds: Optional[int] = None
    skipped_frames: int = 0


__all__ = ["SessionOutcome"]
