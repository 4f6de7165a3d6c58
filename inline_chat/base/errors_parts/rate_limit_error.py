"""Rate-limit error raised for a transport-level 429 response."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .error_code import ErrorCode
from .stream_error import StreamError


@dataclass
class RateLimitError(StreamError):
    """Non-fatal: the session ends RATE_LIMITED and a countdown is scheduled.

    ``retry_after_seconds`` already includes the transport safety buffer.
    """

    code: ErrorCode = ErrorCode.RATE_LIMIT
    message: str = "rate limit exceeded"
    status: Optional[int] = 429
    retry_after_seconds: int = 0
    body: Optional[str] = None


__all__ = ["RateLimitError"]
