"""Transport error for network failures and non-2xx, non-429 responses."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .error_code import ErrorCode
from .stream_error import StreamError


@dataclass
class TransportError(StreamError):
    """HTTP level failure; ``body`` keeps the response text for the notifier."""

    code: ErrorCode = ErrorCode.TRANSPORT
    message: str = "API request failed"
    body: Optional[str] = None

    @classmethod
    def from_response(cls, status: int, body: str, *, model: Optional[str] = None) -> "TransportError":
        """Build the error surfaced for an unsuccessful HTTP status."""
        return cls(
            message=f"API request failed ({status}): {body}",
            model=model,
            status=status,
            body=body,
        )


__all__ = ["TransportError"]
