"""
Error classification helpers mapping exceptions to normalized ErrorCode values.

Used at the session boundary to turn whatever escaped the decode loop (httpx
errors, status-bearing exceptions, already structured errors) into a single
code for logging and notification.
"""
from __future__ import annotations

from typing import Optional

import httpx

from ..cancellation import CancelledError
from .error_code import ErrorCode
from .stream_error import StreamError


def _extract_status(exc: Exception) -> Optional[int]:
    """Attempt to extract an HTTP status code from an exception.

    Supported attribute shapes (checked in order):
    - ``exc.status_code``
    - ``exc.status``
    - ``exc.response.status_code``
    Returns ``None`` if no valid status can be found.
    """
    for attr in ("status_code", "status"):
        val = getattr(exc, attr, None)
        if isinstance(val, int) and 100 <= val < 600:
            return val
    resp = getattr(exc, "response", None)
    if resp is not None:
        sc = getattr(resp, "status_code", None)
        if isinstance(sc, int) and 100 <= sc < 600:
            return sc
    return None


def classify_exception(exc: Exception) -> ErrorCode:
    """Classify an exception into a normalized :class:`ErrorCode`.

    Precedence:
        1. StreamError passthrough.
        2. Cooperative cancellation.
        3. Timeouts (httpx and builtin).
        4. HTTP status (429 is a rate limit, anything else transport).
        5. Any other httpx error is a transport failure.
        6. ``UNKNOWN`` fallback.
    """
    if isinstance(exc, StreamError):
        return exc.code
    if isinstance(exc, CancelledError):
        return ErrorCode.CANCELLED
    if isinstance(exc, (TimeoutError, httpx.TimeoutException)):
        return ErrorCode.TIMEOUT
    status = _extract_status(exc)
    if status == 429:
        return ErrorCode.RATE_LIMIT
    if status is not None:
        return ErrorCode.TRANSPORT
    if isinstance(exc, httpx.HTTPError):
        return ErrorCode.TRANSPORT
    return ErrorCode.UNKNOWN


__all__ = [
    "classify_exception",
    "_extract_status",
]
