"""Cancellation error type.

Defines the public ``CancelledError`` raised when a streaming session or a
rate-limit countdown observes a cancellation request at one of its poll points.
"""

from __future__ import annotations


class CancelledError(RuntimeError):
    """Raised when an operation is cancelled cooperatively.

    Distinguishes user cancellation from real failures so the session can
    settle in ``CANCELLED`` without notifying an error.
    """

__all__ = ["CancelledError"]
