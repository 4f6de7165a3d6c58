"""Cooperative cancellation primitives (public API facade).

``CancellationToken`` carries a cancel request from the user (or the rate
limiter) to the poll points of a running session; ``CancelledError`` is raised
by the code that observes it. Implementations live under
``cancellation_parts``.
"""

from .cancellation_parts.cancelled_error import CancelledError
from .cancellation_parts.cancellation_token import CancellationToken

__all__ = ["CancellationToken", "CancelledError"]
