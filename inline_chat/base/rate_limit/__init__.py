"""Rate-limit detection, countdown and auto-retry."""

from .countdown_task import CountdownResult, CountdownTask, format_remaining
from .rate_limiter import RateLimitFlag, RateLimiter
from .retry_after import (
    in_band_wait_seconds,
    parse_retry_seconds,
    raw_from_error_body,
    transport_wait_seconds,
)

__all__ = [
    "CountdownResult",
    "CountdownTask",
    "format_remaining",
    "RateLimitFlag",
    "RateLimiter",
    "in_band_wait_seconds",
    "parse_retry_seconds",
    "raw_from_error_body",
    "transport_wait_seconds",
]
