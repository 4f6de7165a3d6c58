"""
Normalized stream error codes (taxonomy).

Defines the ``ErrorCode`` enumeration used by the session, the transport and
the notifier glue. Values are lowercase snake_case and are a stable contract
for structured logs.
"""
from __future__ import annotations

from enum import Enum


class ErrorCode(str, Enum):
    """Enumerated normalized error codes representing failure categories."""

    CONFIG = "config"
    TRANSPORT = "transport"
    PARSE_FAILURE = "parse_failure"
    UNKNOWN_FORMAT = "unknown_format"
    RATE_LIMIT = "rate_limit"
    CANCELLED = "cancelled"
    TIMEOUT = "timeout"
    INTERNAL = "internal"
    UNKNOWN = "unknown"


__all__ = ["ErrorCode"]
