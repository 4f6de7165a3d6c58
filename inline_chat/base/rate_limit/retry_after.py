"""Retry-after extraction for rate-limit responses.

Two detection sources keep distinct policies:

* transport-level 429 response: parsed seconds plus a 2 second safety buffer,
  62 seconds when the body carries no usable hint;
* in-band 429 frame: parsed seconds as-is, 60 seconds otherwise.
"""

from __future__ import annotations

import json
import re
from typing import Any, Optional

from ...config.defaults import (
    IN_BAND_RETRY_DEFAULT_SECONDS,
    TRANSPORT_RETRY_BUFFER_SECONDS,
    TRANSPORT_RETRY_DEFAULT_SECONDS,
)

RETRY_AFTER_PATTERN = re.compile(r"Retry after\s*(\d+)\s*seconds")


def parse_retry_seconds(raw: Optional[str]) -> Optional[int]:
    """Return N from "Retry after N seconds" in ``raw``, else ``None``."""
    if not raw:
        return None
    match = RETRY_AFTER_PATTERN.search(raw)
    return int(match.group(1)) if match else None


def raw_from_error_body(body: Any) -> Optional[str]:
    """Pull ``error.metadata.raw`` out of a 429 body (text or parsed JSON)."""
    if isinstance(body, (str, bytes)):
        try:
            body = json.loads(body)
        except (json.JSONDecodeError, UnicodeDecodeError):
            return None
    if not isinstance(body, dict):
        return None
    error = body.get("error")
    if not isinstance(error, dict):
        return None
    metadata = error.get("metadata")
    if not isinstance(metadata, dict) or metadata.get("raw") is None:
        return None
    return str(metadata["raw"])


def transport_wait_seconds(body: Any) -> int:
    """Wait for a transport-level 429 whose response body is ``body``."""
    seconds = parse_retry_seconds(raw_from_error_body(body))
    if seconds is None:
        return TRANSPORT_RETRY_DEFAULT_SECONDS
    return seconds + TRANSPORT_RETRY_BUFFER_SECONDS


def in_band_wait_seconds(raw: Optional[str]) -> int:
    """Wait for an in-band 429 frame whose ``error.metadata.raw`` is ``raw``."""
    seconds = parse_retry_seconds(raw)
    return IN_BAND_RETRY_DEFAULT_SECONDS if seconds is None else seconds


__all__ = [
    "RETRY_AFTER_PATTERN",
    "parse_retry_seconds",
    "raw_from_error_body",
    "transport_wait_seconds",
    "in_band_wait_seconds",
]
