"""Configuration error raised before any request is attempted."""
from __future__ import annotations

from dataclasses import dataclass

from .error_code import ErrorCode
from .stream_error import StreamError


@dataclass
class ConfigError(StreamError):
    """Missing or unusable settings (empty API key, empty model id).

    ``title`` is the notification heading shown next to the instruction.
    """

    code: ErrorCode = ErrorCode.CONFIG
    message: str = "configuration incomplete"
    title: str = "Configuration Required"


__all__ = ["ConfigError"]
