"""Unified stream error taxonomy public surface.

Re-exports the one-class-per-file implementations under
``inline_chat.base.errors_parts``.
"""

from .errors_parts.error_code import ErrorCode
from .errors_parts.stream_error import StreamError
from .errors_parts.config_error import ConfigError
from .errors_parts.transport_error import TransportError
from .errors_parts.rate_limit_error import RateLimitError
from .errors_parts.classification import classify_exception

__all__ = ["ErrorCode", "StreamError", "ConfigError", "TransportError", "RateLimitError", "classify_exception"]
