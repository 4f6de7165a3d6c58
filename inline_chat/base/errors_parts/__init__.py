"""Errors parts package public surface.

Prefer importing from `inline_chat.base.errors` for the stable surface.
"""

from .error_code import ErrorCode
from .stream_error import StreamError
from .config_error import ConfigError
from .transport_error import TransportError
from .rate_limit_error import RateLimitError
from .classification import classify_exception

__all__ = ["ErrorCode", "StreamError", "ConfigError", "TransportError", "RateLimitError", "classify_exception"]
