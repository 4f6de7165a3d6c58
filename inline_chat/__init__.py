"""inline_chat package

Streams chat-completion responses into a text document.

Purpose:
    Provide a small, stable API for embedding the streaming controller in an
    editor or driving it from the ``inline-chat`` command line.

Public API (re-exported):
    - Version: ``__version__``
    - Session: :class:`StreamSession`, :class:`StreamController`
    - Results: :class:`SessionOutcome`, :class:`SessionState`
    - Exceptions: :class:`StreamError`, :class:`ConfigError`,
      :class:`TransportError`, :class:`RateLimitError`, :class:`ErrorCode`
    - Glue: :class:`TextDocument`, :class:`SettingsStore`, :class:`ChatSettings`
"""

from .base.errors import ConfigError, ErrorCode, RateLimitError, StreamError, TransportError
from .base.models import SessionOutcome, SessionState
from .base.streaming import StreamController, StreamSession
from .config.settings import ChatSettings, SettingsStore
from .document import TextDocument

__version__ = "0.1.0"

__all__ = [
    "__version__",
    "StreamSession",
    "StreamController",
    "SessionOutcome",
    "SessionState",
    "StreamError",
    "ConfigError",
    "TransportError",
    "RateLimitError",
    "ErrorCode",
    "TextDocument",
    "SettingsStore",
    "ChatSettings",
]
