"""
Domain models (DTOs) public surface.

Re-exports the one-class-per-file implementations under
``inline_chat.base.models_parts``.
"""

from .models_parts.stream_request import StreamRequest
from .models_parts.extracted_delta import (
    Done,
    ExtractedDelta,
    ParseFailure,
    RateLimited,
    Text,
    UnknownFormat,
)
from .models_parts.session_state import DecodeOutcome, SessionState
from .models_parts.chunk_state import ChunkState
from .models_parts.rate_limit_state import RateLimitState
from .models_parts.session_outcome import SessionOutcome
from .models_parts.marker_info import MarkerInfo

__all__ = [
    "StreamRequest",
    "Text",
    "Done",
    "RateLimited",
    "UnknownFormat",
    "ParseFailure",
    "ExtractedDelta",
    "SessionState",
    "DecodeOutcome",
    "ChunkState",
    "RateLimitState",
    "SessionOutcome",
    "MarkerInfo",
]
