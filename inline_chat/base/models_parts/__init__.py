from .stream_request import StreamRequest
from .extracted_delta import Done, ExtractedDelta, ParseFailure, RateLimited, Text, UnknownFormat
from .session_state import DecodeOutcome, SessionState
from .chunk_state import ChunkState
from .rate_limit_state import RateLimitState
from .session_outcome import SessionOutcome
from .marker_info import MarkerInfo

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
