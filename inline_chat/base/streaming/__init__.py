"""Streaming package: request building, SSE decoding, shape detection,
chunked delivery and the session orchestrator under a single namespace.
"""

from .request_builder import build_headers, build_request
from .sse_decoder import SSEDecoder, data_payload, is_done
from .content_extractor import extract, is_fatal
from .chunk_buffer import ChunkBuffer
from .output_anchor import OutputAnchor, place_anchor, restore_anchor
from .transport import ChatTransport
from .stream_controller import StreamController
from .stream_session import StreamSession

__all__ = [
    "build_headers",
    "build_request",
    "SSEDecoder",
    "data_payload",
    "is_done",
    "extract",
    "is_fatal",
    "ChunkBuffer",
    "OutputAnchor",
    "place_anchor",
    "restore_anchor",
    "ChatTransport",
    "StreamController",
    "StreamSession",
]
