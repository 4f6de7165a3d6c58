"""Response-shape detection for one decoded frame.

Maps a frame payload onto an ``ExtractedDelta``. The checks run in a fixed
order and the first match wins:

0. ``error.code == 429`` (int or numeric string) is an in-band rate limit and
   beats every content key present in the same object.
1. ``choices[0].delta.content`` (OpenAI-compatible).
2. ``response`` (DeepSeek / Ollama style).
3. ``text``.
4. ``content``.

Anything else is ``UnknownFormat`` carrying the keys that were present;
payloads that are not a JSON object, or carry a recognized key with the wrong
shape, are ``ParseFailure``. The extractor is pure: it never touches the chunk
state, the session decides what to do with the result.
"""

from __future__ import annotations

import json
from typing import Any, Dict, Optional

from ..models import Done, ExtractedDelta, ParseFailure, RateLimited, Text, UnknownFormat
from ..rate_limit.retry_after import in_band_wait_seconds

CONTENT_KEYS = ("response", "text", "content")


def _is_rate_limit_code(code: Any) -> bool:
    if isinstance(code, bool):
        return False
    if isinstance(code, int):
        return code == 429
    if isinstance(code, str):
        return code.strip() == "429"
    return False


def _rate_limit_raw(error: Dict[str, Any]) -> Optional[str]:
    metadata = error.get("metadata")
    if isinstance(metadata, dict):
        raw = metadata.get("raw")
        if raw is not None:
            return str(raw)
    return None


def _choices_content(choices: Any) -> ExtractedDelta:
    if not isinstance(choices, list) or not choices:
        return ParseFailure("'choices' is not a non-empty list")
    first = choices[0]
    if not isinstance(first, dict):
        return ParseFailure("'choices[0]' is not an object")
    delta = first.get("delta")
    if not isinstance(delta, dict):
        return ParseFailure("'choices[0].delta' is not an object")
    content = delta.get("content")
    if content is None:
        # role-only / finish_reason frames carry no text
        return Text("")
    if not isinstance(content, str):
        return ParseFailure("'choices[0].delta.content' is not a string")
    return Text(content)


def extract(payload: str) -> ExtractedDelta:
    """Classify one frame payload."""
    if payload.strip() == "[DONE]":
        return Done()
    try:
        obj = json.loads(payload)
    except json.JSONDecodeError as exc:
        return ParseFailure(f"invalid JSON: {exc.msg} at position {exc.pos}")
    if not isinstance(obj, dict):
        return ParseFailure(f"expected a JSON object, got {type(obj).__name__}")

    error = obj.get("error")
    if isinstance(error, dict) and _is_rate_limit_code(error.get("code")):
        raw = _rate_limit_raw(error)
        return RateLimited(retry_after_seconds=in_band_wait_seconds(raw), raw=raw)

    if "choices" in obj:
        return _choices_content(obj["choices"])
    for key in CONTENT_KEYS:
        if key in obj:
            value = obj[key]
            if not isinstance(value, str):
                return ParseFailure(f"'{key}' is not a string")
            return Text(value)
    return UnknownFormat(available_keys=list(obj.keys()))


def is_fatal(delta: ExtractedDelta, total_written: int) -> bool:
    """Unrecognized frames end the session only while nothing has been written."""
    if isinstance(delta, (UnknownFormat, ParseFailure)):
        return total_written == 0
    return False


__all__ = ["extract", "is_fatal", "CONTENT_KEYS"]
