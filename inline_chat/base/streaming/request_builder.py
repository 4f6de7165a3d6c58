"""Request construction for one session invocation.

Validation happens here, before the transport is touched: an empty API key or
model id raises ``ConfigError`` so the user gets an actionable instruction and
no network call is attempted.
"""

from __future__ import annotations

from typing import Any, Dict

from ..errors import ConfigError
from ..interfaces import SessionSettings
from ..models import StreamRequest

MISSING_KEY_MESSAGE = (
    "Please configure your API key: set INLINE_CHAT_API_KEY (or OPENROUTER_API_KEY) "
    "or run `inline-chat config set api_key <key>`."
)
MISSING_MODEL_MESSAGE = "No model selected: run `inline-chat models use <model>`."


def build_request(settings: SessionSettings, user_content: str) -> StreamRequest:
    """Validate ``settings`` and return the request for ``user_content``.

    Raises:
        ConfigError: when the API key or the model id is empty.
    """
    if not (settings.api_key or "").strip():
        raise ConfigError(message=MISSING_KEY_MESSAGE)
    model_id = (settings.model_id or "").strip()
    if not model_id:
        raise ConfigError(message=MISSING_MODEL_MESSAGE)
    return StreamRequest(
        model_id=model_id,
        system_prompt=settings.system_prompt or "",
        user_content=user_content or "",
    )


def build_headers(api_key: str) -> Dict[str, Any]:
    """Bearer auth plus the JSON / event-stream content negotiation headers."""
    return {
        "Authorization": f"Bearer {api_key}",
        "Content-Type": "application/json",
        "Accept": "text/event-stream",
    }


__all__ = ["build_request", "build_headers", "MISSING_KEY_MESSAGE", "MISSING_MODEL_MESSAGE"]
