"""inline_chat.config.env
======================

Environment variable names and helpers for the API credential.

Design Notes
------------
- ``API_KEY_ENV`` is canonical; ``API_KEY_ALIASES`` lists accepted fallbacks in
  priority order (``OPENROUTER_API_KEY`` for users who already export it).
- Helpers never raise on unset variables; callers decide how to proceed (the
  session turns an empty key into a ``ConfigError`` before any request).
"""

from __future__ import annotations

import os
from typing import Iterable, Optional, Tuple

API_KEY_ENV = "INLINE_CHAT_API_KEY"
API_KEY_ALIASES: Tuple[str, ...] = ("OPENROUTER_API_KEY",)

MODEL_ENV = "INLINE_CHAT_MODEL"
BASE_URL_ENV = "INLINE_CHAT_BASE_URL"
SYSTEM_PROMPT_ENV = "INLINE_CHAT_SYSTEM_PROMPT"
CONFIG_FILE_ENV = "INLINE_CHAT_CONFIG_FILE"
SETTINGS_DIR_ENV = "INLINE_CHAT_SETTINGS_DIR"


def is_placeholder(val: Optional[str]) -> bool:
    """Return True if the provided string looks like a placeholder/test value.

    Heuristics: contains 'placeholder', 'changeme', 'example', or starts with
    'test_'. The check is case-insensitive and resilient to surrounding spaces.
    """
    if val is None:
        return False
    v = str(val).strip().lower()
    return (
        "placeholder" in v
        or "changeme" in v
        or "example" in v
        or v.startswith("test_")
    )


def get_api_key_candidates() -> Iterable[str]:
    """Yield acceptable API key variable names, canonical first."""
    yield API_KEY_ENV
    for alias in API_KEY_ALIASES:
        if alias != API_KEY_ENV:
            yield alias


def resolve_api_key() -> Tuple[Optional[str], Optional[str]]:
    """Resolve the API key from the process environment.

    Returns
    -------
    Tuple[Optional[str], Optional[str]]
        ``(value, env_var_used)`` for the first non-empty, non-placeholder
        value; ``(None, None)`` when nothing usable is set.
    """
    for name in get_api_key_candidates():
        val = os.environ.get(name)
        if val and val.strip() and not is_placeholder(val):
            return val.strip(), name
    return None, None


__all__ = [
    "API_KEY_ENV",
    "API_KEY_ALIASES",
    "MODEL_ENV",
    "BASE_URL_ENV",
    "SYSTEM_PROMPT_ENV",
    "CONFIG_FILE_ENV",
    "SETTINGS_DIR_ENV",
    "is_placeholder",
    "get_api_key_candidates",
    "resolve_api_key",
]
