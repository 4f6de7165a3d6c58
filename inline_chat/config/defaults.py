"""inline_chat.config.defaults
===========================

Central place for small, stable default values used by the streaming core,
the settings store and the command-line front end. Values can be overridden
via environment variables or the optional config file, but provide sensible
fallbacks for local use and tests.

This module intentionally avoids importing from other inline_chat packages to
prevent circular dependencies. Only plain constants live here.
"""

from __future__ import annotations

# ---- Endpoint ----
# OpenAI-compatible chat completions endpoint (OpenRouter by default).
DEFAULT_BASE_URL = "https://openrouter.ai/api/v1"
CHAT_COMPLETIONS_PATH = "/chat/completions"

# ---- Settings ----
DEFAULT_MODEL = "anthropic/claude-3.5-sonnet"
DEFAULT_SYSTEM_PROMPT = "You are a helpful AI assistant."
SETTINGS_FILE_NAME = "settings.json"
SETTINGS_DIR_NAME = "inline-chat"

# ---- Stream decoding ----
SSE_DATA_PREFIX = "data:"
SSE_DONE_TOKEN = "[DONE]"

# ---- Chunk buffer ----
# Buffered characters that trigger a flush into the document.
CHUNK_FLUSH_THRESHOLD = 10
# Characters that correspond to a "full" progress bar, and the cap applied
# until the session reports completion.
PROGRESS_SCALE_CHARS = 2000
PROGRESS_CAP = 0.95

# ---- Rate limiting ----
# Transport-level 429: parsed seconds plus a safety buffer, else the default.
TRANSPORT_RETRY_BUFFER_SECONDS = 2
TRANSPORT_RETRY_DEFAULT_SECONDS = 62
# In-band 429 frame: parsed seconds as-is, else the default.
IN_BAND_RETRY_DEFAULT_SECONDS = 60
# Countdown cancellation poll interval.
COUNTDOWN_TICK_SECONDS = 0.1

# ---- Output placement ----
# The document is padded to end with this many newlines; output starts two
# newlines before the end.
OUTPUT_PADDING_NEWLINES = 4
OUTPUT_OFFSET_FROM_END = 2

# ---- Model catalog ----
MODEL_CATALOG_FILE = "models.json"
FALLBACK_MODEL = DEFAULT_MODEL


__all__ = [
    "DEFAULT_BASE_URL",
    "CHAT_COMPLETIONS_PATH",
    "DEFAULT_MODEL",
    "DEFAULT_SYSTEM_PROMPT",
    "SETTINGS_FILE_NAME",
    "SETTINGS_DIR_NAME",
    "SSE_DATA_PREFIX",
    "SSE_DONE_TOKEN",
    "CHUNK_FLUSH_THRESHOLD",
    "PROGRESS_SCALE_CHARS",
    "PROGRESS_CAP",
    "TRANSPORT_RETRY_BUFFER_SECONDS",
    "TRANSPORT_RETRY_DEFAULT_SECONDS",
    "IN_BAND_RETRY_DEFAULT_SECONDS",
    "COUNTDOWN_TICK_SECONDS",
    "OUTPUT_PADDING_NEWLINES",
    "OUTPUT_OFFSET_FROM_END",
    "MODEL_CATALOG_FILE",
    "FALLBACK_MODEL",
]
