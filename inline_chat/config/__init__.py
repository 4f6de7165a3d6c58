"""Unified configuration layer.

Goals
-----
* Centralize defaults (model, base URL, system prompt).
* Merge sources in a predictable order (later wins):
    1. Built-in defaults
    2. Optional external config file (JSON or YAML) named by INLINE_CHAT_CONFIG_FILE
    3. Environment variables (INLINE_CHAT_MODEL, INLINE_CHAT_BASE_URL,
       INLINE_CHAT_SYSTEM_PROMPT, INLINE_CHAT_API_KEY / OPENROUTER_API_KEY)
    4. In-code overrides passed to the helper
* Provide a single call site: ``get_config(overrides)``.

External Config File (Optional)
-------------------------------
JSON is tried first, then YAML. Structure example:

```
model: anthropic/claude-3.5-sonnet
base_url: https://openrouter.ai/api/v1
system_prompt: "You are helpful."
```

Public API
----------
* get_config(overrides: dict | None = None) -> dict
* reset_config_cache() -> None
"""
from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from .defaults import DEFAULT_BASE_URL, DEFAULT_MODEL, DEFAULT_SYSTEM_PROMPT
from .env import (
    BASE_URL_ENV,
    CONFIG_FILE_ENV,
    MODEL_ENV,
    SYSTEM_PROMPT_ENV,
    resolve_api_key,
)

DEFAULTS: Dict[str, Any] = {
    "model": DEFAULT_MODEL,
    "base_url": DEFAULT_BASE_URL,
    "system_prompt": DEFAULT_SYSTEM_PROMPT,
}

ENV_FIELD_MAP = {
    "model": MODEL_ENV,
    "base_url": BASE_URL_ENV,
    "system_prompt": SYSTEM_PROMPT_ENV,
}

_FILE_CACHE: Optional[Dict[str, Any]] = None
_FILE_CACHE_PATH: Optional[str] = None


def _load_external_config() -> Dict[str, Any]:
    global _FILE_CACHE, _FILE_CACHE_PATH
    path = os.getenv(CONFIG_FILE_ENV)
    if _FILE_CACHE is not None and _FILE_CACHE_PATH == path:
        return _FILE_CACHE
    _FILE_CACHE_PATH = path
    if not path or not Path(path).exists():
        _FILE_CACHE = {}
        return _FILE_CACHE
    text = Path(path).read_text(encoding="utf-8")
    data: Any
    try:
        data = json.loads(text)
    except json.JSONDecodeError:
        try:
            data = yaml.safe_load(text) or {}
        except yaml.YAMLError:
            data = {}
    if not isinstance(data, dict):
        data = {}
    _FILE_CACHE = data
    return data


def _env_overrides() -> Dict[str, Any]:
    out: Dict[str, Any] = {}
    for field, name in ENV_FIELD_MAP.items():
        val = os.getenv(name)
        if val is not None:
            out[field] = val
    key, _ = resolve_api_key()
    if key:
        out["api_key"] = key
    return out


def get_config(overrides: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """Return the merged configuration mapping.

    Merge order (later wins): defaults -> external file -> env vars -> overrides.
    Keys: ``model``, ``base_url``, ``system_prompt`` and ``api_key`` (when set).
    """
    cfg: Dict[str, Any] = dict(DEFAULTS)
    cfg |= {k: v for k, v in _load_external_config().items() if k in {"model", "base_url", "system_prompt", "api_key"}}
    cfg |= _env_overrides()
    if overrides:
        cfg |= {k: v for k, v in overrides.items() if v is not None}
    return cfg


def reset_config_cache() -> None:
    """Forget the parsed config file (tests switch files between cases)."""
    global _FILE_CACHE, _FILE_CACHE_PATH
    _FILE_CACHE = None
    _FILE_CACHE_PATH = None


__all__ = [
    "get_config",
    "reset_config_cache",
    "DEFAULTS",
]
