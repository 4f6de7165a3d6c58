"""Persistent settings with an explicit change channel.

Purpose
-------
``ChatSettings`` is an immutable value object (pydantic, frozen) holding the
API key, selected model, system prompt, base URL and the user's model list.
A session takes one snapshot per invocation and never sees later changes.

``SettingsStore`` owns the current snapshot, persists it as JSON under the
XDG config directory (``$XDG_CONFIG_HOME/inline-chat/settings.json``, or the
directory named by ``INLINE_CHAT_SETTINGS_DIR``), and publishes every change
to subscribers in subscription order. Delivery goes to the subscribers that
are registered when the change is published, and a subscriber removed while a
change is being delivered is skipped.

Model list rules
----------------
- The selected model defaults to the first model of the sorted list.
- The last model cannot be removed.
- Removing the selected model re-selects the first remaining model.
"""

from __future__ import annotations

import contextlib
import json
import os
import threading
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from ..base.logging import get_logger, log_event
from . import get_config
from .defaults import DEFAULT_BASE_URL, DEFAULT_SYSTEM_PROMPT, SETTINGS_DIR_NAME, SETTINGS_FILE_NAME
from .env import SETTINGS_DIR_ENV
from .model_catalog import load_default_models

Subscriber = Callable[["ChatSettings"], None]

_logger = get_logger("inline_chat.config.settings")


class ChatSettings(BaseModel):
    """Immutable settings snapshot.

    Attributes:
        api_key: Bearer token for the chat completions endpoint; empty means
            "not configured" and stops a session before any request.
        model_id: Selected model; normalized to the first sorted model when
            empty or not in ``models``.
        system_prompt: System message sent with every request.
        base_url: API base URL (``/chat/completions`` is appended).
        models: Available model ids, kept sorted and de-duplicated.
    """

    model_config = ConfigDict(frozen=True)

    api_key: str = ""
    model_id: str = ""
    system_prompt: str = DEFAULT_SYSTEM_PROMPT
    base_url: str = DEFAULT_BASE_URL
    models: Tuple[str, ...] = Field(default_factory=tuple)

    @model_validator(mode="before")
    @classmethod
    def _normalize(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        data = dict(data)
        models = tuple(sorted({str(m).strip() for m in data.get("models") or () if str(m).strip()}))
        data["models"] = models
        if models and (data.get("model_id") or "").strip() not in models:
            data["model_id"] = models[0]
        return data

    @property
    def available_models(self) -> List[str]:
        return list(self.models)

    def masked(self) -> Dict[str, Any]:
        """Dump for display with the API key redacted."""
        data = self.model_dump()
        key = data.get("api_key") or ""
        data["api_key"] = f"{key[:4]}…{key[-4:]}" if len(key) > 8 else ("set" if key else "")
        data["models"] = list(self.models)
        return data


def _xdg_config_dir() -> Path:
    """Return the configuration directory for this app.

    ``INLINE_CHAT_SETTINGS_DIR`` wins; otherwise ``XDG_CONFIG_HOME`` (or
    ``~/.config``) joined with ``inline-chat``.
    """
    override = os.environ.get(SETTINGS_DIR_ENV)
    if override:
        return Path(override).expanduser()
    root = os.environ.get("XDG_CONFIG_HOME")
    base = Path(root).expanduser() if root else Path.home() / ".config"
    return base / SETTINGS_DIR_NAME


def settings_file_path() -> Path:
    return _xdg_config_dir() / SETTINGS_FILE_NAME


class SettingsStore:
    """Current settings plus a publish/subscribe channel and JSON persistence."""

    def __init__(
        self,
        initial: Optional[ChatSettings] = None,
        *,
        path: Optional[Path] = None,
        persist: bool = True,
    ) -> None:
        self._lock = threading.RLock()
        self._subscribers: List[Subscriber] = []
        self._current = initial or ChatSettings(models=tuple(load_default_models()))
        self._path = path
        self._persist = persist

    # -- construction ---------------------------------------------------
    @classmethod
    def load(cls, path: Optional[Path] = None, *, notifier=None, persist: bool = True) -> "SettingsStore":
        """Build a store from config defaults, the environment and the settings file.

        Persisted values win over configuration defaults; the environment API
        key is used when none has been persisted.
        """
        target = path or settings_file_path()
        cfg = get_config()
        data: Dict[str, Any] = {}
        with contextlib.suppress(OSError, json.JSONDecodeError):
            if target.is_file():
                raw = json.loads(target.read_text(encoding="utf-8"))
                if isinstance(raw, dict):
                    data = raw
        models = data.get("models") or load_default_models(notifier=notifier)
        values = {
            "api_key": data.get("api_key") or cfg.get("api_key") or "",
            "model_id": data.get("model_id") or cfg.get("model") or "",
            "system_prompt": data.get("system_prompt", cfg.get("system_prompt", DEFAULT_SYSTEM_PROMPT)),
            "base_url": data.get("base_url") or cfg.get("base_url") or DEFAULT_BASE_URL,
            "models": tuple(models),
        }
        try:
            initial = ChatSettings(**values)
        except ValidationError as exc:
            log_event(_logger, "settings.invalid", None, path=str(target), error=str(exc))
            initial = ChatSettings(models=tuple(load_default_models(notifier=notifier)))
        return cls(initial, path=target, persist=persist)

    # -- SettingsProvider -----------------------------------------------
    def snapshot(self) -> ChatSettings:
        with self._lock:
            return self._current

    # -- pub/sub --------------------------------------------------------
    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """Register ``callback``; return a function that unsubscribes it."""
        with self._lock:
            self._subscribers.append(callback)
        return lambda: self.unsubscribe(callback)

    def unsubscribe(self, callback: Subscriber) -> bool:
        with self._lock:
            try:
                self._subscribers.remove(callback)
            except ValueError:
                return False
            return True

    def _publish(self, settings: ChatSettings) -> None:
        with self._lock:
            recipients = list(self._subscribers)
        for callback in recipients:
            with self._lock:
                if callback not in self._subscribers:
                    continue
            callback(settings)

    # -- mutation -------------------------------------------------------
    def update(self, **changes: Any) -> ChatSettings:
        """Replace fields, persist and publish; no-op when nothing changes."""
        with self._lock:
            current = self._current
            merged = current.model_dump() | changes
            updated = ChatSettings(**merged)
            if updated == current:
                return current
            self._current = updated
            self._save(updated)
            log_event(
                _logger,
                "settings.changed",
                None,
                fields=sorted(k for k in changes if getattr(current, k, None) != getattr(updated, k, None)),
            )
            self._publish(updated)
            return updated

    def select_model(self, model_id: str) -> ChatSettings:
        model_id = model_id.strip()
        if not model_id:
            raise ValueError("model id must not be empty")
        current = self.snapshot()
        models = current.models if model_id in current.models else current.models + (model_id,)
        return self.update(model_id=model_id, models=models)

    def add_model(self, model_id: str) -> ChatSettings:
        model_id = model_id.strip()
        if not model_id:
            raise ValueError("model id must not be empty")
        current = self.snapshot()
        if model_id in current.models:
            return current
        return self.update(models=current.models + (model_id,))

    def remove_model(self, model_id: str) -> ChatSettings:
        current = self.snapshot()
        if model_id not in current.models:
            raise KeyError(model_id)
        if len(current.models) <= 1:
            raise ValueError("Cannot remove the last model. At least one model must be available.")
        remaining = tuple(m for m in current.models if m != model_id)
        selected = current.model_id if current.model_id != model_id else sorted(remaining)[0]
        return self.update(models=remaining, model_id=selected)

    # -- persistence ----------------------------------------------------
    def _save(self, settings: ChatSettings) -> None:
        if not self._persist or self._path is None:
            return
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path = self._path.with_suffix(".tmp")
            payload = settings.model_dump()
            payload["models"] = list(settings.models)
            tmp_path.write_text(json.dumps(payload, ensure_ascii=False, indent=2), encoding="utf-8")
            os.replace(tmp_path, self._path)
        except OSError as exc:
            log_event(_logger, "settings.save_failed", None, path=str(self._path), error=str(exc))

    @property
    def path(self) -> Optional[Path]:
        return self._path


__all__ = ["ChatSettings", "SettingsStore", "settings_file_path"]
