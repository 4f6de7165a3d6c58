"""Default model list provider.

Reads ``{"defaultModels": [...]}`` from the packaged ``models.json`` or from a
caller-supplied JSON / YAML file, validates it and caches the result per
source. On any failure it logs, notifies once with a title naming the failure
kind, and falls back to a single built-in model so the settings store always
has something to select.

Failure kinds
-------------
- ``not_found``  -> "Configuration Not Found" (file missing or unreadable)
- ``invalid``    -> "Invalid Configuration" (unparseable, wrong shape)
- ``error``      -> "Configuration Error" (empty list, anything else)
"""

from __future__ import annotations

import json
import threading
from importlib import resources
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from ..base.interfaces import Notifier
from ..base.logging import get_logger, log_event
from .defaults import FALLBACK_MODEL, MODEL_CATALOG_FILE

MODELS_KEY = "defaultModels"

_TITLES: Dict[str, tuple[str, str]] = {
    "not_found": ("Configuration Not Found", "Could not find or read the model list. Using default model."),
    "invalid": ("Invalid Configuration", "The model list has an invalid format. Using default model."),
    "error": ("Configuration Error", "Error loading models configuration. Using default model."),
}

_CACHE: Dict[str, List[str]] = {}
_LOCK = threading.Lock()
_logger = get_logger("inline_chat.config.model_catalog")


class ModelCatalogError(Exception):
    """Raised by :func:`read_models`; ``kind`` selects the notification title."""

    def __init__(self, kind: str, message: str) -> None:
        super().__init__(message)
        self.kind = kind


def _read_text(path: Optional[Path]) -> tuple[str, str]:
    try:
        if path is None:
            source = resources.files("inline_chat.config").joinpath(MODEL_CATALOG_FILE)
            return source.read_text(encoding="utf-8"), MODEL_CATALOG_FILE
        return path.read_text(encoding="utf-8"), path.suffix.lower()
    except (OSError, ModuleNotFoundError) as exc:
        raise ModelCatalogError("not_found", f"cannot read model list: {exc}") from exc


def _parse(text: str, suffix: str) -> Any:
    try:
        if suffix in (".yaml", ".yml"):
            return yaml.safe_load(text)
        return json.loads(text)
    except (json.JSONDecodeError, yaml.YAMLError) as exc:
        raise ModelCatalogError("invalid", f"cannot parse model list: {exc}") from exc


def read_models(path: Optional[Path | str] = None) -> List[str]:
    """Read and validate a model list without caching or fallback."""
    p = Path(path) if path is not None else None
    text, suffix = _read_text(p)
    data = _parse(text, suffix if p is not None else ".json")
    if not isinstance(data, dict) or not isinstance(data.get(MODELS_KEY), list):
        raise ModelCatalogError("invalid", f"expected a mapping with a '{MODELS_KEY}' list")
    models = [str(m).strip() for m in data[MODELS_KEY] if str(m).strip()]
    if not models:
        raise ModelCatalogError("error", "no models found in configuration")
    return models


def load_default_models(path: Optional[Path | str] = None, *, notifier: Optional[Notifier] = None) -> List[str]:
    """Return the default model list (cached), falling back on any failure."""
    key = str(path) if path is not None else "<package>"
    with _LOCK:
        if key in _CACHE:
            return list(_CACHE[key])
        try:
            models = read_models(path)
            log_event(_logger, "model_catalog.loaded", None, source=key, count=len(models))
        except ModelCatalogError as exc:
            title, body = _TITLES.get(exc.kind, _TITLES["error"])
            log_event(_logger, "model_catalog.fallback", None, source=key, kind=exc.kind, error=str(exc))
            if notifier is not None:
                notifier.show_error(title, f"{body}\nError: {exc}")
            models = [FALLBACK_MODEL]
        _CACHE[key] = models
        return list(models)


def clear_cache() -> None:
    with _LOCK:
        _CACHE.clear()


__all__ = ["ModelCatalogError", "read_models", "load_default_models", "clear_cache", "MODELS_KEY"]
