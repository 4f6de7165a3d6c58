# -*- coding: utf-8 -*-
"""Utility helpers shared by the CLI handlers.

Functions / classes
-------------------
- ``parse_verbosity(value)``: Map user strings and synonyms to a canonical
  logging level name.
- ``ConsoleProgress``: ``ProgressReporter`` printing status lines to a text
  stream; ``cancel()`` is wired to Ctrl-C by the stream handler.
- ``OverrideSettings``: ``SettingsProvider`` wrapper replacing the model for a
  single run without persisting it.
"""

from __future__ import annotations

import sys
import threading
from typing import Optional, TextIO

from ...config.settings import ChatSettings, SettingsStore


def parse_verbosity(value: str) -> Optional[str]:
    """Parse a user-provided verbosity string into a canonical level.

    Accepted values (case-insensitive):
    - Canonical: DEBUG, INFO, WARNING, ERROR, CRITICAL
    - Synonyms: verbose->DEBUG; warn->WARNING; quiet->ERROR; silent->CRITICAL

    Returns
    -------
    Optional[str]
        Canonical upper-cased level, or ``None`` if invalid.
    """
    v = value.strip().lower()
    mapping = {
        "verbose": "DEBUG",
        "warn": "WARNING",
        "err": "ERROR",
        "quiet": "ERROR",
        "crit": "CRITICAL",
        "silent": "CRITICAL",
    }
    if v in mapping:
        return mapping[v]
    canon = value.strip().upper()
    if canon in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
        return canon
    return None


class ConsoleProgress:
    """Progress reporter for a terminal; prints each new status text once."""

    def __init__(self, stream: Optional[TextIO] = None) -> None:
        self._stream = stream
        self._cancelled = threading.Event()
        self._last_text: Optional[str] = None
        self.fraction = 0.0

    def set_fraction(self, fraction: float) -> None:
        self.fraction = fraction

    def set_text(self, text: str) -> None:
        if text != self._last_text:
            self._last_text = text
            print(text, file=self._stream or sys.stderr)

    def is_cancelled(self) -> bool:
        return self._cancelled.is_set()

    def cancel(self) -> None:
        self._cancelled.set()

    def reset(self) -> None:
        self._cancelled.clear()
        self._last_text = None
        self.fraction = 0.0


class OverrideSettings:
    """Snapshot provider that swaps in ``model_id`` for this process only."""

    def __init__(self, store: SettingsStore, model_id: Optional[str]) -> None:
        self._store = store
        self._model_id = model_id

    def snapshot(self) -> ChatSettings:
        current = self._store.snapshot()
        if not self._model_id:
            return current
        return current.model_copy(update={"model_id": self._model_id})


__all__ = ["parse_verbosity", "ConsoleProgress", "OverrideSettings"]
