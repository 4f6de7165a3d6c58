"""Notifier implementations.

``LoggingNotifier`` records every notification as a structured log event and
keeps the last few in memory (embedders and tests read them back).
``ConsoleNotifier`` additionally prints ``Title: body`` to a text stream for
the command-line front end.
"""

from __future__ import annotations

import logging
import sys
from collections import deque
from typing import Deque, Optional, TextIO, Tuple

from ..base.logging import get_logger, log_event

Notification = Tuple[str, str, str]


class LoggingNotifier:
    """Fire-and-forget notifications routed through the ``inline_chat`` logger."""

    def __init__(self, logger: Optional[logging.Logger] = None, *, history: int = 50) -> None:
        self._logger = logger or get_logger("inline_chat.notifications")
        self.history: Deque[Notification] = deque(maxlen=history)

    def _emit(self, kind: str, level: int, title: str, body: str) -> None:
        self.history.append((kind, title, body))
        log_event(self._logger, f"notify.{kind}", None, level=level, title=title, body=body)

    def show_error(self, title: str, body: str) -> None:
        self._emit("error", logging.ERROR, title, body)

    def show_warning(self, title: str, body: str) -> None:
        self._emit("warning", logging.WARNING, title, body)

    def show_info(self, title: str, body: str) -> None:
        self._emit("info", logging.INFO, title, body)


class ConsoleNotifier(LoggingNotifier):
    def __init__(self, stream: Optional[TextIO] = None, logger: Optional[logging.Logger] = None) -> None:
        super().__init__(logger)
        self._stream = stream

    def _emit(self, kind: str, level: int, title: str, body: str) -> None:
        super()._emit(kind, level, title, body)
        print(f"{title}: {body}", file=self._stream or sys.stderr)


__all__ = ["LoggingNotifier", "ConsoleNotifier"]
