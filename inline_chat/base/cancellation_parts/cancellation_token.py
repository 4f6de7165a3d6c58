"""Cooperative cancellation token implementation.

Exposes the ``CancellationToken`` polled by the SSE decoder, the chunk flush
path and the rate-limit countdown. Besides polling, a token runs registered
callbacks exactly once on cancel; the HTTP transport uses this to tear down
the underlying connection instead of merely ignoring it.
"""

from __future__ import annotations

import logging
from threading import Lock
from typing import Callable

from .state import State
from .cancelled_error import CancelledError

_logger = logging.getLogger("inline_chat.cancellation")


class CancellationToken:
    """A cooperative cancellation token. Thread-safe."""

    def __init__(self) -> None:
        self._state = State()
        self._lock = Lock()

    @property
    def cancelled(self) -> bool:  # noqa: D401 - short form
        """Whether cancellation has been requested."""
        return self._state.cancelled

    @property
    def reason(self) -> str | None:  # noqa: D401 - short form
        """Reason string supplied at cancel time (if any)."""
        return self._state.reason

    def cancel(self, reason: str | None = None) -> None:
        """Request cooperative cancellation and run the registered callbacks."""
        with self._lock:
            if self._state.cancelled:
                return
            self._state.cancelled = True
            self._state.reason = reason
            callbacks = list(self._state.callbacks)
            self._state.callbacks.clear()
        for callback in callbacks:
            self._run_callback(callback)

    def on_cancel(self, callback: Callable[[], None]) -> None:
        """Register ``callback`` to run once on cancellation.

        If the token is already cancelled the callback runs immediately on the
        calling thread.
        """
        with self._lock:
            if not self._state.cancelled:
                self._state.callbacks.append(callback)
                return
        self._run_callback(callback)

    def raise_if_cancelled(self) -> None:
        """Raise ``CancelledError`` if token is cancelled."""
        if self._state.cancelled:
            raise CancelledError(self._state.reason or "operation cancelled")

    @staticmethod
    def _run_callback(callback: Callable[[], None]) -> None:
        try:
            callback()
        except Exception:
            _logger.exception("cancellation callback failed")

    def __repr__(self) -> str:  # pragma: no cover - introspection aid
        return f"CancellationToken(cancelled={self._state.cancelled}, reason={self._state.reason!r})"


__all__ = ["CancellationToken"]
