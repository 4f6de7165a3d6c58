"""StreamController: handle for a session running on a background thread.

Returned by ``StreamSession.start``. Exposes ``cancel(reason)`` for
cooperative cancellation, ``join`` to wait for the session, and the terminal
``SessionOutcome`` for post-hoc inspection.
"""
from __future__ import annotations

import threading
from contextlib import suppress
from typing import Callable, Optional

from ..cancellation import CancellationToken
from ..models import SessionOutcome


class StreamController:
    """Cancellable handle around one background session run.

    Responsibilities:
      * Run the session callable on a daemon thread.
      * Expose ``cancel(reason)`` for cooperative cancellation.
      * Capture the terminal outcome once the run finishes.
    """

    def __init__(
        self,
        run: Callable[[CancellationToken], Optional[SessionOutcome]],
        token: CancellationToken | None = None,
        *,
        name: str = "inline-chat-stream",
    ) -> None:
        self._run = run
        self._token = token or CancellationToken()
        self._outcome: SessionOutcome | None = None
        self._done = threading.Event()
        self._thread = threading.Thread(target=self._target, name=name, daemon=True)

    def _target(self) -> None:
        try:
            self._outcome = self._run(self._token)
        finally:
            self._done.set()

    def start(self) -> "StreamController":
        self._thread.start()
        return self

    # API -----------------------------------------------------------------
    def cancel(self, reason: str | None = None) -> None:
        """Request cooperative cancellation of the underlying session.

        Safe to invoke multiple times or after completion.
        """
        with suppress(Exception):
            self._token.cancel(reason)

    def join(self, timeout: float | None = None) -> bool:
        """Wait for the session to finish; return whether it did."""
        return self._done.wait(timeout)

    @property
    def token(self) -> CancellationToken:
        return self._token

    @property
    def finished(self) -> bool:  # noqa: D401 - short property
        """Whether the session has reached a terminal state."""
        return self._done.is_set()

    @property
    def outcome(self) -> SessionOutcome | None:  # noqa: D401 - short property
        """Return the terminal outcome once the run has completed."""
        return self._outcome

    @property
    def error(self) -> str | None:  # noqa: D401 - short property
        """Return the surfaced error message (if any)."""
        if self._outcome is None or self._outcome.error is None:
            return None
        return self._outcome.error.message


__all__ = ["StreamController"]
