"""Cancellable countdown task handle.

A ``CountdownTask`` carries its own ``CancellationToken`` and a continuation.
``run`` (called by the owner on a dedicated thread) counts down one second at a time, polls cancellation every ``tick`` seconds and
reports progress once per second. When the count reaches zero it sleeps off
any residual drift so the elapsed wall-clock time is at least ``seconds``,
then invokes the continuation. ``cancel`` only sets the token: the
continuation is never invoked from the cancel path.

``sleep`` and ``clock`` are injectable so tests run on a fake clock.
"""

from __future__ import annotations

import threading
import time
from enum import Enum
from typing import Callable, Optional

from ...config.defaults import COUNTDOWN_TICK_SECONDS
from ..cancellation import CancellationToken
from ..interfaces import NullProgress, ProgressReporter


class CountdownResult(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    FAILED = "failed"


def format_remaining(remaining: int) -> str:
    """Render the countdown text: ``M:SS`` at or above a minute, ``Ns`` below."""
    minutes, secs = divmod(max(remaining, 0), 60)
    display = f"{minutes}:{secs:02d}" if minutes > 0 else f"{secs}s"
    return f"Rate limit: {display} remaining"


class CountdownTask:
    """One countdown; run at most once."""

    def __init__(
        self,
        seconds: int,
        continuation: Callable[[], None],
        *,
        token: Optional[CancellationToken] = None,
        progress: Optional[ProgressReporter] = None,
        on_tick: Optional[Callable[[int], None]] = None,
        tick: float = COUNTDOWN_TICK_SECONDS,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.seconds = max(int(seconds), 0)
        self.token = token or CancellationToken()
        self._continuation = continuation
        self._progress = progress or NullProgress()
        self._on_tick = on_tick
        self._tick = tick
        self._sleep = sleep
        self._clock = clock
        self._ticks_per_second = max(int(round(1.0 / tick)), 1)
        self._done = threading.Event()
        self.result = CountdownResult.PENDING
        self.error: Optional[BaseException] = None

    def _cancelled(self) -> bool:
        if self._progress.is_cancelled():
            self.token.cancel("countdown cancelled by user")
        return self.token.cancelled

    def _count_down(self, started: float) -> bool:
        remaining = self.seconds
        while remaining > 0:
            if self._cancelled():
                return False
            self._progress.set_fraction(1.0 - remaining / self.seconds)
            self._progress.set_text(format_remaining(remaining))
            if self._on_tick is not None:
                self._on_tick(remaining)
            for _ in range(self._ticks_per_second):
                if self._cancelled():
                    return False
                self._sleep(self._tick)
            remaining -= 1
        residual = self.seconds - (self._clock() - started)
        if residual > 0:
            self._sleep(residual)
        return not self._cancelled()

    def run(self) -> CountdownResult:
        """Count down on the calling thread, then run the continuation."""
        try:
            if not self._count_down(self._clock()):
                self.result = CountdownResult.CANCELLED
                return self.result
            self._progress.set_fraction(1.0)
            self.result = CountdownResult.COMPLETED
            self._continuation()
            return self.result
        except Exception as exc:  # exposed via ``error``
            self.error = exc
            self.result = CountdownResult.FAILED
            return self.result
        finally:
            self._done.set()

    def cancel(self, reason: str | None = None) -> None:
        self.token.cancel(reason or "countdown cancelled")

    def join(self, timeout: float | None = None) -> bool:
        """Wait for the runner to finish; return whether it did."""
        return self._done.wait(timeout)

    @property
    def finished(self) -> bool:
        return self._done.is_set()


__all__ = ["CountdownTask", "CountdownResult", "format_remaining"]
