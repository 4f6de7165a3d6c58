"""Rate-limit countdown owner.

At most one countdown exists at a time. The rate-limited flag is a
``StateToken`` with its own lock; ``start`` flips it from CLEAR to LIMITED with
compare-and-set and is rejected (logged no-op) when a countdown is already
running. The version returned by that transition identifies the countdown:
when it completes, the retry continuation is dispatched to the UI executor and
fires only if the flag still carries that version. Cancellation clears the
flag immediately through the countdown token's ``on_cancel`` hook and never
retries.
"""

from __future__ import annotations

import logging
import threading
import time
from enum import Enum
from typing import Callable, Optional

from ...config.defaults import COUNTDOWN_TICK_SECONDS
from ..cancellation import CancellationToken
from ..executors import SerialExecutor
from ..guards import StateToken
from ..interfaces import NullProgress, ProgressReporter
from ..logging import LogContext, get_logger, normalized_log_event
from ..models import RateLimitState
from .countdown_task import CountdownResult, CountdownTask

ProgressFactory = Callable[[str], ProgressReporter]


class RateLimitFlag(str, Enum):
    CLEAR = "clear"
    LIMITED = "limited"


class RateLimiter:
    """Single-flight countdown with versioned auto-retry."""

    def __init__(
        self,
        *,
        ui_executor=None,
        progress_factory: Optional[ProgressFactory] = None,
        tick: float = COUNTDOWN_TICK_SECONDS,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._ui = ui_executor if ui_executor is not None else SerialExecutor("inline-chat-ui")
        self._progress_factory = progress_factory or (lambda title: NullProgress())
        self._tick = tick
        self._sleep = sleep
        self._clock = clock
        self._logger = logger or get_logger("inline_chat.rate_limit")
        self.guard: StateToken[RateLimitFlag] = StateToken(RateLimitFlag.CLEAR, name="rate_limit")
        self._lock = threading.Lock()
        self._state: Optional[RateLimitState] = None
        self._task: Optional[CountdownTask] = None

    # -- queries --------------------------------------------------------
    @property
    def active(self) -> bool:
        return self.guard.state is RateLimitFlag.LIMITED

    @property
    def state(self) -> Optional[RateLimitState]:
        with self._lock:
            return self._state

    @property
    def task(self) -> Optional[CountdownTask]:
        with self._lock:
            return self._task

    @property
    def last_result(self) -> Optional[CountdownResult]:
        """How the most recent countdown ended (``PENDING`` while it runs)."""
        task = self.task
        return None if task is None else task.result

    # -- lifecycle ------------------------------------------------------
    def start(
        self,
        seconds: int,
        retry: Callable[[], None],
        *,
        source: str = "transport",
        ctx: Optional[LogContext] = None,
    ) -> Optional[RateLimitState]:
        """Begin a countdown of ``seconds``; return its state or ``None`` if rejected."""
        version = self.guard.compare_and_set(RateLimitFlag.CLEAR, RateLimitFlag.LIMITED)
        if version is None:
            normalized_log_event(
                self._logger,
                "rate_limit.rejected",
                ctx,
                phase="rate_limit",
                level=logging.WARNING,
                retry_after=seconds,
                source=source,
            )
            return None

        token = CancellationToken()
        state = RateLimitState(
            retry_after_seconds=seconds,
            started_at=self._clock(),
            version=version,
            token=token,
        )
        task = CountdownTask(
            seconds,
            lambda: self._dispatch_retry(state, retry, ctx),
            token=token,
            progress=self._progress_factory("Rate Limit"),
            on_tick=lambda remaining: normalized_log_event(
                self._logger,
                "rate_limit.tick",
                ctx,
                phase="rate_limit",
                level=logging.DEBUG,
                remaining=remaining,
                version=version,
            ),
            tick=self._tick,
            sleep=self._sleep,
            clock=self._clock,
        )
        with self._lock:
            self._state = state
            self._task = task
        token.on_cancel(lambda: self._on_cancelled(state, ctx))
        normalized_log_event(
            self._logger,
            "rate_limit.start",
            ctx,
            phase="rate_limit",
            level=logging.WARNING,
            retry_after=seconds,
            source=source,
            version=version,
        )
        threading.Thread(
            target=self._run,
            args=(task, state, ctx),
            name="inline-chat-countdown",
            daemon=True,
        ).start()
        return state

    def cancel(self, reason: str | None = None) -> bool:
        """Cancel the running countdown; return whether one was running."""
        state = self.state
        if state is None or state.cancelled:
            return False
        state.token.cancel(reason or "rate limit countdown cancelled")
        return True

    def join(self, timeout: float | None = None) -> bool:
        """Wait for the current countdown thread to finish (tests, CLI)."""
        task = self.task
        return True if task is None else task.join(timeout)

    # -- internals ------------------------------------------------------
    def _run(self, task: CountdownTask, state: RateLimitState, ctx: Optional[LogContext]) -> None:
        result = task.run()
        if result is CountdownResult.FAILED:
            normalized_log_event(
                self._logger,
                "rate_limit.failed",
                ctx,
                phase="rate_limit",
                level=logging.ERROR,
                error_code="internal",
                error=repr(task.error),
                version=state.version,
            )
            self._clear(state)

    def _clear(self, state: RateLimitState) -> bool:
        cleared = self.guard.compare_and_set(
            RateLimitFlag.LIMITED,
            RateLimitFlag.CLEAR,
            expected_version=state.version,
        )
        if cleared is None:
            return False
        with self._lock:
            if self._state is state:
                self._state = None
        return True

    def _on_cancelled(self, state: RateLimitState, ctx: Optional[LogContext]) -> None:
        self._clear(state)
        normalized_log_event(
            self._logger,
            "rate_limit.cancelled",
            ctx,
            phase="rate_limit",
            level=logging.WARNING,
            version=state.version,
            reason=state.token.reason,
        )

    def _dispatch_retry(self, state: RateLimitState, retry: Callable[[], None], ctx: Optional[LogContext]) -> None:
        normalized_log_event(
            self._logger,
            "rate_limit.complete",
            ctx,
            phase="rate_limit",
            level=logging.WARNING,
            retry_after=state.retry_after_seconds,
            version=state.version,
        )
        self._ui.submit(self._fire_retry, state, retry, ctx)

    def _fire_retry(self, state: RateLimitState, retry: Callable[[], None], ctx: Optional[LogContext]) -> None:
        if state.cancelled or not self._clear(state):
            normalized_log_event(
                self._logger,
                "rate_limit.stale",
                ctx,
                phase="rate_limit",
                level=logging.WARNING,
                version=state.version,
            )
            return
        try:
            retry()
        except Exception:
            self._logger.exception("rate limit retry failed")


__all__ = ["RateLimiter", "RateLimitFlag"]
