"""State of the single active rate-limit countdown."""
from __future__ import annotations

from dataclasses import dataclass

from ..cancellation import CancellationToken


@dataclass
class RateLimitState:
    """Created when a countdown starts, discarded when it ends.

    Attributes:
        retry_after_seconds: Total wait of this countdown.
        started_at: Monotonic clock reading when the countdown began.
        version: Guard version that identifies this countdown; a completion
            whose version no longer matches is stale.
        token: Cancellation token of the countdown task.
    """

    retry_after_seconds: int
    started_at: float
    version: int
    token: CancellationToken

    @property
    def cancelled(self) -> bool:
        return self.token.cancelled


__all__ = ["RateLimitState"]
