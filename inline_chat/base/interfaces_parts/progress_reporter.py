"""ProgressReporter Protocol (single-class module) and a no-op implementation."""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class ProgressReporter(Protocol):
    """Progress view of a session or countdown; ``is_cancelled`` is polled."""

    def set_fraction(self, fraction: float) -> None: ...

    def set_text(self, text: str) -> None: ...

    def is_cancelled(self) -> bool: ...


class NullProgress:
    """Progress reporter that records nothing and is never cancelled."""

    def set_fraction(self, fraction: float) -> None:  # noqa: D401 - no-op
        return None

    def set_text(self, text: str) -> None:  # noqa: D401 - no-op
        return None

    def is_cancelled(self) -> bool:
        return False
