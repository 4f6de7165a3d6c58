"""Versioned state token guarding a single shared resource.

One ``StateToken`` exists per guarded resource (the session-active flag and the
rate-limited flag each get their own). The token pairs an enum value with a
monotonically increasing version and protects both with its own mutex;
``compare_and_set`` is the only way to change it.

The version lets an asynchronous party (for example a countdown thread)
remember *which* activation it belongs to and later prove it is still the
current one before acting.
"""

from __future__ import annotations

from enum import Enum
from threading import Lock
from typing import Generic, Optional, Tuple, TypeVar

S = TypeVar("S", bound=Enum)


class StateToken(Generic[S]):
    """Enum value + version protected by a dedicated lock."""

    def __init__(self, initial: S, *, name: str = "state") -> None:
        self._lock = Lock()
        self._state: S = initial
        self._version = 0
        self.name = name

    @property
    def state(self) -> S:
        with self._lock:
            return self._state

    @property
    def version(self) -> int:
        with self._lock:
            return self._version

    def snapshot(self) -> Tuple[S, int]:
        """Return ``(state, version)`` read atomically."""
        with self._lock:
            return self._state, self._version

    def compare_and_set(
        self,
        expected: S,
        new: S,
        *,
        expected_version: Optional[int] = None,
    ) -> Optional[int]:
        """Move from ``expected`` to ``new`` atomically.

        Returns the new version on success, ``None`` when the current state
        (or version, if ``expected_version`` is given) does not match.
        """
        with self._lock:
            if self._state != expected:
                return None
            if expected_version is not None and self._version != expected_version:
                return None
            self._state = new
            self._version += 1
            return self._version

    def __repr__(self) -> str:  # pragma: no cover - introspection aid
        state, version = self.snapshot()
        return f"StateToken(name={self.name!r}, state={state!r}, version={version})"


__all__ = ["StateToken"]
