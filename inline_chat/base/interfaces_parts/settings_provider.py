"""SessionSettings / SettingsProvider Protocols.

A session reads one immutable settings snapshot per invocation; it never holds
on to the store itself.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class SessionSettings(Protocol):
    """Read-only view of the values a session needs."""

    @property
    def api_key(self) -> str: ...

    @property
    def model_id(self) -> str: ...

    @property
    def system_prompt(self) -> str: ...

    @property
    def base_url(self) -> str: ...


@runtime_checkable
class SettingsProvider(Protocol):
    def snapshot(self) -> SessionSettings:
        """Return the current settings value object."""
        ...
