"""Notifier Protocol (single-class module).

Fire-and-forget user notifications. The core never consumes a return value.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class Notifier(Protocol):
    def show_error(self, title: str, body: str) -> None: ...

    def show_warning(self, title: str, body: str) -> None: ...

    def show_info(self, title: str, body: str) -> None: ...
