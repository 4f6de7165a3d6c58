"""
Collaborator interfaces (Protocols) consumed by the streaming core.

Re-exports the single-class modules under
``inline_chat.base.interfaces_parts``.
"""

from __future__ import annotations

from .interfaces_parts import (
    DocumentSink,
    Notifier,
    NullProgress,
    ProgressReporter,
    SessionSettings,
    SettingsProvider,
)

__all__ = [
    "DocumentSink",
    "Notifier",
    "NullProgress",
    "ProgressReporter",
    "SessionSettings",
    "SettingsProvider",
]
