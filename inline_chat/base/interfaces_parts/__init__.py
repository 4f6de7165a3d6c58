from .document_sink import DocumentSink
from .notifier import Notifier
from .progress_reporter import NullProgress, ProgressReporter
from .settings_provider import SessionSettings, SettingsProvider

__all__ = [
    "DocumentSink",
    "Notifier",
    "NullProgress",
    "ProgressReporter",
    "SessionSettings",
    "SettingsProvider",
]
