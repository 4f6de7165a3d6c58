"""Shared fixtures for the inline_chat test-suite.

Provides:
- process isolation (environment, settings directory, config caches);
- a fake clock whose ``sleep`` advances time instantly;
- recording notifier / progress doubles;
- a scripted transport double yielding SSE lines without any network I/O;
- a ``make_session`` factory wiring a session to inline executors;
- capture of the structured events emitted on the ``inline_chat`` logger.
"""
from __future__ import annotations

import json
import logging
import threading
from contextlib import contextmanager
from typing import Any, Dict, Iterable, Iterator, List, Optional

import pytest

from inline_chat.base.executors import ImmediateExecutor
from inline_chat.base.logging import BASE_LOGGER_NAME, get_logger
from inline_chat.base.rate_limit import RateLimiter
from inline_chat.base.streaming import StreamSession
from inline_chat.config import reset_config_cache
from inline_chat.config.model_catalog import clear_cache
from inline_chat.config.settings import ChatSettings, SettingsStore
from inline_chat.document import TextDocument

_ENV_VARS = (
    "INLINE_CHAT_API_KEY",
    "OPENROUTER_API_KEY",
    "INLINE_CHAT_MODEL",
    "INLINE_CHAT_BASE_URL",
    "INLINE_CHAT_SYSTEM_PROMPT",
    "INLINE_CHAT_CONFIG_FILE",
    "INLINE_CHAT_LOG_LEVEL",
)


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch: pytest.MonkeyPatch, tmp_path) -> Iterator[None]:
    """Keep tests away from the user's environment and config directory."""
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("INLINE_CHAT_SETTINGS_DIR", str(tmp_path / "settings"))
    reset_config_cache()
    clear_cache()
    yield
    reset_config_cache()
    clear_cache()


class FakeClock:
    """Monotonic clock double; ``sleep`` records the request and advances time.

    ``drift`` scales how far time moves per sleep (below 1.0 simulates sleeps
    that return early).
    """

    def __init__(self, drift: float = 1.0) -> None:
        self.now = 0.0
        self.drift = drift
        self.sleeps: List[float] = []

    def __call__(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds * self.drift


@pytest.fixture()
def fake_clock() -> FakeClock:
    return FakeClock()


class RecordingNotifier:
    def __init__(self) -> None:
        self.errors: List[tuple] = []
        self.warnings: List[tuple] = []
        self.infos: List[tuple] = []

    def show_error(self, title: str, body: str) -> None:
        self.errors.append((title, body))

    def show_warning(self, title: str, body: str) -> None:
        self.warnings.append((title, body))

    def show_info(self, title: str, body: str) -> None:
        self.infos.append((title, body))


@pytest.fixture()
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


class RecordingProgress:
    def __init__(self) -> None:
        self.fractions: List[float] = []
        self.texts: List[str] = []
        self.cancelled = False

    def set_fraction(self, fraction: float) -> None:
        self.fractions.append(fraction)

    def set_text(self, text: str) -> None:
        self.texts.append(text)

    def is_cancelled(self) -> bool:
        return self.cancelled


@pytest.fixture()
def progress() -> RecordingProgress:
    return RecordingProgress()


def sse_lines(*frames: Any, done: bool = True) -> List[str]:
    """Render frames as SSE lines; dicts are JSON encoded, strings sent as-is."""
    lines: List[str] = []
    for frame in frames:
        payload = frame if isinstance(frame, str) else json.dumps(frame)
        lines.extend([f"data: {payload}", ""])
    if done:
        lines.extend(["data: [DONE]", ""])
    return lines


def text_frame(text: str) -> Dict[str, Any]:
    return {"choices": [{"delta": {"content": text}}]}


class ScriptedTransport:
    """Transport double: records each open and yields scripted lines.

    ``gate`` (when given) is awaited before the first line is produced so a
    test can hold the session in STREAMING. ``error`` is raised on open.
    """

    def __init__(
        self,
        lines: Iterable[str] = (),
        *,
        gate: Optional[threading.Event] = None,
        error: Optional[BaseException] = None,
    ) -> None:
        self._lines = list(lines)
        self._gate = gate
        self._error = error
        self.calls: List[tuple] = []

    def _produce(self) -> Iterator[str]:
        if self._gate is not None:
            self._gate.wait(5)
        yield from self._lines

    @contextmanager
    def open(self, request, api_key, token):
        self.calls.append((request, api_key))
        token.raise_if_cancelled()
        if self._error is not None:
            raise self._error
        yield self._produce()


@pytest.fixture()
def chat_settings() -> ChatSettings:
    return ChatSettings(api_key="sk-live-1234", model_id="m", system_prompt="s", models=("m",))


@pytest.fixture()
def settings_store(chat_settings: ChatSettings) -> SettingsStore:
    return SettingsStore(chat_settings, persist=False)


@pytest.fixture()
def make_limiter(fake_clock: FakeClock):
    def factory(**kwargs: Any) -> RateLimiter:
        kwargs.setdefault("ui_executor", ImmediateExecutor())
        kwargs.setdefault("sleep", fake_clock.sleep)
        kwargs.setdefault("clock", fake_clock)
        return RateLimiter(**kwargs)

    return factory


@pytest.fixture()
def make_session(settings_store: SettingsStore, notifier: RecordingNotifier, make_limiter):
    """Build a session over ``doc`` and ``transport`` with inline executors."""

    def factory(doc: TextDocument, transport: Any, **kwargs: Any) -> StreamSession:
        kwargs.setdefault("notifier", notifier)
        kwargs.setdefault("rate_limiter", make_limiter())
        kwargs.setdefault("edit_executor", ImmediateExecutor())
        kwargs.setdefault("auto_retry", False)
        return StreamSession(
            doc,
            kwargs.pop("settings", settings_store),
            transport_factory=lambda base_url: transport,
            **kwargs,
        )

    return factory


@pytest.fixture()
def log_events() -> Iterator[List[Dict[str, Any]]]:
    """Collect the JSON payloads logged on the shared ``inline_chat`` logger."""
    events: List[Dict[str, Any]] = []

    class _Collect(logging.Handler):
        def emit(self, record: logging.LogRecord) -> None:
            try:
                events.append(json.loads(record.getMessage()))
            except ValueError:
                events.append({"event": None, "message": record.getMessage()})

    base = get_logger(BASE_LOGGER_NAME)
    previous = base.level
    handler = _Collect(level=logging.DEBUG)
    base.setLevel(logging.DEBUG)
    base.addHandler(handler)
    try:
        yield events
    finally:
        base.removeHandler(handler)
        base.setLevel(previous)


@pytest.fixture()
def helpers():
    """Expose module-level helpers to test modules (no shared helper package)."""
    return type(
        "Helpers",
        (),
        {
            "sse_lines": staticmethod(sse_lines),
            "text_frame": staticmethod(text_frame),
            "ScriptedTransport": ScriptedTransport,
            "FakeClock": FakeClock,
            "RecordingProgress": RecordingProgress,
        },
    )
