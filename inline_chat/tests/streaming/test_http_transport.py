"""ChatTransport against ``httpx.MockTransport``.

Covers the exact request body and bearer header, 429 wait computation,
non-2xx mapping, network failures, pre-cancelled tokens and cancellation while
the server has not sent headers yet.
"""
from __future__ import annotations

import json
import threading
import time

import httpx
import pytest

from inline_chat.base.cancellation import CancellationToken, CancelledError
from inline_chat.base.errors import RateLimitError, TransportError
from inline_chat.base.executors import ImmediateExecutor
from inline_chat.base.models import SessionState, StreamRequest
from inline_chat.base.streaming import ChatTransport, StreamSession
from inline_chat.config.settings import ChatSettings, SettingsStore
from inline_chat.document import TextDocument

BASE = "https://api.test/v1"
REQUEST = StreamRequest(model_id="m", system_prompt="s", user_content="c")


def _transport(handler) -> ChatTransport:
    return ChatTransport(BASE, client=httpx.Client(transport=httpx.MockTransport(handler)))


def _sse(helpers, *frames) -> bytes:
    return "\n".join(helpers.sse_lines(*frames)).encode()


def test_end_to_end_body_and_auth(helpers, notifier, make_limiter):
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["method"] = request.method
        seen["auth"] = request.headers["authorization"]
        seen["body"] = json.loads(request.content)
        return httpx.Response(
            200,
            headers={"content-type": "text/event-stream"},
            content=_sse(helpers, helpers.text_frame("Hi"), helpers.text_frame(" there")),
        )

    store = SettingsStore(
        ChatSettings(api_key="sk-live-1234", model_id="m", system_prompt="s", base_url=BASE, models=("m",)),
        persist=False,
    )
    doc = TextDocument("doc")
    session = StreamSession(
        doc,
        store,
        notifier=notifier,
        rate_limiter=make_limiter(),
        edit_executor=ImmediateExecutor(),
        transport_factory=lambda base_url: _transport(handler),
    )

    outcome = session.invoke("c")

    assert outcome.state is SessionState.COMPLETED
    assert seen["method"] == "POST"
    assert seen["url"] == "https://api.test/v1/chat/completions"
    assert seen["auth"] == "Bearer sk-live-1234"
    assert seen["body"] == {
        "model": "m",
        "messages": [{"role": "system", "content": "s"}, {"role": "user", "content": "c"}],
        "stream": True,
    }
    assert "Hi there" in doc.text()


def test_429_with_hint_adds_buffer():
    body = {"error": {"message": "Rate limited", "metadata": {"raw": "Retry after 5 seconds"}}}
    transport = _transport(lambda request: httpx.Response(429, json=body))

    with pytest.raises(RateLimitError) as info:
        with transport.open(REQUEST, "k", CancellationToken()):
            pass
    assert info.value.retry_after_seconds == 7
    assert info.value.status == 429


def test_429_without_hint_uses_default():
    transport = _transport(lambda request: httpx.Response(429, text="slow down"))

    with pytest.raises(RateLimitError) as info:
        with transport.open(REQUEST, "k", CancellationToken()):
            pass
    assert info.value.retry_after_seconds == 62


def test_non_2xx_raises_transport_error():
    transport = _transport(lambda request: httpx.Response(500, text="boom"))

    with pytest.raises(TransportError) as info:
        with transport.open(REQUEST, "k", CancellationToken()):
            pass
    assert info.value.status == 500
    assert info.value.body == "boom"
    assert "(500): boom" in info.value.message


def test_empty_error_body_is_described():
    transport = _transport(lambda request: httpx.Response(503))

    with pytest.raises(TransportError) as info:
        with transport.open(REQUEST, "k", CancellationToken()):
            pass
    assert "No error details available" in info.value.message


def test_network_failure_is_transport_error():
    def handler(request):
        raise httpx.ConnectError("refused", request=request)

    with pytest.raises(TransportError) as info:
        with _transport(handler).open(REQUEST, "k", CancellationToken()):
            pass
    assert "refused" in info.value.message


def test_cancelled_token_never_sends():
    calls = []

    def handler(request):
        calls.append(request)
        return httpx.Response(200)

    token = CancellationToken()
    token.cancel("before send")
    with pytest.raises(CancelledError):
        with _transport(handler).open(REQUEST, "k", token):
            pass
    assert calls == []


def test_cancel_registers_response_close(helpers):
    token = CancellationToken()
    transport = _transport(lambda request: httpx.Response(200, content=_sse(helpers, {"text": "a"})))

    with transport.open(REQUEST, "k", token) as lines:
        first = next(iter(lines))
        token.cancel("stop")
    assert first.startswith("data:")


class _TrackedBody(httpx.SyncByteStream):
    def __init__(self, data: bytes = b"") -> None:
        self._data = data
        self.closed = threading.Event()

    def __iter__(self):
        yield self._data

    def close(self) -> None:
        self.closed.set()


def _slow_headers(gate: threading.Event, body: _TrackedBody):
    def handler(request: httpx.Request) -> httpx.Response:
        gate.wait(10)
        return httpx.Response(200, stream=body)

    return handler


def test_cancel_while_waiting_for_headers_returns_promptly():
    gate = threading.Event()
    body = _TrackedBody()
    token = CancellationToken()
    timer = threading.Timer(0.1, token.cancel, args=("stop",))

    started = time.monotonic()
    timer.start()
    try:
        with pytest.raises(CancelledError):
            with _transport(_slow_headers(gate, body)).open(REQUEST, "k", token):
                pass
        elapsed = time.monotonic() - started
    finally:
        gate.set()
        timer.cancel()

    assert elapsed < 2.0
    assert body.closed.wait(5)


def test_session_cancel_during_slow_headers(helpers, notifier, make_limiter):
    gate = threading.Event()
    body = _TrackedBody(_sse(helpers, helpers.text_frame("too late")))
    store = SettingsStore(
        ChatSettings(api_key="sk-live-1234", model_id="m", system_prompt="s", base_url=BASE, models=("m",)),
        persist=False,
    )
    doc = TextDocument("doc")
    session = StreamSession(
        doc,
        store,
        notifier=notifier,
        rate_limiter=make_limiter(),
        edit_executor=ImmediateExecutor(),
        transport_factory=lambda base_url: _transport(_slow_headers(gate, body)),
    )

    try:
        started = time.monotonic()
        controller = session.start("c")
        time.sleep(0.1)
        session.cancel("stop")
        assert controller.join(2)
        elapsed = time.monotonic() - started
    finally:
        gate.set()

    assert elapsed < 2.0
    assert controller.outcome.state is SessionState.CANCELLED
    assert doc.text() == "doc"
    assert notifier.errors == []
    assert body.closed.wait(5)
