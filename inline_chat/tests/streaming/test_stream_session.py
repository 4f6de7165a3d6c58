"""StreamSession end-to-end behavior against a scripted transport.

Covers:
- Completed stream writes at the anchor and leaves the marker in place.
- Partial-output policy for unrecognized frames (fatal before output, skipped after).
- Cancellation from a sink hook keeps flushed text and the marker, drops the buffer.
- ConfigError leaves the sink untouched and never opens the transport.
- In-band and transport-level rate limits settle in RATE_LIMITED.
- Log events carry the normalized key set.
"""
from __future__ import annotations

import pytest

from inline_chat.base.cancellation import CancellationToken
from inline_chat.base.errors import ErrorCode, RateLimitError, TransportError
from inline_chat.base.logging import REQUIRED_NORMALIZED_KEYS
from inline_chat.base.models import DecodeOutcome, SessionState
from inline_chat.base.rate_limit import RateLimitFlag
from inline_chat.config.settings import ChatSettings, SettingsStore
from inline_chat.document import TextDocument


def test_completed_stream_inserts_at_anchor(make_session, helpers, notifier):
    doc = TextDocument("question")
    frames = [helpers.text_frame(ch) for ch in "Hello, world!"]
    transport = helpers.ScriptedTransport(helpers.sse_lines(*frames))
    session = make_session(doc, transport)

    outcome = session.invoke()

    assert outcome.state is SessionState.COMPLETED
    assert outcome.decode is DecodeOutcome.DONE
    assert outcome.total_written == 13
    assert outcome.start_offset == len("question\n\n")
    assert doc.text() == "question\n\nHello, world!\n\n"
    assert doc.marker_at(outcome.start_offset).model_id == "m"
    assert notifier.errors == []
    assert session.state is SessionState.IDLE
    request, api_key = transport.calls[0]
    assert request.user_content == "question"
    assert api_key == "sk-live-1234"


def test_selection_is_used_as_context(make_session, helpers):
    doc = TextDocument("ignore this. ask this")
    doc.select(13, 21)
    transport = helpers.ScriptedTransport(helpers.sse_lines(helpers.text_frame("ok")))

    make_session(doc, transport).invoke()

    assert transport.calls[0][0].user_content == "ask this"


def test_exhausted_stream_flushes_partial_buffer(make_session, helpers):
    doc = TextDocument("q")
    transport = helpers.ScriptedTransport(helpers.sse_lines({"response": "abc"}, done=False))

    outcome = make_session(doc, transport).invoke()

    assert outcome.state is SessionState.COMPLETED
    assert outcome.decode is DecodeOutcome.EXHAUSTED
    assert "abc" in doc.text()


def test_unknown_format_before_output_fails_and_restores(make_session, helpers, notifier):
    doc = TextDocument("hello")
    transport = helpers.ScriptedTransport(helpers.sse_lines({"foo": 1}, helpers.text_frame("late")))

    outcome = make_session(doc, transport).invoke()

    assert outcome.state is SessionState.FAILED
    assert outcome.error.code is ErrorCode.UNKNOWN_FORMAT
    assert "Available fields: ['foo']" in outcome.error.message
    assert doc.text() == "hello"
    assert len(doc.markers) == 0
    assert notifier.errors and notifier.errors[0][0] == "Error"
    assert "m response" in notifier.errors[0][1]


def test_unrecognized_frames_after_output_are_skipped(make_session, helpers, notifier):
    doc = TextDocument("hello")
    frames = [{"text": "abcdefghij"}, {"foo": 1}, "not json", {"text": "klm"}]
    transport = helpers.ScriptedTransport(helpers.sse_lines(*frames))

    outcome = make_session(doc, transport).invoke()

    assert outcome.state is SessionState.COMPLETED
    assert outcome.skipped_frames == 2
    assert outcome.total_written == 13
    assert "abcdefghijklm" in doc.text()
    assert notifier.errors == []


def test_unrecognized_frame_with_only_buffered_text_is_fatal(make_session, helpers):
    doc = TextDocument("hello")
    transport = helpers.ScriptedTransport(helpers.sse_lines({"text": "abc"}, {"foo": 1}))

    outcome = make_session(doc, transport).invoke()

    assert outcome.state is SessionState.FAILED
    assert outcome.total_written == 0
    assert doc.text() == "hello"


class _CancellingDocument(TextDocument):
    """Cancels ``token`` after the first non-padding insert."""

    token: CancellationToken

    def insert(self, offset: int, text: str) -> int:
        result = super().insert(offset, text)
        if text.strip():
            self.token.cancel("user pressed stop")
        return result


def test_cancel_mid_stream_keeps_flushed_text(make_session, helpers, notifier):
    doc = _CancellingDocument("hello\n\n\n\n")
    doc.token = CancellationToken()
    frames = [helpers.text_frame(ch) for ch in "0123456789abcdefghijklmno"]
    transport = helpers.ScriptedTransport(helpers.sse_lines(*frames))

    session = make_session(doc, transport)

    outcome = session.invoke(token=doc.token)

    assert outcome.state is SessionState.CANCELLED
    assert outcome.decode is DecodeOutcome.CANCELLED
    assert outcome.total_written == 10
    assert doc.text() == "hello\n\n0123456789\n\n"
    assert doc.marker_at(7) is not None
    assert notifier.errors == []
    assert session.state is SessionState.IDLE


def test_progress_cancel_is_observed(make_session, helpers, progress):
    doc = TextDocument("q")
    progress.cancelled = True
    transport = helpers.ScriptedTransport(helpers.sse_lines(helpers.text_frame("x")))

    outcome = make_session(doc, transport).invoke(progress=progress)

    assert outcome.state is SessionState.CANCELLED
    assert doc.text() == "q"


def test_config_error_leaves_sink_untouched(helpers, notifier, make_session):
    doc = TextDocument("draft")
    transport = helpers.ScriptedTransport(helpers.sse_lines(helpers.text_frame("x")))
    store = SettingsStore(ChatSettings(api_key="", model_id="m", models=("m",)), persist=False)

    outcome = make_session(doc, transport, settings=store).invoke()

    assert outcome.state is SessionState.FAILED
    assert outcome.error.code is ErrorCode.CONFIG
    assert doc.text() == "draft"
    assert len(doc.markers) == 0
    assert transport.calls == []
    assert notifier.warnings[0][0] == "Configuration Required"
    assert notifier.errors == []


def test_transport_error_is_notified(make_session, helpers, notifier):
    doc = TextDocument("q")
    error = TransportError.from_response(500, "boom", model="m")
    transport = helpers.ScriptedTransport(error=error)

    outcome = make_session(doc, transport).invoke()

    assert outcome.state is SessionState.FAILED
    assert outcome.error is error
    assert doc.text() == "q"
    assert "(500): boom" in notifier.errors[0][1]


def test_default_notifier_logs_fatal_errors(make_session, helpers, log_events):
    doc = TextDocument("q")
    transport = helpers.ScriptedTransport(helpers.sse_lines({"unexpected": True}))

    outcome = make_session(doc, transport, notifier=None).invoke()

    assert outcome.state is SessionState.FAILED
    surfaced = [e for e in log_events if e.get("event") == "notify.error"]
    assert len(surfaced) == 1
    assert surfaced[0]["title"] == "Error"
    assert "Unexpected response format" in surfaced[0]["body"]


def test_in_band_rate_limit_flushes_and_warns(make_session, helpers, notifier):
    doc = TextDocument("q")
    frames = [
        {"text": "partial"},
        {"error": {"code": 429, "metadata": {"raw": "Retry after 5 seconds"}}},
        {"text": "never"},
    ]
    transport = helpers.ScriptedTransport(helpers.sse_lines(*frames))
    session = make_session(doc, transport)

    outcome = session.invoke()

    assert outcome.state is SessionState.RATE_LIMITED
    assert outcome.retry_after_seconds == 5
    assert "partial" in doc.text()
    assert "never" not in doc.text()
    assert notifier.warnings[0][0] == "Rate Limit"
    assert not session.rate_limiter.active


def test_transport_rate_limit_starts_countdown_and_retries(make_session, helpers, make_limiter, fake_clock):
    doc = TextDocument("q")

    class _Flaky(helpers.ScriptedTransport):
        def open(self, request, api_key, token):
            if not self.calls:
                self.calls.append((request, api_key))
                raise RateLimitError(retry_after_seconds=7)
            return super().open(request, api_key, token)

    transport = _Flaky(helpers.sse_lines({"text": "after wait"}))
    session = make_session(doc, transport, auto_retry=True, rate_limiter=make_limiter())

    first = session.invoke()

    assert first.state is SessionState.RATE_LIMITED
    assert first.retry_after_seconds == 7
    assert session.rate_limiter.join(5)
    retry = session.latest_controller
    assert retry is not None
    assert retry.join(5)
    assert retry.outcome.state is SessionState.COMPLETED
    assert "after wait" in doc.text()
    assert sum(fake_clock.sleeps) == pytest.approx(7.0)
    assert len(transport.calls) == 2


def test_invocation_rejected_while_rate_limited(make_session, helpers, make_limiter):
    doc = TextDocument("q")
    limiter = make_limiter()
    limiter.guard.compare_and_set(RateLimitFlag.CLEAR, RateLimitFlag.LIMITED)
    session = make_session(doc, helpers.ScriptedTransport(), rate_limiter=limiter)

    assert session.invoke() is None
    assert session.start() is None
    assert not session.is_available()


def test_session_logs_normalized_events(make_session, helpers, log_events):
    doc = TextDocument("q")
    transport = helpers.ScriptedTransport(helpers.sse_lines({"text": "a" * 10}, {"foo": 1}))

    make_session(doc, transport).invoke()

    names = [e.get("event") for e in log_events]
    assert "session.start" in names
    assert "stream.frame_skipped" in names
    end = [e for e in log_events if e.get("event") == "session.end"][-1]
    for key in REQUIRED_NORMALIZED_KEYS:
        assert key in end
    assert end["state"] == "completed"
    assert end["model"] == "m"
    assert end["skipped_frames"] == 1
