"""Stream session orchestrator.

State machine::

    IDLE -> REQUESTING -> STREAMING -> {COMPLETED | CANCELLED | FAILED | RATE_LIMITED}

The session-active flag is a ``StateToken``: entry is a compare-and-set from
IDLE to REQUESTING and a failed CAS rejects the invocation silently (``None``
is returned, nothing is queued, nothing is shown). While the rate limiter is
counting down new invocations are rejected the same way. The flag returns to
IDLE in a ``finally`` on every exit path.

All sink mutations (padding, marker, text, rollback) run on the serialized
edit executor; the read/decode loop runs on the caller's thread (``invoke``)
or on a controller thread (``start``). Fatal errors are caught here, logged,
and surfaced once through the notifier; they never propagate to the caller.
"""

from __future__ import annotations

import logging
import threading
import uuid
from datetime import datetime
from typing import Callable, Optional

from ...service.notifications import LoggingNotifier
from ..cancellation import CancellationToken, CancelledError
from ..errors import ConfigError, ErrorCode, RateLimitError, StreamError, classify_exception
from ..executors import SerialExecutor
from ..guards import StateToken
from ..interfaces import DocumentSink, Notifier, NullProgress, ProgressReporter, SettingsProvider
from ..logging import LogContext, get_logger, normalized_log_event
from ..models import (
    DecodeOutcome,
    Done,
    MarkerInfo,
    ParseFailure,
    RateLimited,
    SessionOutcome,
    SessionState,
    Text,
    UnknownFormat,
)
from ..rate_limit import RateLimiter
from .chunk_buffer import ChunkBuffer
from .content_extractor import extract, is_fatal
from .output_anchor import OutputAnchor, place_anchor, restore_anchor
from .request_builder import build_request
from .sse_decoder import SSEDecoder
from .stream_controller import StreamController
from .transport import ChatTransport

ProgressFactory = Callable[[str], ProgressReporter]
TransportFactory = Callable[[str], ChatTransport]
RETRY_IDLE_WAIT_SECONDS = 5.0


def _fatal_error(delta, model: str) -> StreamError:
    if isinstance(delta, UnknownFormat):
        return StreamError(
            code=ErrorCode.UNKNOWN_FORMAT,
            message=(
                "Unexpected response format from model. "
                f"Available fields: {delta.available_keys}"
            ),
            model=model,
        )
    return StreamError(
        code=ErrorCode.PARSE_FAILURE,
        message=f"Failed to parse model response: {delta.reason}",
        model=model,
    )


class StreamSession:
    """Single-flight streaming of one model response into a document sink."""

    def __init__(
        self,
        sink: DocumentSink,
        settings: SettingsProvider,
        *,
        notifier: Optional[Notifier] = None,
        rate_limiter: Optional[RateLimiter] = None,
        edit_executor=None,
        transport_factory: Optional[TransportFactory] = None,
        progress_factory: Optional[ProgressFactory] = None,
        auto_retry: bool = True,
        now: Callable[[], datetime] = datetime.now,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._sink = sink
        self._settings = settings
        self._notifier = notifier or LoggingNotifier()
        self.rate_limiter = rate_limiter or RateLimiter()
        self._edit = edit_executor if edit_executor is not None else SerialExecutor("inline-chat-edit")
        self._transport_factory = transport_factory or ChatTransport
        self._progress_factory = progress_factory or (lambda title: NullProgress())
        self._auto_retry = auto_retry
        self._now = now
        self._logger = logger or get_logger("inline_chat.session")
        self.guard: StateToken[SessionState] = StateToken(SessionState.IDLE, name="session")
        self.latest_controller: Optional[StreamController] = None
        self._active_token: Optional[CancellationToken] = None
        self._lock = threading.Lock()
        self._idle = threading.Event()
        self._idle.set()

    # -- queries --------------------------------------------------------
    @property
    def state(self) -> SessionState:
        return self.guard.state

    def is_available(self) -> bool:
        """True when no session is active and no countdown is running."""
        return self.guard.state is SessionState.IDLE and not self.rate_limiter.active

    # -- entry points ---------------------------------------------------
    def invoke(
        self,
        user_content: Optional[str] = None,
        *,
        progress: Optional[ProgressReporter] = None,
        token: Optional[CancellationToken] = None,
    ) -> Optional[SessionOutcome]:
        """Run one session on the calling thread.

        ``user_content`` defaults to the sink's selection, or its whole text.
        Returns ``None`` when the invocation is rejected.
        """
        token = token or CancellationToken()
        version = self._acquire(token)
        if version is None:
            return None
        return self._run_guarded(version, user_content, progress, token)

    def start(
        self,
        user_content: Optional[str] = None,
        *,
        progress: Optional[ProgressReporter] = None,
    ) -> Optional[StreamController]:
        """Acquire the guard now and run the session on a background thread.

        The controller's token is the active token from the moment the guard is
        taken, so ``cancel`` right after ``start`` returns is never lost.
        """
        token = CancellationToken()
        version = self._acquire(token)
        if version is None:
            return None
        controller = StreamController(
            lambda tok: self._run_guarded(version, user_content, progress, tok),
            token,
        )
        self.latest_controller = controller
        return controller.start()

    def cancel(self, reason: str | None = None) -> None:
        """Cancel the active session and any running countdown.

        A countdown cancelled here settles the rate-limited session as
        CANCELLED; no retry follows.
        """
        with self._lock:
            token = self._active_token
        if token is not None:
            token.cancel(reason or "cancelled by user")
        if self.rate_limiter.cancel(reason):
            normalized_log_event(
                self._logger, "session.end", None, phase="rate_limit",
                level=logging.WARNING, state=SessionState.CANCELLED.value, reason=reason,
            )

    # -- guard ----------------------------------------------------------
    def _acquire(self, token: CancellationToken) -> Optional[int]:
        if self.rate_limiter.active:
            normalized_log_event(self._logger, "session.rejected", None, phase="start", reason="rate_limited")
            return None
        with self._lock:
            version = self.guard.compare_and_set(SessionState.IDLE, SessionState.REQUESTING)
            if version is not None:
                self._active_token = token
                self._idle.clear()
        if version is None:
            normalized_log_event(self._logger, "session.rejected", None, phase="start", reason="busy")
        return version

    def _release(self) -> None:
        with self._lock:
            self._active_token = None
            state, version = self.guard.snapshot()
            if state is not SessionState.IDLE:
                self.guard.compare_and_set(state, SessionState.IDLE, expected_version=version)
            self._idle.set()

    def _run_guarded(
        self,
        version: int,
        user_content: Optional[str],
        progress: Optional[ProgressReporter],
        token: CancellationToken,
    ) -> SessionOutcome:
        try:
            return self._run(version, user_content, progress, token)
        finally:
            self._release()

    # -- session body ---------------------------------------------------
    def _context(self, user_content: Optional[str]) -> str:
        if user_content is not None:
            return user_content

        def read() -> str:
            selected = self._sink.selected_text()
            return selected if selected else self._sink.text()

        return self._edit.call(read)

    def _run(
        self,
        version: int,
        user_content: Optional[str],
        progress: Optional[ProgressReporter],
        token: CancellationToken,
    ) -> SessionOutcome:
        settings = self._settings.snapshot()
        ctx = LogContext(model=settings.model_id or None, session_id=uuid.uuid4().hex[:8])
        progress = progress or self._progress_factory(f"Streaming {settings.model_id}")

        def cancelled() -> bool:
            if not token.cancelled and progress.is_cancelled():
                token.cancel("cancelled by user")
            return token.cancelled

        try:
            request = build_request(settings, self._context(user_content))
        except ConfigError as exc:
            normalized_log_event(
                self._logger, "session.end", ctx, phase="start", error_code=exc.code.value,
                level=logging.WARNING, state=SessionState.FAILED.value,
            )
            self._notifier.show_warning(exc.title, exc.message)
            return SessionOutcome(state=SessionState.FAILED, error=exc)

        normalized_log_event(
            self._logger, "session.start", ctx, phase="start", attempt=version,
            context_chars=len(request.user_content),
        )
        info = MarkerInfo(model_id=request.model_id, timestamp=self._now().strftime("%H:%M:%S"))
        anchor: OutputAnchor = self._edit.call(place_anchor, self._sink, info)
        buffer = ChunkBuffer(lambda offset, text: self._edit.call(self._sink.insert, offset, text), anchor.offset)

        state = SessionState.FAILED
        decode = DecodeOutcome.PENDING
        error: Optional[StreamError] = None
        retry_after: Optional[int] = None
        rate_limit_source = "transport"
        skipped = 0
        try:
            transport = self._transport_factory(settings.base_url)
            with transport.open(request, settings.api_key, token) as lines:
                self.guard.compare_and_set(SessionState.REQUESTING, SessionState.STREAMING)
                progress.set_text(f"Streaming {request.model_id}")
                decoder = SSEDecoder(lines, cancelled)
                for payload in decoder:
                    delta = extract(payload)
                    if isinstance(delta, RateLimited):
                        retry_after = delta.retry_after_seconds
                        rate_limit_source = "in_band"
                        break
                    if isinstance(delta, (UnknownFormat, ParseFailure)):
                        if is_fatal(delta, buffer.total_written):
                            raise _fatal_error(delta, request.model_id)
                        skipped += 1
                        normalized_log_event(
                            self._logger, "stream.frame_skipped", ctx, phase="mid_stream",
                            emitted=True, chars=buffer.total_written, level=logging.WARNING,
                            reason=repr(delta), frame=payload[:200],
                        )
                        continue
                    if isinstance(delta, Done):
                        break
                    if isinstance(delta, Text) and buffer.append(delta.text):
                        if cancelled():
                            break
                        buffer.flush()
                        progress.set_fraction(buffer.fraction())
                decode = decoder.outcome
                if retry_after is not None:
                    buffer.flush()
                    state = SessionState.RATE_LIMITED
                elif decode is DecodeOutcome.CANCELLED or cancelled():
                    state = SessionState.CANCELLED
                else:
                    if decode is DecodeOutcome.EXHAUSTED:
                        normalized_log_event(
                            self._logger, "stream.decode_end", ctx, phase="finalize",
                            chars=buffer.total_written, level=logging.DEBUG,
                            note="no explicit [DONE] seen",
                        )
                    buffer.flush()
                    state = SessionState.COMPLETED
                    progress.set_fraction(1.0)
        except RateLimitError as exc:
            state = SessionState.RATE_LIMITED
            retry_after = exc.retry_after_seconds
        except CancelledError:
            state = SessionState.CANCELLED
        except Exception as exc:
            if token.cancelled:
                state = SessionState.CANCELLED
            else:
                state = SessionState.FAILED
                error = exc if isinstance(exc, StreamError) else StreamError(
                    code=classify_exception(exc), message=str(exc), model=request.model_id, raw=exc,
                )
        if state is SessionState.CANCELLED:
            buffer.discard()
            decode = DecodeOutcome.CANCELLED if decode is DecodeOutcome.PENDING else decode
        return self._finish(
            ctx, request.model_id, anchor, buffer, state, decode, error, retry_after, rate_limit_source,
            skipped, user_content,
        )

    def _finish(
        self,
        ctx: LogContext,
        model_id: str,
        anchor: OutputAnchor,
        buffer: ChunkBuffer,
        state: SessionState,
        decode: DecodeOutcome,
        error: Optional[StreamError],
        retry_after: Optional[int],
        rate_limit_source: str,
        skipped: int,
        user_content: Optional[str],
    ) -> SessionOutcome:
        written = buffer.total_written
        if written == 0:
            self._edit.call(restore_anchor, self._sink, anchor)
        if state is SessionState.RATE_LIMITED and retry_after is not None:
            if self._auto_retry:
                self.rate_limiter.start(
                    retry_after,
                    lambda: self._retry(user_content),
                    source=rate_limit_source,
                    ctx=ctx,
                )
            else:
                self._notifier.show_warning(
                    "Rate Limit", f"Rate limit exceeded. Retry after {retry_after} seconds."
                )
        normalized_log_event(
            self._logger,
            "session.end",
            ctx,
            phase="finalize",
            emitted=written > 0,
            chars=written,
            error_code=error.code.value if error is not None else None,
            level=logging.ERROR if error is not None else logging.INFO,
            state=state.value,
            decode=decode.value,
            skipped_frames=skipped,
            retry_after=retry_after,
            error=error.message if error is not None else None,
        )
        if error is not None:
            self._notifier.show_error(
                "Error",
                f"An error occurred while streaming the {model_id} response: {error.message}",
            )
        return SessionOutcome(
            state=state,
            total_written=written,
            start_offset=anchor.offset if written else None,
            decode=decode,
            error=error,
            retry_after_seconds=retry_after,
            skipped_frames=skipped,
        )

    def _retry(self, user_content: Optional[str]) -> None:
        # the countdown may end before the rate-limited run has released the guard
        self._idle.wait(RETRY_IDLE_WAIT_SECONDS)
        normalized_log_event(self._logger, "session.retry", None, phase="start")
        self.start(user_content)


__all__ = ["StreamSession"]
