"""CLI action handlers.

Purpose
-------
Subcommand handlers for the ``inline-chat`` CLI, keeping the entrypoint
minimal. This module has no top-level side effects and is safe to import in
tests; every handler accepts an injected ``SettingsStore`` (and the stream
handler an injected transport factory) so tests never touch the network or
the user's config directory.

Exit codes
----------
- ``0`` success (completed stream, settings change applied)
- ``1`` failed stream
- ``2`` usage / configuration problem, or the session was busy
- ``3`` rate limited with ``--no-retry``
- ``130`` cancelled with Ctrl-C
"""

from __future__ import annotations

import argparse
import json
import sys
from dataclasses import replace
from typing import Any, Callable, Dict, Optional

from ...base.executors import ImmediateExecutor, SerialExecutor
from ...base.logging import LogContext, get_logger, normalized_log_event
from ...base.models import SessionOutcome, SessionState
from ...base.rate_limit import CountdownResult, RateLimiter
from ...base.streaming import ChatTransport, StreamController, StreamSession
from ...config.settings import SettingsStore
from ...document import TextDocument
from ..notifications import ConsoleNotifier
from .cli_utils import ConsoleProgress, OverrideSettings

_EXIT_CODES = {
    SessionState.COMPLETED: 0,
    SessionState.FAILED: 1,
    SessionState.RATE_LIMITED: 3,
    SessionState.CANCELLED: 130,
}

_POLL_SECONDS = 0.2


def _print_json(payload: Dict[str, Any], *, stream=None) -> None:
    print(json.dumps(payload, ensure_ascii=False), file=stream or sys.stdout)


def _wait(join: Callable[[float], bool], on_interrupt: Callable[[], None]) -> None:
    """Poll ``join`` until it reports completion; Ctrl-C calls ``on_interrupt`` once."""
    interrupted = False
    while True:
        try:
            if join(_POLL_SECONDS):
                return
        except KeyboardInterrupt:
            if interrupted:
                raise
            interrupted = True
            on_interrupt()


def run_until_settled(
    session: StreamSession,
    controller: StreamController,
    ui_executor,
    progress: ConsoleProgress,
) -> Optional[SessionOutcome]:
    """Wait for ``controller`` and for every automatic retry it leads to.

    A countdown ended by cancellation settles the run as CANCELLED.
    """
    interrupted = []

    def interrupt() -> None:
        interrupted.append(True)
        progress.cancel()
        session.cancel("interrupted")

    def settled(outcome: SessionOutcome) -> SessionOutcome:
        if interrupted or session.rate_limiter.last_result is CountdownResult.CANCELLED:
            return replace(outcome, state=SessionState.CANCELLED)
        return outcome

    while True:
        _wait(controller.join, interrupt)
        outcome = controller.outcome
        if outcome is None or outcome.state is not SessionState.RATE_LIMITED:
            return outcome
        if not session.rate_limiter.active and session.latest_controller is controller:
            return settled(outcome)
        _wait(session.rate_limiter.join, interrupt)
        ui_executor.drain()
        nxt = session.latest_controller
        if nxt is None or nxt is controller:
            return settled(outcome)
        progress.reset()
        controller = nxt


def session_model(store: SettingsStore, override: Optional[str]) -> Optional[str]:
    return override or store.snapshot().model_id or None


def handle_stream(
    args: argparse.Namespace,
    *,
    store: Optional[SettingsStore] = None,
    transport_factory: Optional[Callable[[str], ChatTransport]] = None,
    notifier=None,
) -> int:
    """Execute the ``stream`` subcommand.

    Loads ``args.file`` into a ``TextDocument``, streams the response to the
    selection (or whole file) into it, and saves the file when anything was
    written. A JSON summary is printed to stdout.
    """
    store = store or SettingsStore.load()
    doc = TextDocument.from_file(args.file)
    original = doc.text()
    if args.selection is not None:
        try:
            doc.select(*args.selection)
        except IndexError as exc:
            _print_json({"error": str(exc)}, stream=sys.stderr)
            return 2

    progress = ConsoleProgress()
    ui_executor = SerialExecutor("inline-chat-ui")
    limiter = RateLimiter(ui_executor=ui_executor, progress_factory=lambda title: progress)
    session = StreamSession(
        doc,
        OverrideSettings(store, args.model),
        notifier=notifier or ConsoleNotifier(),
        rate_limiter=limiter,
        edit_executor=ImmediateExecutor(),
        transport_factory=transport_factory,
        progress_factory=lambda title: progress,
        auto_retry=not args.no_retry,
    )
    logger = get_logger("inline_chat.cli")
    ctx = LogContext(model=session_model(store, args.model))
    normalized_log_event(logger, "cli.start", ctx, phase="start", file=str(args.file))
    try:
        controller = session.start()
        if controller is None:
            _print_json({"error": "a session is already running"}, stream=sys.stderr)
            return 2
        outcome = run_until_settled(session, controller, ui_executor, progress)
    finally:
        ui_executor.shutdown(wait=False)

    if outcome is None:
        return 2
    if doc.text() != original:
        doc.save()
    summary = {
        "state": outcome.state.value,
        "chars": outcome.total_written,
        "file": str(args.file),
        "decode": outcome.decode.value,
        "skipped_frames": outcome.skipped_frames,
    }
    if outcome.retry_after_seconds is not None:
        summary["retry_after_seconds"] = outcome.retry_after_seconds
    if outcome.error is not None:
        summary["error"] = outcome.error.message
        summary["error_code"] = outcome.error.code.value
    _print_json(summary)
    normalized_log_event(
        logger, "cli.finalize", ctx, phase="finalize", emitted=outcome.total_written > 0,
        chars=outcome.total_written, state=outcome.state.value,
    )
    if outcome.error is not None and outcome.error.code.value == "config":
        return 2
    return _EXIT_CODES.get(outcome.state, 1)


def handle_models(args: argparse.Namespace, *, store: Optional[SettingsStore] = None) -> int:
    """Execute ``models list|add|remove|use``."""
    store = store or SettingsStore.load()
    cmd = getattr(args, "models_cmd", None) or "list"
    try:
        if cmd == "add":
            store.add_model(args.model)
        elif cmd == "remove":
            store.remove_model(args.model)
        elif cmd == "use":
            store.select_model(args.model)
    except KeyError:
        _print_json({"error": f"unknown model '{args.model}'"}, stream=sys.stderr)
        return 2
    except ValueError as exc:
        _print_json({"error": str(exc)}, stream=sys.stderr)
        return 2
    current = store.snapshot()
    _print_json({"selected": current.model_id, "models": current.available_models})
    return 0


def handle_config(args: argparse.Namespace, *, store: Optional[SettingsStore] = None) -> int:
    """Execute ``config show|set``."""
    store = store or SettingsStore.load()
    if getattr(args, "config_cmd", None) == "set":
        if args.key == "model_id":
            store.select_model(args.value)
        else:
            store.update(**{args.key: args.value})
    payload = store.snapshot().masked()
    if store.path is not None:
        payload["path"] = str(store.path)
    _print_json(payload)
    return 0


__all__ = ["handle_stream", "handle_models", "handle_config", "run_until_settled"]
