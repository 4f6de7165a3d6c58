"""Serialized execution contexts.

``SerialExecutor`` confines work to one dedicated worker thread. The session
routes every sink mutation through one instance (the edit context) and the
rate limiter dispatches its retry continuation through another (the UI
context). ``ImmediateExecutor`` runs work inline and is used where the caller
already owns the document, such as the command-line front end and tests.
"""

from __future__ import annotations

import threading
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Any, Callable, Optional, TypeVar

T = TypeVar("T")


class SerialExecutor:
    """Single worker thread; calls submitted from that thread run inline."""

    def __init__(self, name: str = "inline-chat-serial") -> None:
        self._name = name
        self._pool = ThreadPoolExecutor(max_workers=1, thread_name_prefix=name)
        self._thread_ident: Optional[int] = None
        self._pool.submit(self._capture_ident).result()

    def _capture_ident(self) -> None:
        self._thread_ident = threading.get_ident()

    def on_executor_thread(self) -> bool:
        return threading.get_ident() == self._thread_ident

    def submit(self, fn: Callable[..., T], *args: Any, **kwargs: Any) -> "Future[T]":
        """Schedule ``fn`` without waiting for it."""
        return self._pool.submit(fn, *args, **kwargs)

    def call(self, fn: Callable[..., T], *args: Any, **kwargs: Any) -> T:
        """Run ``fn`` on the worker and return its result (re-raising errors)."""
        if self.on_executor_thread():
            return fn(*args, **kwargs)
        return self._pool.submit(fn, *args, **kwargs).result()

    def drain(self, timeout: float | None = None) -> None:
        """Block until every task submitted before this call has run."""
        if self.on_executor_thread():
            return
        self._pool.submit(lambda: None).result(timeout=timeout)

    def shutdown(self, wait: bool = True) -> None:
        self._pool.shutdown(wait=wait)

    def __repr__(self) -> str:  # pragma: no cover - introspection aid
        return f"SerialExecutor(name={self._name!r})"


class ImmediateExecutor:
    """Executor-shaped object that runs every call on the caller's thread."""

    def submit(self, fn: Callable[..., T], *args: Any, **kwargs: Any) -> "Future[T]":
        future: "Future[T]" = Future()
        try:
            future.set_result(fn(*args, **kwargs))
        except BaseException as exc:  # noqa: BLE001 - delivered through the future
            future.set_exception(exc)
        return future

    def call(self, fn: Callable[..., T], *args: Any, **kwargs: Any) -> T:
        return fn(*args, **kwargs)

    def drain(self, timeout: float | None = None) -> None:
        return None

    def shutdown(self, wait: bool = True) -> None:
        return None


__all__ = ["SerialExecutor", "ImmediateExecutor"]
