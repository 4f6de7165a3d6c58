"""Streaming HTTP transport for chat completions.

``ChatTransport.open`` POSTs the request and yields the response line iterator
inside a context manager. Status handling happens before any line is read:

* 429 reads the body, computes the transport wait and raises ``RateLimitError``;
* any other non-2xx raises ``TransportError`` with status and body;
* network failures are re-raised as ``TransportError``.

The request is sent on a helper thread and the cancel hook is registered before
it goes out: cancelling while connecting or waiting for headers returns at once
and closes the response whenever it arrives; cancelling mid-stream closes the
response so a read blocked in ``iter_lines`` is torn down.
"""

from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import Iterator, Optional

import httpx

from ...config.defaults import CHAT_COMPLETIONS_PATH, DEFAULT_BASE_URL
from ..cancellation import CancellationToken
from ..errors import RateLimitError, TransportError
from ..http import get_httpx_client
from ..models import StreamRequest
from ..rate_limit.retry_after import transport_wait_seconds
from .request_builder import build_headers

NO_BODY = "No error details available"


def _read_body(response: httpx.Response) -> str:
    try:
        text = response.read().decode(response.encoding or "utf-8", errors="replace")
    except httpx.HTTPError:
        return NO_BODY
    return text or NO_BODY


class _PendingResponse:
    """``client.send(stream=True)`` running on a helper thread.

    ``abandon`` (the cancel hook) wakes the waiter immediately and closes the
    response, now or as soon as its headers arrive.
    """

    def __init__(self, client: httpx.Client, request: httpx.Request) -> None:
        self._lock = threading.Lock()
        self._wake = threading.Event()
        self._abandoned = False
        self._response: Optional[httpx.Response] = None
        self._error: Optional[Exception] = None
        self._thread = threading.Thread(
            target=self._send, args=(client, request), name="inline-chat-send", daemon=True
        )

    def start(self) -> "_PendingResponse":
        with self._lock:
            if self._abandoned:
                return self
        self._thread.start()
        return self

    def _send(self, client: httpx.Client, request: httpx.Request) -> None:
        try:
            response = client.send(request, stream=True)
        except Exception as exc:  # re-raised on the waiting thread
            self._error = exc
        else:
            with self._lock:
                self._response = response
                abandoned = self._abandoned
            if abandoned:
                response.close()
        finally:
            self._wake.set()

    def abandon(self) -> None:
        with self._lock:
            self._abandoned = True
            response = self._response
        self._wake.set()
        if response is not None:
            response.close()

    def result(self, token: CancellationToken) -> httpx.Response:
        self._wake.wait()
        token.raise_if_cancelled()
        if self._error is not None:
            raise self._error
        return self._response


class ChatTransport:
    """POST ``{base_url}/chat/completions`` and stream the response lines."""

    def __init__(self, base_url: str = DEFAULT_BASE_URL, *, client: Optional[httpx.Client] = None) -> None:
        self.base_url = base_url.rstrip("/")
        self._client = client

    @property
    def url(self) -> str:
        return f"{self.base_url}{CHAT_COMPLETIONS_PATH}"

    def _http(self) -> httpx.Client:
        return self._client if self._client is not None else get_httpx_client(self.base_url, purpose="chat.stream")

    @contextmanager
    def open(self, request: StreamRequest, api_key: str, token: CancellationToken) -> Iterator[Iterator[str]]:
        """Open the stream; yield an iterator of decoded text lines."""
        token.raise_if_cancelled()
        client = self._http()
        pending = _PendingResponse(
            client,
            client.build_request("POST", self.url, json=request.to_payload(), headers=build_headers(api_key)),
        )
        token.on_cancel(pending.abandon)
        try:
            response = pending.start().result(token)
            try:
                if response.status_code == 429:
                    body = _read_body(response)
                    raise RateLimitError(
                        message=f"rate limit exceeded: {body}",
                        model=request.model_id,
                        retry_after_seconds=transport_wait_seconds(body),
                        body=body,
                    )
                if not response.is_success:
                    raise TransportError.from_response(
                        response.status_code, _read_body(response), model=request.model_id
                    )
                yield response.iter_lines()
            finally:
                response.close()
        except (httpx.HTTPError, httpx.StreamError) as exc:
            if token.cancelled:
                token.raise_if_cancelled()
            raise TransportError(message=f"API request failed: {exc}", model=request.model_id, raw=exc) from exc


__all__ = ["ChatTransport"]
