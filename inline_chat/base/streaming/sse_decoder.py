"""Server-sent-event line decoder.

Turns a blocking line source into a lazy, finite sequence of data-frame
payloads. Lines without the ``data:`` marker (comments, ``event:`` lines,
keep-alives, blanks) are skipped. ``data: [DONE]`` ends the sequence without a
frame. Running out of lines is also a normal end, recorded separately so the
session can log that no explicit terminator was seen.

Cancellation is cooperative: ``is_cancelled`` is polled before every line read
and the sequence stops at once when it reports true.
"""

from __future__ import annotations

from typing import Callable, Iterable, Iterator, Optional

from ...config.defaults import SSE_DATA_PREFIX, SSE_DONE_TOKEN
from ..models import DecodeOutcome


def data_payload(line: str) -> Optional[str]:
    """Return the payload of a ``data:`` line, or ``None`` for any other line."""
    if not line.startswith(SSE_DATA_PREFIX):
        return None
    payload = line[len(SSE_DATA_PREFIX):]
    if payload.startswith(" "):
        payload = payload[1:]
    return payload.rstrip("\r")


def is_done(payload: str) -> bool:
    return payload.strip() == SSE_DONE_TOKEN


class SSEDecoder:
    """Iterable over data-frame payloads; ``outcome`` says how it ended.

    ``outcome`` is ``PENDING`` until iteration finishes, then one of ``DONE``,
    ``EXHAUSTED`` or ``CANCELLED``. ``skipped_lines`` counts non-data lines.
    """

    def __init__(self, lines: Iterable[str], is_cancelled: Callable[[], bool] = lambda: False) -> None:
        self._lines = lines
        self._is_cancelled = is_cancelled
        self.outcome = DecodeOutcome.PENDING
        self.skipped_lines = 0

    def __iter__(self) -> Iterator[str]:
        source = iter(self._lines)
        while True:
            if self._is_cancelled():
                self.outcome = DecodeOutcome.CANCELLED
                return
            try:
                line = next(source)
            except StopIteration:
                self.outcome = DecodeOutcome.EXHAUSTED
                return
            payload = data_payload(line)
            if payload is None:
                self.skipped_lines += 1
                continue
            if is_done(payload):
                self.outcome = DecodeOutcome.DONE
                return
            yield payload


__all__ = ["SSEDecoder", "data_payload", "is_done"]
