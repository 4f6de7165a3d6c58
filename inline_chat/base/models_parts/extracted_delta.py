"""
Tagged union describing what one decoded SSE frame contributed.

Each variant is a small frozen dataclass; ``ExtractedDelta`` is the union
alias consumers match on with ``isinstance``.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Union


@dataclass(frozen=True)
class Text:
    """A textual delta to append to the output (may be empty)."""

    text: str


@dataclass(frozen=True)
class Done:
    """The frame carried the stream terminator."""


@dataclass(frozen=True)
class RateLimited:
    """An in-band 429 signal.

    Attributes:
        retry_after_seconds: Wait computed from ``raw`` under the in-band policy.
        raw: Free-text error detail the wait was parsed from, if any.
    """

    retry_after_seconds: int
    raw: Optional[str] = None


@dataclass(frozen=True)
class UnknownFormat:
    """A JSON object with none of the recognized content keys."""

    available_keys: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class ParseFailure:
    """The payload was not a parseable JSON object of a known shape."""

    reason: str


ExtractedDelta = Union[Text, Done, RateLimited, UnknownFormat, ParseFailure]


__all__ = [
    "Text",
    "Done",
    "RateLimited",
    "UnknownFormat",
    "ParseFailure",
    "ExtractedDelta",
]
