"""Output placement and rollback in the document sink.

The document is padded so it ends with four newlines (only the missing ones
are appended) and output starts two newlines before the end. The response
marker is placed at that offset, replacing any marker already there. When a
session ends without writing anything, ``restore_anchor`` removes the marker
and exactly the padding ``place_anchor`` added.

Both functions mutate the sink and must run on the serialized edit executor.
"""

from __future__ import annotations

from dataclasses import dataclass

from ...config.defaults import OUTPUT_OFFSET_FROM_END, OUTPUT_PADDING_NEWLINES
from ..interfaces import DocumentSink
from ..models import MarkerInfo


@dataclass(frozen=True)
class OutputAnchor:
    """Where output begins and which padding was added to get there."""

    offset: int
    padding_start: int
    padding: int


def _trailing_newlines(text: str) -> int:
    return len(text) - len(text.rstrip("\n"))


def place_anchor(sink: DocumentSink, info: MarkerInfo) -> OutputAnchor:
    existing = _trailing_newlines(sink.text())
    missing = max(OUTPUT_PADDING_NEWLINES - existing, 0)
    padding_start = sink.length()
    if missing:
        sink.insert(padding_start, "\n" * missing)
    offset = sink.length() - OUTPUT_OFFSET_FROM_END
    sink.add_marker(offset, info)
    return OutputAnchor(offset=offset, padding_start=padding_start, padding=missing)


def restore_anchor(sink: DocumentSink, anchor: OutputAnchor) -> None:
    sink.remove_marker(anchor.offset)
    if not anchor.padding:
        return
    end = anchor.padding_start + anchor.padding
    if end <= sink.length() and sink.text()[anchor.padding_start:end] == "\n" * anchor.padding:
        sink.delete(anchor.padding_start, end)


__all__ = ["OutputAnchor", "place_anchor", "restore_anchor"]
