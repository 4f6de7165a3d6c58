"""TextDocument and MarkerRegistry edit tracking."""
from __future__ import annotations

import pytest

from inline_chat.base.interfaces import DocumentSink
from inline_chat.base.models import MarkerInfo
from inline_chat.document import MarkerRegistry, TextDocument

A = MarkerInfo(model_id="a", timestamp="10:00:00")
B = MarkerInfo(model_id="b", timestamp="11:00:00")


def test_document_satisfies_sink_protocol():
    assert isinstance(TextDocument(), DocumentSink)


def test_insert_returns_new_cursor_and_validates_offset():
    doc = TextDocument("ac")
    assert doc.insert(1, "b") == 2
    assert doc.text() == "abc"
    with pytest.raises(IndexError):
        doc.insert(10, "x")


def test_delete_clamps_range():
    doc = TextDocument("abcdef")
    doc.delete(4, 100)
    assert doc.text() == "abcd"
    doc.delete(3, 1)
    assert doc.text() == "abcd"


def test_selection():
    doc = TextDocument("hello world")
    assert doc.selected_text() is None
    doc.select(6, 11)
    assert doc.selected_text() == "world"
    doc.select(3, 3)
    assert doc.selected_text() is None
    doc.clear_selection()
    assert doc.selected_text() is None
    with pytest.raises(IndexError):
        doc.select(5, 50)


def test_marker_at_insert_point_stays():
    registry = MarkerRegistry()
    registry.add(5, A)
    registry.add(9, B)
    registry.on_insert(5, 3)

    assert registry.items() == [(5, A), (12, B)]


def test_delete_drops_markers_inside_range():
    registry = MarkerRegistry()
    registry.add(2, A)
    registry.add(5, B)
    registry.on_delete(3, 6)

    assert registry.items() == [(2, A)]


def test_delete_shifts_later_markers():
    registry = MarkerRegistry()
    registry.add(10, A)
    registry.on_delete(2, 4)

    assert registry.get(8) == A
    assert 10 not in registry


def test_add_replaces_marker_at_same_offset():
    registry = MarkerRegistry()
    assert registry.add(3, A) is None
    assert registry.add(3, B) == A
    assert len(registry) == 1
    assert registry.remove(3)
    assert not registry.remove(3)


def test_document_moves_markers_with_text():
    doc = TextDocument("0123456789")
    doc.add_marker(4, A)
    doc.insert(0, "xx")
    assert doc.marker_at(6) == A
    doc.delete(0, 2)
    assert doc.marker_at(4) == A
    assert doc.marker_tooltips() == ["4: a Response (10:00:00)"]


def test_file_round_trip(tmp_path):
    path = tmp_path / "notes.txt"
    path.write_text("hi", encoding="utf-8")
    doc = TextDocument.from_file(path)
    doc.insert(2, " there")
    doc.save()

    assert path.read_text(encoding="utf-8") == "hi there"
    assert TextDocument.from_file(tmp_path / "new.txt").text() == ""
    with pytest.raises(ValueError):
        TextDocument("x").save()
