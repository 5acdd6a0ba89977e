"""Tests for the log document snapshot."""

from __future__ import annotations

from jobtail.document import LogDocument
from jobtail.grouper import GroupExpansion, LineItem


class TestLogDocument:
    def test_from_text(self, sample_text: str) -> None:
        document = LogDocument.from_text(sample_text)
        assert len(document.lines) == 13
        assert len(document.groups) == 4
        assert len(document.annotations) == 2
        assert document.raw_line_count == 15

    def test_empty(self) -> None:
        document = LogDocument.from_text("")
        assert document.lines == []
        assert document.groups == []
        assert document.raw_line_count == 0

    def test_locate_source_line(self, sample_text: str) -> None:
        document = LogDocument.from_text(sample_text)
        located = document.locate_source_line(10)
        assert located is not None
        group_index, line = located
        assert group_index == 2
        assert line.content.startswith("::error")

    def test_locate_marker_resolves_to_next_line(self, sample_text: str) -> None:
        document = LogDocument.from_text(sample_text)
        located = document.locate_source_line(6)
        assert located is not None
        assert located[1].source_index == 8

    def test_locate_past_end(self, sample_text: str) -> None:
        assert LogDocument.from_text(sample_text).locate_source_line(100) is None

    def test_reveal_expands_group(self, sample_text: str) -> None:
        document = LogDocument.from_text(sample_text)
        expansion = GroupExpansion()
        index = document.reveal(10, expansion)
        assert index is not None
        assert expansion.is_expanded(2, document.groups[2])
        item = document.flatten(expansion)[index]
        assert isinstance(item, LineItem)
        assert item.line.source_index == 10

    def test_reveal_standalone_line(self, sample_text: str) -> None:
        document = LogDocument.from_text(sample_text)
        expansion = GroupExpansion()
        index = document.reveal(13, expansion)
        assert index is not None
        assert expansion.expanded_count == 0
        item = document.flatten(expansion)[index]
        assert isinstance(item, LineItem)
        assert item.line.content.startswith("Process completed")
