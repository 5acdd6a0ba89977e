"""Tests for group folding, expansion state and flattening."""

from __future__ import annotations

from jobtail.classifier import classify_text
from jobtail.grouper import UNNAMED_GROUP, GroupExpansion, GroupHeader, LineItem, flatten, group_lines
from jobtail.models import LogGroup


def _groups(text: str) -> list[LogGroup]:
    return group_lines(classify_text(text))


class TestGroupLines:
    def test_sample_groups(self, sample_text: str) -> None:
        groups = _groups(sample_text)
        assert [g.name for g in groups] == ["Run actions/checkout@v4", "", "Run make test", ""]
        assert [len(g.lines) for g in groups] == [2, 2, 3, 2]

    def test_named_groups_start_collapsed(self, sample_text: str) -> None:
        groups = _groups(sample_text)
        assert not groups[0].expanded
        assert groups[1].expanded
        assert groups[1].is_standalone

    def test_markers_not_in_group_lines(self) -> None:
        groups = _groups("##[group]A\nx\n##[endgroup]\n")
        assert len(groups) == 1
        assert [line.content for line in groups[0].lines] == ["x"]

    def test_open_inside_group_closes_previous(self) -> None:
        groups = _groups("##[group]A\na\n##[group]B\nb\n##[endgroup]\n")
        assert [g.name for g in groups] == ["A", "B"]
        assert [line.content for line in groups[0].lines] == ["a"]
        assert [line.content for line in groups[1].lines] == ["b"]

    def test_unclosed_group_emitted(self) -> None:
        groups = _groups("before\n##[group]A\na\n")
        assert [g.name for g in groups] == ["", "A"]
        assert [line.content for line in groups[1].lines] == ["a"]

    def test_stray_end_ignored(self) -> None:
        groups = _groups("x\n##[endgroup]\ny\n")
        assert len(groups) == 1
        assert groups[0].is_standalone
        assert [line.content for line in groups[0].lines] == ["x", "y"]

    def test_consecutive_standalone_lines_coalesce(self) -> None:
        groups = _groups("a\nb\nc\n")
        assert len(groups) == 1
        assert len(groups[0].lines) == 3

    def test_empty_title(self) -> None:
        groups = _groups("##[group]\nx\n##[endgroup]\n")
        assert groups[0].name == UNNAMED_GROUP

    def test_empty_group(self) -> None:
        groups = _groups("##[group]A\n##[endgroup]\n")
        assert len(groups) == 1
        assert groups[0].lines == []


class TestGroupExpansion:
    def test_toggle(self, sample_text: str) -> None:
        groups = _groups(sample_text)
        expansion = GroupExpansion()
        assert expansion.toggle(0, groups[0]) is True
        assert expansion.is_expanded(0, groups[0])
        assert expansion.toggle(0, groups[0]) is False
        assert not expansion.is_expanded(0, groups[0])

    def test_standalone_always_expanded(self, sample_text: str) -> None:
        groups = _groups(sample_text)
        expansion = GroupExpansion()
        assert expansion.is_expanded(1, groups[1])
        assert expansion.toggle(1, groups[1]) is True
        assert expansion.expanded_count == 0

    def test_state_survives_regrouping(self, sample_text: str) -> None:
        expansion = GroupExpansion()
        groups = _groups(sample_text)
        expansion.expand(2, groups[2])
        regrouped = _groups(sample_text + "more output\n")
        assert expansion.is_expanded(2, regrouped[2])

    def test_expand_and_collapse_all(self, sample_text: str) -> None:
        groups = _groups(sample_text)
        expansion = GroupExpansion()
        expansion.expand_all(groups)
        assert expansion.expanded_count == 2
        assert all(g.expanded for g in expansion.apply(groups))
        expansion.collapse_all()
        applied = expansion.apply(groups)
        assert [g.expanded for g in applied] == [False, True, False, True]

    def test_apply_does_not_mutate(self, sample_text: str) -> None:
        groups = _groups(sample_text)
        expansion = GroupExpansion()
        expansion.expand(0, groups[0])
        expansion.apply(groups)
        assert not groups[0].expanded


class TestFlatten:
    def test_collapsed(self, sample_text: str) -> None:
        items = flatten(_groups(sample_text), GroupExpansion())
        kinds = [type(item) for item in items]
        assert kinds == [GroupHeader, LineItem, LineItem, GroupHeader, LineItem, LineItem]
        assert isinstance(items[0], GroupHeader)
        assert not items[0].expanded

    def test_expanded_group_lines_follow_header(self, sample_text: str) -> None:
        groups = _groups(sample_text)
        expansion = GroupExpansion()
        expansion.expand(2, groups[2])
        items = flatten(groups, expansion)
        assert len(items) == 9
        header = items[3]
        assert isinstance(header, GroupHeader)
        assert header.expanded
        assert all(isinstance(item, LineItem) and item.group_index == 2 for item in items[4:7])

    def test_empty(self) -> None:
        assert flatten([], GroupExpansion()) == []
