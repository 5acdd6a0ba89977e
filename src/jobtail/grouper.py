"""Fold classified lines into collapsible groups and flatten them for rendering."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from jobtail.models import LineType, LogGroup, LogLine

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

UNNAMED_GROUP = "Unknown Group"

type GroupKey = tuple[int, str]


def group_lines(lines: Iterable[LogLine]) -> list[LogGroup]:
    """Pair group-start/group-end markers into flat groups.

    Groups never nest: a group-start inside an open group closes the open one
    first. Consecutive lines outside any group become one standalone group with
    an empty name. A group-end with nothing open is ignored and a group still
    open at the end of the input is emitted as is.
    """
    groups: list[LogGroup] = []
    current: LogGroup | None = None
    standalone: LogGroup | None = None

    for line in lines:
        if line.type == LineType.GROUP_START:
            if current is not None:
                groups.append(current)
            standalone = None
            current = LogGroup(name=line.group_name or UNNAMED_GROUP, level=line.level, expanded=False)
        elif line.type == LineType.GROUP_END:
            if current is not None:
                groups.append(current)
                current = None
        elif current is not None:
            current.lines.append(line)
        else:
            if standalone is None:
                standalone = LogGroup(name="", level=line.level, expanded=True)
                groups.append(standalone)
            standalone.lines.append(line)

    if current is not None:
        groups.append(current)
    return groups


class GroupExpansion:
    """Expansion state for named groups, kept apart from the rebuilt group list.

    Keys are (position, name) so the state survives regrouping while a stream
    grows: new text only appends groups or extends the trailing one.
    """

    def __init__(self) -> None:
        self._expanded: set[GroupKey] = set()

    @staticmethod
    def key(index: int, group: LogGroup) -> GroupKey:
        return (index, group.name)

    def is_expanded(self, index: int, group: LogGroup) -> bool:
        if group.is_standalone:
            return True
        return self.key(index, group) in self._expanded

    def toggle(self, index: int, group: LogGroup) -> bool:
        """Flip one group; returns the new expansion state."""
        if group.is_standalone:
            return True
        if self.is_expanded(index, group):
            self.collapse(index, group)
            return False
        self.expand(index, group)
        return True

    def expand(self, index: int, group: LogGroup) -> None:
        self._expanded.add(self.key(index, group))

    def collapse(self, index: int, group: LogGroup) -> None:
        self._expanded.discard(self.key(index, group))

    def expand_all(self, groups: Sequence[LogGroup]) -> None:
        self._expanded.update(self.key(i, g) for i, g in enumerate(groups) if not g.is_standalone)

    def collapse_all(self) -> None:
        self._expanded.clear()

    @property
    def expanded_count(self) -> int:
        return len(self._expanded)

    def apply(self, groups: Sequence[LogGroup]) -> list[LogGroup]:
        """Copies of the groups with their expanded flag set from this state."""
        return [g.model_copy(update={"expanded": self.is_expanded(i, g)}) for i, g in enumerate(groups)]


@dataclass(frozen=True, slots=True)
class GroupHeader:
    """Render item for a named group's header row."""

    group_index: int
    group: LogGroup
    expanded: bool


@dataclass(frozen=True, slots=True)
class LineItem:
    """Render item for one log line."""

    group_index: int
    line: LogLine


type RenderItem = GroupHeader | LineItem


def flatten(groups: Sequence[LogGroup], expansion: GroupExpansion) -> list[RenderItem]:
    """Interleave group headers and visible lines into one render list."""
    items: list[RenderItem] = []
    for index, group in enumerate(groups):
        if group.is_standalone:
            items.extend(LineItem(index, line) for line in group.lines)
            continue
        expanded = expansion.is_expanded(index, group)
        items.append(GroupHeader(index, group, expanded))
        if expanded:
            items.extend(LineItem(index, line) for line in group.lines)
    return items
