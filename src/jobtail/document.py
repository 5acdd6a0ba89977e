"""Classified, grouped and annotated view over one job's cumulative log text."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from jobtail.annotations import parse_annotations
from jobtail.classifier import classify_text
from jobtail.grouper import GroupHeader, LineItem, flatten, group_lines

if TYPE_CHECKING:
    from jobtail.grouper import GroupExpansion, RenderItem
    from jobtail.models import Annotation, LogGroup, LogLine


@dataclass(slots=True)
class LogDocument:
    """Everything derived from one snapshot of the log text.

    Rebuilt whenever new text arrives. Line classification and annotation
    extraction run independently over the same text.
    """

    text: str = ""
    lines: list[LogLine] = field(default_factory=list)
    groups: list[LogGroup] = field(default_factory=list)
    annotations: list[Annotation] = field(default_factory=list)

    @classmethod
    def from_text(cls, text: str) -> LogDocument:
        lines = classify_text(text)
        return cls(text=text, lines=lines, groups=group_lines(lines), annotations=parse_annotations(text))

    @property
    def raw_line_count(self) -> int:
        return len(self.text.split("\n")) if self.text else 0

    def flatten(self, expansion: GroupExpansion) -> list[RenderItem]:
        return flatten(self.groups, expansion)

    def locate_source_line(self, source_index: int) -> tuple[int, LogLine] | None:
        """Group position and line for a raw line index.

        Blank lines and group markers have no rendered line of their own; they
        resolve to the nearest following line.
        """
        for group_index, group in enumerate(self.groups):
            for line in group.lines:
                if line.source_index is not None and line.source_index >= source_index:
                    return group_index, line
        return None

    def reveal(self, source_index: int, expansion: GroupExpansion) -> int | None:
        """Expand the group holding a raw line and return its flattened index."""
        located = self.locate_source_line(source_index)
        if located is None:
            return None
        group_index, line = located
        group = self.groups[group_index]
        if not group.is_standalone:
            expansion.expand(group_index, group)
        for index, item in enumerate(self.flatten(expansion)):
            if isinstance(item, LineItem) and item.line is line:
                return index
            if isinstance(item, GroupHeader) and item.group_index > group_index:
                break
        return None
