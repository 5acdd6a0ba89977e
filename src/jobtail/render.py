"""Rich text rendering of classified lines, ANSI segments and search highlights."""

from __future__ import annotations

from typing import TYPE_CHECKING

from rich.style import Style
from rich.text import Text

from jobtail.ansi import BOLD_CLASS, COLOR_NAMES, render_segments
from jobtail.grouper import GroupHeader
from jobtail.models import LineType
from jobtail.search import MATCH_CLASS, highlight_segments

if TYPE_CHECKING:
    from collections.abc import Sequence

    from jobtail.ansi import StyledSegment
    from jobtail.grouper import RenderItem
    from jobtail.models import LogLine

INDENT = "  "
EXPANDED_MARK = "▼"
COLLAPSED_MARK = "▶"

LINE_STYLES: dict[LineType, Style] = {
    LineType.ERROR: Style(color="#e06c75"),
    LineType.WARNING: Style(color="#e5c07b"),
    LineType.COMMAND: Style(color="#61afef", bold=True),
    LineType.GROUP_START: Style(color="#c678dd", bold=True),
    LineType.REGULAR: Style(),
}
HEADER_STYLE = Style(color="#c678dd", bold=True)
TIMESTAMP_STYLE = Style(dim=True)
MATCH_STYLE = Style(bgcolor="#6e5600", color="#ffffff")


def class_style(css_class: str) -> Style:
    """Rich style for one segment class."""
    if css_class == BOLD_CLASS:
        return Style(bold=True)
    if css_class == MATCH_CLASS:
        return MATCH_STYLE
    name = css_class.removeprefix("ansi-")
    if name.startswith("bright-") and name.removeprefix("bright-") in COLOR_NAMES:
        return Style(color=f"bright_{name.removeprefix('bright-')}")
    if name in COLOR_NAMES:
        return Style(color=name)
    return Style()


def segments_to_text(segments: Sequence[StyledSegment], base_style: Style | None = None) -> Text:
    """Build a Text from styled segments on top of a base style."""
    text = Text(style=base_style or Style())
    for segment in segments:
        style = Style.combine(class_style(c) for c in segment.classes) if segment.classes else None
        text.append(segment.text, style=style)
    return text


def format_timestamp(timestamp: str | None) -> str:
    """Runner timestamp as HH:MM:SS (empty when absent)."""
    if not timestamp or len(timestamp) < 19:  # noqa: PLR2004
        return ""
    return timestamp[11:19]


def line_to_text(line: LogLine, search: str | None = None, *, show_timestamps: bool = True) -> Text:
    """Render one log line: timestamp, indentation, then styled content."""
    text = Text()
    if show_timestamps:
        stamp = format_timestamp(line.timestamp)
        text.append(f"{stamp:<8} ", style=TIMESTAMP_STYLE)
    text.append(INDENT * line.level)
    segments = highlight_segments(render_segments(line.content), search)
    text.append_text(segments_to_text(segments, LINE_STYLES.get(line.type, Style())))
    return text


def header_to_text(item: GroupHeader, search: str | None = None, *, show_timestamps: bool = True) -> Text:
    """Render a group header row with its fold marker and line count."""
    text = Text()
    if show_timestamps:
        text.append(" " * 9)
    text.append(INDENT * item.group.level)
    mark = EXPANDED_MARK if item.expanded else COLLAPSED_MARK
    text.append(f"{mark} ", style=HEADER_STYLE)
    segments = highlight_segments(render_segments(item.group.name), search)
    text.append_text(segments_to_text(segments, HEADER_STYLE))
    text.append(f" ({len(item.group.lines)})", style=TIMESTAMP_STYLE)
    return text


def item_to_text(item: RenderItem, search: str | None = None, *, show_timestamps: bool = True) -> Text:
    if isinstance(item, GroupHeader):
        return header_to_text(item, search, show_timestamps=show_timestamps)
    return line_to_text(item.line, search, show_timestamps=show_timestamps)


def omitted_text(omitted: int, hint: str | None = "press o to show all") -> Text:
    """Placeholder row for the truncated middle of a long log."""
    label = f"… {omitted:,} lines omitted"
    if hint:
        label += f" ({hint})"
    return Text(label, style=Style(italic=True, dim=True))
