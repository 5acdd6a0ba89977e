"""Search term highlighting over styled segments."""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

from jobtail.ansi import StyledSegment, strip_ansi
from jobtail.grouper import GroupHeader

if TYPE_CHECKING:
    from collections.abc import Sequence

    from jobtail.grouper import RenderItem

MATCH_CLASS = "search-match"


def compile_term(term: str | None) -> re.Pattern[str] | None:
    """Case-insensitive pattern for a literal term, or None for an empty term."""
    if not term:
        return None
    return re.compile(re.escape(term), re.IGNORECASE)


def highlight_segments(segments: Sequence[StyledSegment], term: str | None) -> list[StyledSegment]:
    """Mark case-insensitive matches of term inside each segment.

    A match inside a styled segment keeps that segment's classes and gains the
    match class. Matches never span segment boundaries.
    """
    pattern = compile_term(term)
    if pattern is None:
        return list(segments)

    result: list[StyledSegment] = []
    for segment in segments:
        pos = 0
        for match in pattern.finditer(segment.text):
            if match.start() > pos:
                result.append(StyledSegment(segment.text[pos : match.start()], segment.classes))
            result.append(StyledSegment(match.group(0), (*segment.classes, MATCH_CLASS)))
            pos = match.end()
        if pos == 0:
            result.append(segment)
        elif pos < len(segment.text):
            result.append(StyledSegment(segment.text[pos:], segment.classes))
    return result


def item_text(item: RenderItem) -> str:
    """Searchable text of a render item (escape codes removed)."""
    if isinstance(item, GroupHeader):
        return item.group.name
    return strip_ansi(item.line.content)


def find_line_matches(items: Sequence[RenderItem], term: str | None) -> list[int]:
    """Indices of render items whose visible text contains the term."""
    pattern = compile_term(term)
    if pattern is None:
        return []
    return [i for i, item in enumerate(items) if pattern.search(item_text(item))]


def count_matches(items: Sequence[RenderItem], term: str | None) -> int:
    """Total number of term occurrences, group headers included."""
    pattern = compile_term(term)
    if pattern is None:
        return 0
    return sum(len(pattern.findall(item_text(item))) for item in items)
