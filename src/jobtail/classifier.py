"""Line classification for CI runner logs."""

from __future__ import annotations

import re
from typing import NamedTuple

from jobtail.models import LineType, LogLine

GROUP_START_MARKER = "##[group]"
GROUP_END_MARKER = "##[endgroup]"
COMMAND_MARKERS = ("##[command]", "##[section]")

_TIMESTAMP_RE = re.compile(r"^(\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}(?:\.\d+)?Z)\s(.*)$", re.DOTALL)

_ERROR_WORDS = ("error", "failed")
_ERROR_GLYPHS = ("\u274c",)
_WARNING_WORDS = ("warn",)
_WARNING_GLYPHS = ("\u26a0",)


class ClassifyResult(NamedTuple):
    """Outcome of classifying one raw line: the line (None if dropped) and the next level."""

    line: LogLine | None
    level: int


def split_timestamp(raw: str) -> tuple[str | None, str]:
    """Split a leading ISO-8601 runner timestamp off a raw line."""
    match = _TIMESTAMP_RE.match(raw)
    if match is None:
        return None, raw
    return match.group(1), match.group(2)


def _detect_type(content: str) -> LineType:
    if content.startswith(COMMAND_MARKERS):
        return LineType.COMMAND
    lowered = content.lower()
    if any(word in lowered for word in _ERROR_WORDS) or any(g in content for g in _ERROR_GLYPHS):
        return LineType.ERROR
    if any(word in lowered for word in _WARNING_WORDS) or any(g in content for g in _WARNING_GLYPHS):
        return LineType.WARNING
    return LineType.REGULAR


def classify_line(raw: str, level: int, source_index: int | None = None) -> ClassifyResult:
    """Classify one raw line given the running group nesting level.

    Pure function: the same (raw, level) pair always yields the same result.
    Blank lines are dropped. Group markers adjust the level returned for the
    following line; the level never goes below zero.
    """
    level = max(0, level)
    if not raw.strip():
        return ClassifyResult(None, level)

    timestamp, content = split_timestamp(raw)

    if content.startswith(GROUP_START_MARKER):
        title = content[len(GROUP_START_MARKER) :].strip()
        line = LogLine(
            timestamp=timestamp,
            content=title,
            type=LineType.GROUP_START,
            group_name=title,
            level=level,
            source_index=source_index,
        )
        return ClassifyResult(line, level + 1)

    if content.startswith(GROUP_END_MARKER):
        level = max(0, level - 1)
        line = LogLine(timestamp=timestamp, content="", type=LineType.GROUP_END, level=level, source_index=source_index)
        return ClassifyResult(line, level)

    line = LogLine(
        timestamp=timestamp,
        content=content,
        type=_detect_type(content),
        level=level,
        source_index=source_index,
    )
    return ClassifyResult(line, level)


def classify_text(text: str) -> list[LogLine]:
    """Classify the whole cumulative text, threading the level line by line."""
    lines: list[LogLine] = []
    if not text:
        return lines
    level = 0
    for index, raw in enumerate(text.split("\n")):
        result = classify_line(raw.rstrip("\r"), level, source_index=index)
        level = result.level
        if result.line is not None:
            lines.append(result.line)
    return lines
