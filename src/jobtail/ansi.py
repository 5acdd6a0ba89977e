"""Interpretation of SGR color/bold escape sequences embedded in log lines."""

from __future__ import annotations

import re
from typing import NamedTuple

# ESC-bracket form, or a bare bracket when the transport dropped the ESC byte.
_SGR_RE = re.compile(r"(?:\x1b\[|\[)((?:\d+;)*\d+)m")

COLOR_NAMES = ("black", "red", "green", "yellow", "blue", "magenta", "cyan", "white")

BOLD_CLASS = "ansi-bold"

_FOREGROUND: dict[int, str] = {30 + i: f"ansi-{name}" for i, name in enumerate(COLOR_NAMES)} | {
    90 + i: f"ansi-bright-{name}" for i, name in enumerate(COLOR_NAMES)
}

# 38/48 take "5;n" (256 colours) or "2;r;g;b" (truecolour); their operands are not codes.
_EXTENDED_COLOR = frozenset({38, 48})
_EXTENDED_OPERANDS: dict[int | None, int] = {5: 1, 2: 3}


class StyledSegment(NamedTuple):
    """A run of text and the style classes that apply to it."""

    text: str
    classes: tuple[str, ...] = ()

    @property
    def is_plain(self) -> bool:
        return not self.classes


def _classes(*, bold: bool, color: str | None) -> tuple[str, ...]:
    result: list[str] = []
    if bold:
        result.append(BOLD_CLASS)
    if color is not None:
        result.append(color)
    return tuple(result)


def render_segments(text: str) -> list[StyledSegment]:
    """Split a line into styled segments, consuming recognised escape sequences.

    Style state starts clean for every call and persists across sequences
    until a reset code. Unknown codes are skipped.
    """
    segments: list[StyledSegment] = []
    bold = False
    color: str | None = None
    pos = 0

    for match in _SGR_RE.finditer(text):
        if match.start() > pos:
            segments.append(StyledSegment(text[pos : match.start()], _classes(bold=bold, color=color)))
        codes = [int(part) for part in match.group(1).split(";")]
        i = 0
        while i < len(codes):
            code = codes[i]
            if code in _EXTENDED_COLOR:
                mode = codes[i + 1] if i + 1 < len(codes) else None
                i += 2 + _EXTENDED_OPERANDS.get(mode, 0)
                continue
            if code == 0:
                bold = False
                color = None
            elif code == 1:
                bold = True
            elif code in _FOREGROUND:
                color = _FOREGROUND[code]
            i += 1
        pos = match.end()

    if pos < len(text):
        segments.append(StyledSegment(text[pos:], _classes(bold=bold, color=color)))
    return segments


def strip_ansi(text: str) -> str:
    """Remove recognised escape sequences, keeping only the text."""
    return _SGR_RE.sub("", text)
