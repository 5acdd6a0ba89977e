"""Export job log text to files."""

from __future__ import annotations

from enum import StrEnum
from typing import TYPE_CHECKING

from jobtail.ansi import strip_ansi

if TYPE_CHECKING:
    from collections.abc import Callable
    from pathlib import Path


class ExportFormat(StrEnum):
    """Supported export formats."""

    RAW = "raw"
    PLAIN = "plain"


def _export_raw(text: str) -> str:
    return text


def _export_plain(text: str) -> str:
    """Escape codes removed; timestamps and markers kept."""
    return strip_ansi(text)


_EXPORTERS: dict[ExportFormat, Callable[[str], str]] = {
    ExportFormat.RAW: _export_raw,
    ExportFormat.PLAIN: _export_plain,
}


def export_text(text: str, fmt: ExportFormat, output_path: Path) -> int:
    """Write log text in the given format. Returns the number of lines written."""
    body = _EXPORTERS[fmt](text)
    if body and not body.endswith("\n"):
        body += "\n"
    output_path.write_text(body, encoding="utf-8")
    return body.count("\n")
