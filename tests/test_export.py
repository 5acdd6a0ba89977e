"""Tests for exporting job log text."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from jobtail.export import ExportFormat, export_text

if TYPE_CHECKING:
    from pathlib import Path


class TestExportText:
    def test_raw_keeps_everything(self, tmp_path: Path, sample_text: str) -> None:
        output = tmp_path / "out.log"
        count = export_text(sample_text, ExportFormat.RAW, output)
        assert output.read_text() == sample_text
        assert count == 14

    def test_plain_strips_escapes(self, tmp_path: Path, sample_text: str) -> None:
        output = tmp_path / "out.txt"
        export_text(sample_text, ExportFormat.PLAIN, output)
        body = output.read_text()
        assert "\x1b[" not in body
        assert "FAIL pkg/b" in body
        assert "##[group]Run make test" in body

    def test_adds_trailing_newline(self, tmp_path: Path) -> None:
        output = tmp_path / "out.log"
        assert export_text("a\nb", ExportFormat.RAW, output) == 2
        assert output.read_text() == "a\nb\n"

    def test_empty(self, tmp_path: Path) -> None:
        output = tmp_path / "out.log"
        assert export_text("", ExportFormat.RAW, output) == 0
        assert output.read_text() == ""

    @pytest.mark.parametrize("fmt", list(ExportFormat))
    def test_every_format_exports(self, tmp_path: Path, fmt: ExportFormat) -> None:
        output = tmp_path / f"out.{fmt}"
        assert export_text("line\n", fmt, output) == 1
        assert output.read_text() == "line\n"
