"""Tests for ANSI escape interpretation."""

from __future__ import annotations

import pytest

from jobtail.ansi import BOLD_CLASS, StyledSegment, render_segments, strip_ansi


class TestRenderSegments:
    def test_plain_text(self) -> None:
        assert render_segments("hello") == [StyledSegment("hello")]

    def test_empty(self) -> None:
        assert render_segments("") == []

    def test_color_and_reset(self) -> None:
        segments = render_segments("\x1b[31mred\x1b[0m plain")
        assert segments == [StyledSegment("red", ("ansi-red",)), StyledSegment(" plain")]

    def test_bare_bracket_form(self) -> None:
        segments = render_segments("[32mgreen[0m")
        assert segments == [StyledSegment("green", ("ansi-green",))]

    def test_bold_and_color_combined(self) -> None:
        segments = render_segments("\x1b[1;31mFAIL\x1b[0m")
        assert segments == [StyledSegment("FAIL", (BOLD_CLASS, "ansi-red"))]

    def test_state_persists_across_sequences(self) -> None:
        segments = render_segments("\x1b[1mbold \x1b[34mblue")
        assert segments == [
            StyledSegment("bold ", (BOLD_CLASS,)),
            StyledSegment("blue", (BOLD_CLASS, "ansi-blue")),
        ]

    def test_bright_colors(self) -> None:
        segments = render_segments("\x1b[93mhi")
        assert segments == [StyledSegment("hi", ("ansi-bright-yellow",))]

    def test_unknown_codes_ignored(self) -> None:
        segments = render_segments("\x1b[4;38mtext")
        assert segments == [StyledSegment("text")]

    def test_extended_color_operands_ignored(self) -> None:
        assert render_segments("\x1b[38;5;31mtext\x1b[0m") == [StyledSegment("text")]
        assert render_segments("\x1b[38;2;1;32;200mtext") == [StyledSegment("text")]
        assert render_segments("\x1b[48;5;1;31mtext") == [StyledSegment("text", ("ansi-red",))]

    def test_state_does_not_carry_between_calls(self) -> None:
        render_segments("\x1b[31munterminated")
        assert render_segments("next") == [StyledSegment("next")]

    def test_is_plain(self) -> None:
        assert StyledSegment("x").is_plain
        assert not StyledSegment("x", ("ansi-red",)).is_plain

    @pytest.mark.parametrize(
        "text",
        [
            "\x1b[32mok\x1b[0m  pkg/a",
            "[1m[31mboth[0m",
            "no escapes [here] at all",
            "\x1b[",
            "[m[;m[31",
            "\x1b[0m\x1b[0m",
        ],
    )
    def test_segments_reconstruct_stripped_text(self, text: str) -> None:
        assert "".join(s.text for s in render_segments(text)) == strip_ansi(text)


class TestStripAnsi:
    def test_strip(self) -> None:
        assert strip_ansi("\x1b[1;31mFAIL\x1b[0m pkg/b") == "FAIL pkg/b"

    def test_leaves_other_brackets(self) -> None:
        assert strip_ansi("[INFO] done") == "[INFO] done"
