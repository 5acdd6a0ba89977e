"""End-to-end: chunks through the controller into a grouped, windowed document."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import pytest

from jobtail.document import LogDocument
from jobtail.grouper import GroupExpansion, GroupHeader, LineItem
from jobtail.models import ChunkPayload, LineType
from jobtail.stream import StreamController
from jobtail.truncation import TruncationWindow

ScriptedFactory = Callable[[list[Any]], Any]

FIRST = (
    "2025-01-01T00:00:00.000Z ##[group]Setup\n"
    "2025-01-01T00:00:00.100Z step one\n"
    "2025-01-01T00:00:00.200Z ##[endgroup]\n"
)
SECOND = "2025-01-01T00:00:00.300Z done\n"


class TestPipeline:
    @pytest.mark.asyncio
    async def test_two_chunk_scenario(self, scripted_source: ScriptedFactory) -> None:
        source = scripted_source(
            [
                ChunkPayload(content=FIRST, total_length=120),
                ChunkPayload(content=SECOND, total_length=150),
            ]
        )
        controller = StreamController(source)
        await controller.poll()
        await controller.poll()
        assert source.offsets == [0, 120]
        assert controller.state.offset == 150

        document = LogDocument.from_text(controller.state.content)
        assert len(document.groups) == 2
        setup, standalone = document.groups
        assert setup.name == "Setup"
        assert [(line.content, line.level) for line in setup.lines] == [("step one", 1)]
        assert standalone.is_standalone
        assert [(line.content, line.level) for line in standalone.lines] == [("done", 0)]
        assert standalone.lines[0].type == LineType.REGULAR

        items = document.flatten(GroupExpansion())
        window_slice = TruncationWindow().slice(len(items))
        assert not window_slice.truncated
        assert window_slice.omitted == 0
        assert isinstance(items[0], GroupHeader)
        assert isinstance(items[1], LineItem)

    @pytest.mark.asyncio
    async def test_long_log_truncated_and_focused(self, scripted_source: ScriptedFactory) -> None:
        text = "".join(f"line {i}\n" for i in range(100))
        text += "::error file=x.py,line=1::late failure\n"
        text += "".join(f"line {i}\n" for i in range(100, 120))
        source = scripted_source([ChunkPayload(content=text, total_length=len(text))])
        controller = StreamController(source)
        await controller.poll()

        document = LogDocument.from_text(controller.state.content)
        expansion = GroupExpansion()
        window = TruncationWindow(limit=50, head=10, tail=10)
        items = document.flatten(expansion)
        assert window.slice(len(items)).omitted == len(items) - 20

        annotation = document.annotations[0]
        assert annotation.line == 100
        index = document.reveal(annotation.line, expansion)
        assert index == 100
        assert window.focus(index, len(items)) is True
        head, tail = window.slice(len(items)).take(items)
        assert len(head) == len(items)
        assert tail == []
