"""Shared test fixtures."""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

import pytest

from jobtail.models import ChunkPayload
from jobtail.sources import FetchError

if TYPE_CHECKING:
    from collections.abc import Callable
    from pathlib import Path

SAMPLE_LINES = [
    "2025-01-01T00:00:00.0000000Z ##[group]Run actions/checkout@v4",
    "2025-01-01T00:00:00.1000000Z with:",
    "2025-01-01T00:00:00.2000000Z   fetch-depth: 1",
    "2025-01-01T00:00:00.3000000Z ##[endgroup]",
    "2025-01-01T00:00:01.0000000Z ##[command]/usr/bin/git version",
    "2025-01-01T00:00:01.1000000Z git version 2.43.0",
    "",
    "2025-01-01T00:00:02.0000000Z ##[group]Run make test",
    "2025-01-01T00:00:02.1000000Z \x1b[32mok\x1b[0m  pkg/a  0.01s",
    "2025-01-01T00:00:02.2000000Z \x1b[1;31mFAIL\x1b[0m pkg/b",
    "2025-01-01T00:00:02.3000000Z ::error file=pkg/b/b_test.go,line=12,col=3::TestB: expected 1, got 2",
    "2025-01-01T00:00:02.4000000Z ##[endgroup]",
    "2025-01-01T00:00:03.0000000Z ::warning::Node 16 is deprecated",
    "2025-01-01T00:00:03.1000000Z Process completed with exit code 1.",
]

SAMPLE_TEXT = "\n".join(SAMPLE_LINES) + "\n"


@pytest.fixture
def sample_text() -> str:
    return SAMPLE_TEXT


@pytest.fixture
def sample_log_file(tmp_path: Path) -> Path:
    """Create a temporary job log file with sample content."""
    log_file = tmp_path / "job.log"
    log_file.write_text(SAMPLE_TEXT)
    return log_file


type Step = ChunkPayload | FetchError | Callable[[int], ChunkPayload]


class ScriptedSource:
    """Log source replaying a fixed list of responses and recording requested offsets.

    Each step is a payload, an error to raise, or a callable taking the offset.
    When ``gate`` is set, fetches wait for it before answering.
    """

    def __init__(self, steps: list[Step]) -> None:
        self._steps = list(steps)
        self.offsets: list[int] = []
        self.gate: asyncio.Event | None = None
        self.closed = False

    @property
    def description(self) -> str:
        return "scripted"

    async def fetch_chunk(self, offset: int) -> ChunkPayload:
        self.offsets.append(offset)
        if self.gate is not None:
            await self.gate.wait()
        step = self._steps.pop(0)
        if isinstance(step, FetchError):
            raise step
        if isinstance(step, ChunkPayload):
            return step
        return step(offset)

    async def aclose(self) -> None:
        self.closed = True


@pytest.fixture
def scripted_source() -> Callable[[list[Step]], ScriptedSource]:
    return ScriptedSource
