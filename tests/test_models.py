"""Tests for pydantic models."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from jobtail.models import AppConfig, ChunkPayload, LineType, LogChunk, LogGroup, LogLine, StreamState


class TestChunkPayload:
    def test_camel_case_aliases(self) -> None:
        payload = ChunkPayload.model_validate(
            {"content": "x\n", "totalLength": 2, "isComplete": True, "jobStatus": "completed"}
        )
        assert payload.total_length == 2
        assert payload.is_complete is True
        assert payload.job_status == "completed"

    def test_populate_by_name(self) -> None:
        payload = ChunkPayload(content="", total_length=5)
        assert payload.total_length == 5
        assert payload.is_complete is None

    def test_negative_length_rejected(self) -> None:
        with pytest.raises(ValidationError):
            LogChunk(total_length=-1)

    def test_to_chunk_drops_metadata(self) -> None:
        payload = ChunkPayload(content="a", total_length=1, job_status="queued", message="waiting")
        chunk = payload.to_chunk()
        assert type(chunk) is LogChunk
        assert chunk.total_length == 1


class TestStreamState:
    def test_empty_state(self) -> None:
        state = StreamState()
        assert state.offset == 0
        assert state.content == ""

    def test_offset_follows_chunk(self) -> None:
        state = StreamState(chunk=LogChunk(content="abc", total_length=3))
        assert state.offset == 3
        assert state.content == "abc"


class TestLogGroup:
    def test_standalone(self) -> None:
        assert LogGroup(name="").is_standalone
        assert not LogGroup(name="Build").is_standalone

    def test_lines_are_frozen(self) -> None:
        line = LogLine(content="x", type=LineType.REGULAR)
        with pytest.raises(ValidationError):
            line.content = "y"  # type: ignore[misc]


class TestAppConfig:
    def test_defaults(self) -> None:
        config = AppConfig()
        assert config.render_limit == 5000
        assert config.head_lines == 500
        assert config.tail_lines == 2000
        assert config.stall_threshold == 20

    def test_invalid_poll_interval(self) -> None:
        with pytest.raises(ValidationError):
            AppConfig(poll_interval=0)
