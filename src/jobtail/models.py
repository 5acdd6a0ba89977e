"""Pydantic models for jobtail."""

from __future__ import annotations

from datetime import datetime  # noqa: TC003 - Pydantic needs this at runtime for model field resolution
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class JobStatus(StrEnum):
    """Status of a CI job as reported by the runner."""

    QUEUED = "queued"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


class LogChunk(BaseModel):
    """Text observed since a previous offset, plus the cumulative length."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    content: str = ""
    total_length: int = Field(default=0, ge=0)
    is_complete: bool | None = None


class JobStep(BaseModel):
    """A single step of a job."""

    number: int
    name: str
    status: str
    conclusion: str | None = None
    started_at: str | None = None
    completed_at: str | None = None


class ChunkPayload(LogChunk):
    """Offset fetch response: a log chunk with optional job metadata."""

    job_status: str | None = None
    job_conclusion: str | None = None
    job_steps: list[JobStep] = []
    message: str | None = None

    def to_chunk(self) -> LogChunk:
        """Drop the job metadata, keeping only the log chunk fields."""
        return LogChunk(content=self.content, total_length=self.total_length, is_complete=self.is_complete)


class StreamPhase(StrEnum):
    """Where a stream controller is in its polling cycle."""

    IDLE = "idle"
    FETCHING = "fetching"
    GROWING = "growing"
    STALLED = "stalled"
    COMPLETED = "completed"
    ERROR = "error"
    NOT_FOUND = "not_found"


class StreamState(BaseModel):
    """Polling state of one log stream. Owned by its StreamController."""

    chunk: LogChunk | None = None
    last_poll_timestamp: datetime | None = None
    cycles_without_growth: int = 0
    is_complete: bool = False

    @property
    def offset(self) -> int:
        """Offset to request on the next fetch."""
        return self.chunk.total_length if self.chunk is not None else 0

    @property
    def content(self) -> str:
        """Cumulative log text observed so far."""
        return self.chunk.content if self.chunk is not None else ""


class LineType(StrEnum):
    """Semantic category of a classified log line."""

    GROUP_START = "group-start"
    GROUP_END = "group-end"
    COMMAND = "command"
    ERROR = "error"
    WARNING = "warning"
    REGULAR = "regular"


class LogLine(BaseModel):
    """A single classified log line."""

    model_config = ConfigDict(frozen=True)

    timestamp: str | None = None
    content: str
    type: LineType
    group_name: str | None = None
    level: int = Field(default=0, ge=0)
    source_index: int | None = None


class LogGroup(BaseModel):
    """A collapsible run of lines. An empty name marks standalone lines."""

    name: str
    lines: list[LogLine] = []
    level: int = 0
    expanded: bool = False

    @property
    def is_standalone(self) -> bool:
        return not self.name


class AnnotationLevel(StrEnum):
    """Severity of a runner annotation."""

    FAILURE = "failure"
    WARNING = "warning"
    NOTICE = "notice"


class Annotation(BaseModel):
    """A structured diagnostic emitted by the runner inside the log text."""

    model_config = ConfigDict(frozen=True)

    path: str | None = None
    start_line: int | None = None
    end_line: int | None = None
    message: str
    annotation_level: AnnotationLevel
    title: str | None = None
    line: int
    column: int | None = None


class CachePolicy(BaseModel):
    """Caching rules for one kind of resource (TTLs in seconds)."""

    client_ttl: float
    server_ttl: float
    tags: list[str] = []
    revalidate_on_focus: bool = False


class AppConfig(BaseModel):
    """Application configuration persisted to disk."""

    theme: str = "textual-dark"
    poll_interval: float = Field(default=3.0, gt=0)
    stall_threshold: int = Field(default=20, ge=1)
    render_limit: int = Field(default=5000, ge=1)
    head_lines: int = Field(default=500, ge=0)
    tail_lines: int = Field(default=2000, ge=0)
    api_url: str = "https://api.github.com"
    proxy_url: str | None = None
