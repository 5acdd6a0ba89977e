"""Offset-based polling of a growing job log."""

from __future__ import annotations

import asyncio
import logging
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from jobtail.models import ChunkPayload, JobStatus, LogChunk, StreamPhase, StreamState
from jobtail.sources import FetchError, LogNotFoundError

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Callable

    from jobtail.sources import LogSource

logger = logging.getLogger(__name__)

DEFAULT_POLL_INTERVAL = 3.0
DEFAULT_STALL_THRESHOLD = 20


def merge_chunk(prev: LogChunk | None, nxt: LogChunk) -> LogChunk:
    """Append a newly fetched chunk onto the cumulative one.

    A chunk that does not grow the total length leaves the cumulative chunk as is
    apart from its completion flag.
    """
    if prev is None:
        return nxt.model_copy()
    if nxt.total_length <= prev.total_length:
        return prev.model_copy(update={"is_complete": nxt.is_complete})
    return LogChunk(
        content=prev.content + nxt.content,
        total_length=nxt.total_length,
        is_complete=nxt.is_complete,
    )


class StreamController:
    """Drives the polling protocol for one log stream and owns its StreamState.

    At most one fetch is in flight; a poll requested meanwhile is dropped.
    Offsets always equal the last merged total length, so bytes are never
    fetched twice. Renderers only read ``state``.
    """

    def __init__(
        self,
        source: LogSource,
        *,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        stall_threshold: int = DEFAULT_STALL_THRESHOLD,
        job_status: str | None = None,
        job_conclusion: str | None = None,
        on_update: Callable[[StreamController], None] | None = None,
    ) -> None:
        self._source = source
        self.poll_interval = poll_interval
        self.stall_threshold = stall_threshold
        self.job_status = job_status
        self.job_conclusion = job_conclusion
        self._on_update = on_update
        self._state = StreamState()
        self._generation = 0
        self._in_flight = False
        self.streaming = False
        self.phase = StreamPhase.IDLE
        self.message: str | None = None
        self.last_error: FetchError | None = None
        self.last_offset: int | None = None

    @property
    def state(self) -> StreamState:
        return self._state

    @property
    def source(self) -> LogSource:
        return self._source

    @property
    def in_flight(self) -> bool:
        return self._in_flight

    @property
    def is_completed(self) -> bool:
        return self.phase == StreamPhase.COMPLETED

    @property
    def job_active(self) -> bool:
        """Whether the job may still produce output (unknown status counts as active)."""
        return self.job_status is None or self.job_status in {JobStatus.QUEUED, JobStatus.IN_PROGRESS}

    def start(self) -> None:
        """Enable streaming; ticks from ``follow`` or manual ``poll`` calls fetch again."""
        if self.is_completed:
            return
        self.streaming = True
        logger.info("streaming started for %s", self._source.description)

    def stop(self) -> None:
        """Disable streaming. A fetch still in flight will be discarded."""
        self.streaming = False
        self._generation += 1
        self._in_flight = False
        if not self.is_completed:
            self.phase = StreamPhase.IDLE
        logger.info("streaming stopped for %s", self._source.description)

    def reset(self) -> None:
        """Drop all merged content; the next fetch starts from offset 0."""
        self._generation += 1
        self._in_flight = False
        self._state = StreamState()
        self.phase = StreamPhase.IDLE
        self.message = None
        self.last_error = None

    async def poll(self) -> bool:
        """Run one fetch-and-merge tick. Returns False if the tick was dropped."""
        if self._in_flight:
            logger.debug("poll dropped: fetch already in flight for %s", self._source.description)
            return False

        generation = self._generation
        offset = self._state.offset
        self._in_flight = True
        self.phase = StreamPhase.FETCHING
        self.last_offset = offset
        try:
            payload = await self._source.fetch_chunk(offset)
        except LogNotFoundError as e:
            if generation != self._generation:
                return False
            self._apply_not_found(e)
        except FetchError as e:
            if generation != self._generation:
                return False
            self._apply_error(e)
        else:
            if generation != self._generation:
                logger.debug("discarding fetch result for %s after stop/reset", self._source.description)
                return False
            self._apply(payload)
        finally:
            if generation == self._generation:
                self._in_flight = False

        if self._on_update is not None:
            self._on_update(self)
        return True

    async def follow(self) -> AsyncIterator[StreamState]:
        """Poll every ``poll_interval`` seconds while streaming, yielding after each tick."""
        self.start()
        while self.streaming:
            if await self.poll():
                yield self._state
            if not self.streaming:
                break
            await asyncio.sleep(self.poll_interval)

    def _touch(self, **update: object) -> None:
        self._state = self._state.model_copy(update={"last_poll_timestamp": datetime.now(tz=UTC), **update})

    def _apply(self, payload: ChunkPayload) -> None:
        self.last_error = None
        if payload.job_status:
            self.job_status = payload.job_status
            self.job_conclusion = payload.job_conclusion
        self.message = payload.message

        prev = self._state.chunk
        if prev is not None and payload.total_length < prev.total_length:
            logger.warning(
                "log length went from %d to %d for %s; reloading from the start",
                prev.total_length,
                payload.total_length,
                self._source.description,
            )
            self._state = StreamState(last_poll_timestamp=datetime.now(tz=UTC))
            self.phase = StreamPhase.ERROR
            self.message = "Log source reset; reloading from the start"
            return

        grew = prev is None or payload.total_length > prev.total_length
        chunk = merge_chunk(prev, payload.to_chunk())
        cycles = 0 if grew else self._state.cycles_without_growth + 1
        self._touch(chunk=chunk, cycles_without_growth=cycles, is_complete=bool(payload.is_complete))
        self.phase = StreamPhase.GROWING if grew else StreamPhase.STALLED

        if self._should_finalize():
            self.phase = StreamPhase.COMPLETED
            self.streaming = False
            logger.info("stream completed for %s at %d chars", self._source.description, chunk.total_length)
        elif cycles > self.stall_threshold and not payload.message:
            self.message = f"No new output for {cycles} polls"

    def _should_finalize(self) -> bool:
        if not self._state.is_complete:
            return False
        if self.job_status == JobStatus.COMPLETED:
            return True
        return self.job_status is None and self._state.cycles_without_growth > self.stall_threshold

    def _apply_not_found(self, error: LogNotFoundError) -> None:
        self.last_error = None
        self.message = error.message
        self.phase = StreamPhase.NOT_FOUND
        self._touch(cycles_without_growth=self._state.cycles_without_growth + 1)

    def _apply_error(self, error: FetchError) -> None:
        logger.warning("fetch failed for %s: %s", self._source.description, error)
        self.last_error = error
        self.phase = StreamPhase.ERROR

    async def aclose(self) -> None:
        self.stop()
        await self._source.aclose()
