"""Offset fetch sources: where a stream's log chunks come from."""

from __future__ import annotations

import codecs
import logging
from typing import TYPE_CHECKING, Any, Protocol

import aiofiles
import httpx
from pydantic import ValidationError

from jobtail.cache import CACHE_POLICIES, ResponseCache, job_key, job_logs_key
from jobtail.models import ChunkPayload, JobStatus, JobStep

if TYPE_CHECKING:
    from pathlib import Path

logger = logging.getLogger(__name__)

_DEFAULT_TIMEOUT = 30.0
_NOT_FOUND_TYPE = "logs_not_found"


class FetchError(Exception):
    """A log fetch failed. status_code is None for transport failures."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code

    def __str__(self) -> str:
        if self.status_code is None:
            return self.message
        return f"{self.message} (HTTP {self.status_code})"


class LogNotFoundError(FetchError):
    """The log does not exist yet (job not started, or not uploaded)."""


class LogSource(Protocol):
    """Anything that can answer 'everything after offset N'."""

    @property
    def description(self) -> str: ...

    async def fetch_chunk(self, offset: int) -> ChunkPayload: ...

    async def aclose(self) -> None: ...


def _error_details(response: httpx.Response) -> tuple[str | None, str | None]:
    """(type, message) from an error body shaped {"error": {...}} or {"error": "..."}."""
    try:
        body = response.json()
    except ValueError:
        return None, None
    if not isinstance(body, dict):
        return None, None
    error = body.get("error")
    if isinstance(error, dict):
        return error.get("type"), error.get("message")
    if isinstance(error, str):
        return None, error
    return None, body.get("message")


def _slice(text: str, offset: int, *, complete: bool, job: dict[str, Any] | None = None) -> ChunkPayload:
    steps: list[JobStep] = []
    if job is not None:
        try:
            steps = [JobStep.model_validate(step) for step in job.get("steps") or []]
        except ValidationError:
            logger.debug("ignoring malformed job steps")
    return ChunkPayload(
        content=text[offset:],
        total_length=len(text),
        is_complete=complete,
        job_status=job.get("status") if job else None,
        job_conclusion=job.get("conclusion") if job else None,
        job_steps=steps,
    )


class ProxyLogSource:
    """Polls the web app's job log route, which slices the log at the offset server side."""

    def __init__(
        self,
        base_url: str,
        owner: str,
        repo: str,
        job_id: int,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._url = f"{base_url.rstrip('/')}/api/repos/{owner}/{repo}/actions/jobs/{job_id}"
        self._client = client or httpx.AsyncClient(timeout=_DEFAULT_TIMEOUT)
        self._owns_client = client is None
        self._job_id = job_id
        self._repo = f"{owner}/{repo}"

    @property
    def description(self) -> str:
        return f"{self._repo} job {self._job_id}"

    async def fetch_chunk(self, offset: int) -> ChunkPayload:
        try:
            response = await self._client.get(self._url, params={"offset": offset})
        except httpx.HTTPError as e:
            logger.warning("transport error fetching %s: %s", self._url, e)
            msg = f"Network error while fetching logs: {e}"
            raise FetchError(msg) from e

        if response.is_success:
            try:
                return ChunkPayload.model_validate(response.json())
            except (ValueError, ValidationError) as e:
                msg = "Malformed log response"
                raise FetchError(msg, response.status_code) from e

        error_type, message = _error_details(response)
        if response.status_code == httpx.codes.NOT_FOUND or error_type == _NOT_FOUND_TYPE:
            raise LogNotFoundError(message or "Logs not available yet", response.status_code)
        raise FetchError(message or "Failed to fetch logs", response.status_code)

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()


class GitHubLogSource:
    """Reads a job's log straight from the GitHub REST API and slices it locally.

    The API only serves whole logs, so every poll downloads the full text.
    Once the job is completed the text cannot change and is served from the cache.
    """

    def __init__(
        self,
        owner: str,
        repo: str,
        job_id: int,
        token: str | None = None,
        api_url: str = "https://api.github.com",
        client: httpx.AsyncClient | None = None,
        cache: ResponseCache | None = None,
    ) -> None:
        headers = {"Accept": "application/vnd.github+json", "X-GitHub-Api-Version": "2022-11-28"}
        if token:
            headers["Authorization"] = f"Bearer {token}"
        self._client = client or httpx.AsyncClient(timeout=_DEFAULT_TIMEOUT)
        self._owns_client = client is None
        self._headers = headers
        self._base = f"{api_url.rstrip('/')}/repos/{owner}/{repo}/actions/jobs/{job_id}"
        self._cache = cache if cache is not None else ResponseCache()
        self._logs_key = job_logs_key(owner, repo, job_id)
        self._job_key = job_key(owner, repo, job_id)
        self._job_id = job_id
        self._repo = f"{owner}/{repo}"

    @property
    def description(self) -> str:
        return f"{self._repo} job {self._job_id}"

    async def _get(self, url: str, etag: str | None = None) -> httpx.Response:
        headers = self._headers if etag is None else {**self._headers, "If-None-Match": etag}
        try:
            response = await self._client.get(url, headers=headers, follow_redirects=True)
        except httpx.HTTPError as e:
            logger.warning("transport error fetching %s: %s", url, e)
            msg = f"Network error while fetching logs: {e}"
            raise FetchError(msg) from e
        if response.status_code == httpx.codes.NOT_MODIFIED and etag is not None:
            return response
        if response.status_code == httpx.codes.NOT_FOUND:
            _, message = _error_details(response)
            raise LogNotFoundError(message or "Logs not available yet", response.status_code)
        if not response.is_success:
            _, message = _error_details(response)
            raise FetchError(message or "GitHub API request failed", response.status_code)
        return response

    async def fetch_job(self) -> dict[str, Any]:
        """Job metadata (status, conclusion, steps).

        Completed jobs are served from the cache. Running jobs are revalidated
        on every call with the stored ETag, so an unchanged job costs a 304.
        """
        cached = self._cache.get(self._job_key)
        if cached is not None and not cached.stale and cached.data.get("status") == JobStatus.COMPLETED:
            return cached.data
        etag = cached.etag if cached is not None else None
        response = await self._get(self._base, etag=etag)
        if response.status_code == httpx.codes.NOT_MODIFIED and cached is not None:
            logger.debug("job %s not modified", self._job_id)
            job = cached.data
        else:
            try:
                job = response.json()
            except ValueError as e:
                msg = "Malformed job response"
                raise FetchError(msg, response.status_code) from e
            if not isinstance(job, dict):
                msg = "Malformed job response"
                raise FetchError(msg, response.status_code)
        completed = job.get("status") == JobStatus.COMPLETED
        policy = CACHE_POLICIES["completed_job_logs" if completed else "running_job_logs"]
        self._cache.set(self._job_key, job, policy, etag=response.headers.get("ETag") or etag)
        return job

    async def fetch_chunk(self, offset: int) -> ChunkPayload:
        cached = self._cache.get_fresh(self._logs_key)
        if cached is not None:
            job, text = cached
            return _slice(text, offset, complete=True, job=job)

        job = await self.fetch_job()
        completed = job.get("status") == JobStatus.COMPLETED
        try:
            response = await self._get(f"{self._base}/logs")
        except LogNotFoundError as e:
            if completed:
                raise
            # Running jobs often have no log yet; report status instead of failing.
            payload = _slice("", 0, complete=False, job=job)
            payload.message = f"Job {job.get('status', 'unknown')}: {e.message}"
            return payload

        text = response.text
        if completed:
            self._cache.set(self._logs_key, (job, text), CACHE_POLICIES["completed_job_logs"])
        return _slice(text, offset, complete=completed, job=job)

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()


class FileLogSource:
    """Serves a local log file by byte offset. Useful for replaying saved job logs."""

    def __init__(self, path: Path, *, complete: bool = False) -> None:
        self._path = path
        self._complete = complete

    @property
    def description(self) -> str:
        return str(self._path)

    async def fetch_chunk(self, offset: int) -> ChunkPayload:
        try:
            size = self._path.stat().st_size
        except FileNotFoundError as e:
            msg = f"{self._path} does not exist yet"
            raise LogNotFoundError(msg) from e
        except OSError as e:
            msg = f"Cannot read {self._path}: {e}"
            raise FetchError(msg) from e

        if size < offset:
            # Truncated or rotated: report the smaller size so the stream reloads.
            return ChunkPayload(content="", total_length=size, is_complete=self._complete)

        async with aiofiles.open(self._path, "rb") as f:
            await f.seek(offset)
            data = await f.read()
        # A writer may be mid-character; leave a partial UTF-8 sequence for the next fetch.
        decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        content = decoder.decode(data, final=self._complete)
        pending, _ = decoder.getstate()
        return ChunkPayload(
            content=content,
            total_length=offset + len(data) - len(pending),
            is_complete=self._complete,
        )

    async def aclose(self) -> None:
        return None
