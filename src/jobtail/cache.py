"""In-memory response cache with per-resource policies."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from jobtail.models import CachePolicy

if TYPE_CHECKING:
    from collections.abc import Callable

logger = logging.getLogger(__name__)

CACHE_POLICIES: dict[str, CachePolicy] = {
    "completed_job_logs": CachePolicy(client_ttl=3600, server_ttl=3600, tags=["logs"]),
    "running_job_logs": CachePolicy(client_ttl=30, server_ttl=10, tags=["logs"], revalidate_on_focus=True),
}


def job_logs_key(owner: str, repo: str, job_id: int) -> str:
    return f"job_logs:{owner}/{repo}/{job_id}"


def job_key(owner: str, repo: str, job_id: int) -> str:
    return f"job:{owner}/{repo}/{job_id}"


@dataclass(slots=True)
class _Entry:
    data: Any
    stored_at: float
    ttl: float
    etag: str | None = None


@dataclass(frozen=True, slots=True)
class CachedValue:
    """A cache hit. Stale values are still returned so callers can revalidate."""

    data: Any
    stale: bool
    etag: str | None = None


@dataclass
class ResponseCache:
    """Response cache owned by whoever creates it; nothing here is global."""

    clock: Callable[[], float] = time.monotonic
    _entries: dict[str, _Entry] = field(default_factory=dict)

    def set(self, key: str, data: Any, policy: CachePolicy, etag: str | None = None) -> None:  # noqa: ANN401
        self._entries[key] = _Entry(data=data, stored_at=self.clock(), ttl=policy.client_ttl, etag=etag)

    def get(self, key: str) -> CachedValue | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        stale = self.clock() - entry.stored_at > entry.ttl
        logger.debug("cache %s for %s", "stale hit" if stale else "hit", key)
        return CachedValue(data=entry.data, stale=stale, etag=entry.etag)

    def get_fresh(self, key: str) -> Any | None:  # noqa: ANN401
        """Data for key only when it has not expired."""
        cached = self.get(key)
        if cached is None or cached.stale:
            return None
        return cached.data
