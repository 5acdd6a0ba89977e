"""Tests for the response cache."""

from __future__ import annotations

from jobtail.cache import CACHE_POLICIES, ResponseCache, job_key, job_logs_key
from jobtail.models import CachePolicy


class FakeClock:
    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


class TestPolicies:
    def test_ttls(self) -> None:
        assert CACHE_POLICIES["completed_job_logs"].client_ttl == 3600
        assert CACHE_POLICIES["running_job_logs"].client_ttl == 30
        assert CACHE_POLICIES["running_job_logs"].revalidate_on_focus

    def test_keys_distinct(self) -> None:
        assert job_logs_key("o", "r", 1) != job_key("o", "r", 1)
        assert job_key("o", "r", 1) != job_key("o", "r", 2)


class TestResponseCache:
    def test_miss(self) -> None:
        cache = ResponseCache()
        assert cache.get("nope") is None
        assert cache.get_fresh("nope") is None

    def test_fresh_then_stale(self) -> None:
        clock = FakeClock()
        cache = ResponseCache(clock=clock)
        cache.set("k", {"a": 1}, CachePolicy(client_ttl=10, server_ttl=5), etag='"v1"')

        hit = cache.get("k")
        assert hit is not None
        assert not hit.stale
        assert hit.etag == '"v1"'
        assert cache.get_fresh("k") == {"a": 1}

        clock.now += 11
        stale = cache.get("k")
        assert stale is not None
        assert stale.stale
        assert stale.data == {"a": 1}
        assert stale.etag == '"v1"'
        assert cache.get_fresh("k") is None

    def test_set_replaces_entry(self) -> None:
        cache = ResponseCache()
        cache.set("k", 1, CACHE_POLICIES["running_job_logs"], etag='"a"')
        cache.set("k", 2, CACHE_POLICIES["running_job_logs"])
        hit = cache.get("k")
        assert hit is not None
        assert hit.data == 2
        assert hit.etag is None

    def test_instances_are_independent(self) -> None:
        first = ResponseCache()
        second = ResponseCache()
        first.set("k", 1, CACHE_POLICIES["completed_job_logs"])
        assert second.get("k") is None
