"""Tests for ActivityService.get_or_fetch."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import pytest

from ghactivity.cache import ActivityService, CacheStore
from ghactivity.exceptions import (
    CacheReadError,
    CacheWriteError,
    ConnectionError_,
    InvalidUsageError,
    NotFoundError,
    ParseError,
    UpstreamError,
)


class RecordingFetcher:
    """Fetcher double that records calls and returns or raises on demand."""

    def __init__(self, result: Any = None, error: Exception | None = None) -> None:
        self.result = result
        self.error = error
        self.calls: list[str] = []

    def __call__(self, key: str) -> Any:
        self.calls.append(key)
        if self.error is not None:
            raise self.error
        return self.result


class RecordingStore(CacheStore):
    """CacheStore that counts writes."""

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.writes: list[tuple[str, Any]] = []

    def write(self, key: str, payload: Any):
        self.writes.append((key, payload))
        return super().write(key, payload)


@pytest.fixture()
def store(tmp_path: Path, clock) -> RecordingStore:
    return RecordingStore(tmp_path, "events", ttl_seconds=600, clock=clock)


@pytest.fixture()
def service(store: RecordingStore) -> ActivityService:
    return ActivityService(store)


# ------------------------------------------------------------------ #
# Hit / miss
# ------------------------------------------------------------------ #


class TestHitMiss:
    def test_miss_fetches_once_and_writes_once(
        self, service: ActivityService, store: RecordingStore
    ) -> None:
        fetcher = RecordingFetcher(result=[{"type": "WatchEvent"}])

        result = service.get_or_fetch("alice", fetcher)

        assert fetcher.calls == ["alice"]
        assert store.writes == [("alice", [{"type": "WatchEvent"}])]
        assert result.payload == [{"type": "WatchEvent"}]
        assert result.from_cache is False
        assert result.write_error is None

    def test_hit_skips_fetch(self, service: ActivityService, store: RecordingStore) -> None:
        store.write("alice", {"cached": True})
        store.writes.clear()
        fetcher = RecordingFetcher(result={"cached": False})

        result = service.get_or_fetch("alice", fetcher)

        assert fetcher.calls == []
        assert store.writes == []
        assert result.payload == {"cached": True}
        assert result.from_cache is True

    def test_hit_reports_stored_at(self, service: ActivityService, store: RecordingStore, clock) -> None:
        store.write("alice", [])
        stamped = clock.now
        clock.advance(minutes=2)

        result = service.get_or_fetch("alice", RecordingFetcher(result=[1]))
        assert result.stored_at == stamped

    def test_second_call_is_served_from_cache(self, service: ActivityService) -> None:
        fetcher = RecordingFetcher(result=[1, 2])
        first = service.get_or_fetch("alice", fetcher)
        second = service.get_or_fetch("alice", fetcher)

        assert first.from_cache is False
        assert second.from_cache is True
        assert second.payload == [1, 2]
        assert fetcher.calls == ["alice"]

    def test_stale_entry_is_refetched(self, service: ActivityService, store: RecordingStore, clock) -> None:
        store.write("alice", ["old"])
        clock.advance(minutes=10)
        fetcher = RecordingFetcher(result=["new"])

        result = service.get_or_fetch("alice", fetcher)

        assert fetcher.calls == ["alice"]
        assert result.payload == ["new"]
        assert result.from_cache is False
        assert store.read("alice").payload == ["new"]

    def test_keys_are_independent(self, service: ActivityService) -> None:
        service.get_or_fetch("alice", RecordingFetcher(result=["a"]))
        fetcher = RecordingFetcher(result=["b"])

        result = service.get_or_fetch("bob", fetcher)

        assert fetcher.calls == ["bob"]
        assert result.payload == ["b"]

    def test_corrupt_entry_falls_through_to_fetch(
        self, service: ActivityService, store: RecordingStore
    ) -> None:
        path = store.path_for("alice")
        path.parent.mkdir(parents=True)
        path.write_text("{broken", encoding="utf-8")
        fetcher = RecordingFetcher(result=["fresh"])

        result = service.get_or_fetch("alice", fetcher)

        assert fetcher.calls == ["alice"]
        assert result.payload == ["fresh"]
        assert store.read("alice").payload == ["fresh"]


# ------------------------------------------------------------------ #
# Refresh and disabled cache
# ------------------------------------------------------------------ #


class TestRefreshAndDisabled:
    def test_refresh_bypasses_fresh_entry(
        self, service: ActivityService, store: RecordingStore
    ) -> None:
        store.write("alice", ["cached"])
        fetcher = RecordingFetcher(result=["live"])

        result = service.get_or_fetch("alice", fetcher, refresh=True)

        assert fetcher.calls == ["alice"]
        assert result.from_cache is False
        assert store.read("alice").payload == ["live"]

    def test_disabled_cache_always_fetches(self) -> None:
        service = ActivityService(None)
        fetcher = RecordingFetcher(result=[1])

        first = service.get_or_fetch("alice", fetcher)
        second = service.get_or_fetch("alice", fetcher)

        assert fetcher.calls == ["alice", "alice"]
        assert first.from_cache is second.from_cache is False
        assert first.stored_at is None


# ------------------------------------------------------------------ #
# Failures
# ------------------------------------------------------------------ #


class TestFailures:
    @pytest.mark.parametrize(
        "error",
        [
            NotFoundError("User not found"),
            UpstreamError(503),
            ParseError("Failed to parse response"),
            ConnectionError_("unreachable"),
        ],
    )
    def test_fetch_failure_propagates_without_write(
        self, service: ActivityService, store: RecordingStore, error: Exception
    ) -> None:
        fetcher = RecordingFetcher(error=error)

        with pytest.raises(type(error)) as excinfo:
            service.get_or_fetch("alice", fetcher)

        assert excinfo.value is error
        assert store.writes == []
        assert store.read("alice") is None

    def test_fetch_failure_does_not_fall_back_to_stale(
        self, service: ActivityService, store: RecordingStore, clock
    ) -> None:
        store.write("alice", ["stale"])
        clock.advance(hours=1)

        with pytest.raises(UpstreamError):
            service.get_or_fetch("alice", RecordingFetcher(error=UpstreamError(500)))

    def test_upstream_status_is_preserved(self, service: ActivityService) -> None:
        with pytest.raises(UpstreamError) as excinfo:
            service.get_or_fetch("alice", RecordingFetcher(error=UpstreamError(502)))
        assert excinfo.value.status_code == 502

    def test_write_failure_still_returns_payload(
        self,
        service: ActivityService,
        store: RecordingStore,
        monkeypatch: pytest.MonkeyPatch,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        def _boom(path, data):
            raise OSError("read-only file system")

        monkeypatch.setattr("ghactivity.cache.store.atomic_write", _boom)
        fetcher = RecordingFetcher(result={"fresh": True})

        with caplog.at_level(logging.WARNING, logger="ghactivity"):
            result = service.get_or_fetch("alice", fetcher)

        assert result.payload == {"fresh": True}
        assert result.from_cache is False
        assert result.stored_at is None
        assert isinstance(result.write_error, CacheWriteError)
        assert "Could not cache response" in caplog.text

    def test_read_failure_aborts_before_fetch(
        self, service: ActivityService, store: RecordingStore
    ) -> None:
        store.path_for("alice").mkdir(parents=True)
        fetcher = RecordingFetcher(result=[1])

        with pytest.raises(CacheReadError):
            service.get_or_fetch("alice", fetcher)
        assert fetcher.calls == []

    def test_empty_key_rejected_before_fetch(self, service: ActivityService) -> None:
        fetcher = RecordingFetcher(result=[1])
        with pytest.raises(InvalidUsageError):
            service.get_or_fetch("", fetcher)
        assert fetcher.calls == []


# ------------------------------------------------------------------ #
# End-to-end scenarios
# ------------------------------------------------------------------ #


class TestScenarios:
    def test_alice_hit_then_expiry(self, service: ActivityService, store: RecordingStore, clock) -> None:
        store.write("alice", {"type": "list", "items": []})

        clock.advance(minutes=5)
        early = RecordingFetcher(result={"type": "list", "items": ["unexpected"]})
        result = service.get_or_fetch("alice", early)
        assert result.payload == {"type": "list", "items": []}
        assert early.calls == []

        clock.advance(minutes=6)
        late = RecordingFetcher(result={"type": "list", "items": [1]})
        result = service.get_or_fetch("alice", late)
        assert result.payload == {"type": "list", "items": [1]}
        assert late.calls == ["alice"]
        assert store.read("alice").payload == {"type": "list", "items": [1]}

    def test_bob_not_found_leaves_no_entry(self, service: ActivityService, store: RecordingStore) -> None:
        with pytest.raises(NotFoundError):
            service.get_or_fetch("bob", RecordingFetcher(error=NotFoundError("User not found")))

        assert store.read("bob") is None
        assert not store.path_for("bob").exists()
