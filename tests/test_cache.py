"""Tests for folio.store.cache — snapshot file handoff."""

from __future__ import annotations

import asyncio
import json
from datetime import UTC, date, datetime
from pathlib import Path

import pytest

from folio._errors import CacheNotFoundError
from folio.observability import CacheRead, SnapshotWritten, StackCollector
from folio.store.cache import CacheStore
from folio.transform import Snapshot


def _snapshot() -> Snapshot:
    return Snapshot(
        props={"site": {"title": "My Site"}, "liveUpdate": True},
        pages=[
            {"path": "/a", "page": {"slug": "a", "tags": ["x"]}},
            {"path": "/a", "page": {"slug": "a", "n": 1.5}, "extra": None},
        ],
    )


class TestProducerSide:
    """clear() and write()."""

    def test_write_creates_parent_dirs(self, tmp_path: Path) -> None:
        store = CacheStore(tmp_path / "deep" / "nested" / "cache.json")
        store.write(_snapshot())
        assert store.exists()

    def test_file_layout(self, tmp_path: Path) -> None:
        store = CacheStore(tmp_path / "cache.json")
        store.write(_snapshot())
        data = json.loads(store.path.read_text())
        assert set(data) == {"props", "pages"}
        assert data["pages"][0]["path"] == "/a"

    def test_write_returns_size(self, tmp_path: Path) -> None:
        store = CacheStore(tmp_path / "cache.json")
        size = store.write(_snapshot())
        assert size == store.path.stat().st_size

    def test_overwrites_whole_file(self, tmp_path: Path) -> None:
        store = CacheStore(tmp_path / "cache.json")
        store.write(Snapshot(pages=[{"path": f"/{i}", "page": {}} for i in range(100)]))
        store.write(Snapshot(props={"small": True}))
        assert json.loads(store.path.read_text()) == {"props": {"small": True}, "pages": []}

    def test_clear_removes_file(self, tmp_path: Path) -> None:
        store = CacheStore(tmp_path / "cache.json")
        store.write(_snapshot())
        assert store.clear() is True
        assert not store.exists()

    def test_clear_without_file(self, tmp_path: Path) -> None:
        assert CacheStore(tmp_path / "cache.json").clear() is False

    def test_encodes_dates_and_sets(self, tmp_path: Path) -> None:
        store = CacheStore(tmp_path / "cache.json")
        when = datetime(2024, 5, 1, 12, 0, tzinfo=UTC)
        store.write(Snapshot(props={"when": when, "day": date(2024, 5, 1), "tags": {"x"}}))
        props = json.loads(store.path.read_text())["props"]
        assert props == {"when": when.isoformat(), "day": "2024-05-01", "tags": ["x"]}

    def test_unencodable_value_raises(self, tmp_path: Path) -> None:
        store = CacheStore(tmp_path / "cache.json")
        with pytest.raises(TypeError, match="not JSON serializable"):
            store.write(Snapshot(props={"obj": object()}))

    def test_write_recorded(self, tmp_path: Path) -> None:
        collector = StackCollector()
        store = CacheStore(tmp_path / "cache.json", collector=collector)
        store.write(_snapshot())
        events = collector.log.query(event_type=SnapshotWritten)
        assert len(events) == 1
        assert events[0].pages == 2


class TestConsumerSide:
    """read() — retry while absent, fresh read every call."""

    @pytest.mark.asyncio
    async def test_round_trip(self, tmp_path: Path) -> None:
        store = CacheStore(tmp_path / "cache.json")
        snapshot = _snapshot()
        store.write(snapshot)
        assert await store.read() == snapshot

    @pytest.mark.asyncio
    async def test_missing_file_fails_after_budget(self, tmp_path: Path) -> None:
        store = CacheStore(tmp_path / "cache.json", retry_delay=0.001, max_retries=3)
        with pytest.raises(CacheNotFoundError) as info:
            await store.read()
        assert info.value.attempts == 3
        assert info.value.path == tmp_path / "cache.json"

    @pytest.mark.asyncio
    async def test_default_backoff_is_ten_half_seconds(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        delays: list[float] = []

        async def _fake_sleep(delay: float) -> None:
            delays.append(delay)

        monkeypatch.setattr("folio.store.cache.asyncio.sleep", _fake_sleep)
        store = CacheStore(tmp_path / "cache.json")
        with pytest.raises(CacheNotFoundError):
            await store.read()
        assert delays == [0.5] * 10

    @pytest.mark.asyncio
    async def test_waits_for_first_write(self, tmp_path: Path) -> None:
        store = CacheStore(tmp_path / "cache.json", retry_delay=0.01, max_retries=200)
        reader = asyncio.create_task(store.read())
        await asyncio.sleep(0.05)
        assert not reader.done()

        store.write(_snapshot())
        assert await asyncio.wait_for(reader, timeout=5) == _snapshot()

    @pytest.mark.asyncio
    async def test_each_read_sees_latest_write(self, tmp_path: Path) -> None:
        store = CacheStore(tmp_path / "cache.json")
        store.write(Snapshot(props={"v": 1}))
        assert (await store.read()).props == {"v": 1}
        store.write(Snapshot(props={"v": 2}))
        assert (await store.read()).props == {"v": 2}

    @pytest.mark.asyncio
    async def test_corrupt_file_raises(self, tmp_path: Path) -> None:
        path = tmp_path / "cache.json"
        path.write_text("{not json")
        with pytest.raises(json.JSONDecodeError):
            await CacheStore(path).read()

    @pytest.mark.asyncio
    async def test_reads_recorded(self, tmp_path: Path) -> None:
        collector = StackCollector()
        store = CacheStore(
            tmp_path / "cache.json", retry_delay=0.001, max_retries=2, collector=collector,
        )
        with pytest.raises(CacheNotFoundError):
            await store.read()
        store.write(_snapshot())
        await store.read()

        found, missing = collector.log.query(event_type=CacheRead)
        assert found.found is True
        assert found.retries == 0
        assert missing.found is False
        assert missing.retries == 2
