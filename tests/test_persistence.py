"""Tests for snapshot persistence: JSON adapter, restore rules and the flush timer."""

import asyncio
import json
import threading
import time

import pytest

from shortener.core.exceptions import SnapshotReadError, SnapshotWriteError
from shortener.db.interface import SnapshotAdapter
from shortener.db.json_adapter import JsonFileAdapter
from shortener.db.models import LinkRecord, SnapshotDocument, StoreState
from shortener.services.link_store import LinkStore
from shortener.services.persistence import SnapshotManager


class FailingAdapter(SnapshotAdapter):
    """Adapter whose writes always fail, e.g. a full disk."""

    def __init__(self):
        self.attempts = 0

    def read(self) -> SnapshotDocument:
        raise SnapshotReadError("memory://failing", "Nothing stored")

    def write(self, document: SnapshotDocument) -> None:
        self.attempts += 1
        raise SnapshotWriteError("memory://failing", "Disk full", OSError(28, "No space left on device"))

    def describe(self) -> str:
        return "memory://failing"


def populated_store() -> LinkStore:
    store = LinkStore(clock=lambda: 1_700_000_000_000)
    store.shorten("http://example.com")
    store.shorten("https://example.org/a?b=c")
    store.shorten("https://example.net")
    store.resolve("a")
    store.resolve("a")
    store.resolve("c")
    return store


class TestJsonFileAdapter:
    """Test the JSON snapshot file."""

    def test_file_layout(self, adapter, snapshot_path):
        """The file uses the camelCase snapshot layout."""
        store = populated_store()
        adapter.write(SnapshotDocument.from_state(store.snapshot()))

        data = json.loads(snapshot_path.read_text(encoding="utf-8"))
        assert set(data) == {"longToShort", "shortToRecord", "counter"}
        assert data["counter"] == 3
        assert ["http://example.com", "a"] in data["longToShort"]
        assert [
            "a",
            {"longUrl": "http://example.com", "clicks": 2, "createdAt": 1_700_000_000_000},
        ] in data["shortToRecord"]

    def test_missing_file(self, adapter):
        with pytest.raises(SnapshotReadError):
            adapter.read()

    @pytest.mark.parametrize("content", [
        "",
        "   \n",
        "{not json",
        "[]",
        '{"longToShort": [], "counter": 1}',
        '{"shortToRecord": [], "counter": -1}',
        '{"shortToRecord": [["a", {"longUrl": "http://a"}]], "counter": 1}',
    ])
    def test_invalid_file(self, adapter, snapshot_path, content):
        """Anything that is not a complete snapshot is a read error."""
        snapshot_path.write_text(content, encoding="utf-8")
        with pytest.raises(SnapshotReadError):
            adapter.read()

    def test_write_leaves_no_temporary_files(self, adapter, snapshot_path, tmp_path):
        """The temporary file is renamed over the snapshot."""
        adapter.write(SnapshotDocument.from_state(populated_store().snapshot()))
        adapter.write(SnapshotDocument.from_state(StoreState()))
        assert list(tmp_path.iterdir()) == [snapshot_path]
        assert adapter.read().counter == 0

    def test_write_creates_parent_directory(self, tmp_path):
        adapter = JsonFileAdapter(tmp_path / "data" / "nested" / "urls.json")
        adapter.write(SnapshotDocument.from_state(StoreState()))
        assert adapter.read().short_to_record == []

    def test_failed_write_keeps_previous_snapshot(self, tmp_path):
        """A failed write raises and cleans up its temporary file."""
        target = tmp_path / "urls.json"
        target.mkdir()
        adapter = JsonFileAdapter(target)

        with pytest.raises(SnapshotWriteError):
            adapter.write(SnapshotDocument.from_state(StoreState()))
        assert list(tmp_path.iterdir()) == [target]


class TestRestore:
    """Test SnapshotManager.restore."""

    def test_round_trip(self, adapter):
        """Flushing then restoring reproduces maps, clicks, creation times and counter."""
        store = populated_store()
        manager = SnapshotManager(adapter, store=store)
        assert manager.flush_now()

        restored = SnapshotManager(adapter).restore()
        assert restored == store.snapshot()

    def test_missing_snapshot_gives_empty_state(self, adapter):
        assert SnapshotManager(adapter).restore() == StoreState()

    def test_corrupt_snapshot_gives_empty_state(self, adapter, snapshot_path):
        snapshot_path.write_text('{"longToShort": [[', encoding="utf-8")
        state = SnapshotManager(adapter).restore()
        assert state == StoreState()

    def test_counter_survives_restart(self, adapter):
        """A restarted store continues the counter instead of reusing codes."""
        manager = SnapshotManager(adapter)
        store = manager.open_store()
        assert store.shorten("http://one.example") == "a"
        assert store.shorten("http://two.example") == "b"
        manager.flush_now()

        store = SnapshotManager(adapter).open_store()
        assert store.counter == 2
        assert store.shorten("http://one.example") == "a"
        assert store.shorten("http://three.example") == "c"
        assert store.resolve("b") == "http://two.example"

    def test_short_to_record_is_authoritative(self, adapter, snapshot_path):
        """longToShort is rebuilt from shortToRecord when they disagree."""
        snapshot_path.write_text(json.dumps({
            "longToShort": [["http://stale.example", "a"], ["http://b.example", "b"]],
            "shortToRecord": [
                ["a", {"longUrl": "http://a.example", "clicks": 1, "createdAt": 10}],
                ["b", {"longUrl": "http://b.example", "clicks": 0, "createdAt": 20}],
            ],
            "counter": 2,
        }), encoding="utf-8")

        state = SnapshotManager(adapter).restore()
        assert state.long_to_short == {"http://a.example": "a", "http://b.example": "b"}
        assert state.short_to_record["a"] == LinkRecord("http://a.example", 1, 10)

    def test_missing_long_to_short_is_rebuilt(self, adapter, snapshot_path):
        snapshot_path.write_text(json.dumps({
            "shortToRecord": [["a", {"longUrl": "http://a.example", "clicks": 0, "createdAt": 1}]],
            "counter": 1,
        }), encoding="utf-8")
        state = SnapshotManager(adapter).restore()
        assert state.long_to_short == {"http://a.example": "a"}

    def test_counter_behind_codes_is_raised(self, adapter, snapshot_path):
        """A counter lower than a stored code would reissue it, so it is raised."""
        snapshot_path.write_text(json.dumps({
            "longToShort": [["http://a.example", "ab"]],
            "shortToRecord": [["ab", {"longUrl": "http://a.example", "clicks": 0, "createdAt": 1}]],
            "counter": 3,
        }), encoding="utf-8")

        store = SnapshotManager(adapter).open_store()
        assert store.counter == 28
        assert store.shorten("http://b.example") == "ac"

    def test_foreign_codes_are_kept(self, adapter, snapshot_path):
        """Codes outside [a-z] still resolve but do not move the counter."""
        snapshot_path.write_text(json.dumps({
            "longToShort": [["http://a.example", "Custom1"]],
            "shortToRecord": [["Custom1", {"longUrl": "http://a.example", "clicks": 4, "createdAt": 1}]],
            "counter": 0,
        }), encoding="utf-8")

        store = SnapshotManager(adapter).open_store()
        assert store.counter == 0
        assert store.resolve("Custom1") == "http://a.example"


class TestFlush:
    """Test flush_if_dirty / flush_now."""

    def test_clean_store_is_not_written(self, adapter, snapshot_path):
        manager = SnapshotManager(adapter)
        manager.open_store()
        assert not manager.flush_if_dirty()
        assert not snapshot_path.exists()

    def test_dirty_store_is_written_once(self, adapter):
        manager = SnapshotManager(adapter)
        store = manager.open_store()
        store.shorten("http://example.com")

        assert manager.flush_if_dirty()
        assert not store.dirty
        assert adapter.read().counter == 1
        assert not manager.flush_if_dirty()

    def test_clicks_are_flushed(self, adapter):
        manager = SnapshotManager(adapter)
        store = manager.open_store()
        code = store.shorten("http://example.com")
        manager.flush_if_dirty()

        store.resolve(code)
        assert manager.flush_if_dirty()
        assert dict(adapter.read().short_to_record)[code].clicks == 1

    def test_failed_write_keeps_changes_dirty(self):
        """A failed flush is logged, not raised, and retried on the next tick."""
        adapter = FailingAdapter()
        store = LinkStore()
        manager = SnapshotManager(adapter, store=store)
        store.shorten("http://example.com")

        assert not manager.flush_if_dirty()
        assert store.dirty
        assert not manager.flush_if_dirty()
        assert adapter.attempts == 2

    def test_failed_write_then_recovery(self, adapter):
        store = LinkStore()
        store.shorten("http://example.com")
        assert not SnapshotManager(FailingAdapter(), store=store).flush_if_dirty()

        assert SnapshotManager(adapter, store=store).flush_if_dirty()
        assert not store.dirty
        assert adapter.read().counter == 1

    def test_slow_timer_flush_cannot_overwrite_final_flush(self, adapter, monkeypatch):
        """A timer flush still in flight at shutdown never replaces the newer final snapshot."""
        manager = SnapshotManager(adapter)
        store = manager.open_store()
        store.shorten("http://one.example")

        copied = threading.Event()
        take_snapshot = store.snapshot_if_dirty

        def slow_snapshot_if_dirty():
            state = take_snapshot()
            copied.set()
            time.sleep(0.3)
            return state

        monkeypatch.setattr(store, "snapshot_if_dirty", slow_snapshot_if_dirty)

        timer_flush = threading.Thread(target=manager.flush_if_dirty)
        timer_flush.start()
        assert copied.wait(timeout=5)

        store.shorten("http://two.example")
        assert manager.flush_now()
        timer_flush.join(timeout=5)

        document = adapter.read()
        assert document.counter == 2
        assert {record.long_url for _, record in document.short_to_record} == {
            "http://one.example",
            "http://two.example",
        }

    def test_flush_without_store(self, adapter):
        with pytest.raises(RuntimeError):
            SnapshotManager(adapter).flush_now()

    def test_interval_floor(self, adapter):
        with pytest.raises(ValueError):
            SnapshotManager(adapter, interval_ms=999)


class TestFlushTimer:
    """Test the repeating flush timer and the shutdown flush."""

    @pytest.mark.asyncio
    async def test_timer_flushes_repeatedly(self, adapter):
        """The timer keeps flushing after its first tick."""
        manager = SnapshotManager(adapter, interval_ms=1000)
        store = manager.open_store()
        await manager.start()
        try:
            store.shorten("http://a.example")
            await asyncio.sleep(1.5)
            assert not store.dirty
            assert adapter.read().counter == 1

            store.shorten("http://b.example")
            await asyncio.sleep(1.0)
            assert not store.dirty
            assert adapter.read().counter == 2
        finally:
            await manager.stop()

    @pytest.mark.asyncio
    async def test_stop_writes_final_snapshot(self, adapter):
        """Changes made after the last tick are written on shutdown."""
        manager = SnapshotManager(adapter, interval_ms=60000)
        store = manager.open_store()
        await manager.start()

        store.shorten("http://example.com")
        store.resolve("a")
        await manager.stop()

        state = SnapshotManager(adapter).restore()
        assert state.counter == 1
        assert state.short_to_record["a"].clicks == 1

    @pytest.mark.asyncio
    async def test_start_twice_keeps_one_timer(self, adapter):
        manager = SnapshotManager(adapter)
        manager.open_store()
        await manager.start()
        task = manager._task
        await manager.start()
        assert manager._task is task
        await manager.stop()
        assert manager._task is None
