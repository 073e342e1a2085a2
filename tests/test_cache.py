"""Tests for the local key-value stores and the debouncer."""

import threading

from officemap.persistence.cache import Debouncer, JsonFileStore, MemoryStore, cache_key


def _make_counter():
    calls = []
    return calls, lambda: calls.append(1)


class TestStores:
    def test_cache_key(self):
        assert cache_key(7) == "officemap:location:7"

    def test_memory_store_round_trip(self):
        store = MemoryStore()
        store.set("k", {"floors": {"Floor 1": []}})
        assert "k" in store
        assert store.get("k") == {"floors": {"Floor 1": []}}
        store.delete("k")
        assert store.get("k") is None

    def test_json_file_store_round_trip(self, tmp_path):
        store = JsonFileStore(tmp_path / "cache")
        store.set(cache_key(3), {"currentFloor": "Floor 2"})
        assert store.get(cache_key(3)) == {"currentFloor": "Floor 2"}
        assert len(list((tmp_path / "cache").glob("*.json"))) == 1
        store.delete(cache_key(3))
        assert store.get(cache_key(3)) is None

    def test_json_file_store_ignores_corrupt_entry(self, tmp_path):
        store = JsonFileStore(tmp_path)
        store.set("k", {"a": 1})
        next(tmp_path.glob("*.json")).write_text("{broken", encoding="utf-8")
        assert store.get("k") is None


class TestDebouncer:
    def test_burst_collapses_to_one_call(self):
        calls, cb = _make_counter()
        debouncer = Debouncer(60.0, cb)
        for _ in range(5):
            debouncer.trigger()
        assert debouncer.pending
        assert debouncer.flush()
        assert calls == [1]
        assert not debouncer.pending

    def test_flush_without_pending(self):
        calls, cb = _make_counter()
        assert not Debouncer(60.0, cb).flush()
        assert calls == []

    def test_cancel_drops_pending_call(self):
        calls, cb = _make_counter()
        debouncer = Debouncer(60.0, cb)
        debouncer.trigger()
        debouncer.cancel()
        assert not debouncer.flush()
        assert calls == []

    def test_fires_after_delay(self):
        fired = threading.Event()
        debouncer = Debouncer(0.01, fired.set)
        debouncer.trigger()
        assert fired.wait(timeout=5.0)
        assert not debouncer.pending
