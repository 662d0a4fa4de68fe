"""
Tests for run history and its key-value backends.
"""

import json

import pytest

from ..storage import GameRunSummary, HistoryStore, JsonFileStore, MemoryStore

KEY = "mental-math-history"


def summary(run_id: str, score: int = 100, **changes) -> GameRunSummary:
    data = dict(
        run_id=run_id,
        mode="quick",
        difficulty="easy",
        score=score,
        accuracy=80.0,
        max_combo=3,
        speed_stars=2,
        shield_used=0,
        questions_answered=10,
        time_taken_ms=42_000,
        completed_at=1_700_000_000_000,
    )
    data.update(changes)
    return GameRunSummary(**data)


class TestHistoryLoad:
    """Tests for best-effort reads."""

    def test_missing_key(self, history):
        assert history.load() == []

    @pytest.mark.parametrize("raw", ["not json", "{\"a\": 1}", "42", "null", ""])
    def test_unusable_data_reads_empty(self, raw):
        history = HistoryStore(MemoryStore({KEY: raw}))
        assert history.load() == []

    def test_malformed_entries_dropped(self):
        good = summary("good").model_dump()
        raw = json.dumps([good, {"run_id": "bad"}, "junk", dict(good, run_id="also", score=-5)])
        history = HistoryStore(MemoryStore({KEY: raw}))
        assert [e.run_id for e in history.load()] == ["good"]

    def test_read_truncates(self):
        raw = json.dumps([summary(f"r{i}").model_dump() for i in range(15)])
        history = HistoryStore(MemoryStore({KEY: raw}), limit=10)
        assert len(history.load()) == 10


class TestHistorySave:
    """Tests for insert-or-replace writes."""

    def test_newest_first(self, history):
        history.save(summary("a"))
        history.save(summary("b"))
        assert [e.run_id for e in history.load()] == ["b", "a"]

    def test_same_run_replaced(self, history):
        history.save(summary("a", score=100))
        history.save(summary("b"))
        entries = history.save(summary("a", score=300))
        assert [e.run_id for e in entries] == ["a", "b"]
        assert entries[0].score == 300
        assert history.load() == entries

    def test_limit(self, history):
        for i in range(12):
            history.save(summary(f"r{i}"))
        entries = history.load()
        assert len(entries) == 10
        assert entries[0].run_id == "r11"
        assert entries[-1].run_id == "r2"

    def test_recent(self, history):
        for i in range(7):
            history.save(summary(f"r{i}"))
        assert [e.run_id for e in history.recent(3)] == ["r6", "r5", "r4"]

    def test_clear(self, history, memory_store):
        history.save(summary("a"))
        assert history.clear() == []
        assert history.load() == []
        assert memory_store.get(KEY) == "[]"

    def test_stored_as_json_list(self, history, memory_store):
        history.save(summary("a"))
        data = json.loads(memory_store.get(KEY))
        assert isinstance(data, list)
        assert data[0]["run_id"] == "a"
        assert data[0]["time_taken_ms"] == 42_000

    def test_save_over_corrupt_data(self):
        store = MemoryStore({KEY: "{broken"})
        history = HistoryStore(store)
        history.save(summary("a"))
        assert [e.run_id for e in history.load()] == ["a"]

    def test_custom_key(self, memory_store):
        history = HistoryStore(memory_store, key="other")
        history.save(summary("a"))
        assert memory_store.get(KEY) is None
        assert memory_store.get("other") is not None


class TestJsonFileStore:
    """Tests for the file backend."""

    def test_round_trip(self, tmp_path):
        store = JsonFileStore(tmp_path / "data")
        assert store.get(KEY) is None
        store.set(KEY, "[1, 2]")
        assert store.get(KEY) == "[1, 2]"
        assert JsonFileStore(tmp_path / "data").get(KEY) == "[1, 2]"

    def test_directory_created_lazily(self, tmp_path):
        data_dir = tmp_path / "nested" / "dir"
        store = JsonFileStore(data_dir)
        store.get(KEY)
        assert not data_dir.exists()
        store.set(KEY, "[]")
        assert data_dir.is_dir()

    def test_closed_store_rejects_writes(self, tmp_path):
        store = JsonFileStore(tmp_path)
        store.close()
        store.close()
        with pytest.raises(RuntimeError):
            store.set(KEY, "[]")

    def test_history_on_disk(self, tmp_path):
        history = HistoryStore(JsonFileStore(tmp_path))
        history.save(summary("a"))
        reopened = HistoryStore(JsonFileStore(tmp_path))
        assert [e.run_id for e in reopened.load()] == ["a"]

    def test_write_failure_swallowed(self, tmp_path):
        store = JsonFileStore(tmp_path)
        store.close()
        history = HistoryStore(store)
        entries = history.save(summary("a"))
        assert [e.run_id for e in entries] == ["a"]
        assert history.load() == []
