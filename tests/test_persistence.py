from __future__ import annotations

import json
import logging

import pytest

from tasklist.persistence import TaskPersistence
from tasklist.storage import InMemoryKeyValueStore

from .fakes import FailingStore

SAMPLE = [
    {"id": 1738331100000, "text": "Buy milk", "completed": False, "createdAt": "2025-01-31T13:45:00.000Z"},
    {"id": 1738331101000, "text": "Café", "completed": True, "createdAt": "2025-01-31T13:45:01.000Z"},
]


class TestLoad:
    def test_missing_key_is_empty(self, persistence: TaskPersistence):
        assert persistence.load() == []

    def test_loads_stored_records(self, store: InMemoryKeyValueStore, persistence: TaskPersistence):
        store.set_item("tasks", json.dumps(SAMPLE))
        assert persistence.load() == SAMPLE

    def test_unparsable_value_is_empty(self, store: InMemoryKeyValueStore, persistence: TaskPersistence, caplog):
        store.set_item("tasks", "{not json")
        with caplog.at_level(logging.WARNING, logger="tasklist.persistence"):
            assert persistence.load() == []
        assert "not valid JSON" in caplog.text

    def test_non_list_value_is_empty(self, store: InMemoryKeyValueStore, persistence: TaskPersistence):
        store.set_item("tasks", '{"id": 1}')
        assert persistence.load() == []
        store.set_item("tasks", "null")
        assert persistence.load() == []

    def test_non_object_entries_are_dropped(self, store: InMemoryKeyValueStore, persistence: TaskPersistence):
        store.set_item("tasks", json.dumps([SAMPLE[0], 3, "x", None]))
        assert persistence.load() == [SAMPLE[0]]

    @pytest.mark.parametrize(
        "entry",
        [
            {"text": "legacy", "completed": False, "createdAt": "2025-01-31T13:45:00.000Z"},
            {"id": 1, "text": "no timestamp", "completed": False},
            {"id": True, "text": "bool id", "completed": False, "createdAt": "2025-01-31T13:45:00.000Z"},
            {"id": 2, "text": None, "completed": False, "createdAt": "2025-01-31T13:45:00.000Z"},
            {"id": 3, "text": "no flag", "createdAt": "2025-01-31T13:45:00.000Z"},
            {"id": 4, "text": "string flag", "completed": "yes", "createdAt": "2025-01-31T13:45:00.000Z"},
        ],
    )
    def test_incomplete_entries_are_dropped(self, store: InMemoryKeyValueStore, persistence: TaskPersistence, caplog, entry):
        store.set_item("tasks", json.dumps([entry, SAMPLE[0]]))
        with caplog.at_level(logging.WARNING, logger="tasklist.persistence"):
            assert persistence.load() == [SAMPLE[0]]
        assert "Dropped 1 malformed entries" in caplog.text

    def test_store_read_error_is_absorbed(self):
        persistence = TaskPersistence(FailingStore(fail_reads=True))
        assert persistence.load() == []

    def test_uses_configured_key(self, store: InMemoryKeyValueStore):
        store.set_item("other", json.dumps(SAMPLE))
        assert TaskPersistence(store, key="other").load() == SAMPLE
        assert TaskPersistence(store).load() == []


class TestSave:
    def test_save_replaces_whole_collection(self, store: InMemoryKeyValueStore, persistence: TaskPersistence):
        assert persistence.save(SAMPLE) is True
        assert persistence.save(SAMPLE[:1]) is True
        assert json.loads(store.get_item("tasks")) == SAMPLE[:1]

    def test_serialization_is_compact_and_keeps_unicode(self, store: InMemoryKeyValueStore, persistence: TaskPersistence):
        persistence.save(SAMPLE[1:])
        assert store.get_item("tasks") == (
            '[{"id":1738331101000,"text":"Café","completed":true,"createdAt":"2025-01-31T13:45:01.000Z"}]'
        )

    def test_write_failure_returns_false_and_logs(self, caplog):
        persistence = TaskPersistence(FailingStore())
        with caplog.at_level(logging.ERROR, logger="tasklist.persistence"):
            assert persistence.save(SAMPLE) is False
        assert "Error saving" in caplog.text

    def test_unserializable_data_returns_false(self, store: InMemoryKeyValueStore, persistence: TaskPersistence):
        bad = [{"id": 1, "text": "x", "completed": False, "createdAt": object()}]
        assert persistence.save(bad) is False  # type: ignore[arg-type]
        assert store.get_item("tasks") is None

    def test_save_of_load_leaves_stored_value_unchanged(self, store: InMemoryKeyValueStore, persistence: TaskPersistence):
        persistence.save(SAMPLE)
        before = store.get_item("tasks")
        assert persistence.save(persistence.load()) is True
        assert store.get_item("tasks") == before

    def test_save_of_empty_load_writes_empty_array(self, store: InMemoryKeyValueStore, persistence: TaskPersistence):
        assert persistence.save(persistence.load()) is True
        assert store.get_item("tasks") == "[]"
