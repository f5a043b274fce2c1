from __future__ import annotations

import json
from datetime import datetime, timedelta, timezone

import pytest

from tasklist.persistence import TaskPersistence
from tasklist.repositories import TaskRepository
from tasklist.storage import InMemoryKeyValueStore

from .fakes import FailingStore, StepClock


class TestCreate:
    def test_create_then_list(self, repo: TaskRepository):
        created = repo.create("  Buy milk  ")
        assert created is not None
        assert created["text"] == "Buy milk"
        assert created["completed"] is False
        assert repo.list() == [created]

    def test_id_and_timestamp_come_from_clock(self, repo: TaskRepository):
        created = repo.create("Buy milk")
        assert created is not None
        assert created["createdAt"] == "2025-01-31T13:45:00.000Z"
        start = datetime(2025, 1, 31, 13, 45, 0, tzinfo=timezone.utc)
        assert created["id"] == int(start.timestamp() * 1000)

    @pytest.mark.parametrize("text", ["", "   ", "\n\t", None, 42])
    def test_invalid_text_is_rejected_without_write(self, repo: TaskRepository, store: InMemoryKeyValueStore, text):
        assert repo.create(text) is None
        assert store.get_item("tasks") is None

    def test_ids_are_unique(self, repo: TaskRepository):
        for i in range(5):
            repo.create(f"Task {i}")
        ids = [t["id"] for t in repo.list()]
        assert len(set(ids)) == 5

    def test_same_millisecond_creations_get_distinct_ids(self, persistence: TaskPersistence):
        frozen = StepClock(step=timedelta(0))
        repo = TaskRepository(persistence, clock=frozen)
        first = repo.create("First")
        second = repo.create("Second")
        assert first is not None and second is not None
        assert second["id"] == first["id"] + 1
        assert first["createdAt"] == second["createdAt"]

    def test_clock_going_backwards_keeps_ids_increasing(self, persistence: TaskPersistence):
        repo = TaskRepository(persistence, clock=StepClock(step=timedelta(seconds=-1)))
        a = repo.create("a")
        b = repo.create("b")
        assert a is not None and b is not None
        assert b["id"] > a["id"]

    def test_persistence_failure_returns_none(self):
        repo = TaskRepository(TaskPersistence(FailingStore()), clock=StepClock())
        assert repo.create("Buy milk") is None

    def test_returned_task_is_a_copy(self, repo: TaskRepository):
        created = repo.create("Buy milk")
        assert created is not None
        created["text"] = "changed"
        assert repo.list()[0]["text"] == "Buy milk"


class TestListAndGet:
    def test_list_empty(self, repo: TaskRepository):
        assert repo.list() == []

    def test_list_on_unreadable_store_is_empty(self):
        repo = TaskRepository(TaskPersistence(FailingStore(fail_reads=True)))
        assert repo.list() == []

    def test_get(self, repo: TaskRepository):
        created = repo.create("Walk dog")
        assert created is not None
        assert repo.get(created["id"]) == created
        assert repo.get(-1) is None


class TestUpdate:
    def test_patch_overwrites_only_given_fields(self, repo: TaskRepository):
        created = repo.create("Buy milk")
        assert created is not None
        assert repo.update(created["id"], {"completed": True}) is True
        updated = repo.get(created["id"])
        assert updated == {**created, "completed": True}

    def test_patch_text_is_trimmed(self, repo: TaskRepository):
        created = repo.create("Buy milk")
        assert created is not None
        assert repo.update(created["id"], {"text": "  Buy oat milk "}) is True
        assert repo.get(created["id"])["text"] == "Buy oat milk"

    def test_blank_text_patch_is_rejected(self, repo: TaskRepository):
        created = repo.create("Buy milk")
        assert created is not None
        assert repo.update(created["id"], {"text": "   "}) is False
        assert repo.get(created["id"]) == created

    def test_identity_and_creation_time_cannot_change(self, repo: TaskRepository):
        created = repo.create("Buy milk")
        assert created is not None
        patch = {"id": 1, "createdAt": "1999-01-01T00:00:00.000Z", "completed": True}
        assert repo.update(created["id"], patch) is True
        updated = repo.get(created["id"])
        assert updated["id"] == created["id"]
        assert updated["createdAt"] == created["createdAt"]
        assert updated["completed"] is True

    def test_missing_id_returns_false_without_write(self, repo: TaskRepository, store: InMemoryKeyValueStore):
        repo.create("Buy milk")
        before = store.get_item("tasks")
        assert repo.update(123, {"completed": True}) is False
        assert store.get_item("tasks") == before

    def test_persistence_failure_returns_false(self):
        record = {"id": 1, "text": "a", "completed": False, "createdAt": "2025-01-31T13:45:00.000Z"}
        store = FailingStore({"tasks": json.dumps([record])})
        repo = TaskRepository(TaskPersistence(store))
        assert repo.update(1, {"completed": True}) is False
        assert store.write_attempts == ["tasks"]

    def test_other_records_untouched(self, repo: TaskRepository):
        a = repo.create("a")
        b = repo.create("b")
        assert a is not None and b is not None
        repo.update(a["id"], {"completed": True})
        assert repo.get(b["id"]) == b


class TestRemove:
    def test_remove_existing(self, repo: TaskRepository):
        a = repo.create("a")
        b = repo.create("b")
        assert a is not None and b is not None
        assert repo.remove(a["id"]) is True
        assert repo.list() == [b]

    def test_remove_missing_id_succeeds_and_leaves_collection(self, repo: TaskRepository):
        repo.create("a")
        before = repo.list()
        assert repo.remove(999) is True
        assert repo.list() == before

    def test_remove_on_empty_store_writes_empty_collection(self, repo: TaskRepository, store: InMemoryKeyValueStore):
        assert repo.remove(1) is True
        assert store.get_item("tasks") == "[]"

    def test_persistence_failure_returns_false(self):
        repo = TaskRepository(TaskPersistence(FailingStore()))
        assert repo.remove(1) is False


class TestToggleComplete:
    def test_toggle_twice_restores_state(self, repo: TaskRepository):
        created = repo.create("Buy milk")
        assert created is not None
        assert repo.toggle_complete(created["id"]) is True
        assert repo.get(created["id"])["completed"] is True
        assert repo.toggle_complete(created["id"]) is True
        assert repo.get(created["id"])["completed"] is False

    def test_unknown_id_is_noop(self, repo: TaskRepository, store: InMemoryKeyValueStore):
        repo.create("Buy milk")
        before = store.get_item("tasks")
        assert repo.toggle_complete(42) is False
        assert store.get_item("tasks") == before
