from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Callable, List, Mapping, Optional

from .models import MUTABLE_FIELDS, TaskRecord
from .persistence import TaskPersistence
from .settings import Settings, get_settings
from .storage import InMemoryKeyValueStore, JsonFileKeyValueStore, KeyValueStore
from .utils import allocate_task_id, format_timestamp, utc_now

logger = logging.getLogger(__name__)


def _clean_text(text: Any) -> Optional[str]:
    """Trimmed text, or None when text is not a string or is blank."""
    if not isinstance(text, str):
        return None
    s = text.strip()
    return s or None


def _existing_ids(tasks: List[TaskRecord]) -> List[int]:
    return [t["id"] for t in tasks if isinstance(t.get("id"), int) and not isinstance(t.get("id"), bool)]


# PUBLIC_INTERFACE
class TaskRepository:
    """
    CRUD operations over the persisted task collection.

    Every operation loads the whole collection, changes it and saves it back
    through the TaskPersistence adapter. Nothing here raises: invalid input
    and storage failures come back as None/False.
    """

    def __init__(
        self,
        persistence: TaskPersistence,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._persistence = persistence
        self._clock = clock

    @property
    def persistence(self) -> TaskPersistence:
        return self._persistence

    def create(self, text: Any) -> Optional[TaskRecord]:
        """
        Create and persist a new task. Returns the created task, or None if
        text is blank or the collection could not be saved.
        """
        cleaned = _clean_text(text)
        if cleaned is None:
            logger.debug("Rejected task creation with blank text")
            return None

        tasks = self._persistence.load()
        now = self._clock()
        task: TaskRecord = {
            "id": allocate_task_id(now, _existing_ids(tasks)),
            "text": cleaned,
            "completed": False,
            "createdAt": format_timestamp(now),
        }
        tasks.append(task)
        if not self._persistence.save(tasks):
            return None
        logger.info("Created task id=%s", task["id"])
        return dict(task)  # type: ignore[return-value]

    def list(self) -> List[TaskRecord]:
        """Return the collection in storage order (copies)."""
        return [dict(t) for t in self._persistence.load()]  # type: ignore[misc]

    def get(self, task_id: int) -> Optional[TaskRecord]:
        """Return a task by id, or None if not found."""
        for task in self._persistence.load():
            if task.get("id") == task_id:
                return dict(task)  # type: ignore[return-value]
        return None

    def update(self, task_id: int, patch: Mapping[str, Any]) -> bool:
        """
        Merge patch over the task with task_id and persist the collection.

        Only 'text' and 'completed' can change; other keys are ignored. Returns
        False if the task does not exist, the patched text is blank, or saving
        failed.
        """
        tasks = self._persistence.load()
        index = next((i for i, t in enumerate(tasks) if t.get("id") == task_id), None)
        if index is None:
            return False

        changes = {k: v for k, v in patch.items() if k in MUTABLE_FIELDS}
        if "text" in changes:
            cleaned = _clean_text(changes["text"])
            if cleaned is None:
                logger.debug("Rejected update of task id=%s with blank text", task_id)
                return False
            changes["text"] = cleaned
        if "completed" in changes:
            changes["completed"] = bool(changes["completed"])

        updated = dict(tasks[index])
        updated.update(changes)
        tasks[index] = updated  # type: ignore[assignment]
        ok = self._persistence.save(tasks)
        if ok:
            logger.info("Updated task id=%s fields=%s", task_id, sorted(changes))
        return ok

    def remove(self, task_id: int) -> bool:
        """
        Remove the task with task_id. Succeeds even if no task matched; False
        only when the filtered collection could not be saved.
        """
        tasks = self._persistence.load()
        remaining = [t for t in tasks if t.get("id") != task_id]
        ok = self._persistence.save(remaining)
        if ok and len(remaining) != len(tasks):
            logger.info("Removed task id=%s", task_id)
        return ok

    def toggle_complete(self, task_id: int) -> bool:
        """
        Flip the completion flag of a task. Unknown ids are a no-op.
        Returns True when a toggle was persisted.
        """
        task = self.get(task_id)
        if task is None:
            return False
        return self.update(task_id, {"completed": not task.get("completed", False)})


# PUBLIC_INTERFACE
def build_store(settings: Settings) -> KeyValueStore:
    """
    Factory to return the configured key-value store based on settings.
    - memory: InMemoryKeyValueStore
    - file: JsonFileKeyValueStore at STORAGE_PATH
    - sqlite: SQLiteKeyValueStore at STORAGE_PATH
    """
    if settings.storage_backend == "file" and settings.storage_path:
        return JsonFileKeyValueStore(settings.storage_path)
    if settings.storage_backend == "sqlite" and settings.storage_path:
        from .db import SQLiteKeyValueStore

        return SQLiteKeyValueStore(settings.storage_path)
    return InMemoryKeyValueStore()


# PUBLIC_INTERFACE
def get_repository(settings: Optional[Settings] = None) -> TaskRepository:
    """Build a TaskRepository over the store and key selected by settings."""
    settings = settings or get_settings()
    store = build_store(settings)
    logger.info("Using %s task storage key=%r", store.backend_name, settings.storage_key)
    return TaskRepository(TaskPersistence(store, key=settings.storage_key))
