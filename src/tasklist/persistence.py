from __future__ import annotations

import json
import logging
from typing import Any, Dict, List, Sequence

from .models import TaskRecord
from .storage import KeyValueStore

logger = logging.getLogger(__name__)

DEFAULT_STORAGE_KEY = "tasks"


def _is_task_record(entry: Any) -> bool:
    """True for an object carrying every Task field with the right JSON type."""
    if not isinstance(entry, dict):
        return False
    task_id = entry.get("id")
    return (
        isinstance(task_id, int)
        and not isinstance(task_id, bool)
        and isinstance(entry.get("text"), str)
        and isinstance(entry.get("completed"), bool)
        and isinstance(entry.get("createdAt"), str)
    )


# PUBLIC_INTERFACE
class TaskPersistence:
    """
    Reads and writes the whole task collection as one JSON array stored under
    a single key of a KeyValueStore.

    Failures never escape this class:
    - load() turns a missing key, a store error or unparsable data into [],
      and drops entries lacking any Task field
    - save() turns serialization or store errors into False
    """

    def __init__(self, store: KeyValueStore, key: str = DEFAULT_STORAGE_KEY) -> None:
        self._store = store
        self._key = key

    @property
    def store(self) -> KeyValueStore:
        return self._store

    @property
    def key(self) -> str:
        return self._key

    def load(self) -> List[TaskRecord]:
        """Return the stored collection, or an empty list if there is none."""
        try:
            raw = self._store.get_item(self._key)
        except Exception:
            logger.warning("Reading %r from %s failed; using empty collection", self._key,
                           self._store.backend_name, exc_info=True)
            return []
        if raw is None:
            return []

        try:
            data: Any = json.loads(raw)
        except (TypeError, ValueError):
            logger.warning("Stored value under %r is not valid JSON; using empty collection", self._key)
            return []
        if not isinstance(data, list):
            logger.warning("Stored value under %r is not a list; using empty collection", self._key)
            return []

        records: List[TaskRecord] = [entry for entry in data if _is_task_record(entry)]
        if len(records) != len(data):
            logger.warning("Dropped %d malformed entries under %r", len(data) - len(records), self._key)
        logger.debug("Loaded %d tasks from %r", len(records), self._key)
        return records

    def save(self, tasks: Sequence[TaskRecord]) -> bool:
        """Replace the stored collection with tasks. Returns False on any failure."""
        try:
            payload = self.serialize(tasks)
            self._store.set_item(self._key, payload)
        except Exception:
            logger.exception("Error saving %d tasks under %r", len(tasks), self._key)
            return False
        logger.debug("Saved %d tasks under %r", len(tasks), self._key)
        return True

    @staticmethod
    def serialize(tasks: Sequence[TaskRecord]) -> str:
        """
        Compact, deterministic JSON for a collection. Raises TypeError/ValueError
        for values JSON cannot represent.
        """
        items: List[Dict[str, Any]] = [dict(t) for t in tasks]
        return json.dumps(items, separators=(",", ":"), ensure_ascii=False, allow_nan=False)
