from __future__ import annotations

import logging
from functools import lru_cache
from threading import RLock
from typing import Any, Mapping, Optional

from .models import TaskRecord
from .rendering import (
    DEFAULT_EMPTY_TEXT,
    DisplaySnapshot,
    DisplayTargets,
    render,
    render_pending_count,
)
from .repositories import TaskRepository, get_repository
from .settings import get_settings

logger = logging.getLogger(__name__)


# PUBLIC_INTERFACE
class TaskCoordinator:
    """
    Entry points for user actions (add, toggle, remove, initial load).

    Each action calls the repository and then refresh(), which reads the
    collection once and renders both the list and the pending counter from
    that same snapshot. Actions are serialized with a lock so one
    read-modify-write-render cycle finishes before the next starts.
    """

    def __init__(
        self,
        repository: TaskRepository,
        targets: Optional[DisplayTargets] = None,
        empty_text: str = DEFAULT_EMPTY_TEXT,
    ) -> None:
        self._repo = repository
        self._targets = targets if targets is not None else DisplayTargets()
        self._empty_text = empty_text
        self._lock = RLock()

    @property
    def repository(self) -> TaskRepository:
        return self._repo

    @property
    def targets(self) -> DisplayTargets:
        return self._targets

    def initialize(self) -> DisplaySnapshot:
        """Initial render on application start."""
        snapshot = self.refresh()
        logger.info("Task list initialized pending=%s", snapshot.pending_count)
        return snapshot

    def refresh(self) -> DisplaySnapshot:
        with self._lock:
            tasks = self._repo.list()
            render(tasks, self._targets.task_list, self._empty_text)
            render_pending_count(tasks, self._targets.pending_counter)
            return self._targets.snapshot()

    def on_add(self, input_text: Optional[str] = None) -> Optional[TaskRecord]:
        """
        Add a task from input_text, or from the input field when omitted.
        On success the input field is cleared and the display refreshed;
        on failure nothing changes.
        """
        with self._lock:
            task_input = self._targets.task_input
            if input_text is None:
                input_text = task_input.value if task_input is not None else ""
            created = self._repo.create(input_text)
            if created is None:
                return None
            if task_input is not None:
                task_input.clear()
            self.refresh()
            return created

    def on_update(self, task_id: int, patch: Mapping[str, Any]) -> bool:
        with self._lock:
            updated = self._repo.update(task_id, patch)
            if updated:
                self.refresh()
            return updated

    def on_toggle(self, task_id: int) -> bool:
        with self._lock:
            toggled = self._repo.toggle_complete(task_id)
            self.refresh()
            return toggled

    def on_remove(self, task_id: int) -> bool:
        with self._lock:
            removed = self._repo.remove(task_id)
            self.refresh()
            return removed


# PUBLIC_INTERFACE
@lru_cache(maxsize=1)
def get_coordinator() -> TaskCoordinator:
    """
    Process-wide coordinator wired from settings. Cached so every request
    renders into the same display targets and storage.
    """
    settings = get_settings()
    return TaskCoordinator(get_repository(settings), empty_text=settings.empty_list_text)
