from __future__ import annotations

import os

import pytest

# Ensure we default to memory backend for tests to avoid filesystem dependencies
os.environ.setdefault("STORAGE_BACKEND", "memory")

from tasklist.coordinator import TaskCoordinator  # noqa: E402
from tasklist.persistence import TaskPersistence  # noqa: E402
from tasklist.rendering import DisplayTargets  # noqa: E402
from tasklist.repositories import TaskRepository  # noqa: E402
from tasklist.storage import InMemoryKeyValueStore  # noqa: E402

from .fakes import StepClock  # noqa: E402


@pytest.fixture()
def store() -> InMemoryKeyValueStore:
    return InMemoryKeyValueStore()


@pytest.fixture()
def persistence(store: InMemoryKeyValueStore) -> TaskPersistence:
    return TaskPersistence(store)


@pytest.fixture()
def clock() -> StepClock:
    return StepClock()


@pytest.fixture()
def repo(persistence: TaskPersistence, clock: StepClock) -> TaskRepository:
    """Repository over an in-memory store with one second between creations."""
    return TaskRepository(persistence, clock=clock)


@pytest.fixture()
def targets() -> DisplayTargets:
    return DisplayTargets()


@pytest.fixture()
def coordinator(repo: TaskRepository, targets: DisplayTargets) -> TaskCoordinator:
    return TaskCoordinator(repo, targets)
