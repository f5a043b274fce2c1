from __future__ import annotations

from typing import TypedDict


# PUBLIC_INTERFACE
class TaskRecord(TypedDict):
    """
    A single persisted task, stored exactly in this shape inside the JSON
    collection.

    Fields:
    - id: Unique integer identifier, derived from the creation instant (ms)
    - text: Non-empty trimmed task text
    - completed: Boolean completion flag
    - createdAt: ISO8601 UTC creation instant, e.g. '2025-01-31T13:45:00.123Z'
    """

    id: int
    text: str
    completed: bool
    createdAt: str


# PUBLIC_INTERFACE
class TaskPatch(TypedDict, total=False):
    """Partial set of mutable task fields accepted by the repository update."""

    text: str
    completed: bool


MUTABLE_FIELDS = frozenset({"text", "completed"})
