"""
Rendering of the task collection into display rows and the pending counter.

The pure part (sort_for_display, build_rows, count_pending) maps a task
sequence to row descriptors. render() and render_pending_count() push those
values into display targets, which are plain thread-safe holders the HTML and
JSON adapters read from. A missing target is never an error.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from threading import RLock
from typing import Iterable, List, Optional, Sequence, Tuple

from .models import TaskRecord
from .utils import parse_timestamp

DEFAULT_EMPTY_TEXT = "No tasks found"
ACTIONS_PREFIX = "/api/v1/tasks"

_EARLIEST = datetime.min.replace(tzinfo=timezone.utc)


@dataclass(frozen=True)
class RowAction:
    """An invocable action attached to a row: HTTP method plus target path."""

    method: str
    href: str


@dataclass(frozen=True)
class TaskRow:
    """Everything needed to display one task."""

    id: int
    text: str
    completed: bool
    struck_through: bool
    toggle_action: RowAction
    remove_action: RowAction


@dataclass(frozen=True)
class DisplaySnapshot:
    """What the list and the counter show after one refresh."""

    rows: Tuple[TaskRow, ...] = ()
    placeholder: Optional[str] = None
    pending_count: Optional[int] = None


def _display_key(task: TaskRecord) -> Tuple[bool, datetime]:
    parsed = parse_timestamp(task.get("createdAt"))
    # Unparsable timestamps sort first; sorted() keeps their relative order.
    return (parsed is not None, parsed or _EARLIEST)


# PUBLIC_INTERFACE
def sort_for_display(tasks: Iterable[TaskRecord]) -> List[TaskRecord]:
    """Stable ascending sort on createdAt."""
    return sorted(tasks, key=_display_key)


# PUBLIC_INTERFACE
def build_row(task: TaskRecord, actions_prefix: str = ACTIONS_PREFIX) -> TaskRow:
    task_id = task["id"]
    completed = bool(task.get("completed", False))
    return TaskRow(
        id=task_id,
        text=str(task.get("text", "")),
        completed=completed,
        struck_through=completed,
        toggle_action=RowAction("POST", f"{actions_prefix}/{task_id}/toggle"),
        remove_action=RowAction("DELETE", f"{actions_prefix}/{task_id}"),
    )


# PUBLIC_INTERFACE
def build_rows(tasks: Iterable[TaskRecord], actions_prefix: str = ACTIONS_PREFIX) -> List[TaskRow]:
    """Row descriptors for tasks in display order."""
    return [build_row(t, actions_prefix) for t in sort_for_display(tasks)]


# PUBLIC_INTERFACE
def count_pending(tasks: Iterable[TaskRecord]) -> int:
    return sum(1 for t in tasks if not t.get("completed", False))


# PUBLIC_INTERFACE
class TaskListView:
    """Display target for the task list: either rows or a single placeholder."""

    def __init__(self) -> None:
        self._lock = RLock()
        self._rows: List[TaskRow] = []
        self._placeholder: Optional[str] = None

    def clear(self) -> None:
        with self._lock:
            self._rows = []
            self._placeholder = None

    def append(self, row: TaskRow) -> None:
        with self._lock:
            self._placeholder = None
            self._rows.append(row)

    def show_placeholder(self, text: str) -> None:
        with self._lock:
            self._rows = []
            self._placeholder = text

    @property
    def rows(self) -> Tuple[TaskRow, ...]:
        with self._lock:
            return tuple(self._rows)

    @property
    def placeholder(self) -> Optional[str]:
        with self._lock:
            return self._placeholder


# PUBLIC_INTERFACE
class PendingCounterView:
    """Display target for the pending-count badge."""

    def __init__(self) -> None:
        self._lock = RLock()
        self._value: Optional[int] = None

    def set(self, value: int) -> None:
        with self._lock:
            self._value = value

    @property
    def value(self) -> Optional[int]:
        with self._lock:
            return self._value


# PUBLIC_INTERFACE
class InputField:
    """The text input new tasks are typed into."""

    def __init__(self, value: str = "") -> None:
        self.value = value

    def clear(self) -> None:
        self.value = ""


@dataclass
class DisplayTargets:
    """The display targets a coordinator renders into; any of them may be absent."""

    task_list: Optional[TaskListView] = field(default_factory=TaskListView)
    pending_counter: Optional[PendingCounterView] = field(default_factory=PendingCounterView)
    task_input: Optional[InputField] = field(default_factory=InputField)

    def snapshot(self) -> DisplaySnapshot:
        return DisplaySnapshot(
            rows=self.task_list.rows if self.task_list else (),
            placeholder=self.task_list.placeholder if self.task_list else None,
            pending_count=self.pending_counter.value if self.pending_counter else None,
        )


# PUBLIC_INTERFACE
def render(
    tasks: Sequence[TaskRecord],
    target: Optional[TaskListView],
    empty_text: str = DEFAULT_EMPTY_TEXT,
) -> None:
    """Replace the list contents with rows for tasks, or the placeholder if there are none."""
    if target is None:
        return
    target.clear()
    if not tasks:
        target.show_placeholder(empty_text)
        return
    for row in build_rows(tasks):
        target.append(row)


# PUBLIC_INTERFACE
def render_pending_count(tasks: Sequence[TaskRecord], target: Optional[PendingCounterView]) -> None:
    if target is None:
        return
    target.set(count_pending(tasks))
