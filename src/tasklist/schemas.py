from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from .rendering import DisplaySnapshot, RowAction, TaskRow


# PUBLIC_INTERFACE
class TaskCreate(BaseModel):
    """
    Schema for adding a new task. Blank text is accepted here and rejected by
    the repository, which reports it as a failed add.
    """

    model_config = ConfigDict(json_schema_extra={"example": {"text": "Buy milk"}})

    text: str = Field(..., description="Task text; surrounding whitespace is trimmed")


# PUBLIC_INTERFACE
class TaskUpdate(BaseModel):
    """
    Schema for updating an existing task.
    All fields are optional; only provided fields will be updated.
    """

    model_config = ConfigDict(json_schema_extra={"example": {"text": "Buy oat milk", "completed": True}})

    text: Optional[str] = Field(default=None, description="New task text")
    completed: Optional[bool] = Field(default=None, description="Completion status flag")


# PUBLIC_INTERFACE
class TaskOut(BaseModel):
    """
    Schema returned by the API for a task. Serialized with the stored field
    names, so createdAt keeps its camelCase key.
    """

    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "id": 1738331100123,
                "text": "Buy milk",
                "completed": False,
                "createdAt": "2025-01-31T13:45:00.123Z",
            }
        },
    )

    id: int = Field(..., description="Unique identifier of the task")
    text: str = Field(..., description="Task text")
    completed: bool = Field(..., description="Completion status flag")
    created_at: str = Field(..., alias="createdAt", description="ISO8601 UTC creation instant")


class RowActionOut(BaseModel):
    method: str = Field(..., description="HTTP method of the action")
    href: str = Field(..., description="Path the action is sent to")

    @classmethod
    def from_action(cls, action: RowAction) -> "RowActionOut":
        return cls(method=action.method, href=action.href)


class TaskRowOut(BaseModel):
    """A displayable task row."""

    id: int
    text: str
    completed: bool
    struck_through: bool = Field(..., description="Whether the text is shown struck through")
    toggle_action: RowActionOut
    remove_action: RowActionOut

    @classmethod
    def from_row(cls, row: TaskRow) -> "TaskRowOut":
        return cls(
            id=row.id,
            text=row.text,
            completed=row.completed,
            struck_through=row.struck_through,
            toggle_action=RowActionOut.from_action(row.toggle_action),
            remove_action=RowActionOut.from_action(row.remove_action),
        )


# PUBLIC_INTERFACE
class TaskListViewOut(BaseModel):
    """
    Current display state: rows in display order (or a placeholder when the
    list is empty) plus the pending-count badge.
    """

    rows: List[TaskRowOut] = Field(default_factory=list, description="Rows sorted by creation time")
    placeholder: Optional[str] = Field(default=None, description="Shown instead of rows when there are no tasks")
    pending_count: Optional[int] = Field(default=None, description="Number of tasks not yet completed")

    @classmethod
    def from_snapshot(cls, snapshot: DisplaySnapshot) -> "TaskListViewOut":
        return cls(
            rows=[TaskRowOut.from_row(r) for r in snapshot.rows],
            placeholder=snapshot.placeholder,
            pending_count=snapshot.pending_count,
        )
