from __future__ import annotations

import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Response, status

from ..coordinator import TaskCoordinator, get_coordinator
from ..rendering import ACTIONS_PREFIX
from ..schemas import TaskCreate, TaskListViewOut, TaskOut, TaskUpdate

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix=ACTIONS_PREFIX,
    tags=["tasks"],
)


def _get_coordinator(coordinator: TaskCoordinator = Depends(get_coordinator)) -> TaskCoordinator:
    """
    Dependency wrapper for the coordinator to keep signatures clean.
    """
    return coordinator


def _require_task(coordinator: TaskCoordinator, task_id: int) -> None:
    if coordinator.repository.get(task_id) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Task not found")


# PUBLIC_INTERFACE
@router.post(
    "/",
    response_model=TaskOut,
    status_code=status.HTTP_201_CREATED,
    summary="Add Task",
    description="Add a new task and refresh the list and pending counter.",
    responses={
        201: {"description": "Task created successfully"},
        400: {"description": "Blank text or storage failure"},
    },
)
def add_task(payload: TaskCreate, coordinator: TaskCoordinator = Depends(_get_coordinator)) -> TaskOut:
    """
    Add a task. Blank text is a failed add, reported as 400.
    """
    created = coordinator.on_add(payload.text)
    if created is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Task was not created")
    return TaskOut(**created)  # type: ignore[arg-type]


# PUBLIC_INTERFACE
@router.get(
    "/",
    response_model=List[TaskOut],
    summary="List Tasks",
    description="Return every stored task in storage order.",
)
def list_tasks(coordinator: TaskCoordinator = Depends(_get_coordinator)) -> List[TaskOut]:
    return [TaskOut(**t) for t in coordinator.repository.list()]  # type: ignore[arg-type]


# PUBLIC_INTERFACE
@router.get(
    "/view",
    response_model=TaskListViewOut,
    summary="Task List View",
    description=(
        "Refresh and return the display state: rows sorted by creation time "
        "(or the empty-list placeholder) and the pending-count badge."
    ),
)
def get_view(coordinator: TaskCoordinator = Depends(_get_coordinator)) -> TaskListViewOut:
    return TaskListViewOut.from_snapshot(coordinator.refresh())


# PUBLIC_INTERFACE
@router.get(
    "/{task_id}",
    response_model=TaskOut,
    summary="Get Task",
    description="Get a single task by ID.",
    responses={
        200: {"description": "Task found"},
        404: {"description": "Task not found"},
    },
)
def get_task(task_id: int, coordinator: TaskCoordinator = Depends(_get_coordinator)) -> TaskOut:
    task = coordinator.repository.get(task_id)
    if task is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Task not found")
    return TaskOut(**task)  # type: ignore[arg-type]


# PUBLIC_INTERFACE
@router.patch(
    "/{task_id}",
    response_model=TaskOut,
    summary="Update Task",
    description="Partially update the text and/or completion flag of a task.",
    responses={
        200: {"description": "Task updated"},
        400: {"description": "Blank text or storage failure"},
        404: {"description": "Task not found"},
    },
)
def update_task(
    task_id: int, payload: TaskUpdate, coordinator: TaskCoordinator = Depends(_get_coordinator)
) -> TaskOut:
    """
    Partial update of a task. Fields sent as null are left unchanged.
    """
    _require_task(coordinator, task_id)
    patch = {k: v for k, v in payload.model_dump(exclude_unset=True).items() if v is not None}
    if not coordinator.on_update(task_id, patch):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Task was not updated")
    task = coordinator.repository.get(task_id)
    if task is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Task not found")
    return TaskOut(**task)  # type: ignore[arg-type]


# PUBLIC_INTERFACE
@router.post(
    "/{task_id}/toggle",
    response_model=TaskListViewOut,
    summary="Toggle Task",
    description="Flip the completion flag of a task and return the refreshed view.",
    responses={
        200: {"description": "Task toggled"},
        404: {"description": "Task not found"},
        503: {"description": "Task storage unavailable"},
    },
)
def toggle_task(task_id: int, coordinator: TaskCoordinator = Depends(_get_coordinator)) -> TaskListViewOut:
    if not coordinator.on_toggle(task_id):
        # Checked after the toggle: a concurrent remove may have won the lock first.
        _require_task(coordinator, task_id)
        logger.warning("Toggle of task id=%s was not persisted", task_id)
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Task storage unavailable")
    return TaskListViewOut.from_snapshot(coordinator.targets.snapshot())


# PUBLIC_INTERFACE
@router.delete(
    "/{task_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Remove Task",
    description="Remove a task by ID. Removing an unknown ID also succeeds.",
    responses={
        204: {"description": "Task removed (or did not exist)"},
        503: {"description": "Task storage unavailable"},
    },
)
def remove_task(task_id: int, coordinator: TaskCoordinator = Depends(_get_coordinator)) -> Response:
    if not coordinator.on_remove(task_id):
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Task storage unavailable")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
