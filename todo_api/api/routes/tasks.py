from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Path, status
from sqlalchemy.orm import Session

from todo_api.db.database import get_db
from todo_api.schemas.task import (
    MessageResponse,
    TaskCreate,
    TaskListResponse,
    TaskRead,
    TaskResponse,
    TaskUpdate,
)
from todo_api.services.task_service import TaskService

router = APIRouter(prefix="/todos", tags=["Tasks"])

TaskId = Annotated[int, Path(gt=0, description="Task identifier")]


def get_task_service(db: Annotated[Session, Depends(get_db)]) -> TaskService:
    return TaskService(db)


Service = Annotated[TaskService, Depends(get_task_service)]


@router.get("", response_model=TaskListResponse)
def list_tasks(service: Service) -> TaskListResponse:
    """List all tasks, newest first."""
    tasks = service.list_tasks()
    return TaskListResponse(data=[TaskRead.model_validate(t) for t in tasks])


@router.get("/{task_id}", response_model=TaskResponse)
def get_task(task_id: TaskId, service: Service) -> TaskResponse:
    task = service.get_task(task_id)
    return TaskResponse(data=TaskRead.model_validate(task))


@router.post("", response_model=TaskResponse, status_code=status.HTTP_201_CREATED)
def create_task(payload: TaskCreate, service: Service) -> TaskResponse:
    """Create a task.

    Returns:
        TaskResponse: The stored task, including its id and timestamps.
    """
    task = service.create_task(
        title=payload.title,
        description=payload.description,
        is_done=payload.is_done,
    )
    return TaskResponse(message="Task created", data=TaskRead.model_validate(task))


@router.put("/{task_id}", response_model=TaskResponse)
def update_task(task_id: TaskId, payload: TaskUpdate, service: Service) -> TaskResponse:
    """Update the fields present in the request body.

    Fields omitted from the JSON body are left untouched; an explicit
    ``"description": null`` clears the description.
    """
    task = service.update_task(task_id, payload.model_dump(exclude_unset=True))
    return TaskResponse(message="Task updated", data=TaskRead.model_validate(task))


@router.delete("/{task_id}", response_model=MessageResponse)
def delete_task(task_id: TaskId, service: Service) -> MessageResponse:
    service.delete_task(task_id)
    return MessageResponse(message="Task deleted")


@router.patch("/{task_id}/toggle", response_model=TaskResponse)
def toggle_task(task_id: TaskId, service: Service) -> TaskResponse:
    """Flip a task between pending and done."""
    task = service.toggle_task(task_id)
    return TaskResponse(message="Task status updated", data=TaskRead.model_validate(task))
