"""Task storage service wrapping CRUD over the ``tasks`` table.

All queries go through the SQLAlchemy ORM, so values are always bound as
parameters. Database failures are rolled back, logged, and surfaced as
StorageAppError; missing rows raise NotFoundAppError.
"""

from __future__ import annotations

import logging
from typing import Any

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from todo_api.core.errors import NotFoundAppError, StorageAppError, ValidationAppError
from todo_api.db.models import Task

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = ("title", "description", "is_done")


class TaskService:
    """CRUD operations on tasks bound to one database session."""

    def __init__(self, db: Session) -> None:
        self.db = db

    def _storage_error(self, operation: str, exc: SQLAlchemyError) -> StorageAppError:
        self.db.rollback()
        logger.error(
            "task_store.failed",
            extra={
                "operation": operation,
                "error_type": type(exc).__name__,
                "error_msg": str(exc),
            },
        )
        return StorageAppError(
            code="storage_error",
            message="The task store is unavailable. Please try again later.",
            details={"operation": operation},
        )

    def _get_or_404(self, task_id: int) -> Task:
        try:
            task = self.db.get(Task, task_id)
        except SQLAlchemyError as exc:
            raise self._storage_error("get", exc) from exc

        if task is None:
            raise NotFoundAppError(
                code="task_not_found",
                message="Task not found",
                details={"task_id": task_id},
            )
        return task

    def _commit(self, operation: str, task: Task | None = None) -> None:
        try:
            self.db.commit()
            if task is not None:
                self.db.refresh(task)
        except SQLAlchemyError as exc:
            raise self._storage_error(operation, exc) from exc

    def list_tasks(self) -> list[Task]:
        """Return every task, newest first."""
        stmt = select(Task).order_by(Task.created_at.desc(), Task.id.desc())
        try:
            return list(self.db.scalars(stmt))
        except SQLAlchemyError as exc:
            raise self._storage_error("list", exc) from exc

    def get_task(self, task_id: int) -> Task:
        return self._get_or_404(task_id)

    def create_task(
        self,
        *,
        title: str,
        description: str | None = None,
        is_done: bool = False,
    ) -> Task:
        """Insert a new task and return it with server-generated fields loaded.

        Raises:
            ValidationAppError: If the title is blank.
        """
        if not title or not title.strip():
            raise ValidationAppError(
                code="title_required",
                message="Task title is required",
                details={"field": "title"},
            )

        task = Task(title=title.strip(), description=description, is_done=bool(is_done))
        self.db.add(task)
        self._commit("create", task)

        logger.info("task.created", extra={"task_id": task.id})
        return task

    def update_task(self, task_id: int, fields: dict[str, Any]) -> Task:
        """Apply a partial update.

        Args:
            task_id: Target task id.
            fields: Mapping of field name to new value; unknown keys are ignored.

        Raises:
            ValidationAppError: If no updatable field is given or title is blank.
            NotFoundAppError: If the task does not exist.
        """
        changes = {k: v for k, v in fields.items() if k in UPDATABLE_FIELDS}
        if not changes:
            raise ValidationAppError(
                code="no_fields_to_update",
                message="No valid fields were provided to update",
                details={"hint": "Send at least one of: title, description, is_done"},
            )
        if "title" in changes and not (changes["title"] or "").strip():
            raise ValidationAppError(
                code="title_required",
                message="Task title cannot be empty",
                details={"field": "title"},
            )
        if "is_done" in changes and changes["is_done"] is None:
            raise ValidationAppError(
                code="invalid_is_done",
                message="is_done must be true or false",
                details={"field": "is_done"},
            )

        task = self._get_or_404(task_id)
        for name, value in changes.items():
            setattr(task, name, value.strip() if name == "title" else value)
        self._commit("update", task)

        logger.info(
            "task.updated",
            extra={"task_id": task.id, "fields": sorted(changes)},
        )
        return task

    def delete_task(self, task_id: int) -> None:
        task = self._get_or_404(task_id)
        self.db.delete(task)
        self._commit("delete")
        logger.info("task.deleted", extra={"task_id": task_id})

    def toggle_task(self, task_id: int) -> Task:
        """Flip the completion flag of a task."""
        task = self._get_or_404(task_id)
        task.is_done = not task.is_done
        self._commit("toggle", task)
        logger.info("task.toggled", extra={"task_id": task.id, "is_done": task.is_done})
        return task
