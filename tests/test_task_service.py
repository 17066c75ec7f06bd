"""Unit tests for TaskService against an in-memory SQLite database."""

from __future__ import annotations

from unittest.mock import patch

import pytest
from sqlalchemy.exc import OperationalError

from todo_api.core.config import DatabaseSettings
from todo_api.core.errors import NotFoundAppError, StorageAppError, ValidationAppError
from todo_api.db.database import build_engine, build_session_factory, init_db
from todo_api.services.task_service import TaskService


@pytest.fixture
def service():
    engine = build_engine(DatabaseSettings(url="sqlite://"))
    init_db(engine)
    session = build_session_factory(engine)()
    try:
        yield TaskService(session)
    finally:
        session.close()
        engine.dispose()


def test_create_and_get(service: TaskService) -> None:
    task = service.create_task(title="Plan trip", description="Book hotel")

    fetched = service.get_task(task.id)

    assert fetched.title == "Plan trip"
    assert fetched.description == "Book hotel"
    assert fetched.is_done is False
    assert fetched.created_at is not None


def test_create_blank_title_raises(service: TaskService) -> None:
    with pytest.raises(ValidationAppError) as exc_info:
        service.create_task(title="  ")

    assert exc_info.value.code == "title_required"


def test_update_with_only_unknown_fields_raises(service: TaskService) -> None:
    task = service.create_task(title="a")

    with pytest.raises(ValidationAppError):
        service.update_task(task.id, {"id": 99, "created_at": None})


def test_update_rejects_null_is_done(service: TaskService) -> None:
    task = service.create_task(title="a")

    with pytest.raises(ValidationAppError) as exc_info:
        service.update_task(task.id, {"is_done": None})

    assert exc_info.value.code == "invalid_is_done"


def test_toggle_and_delete(service: TaskService) -> None:
    task = service.create_task(title="a")

    assert service.toggle_task(task.id).is_done is True
    service.delete_task(task.id)

    with pytest.raises(NotFoundAppError):
        service.get_task(task.id)
    assert service.list_tasks() == []


def test_missing_task_raises_not_found(service: TaskService) -> None:
    with pytest.raises(NotFoundAppError) as exc_info:
        service.toggle_task(12345)

    assert exc_info.value.details == {"task_id": 12345}


def test_database_failure_becomes_storage_error(service: TaskService) -> None:
    failure = OperationalError("SELECT 1", {}, Exception("database is locked"))

    with patch.object(service.db, "scalars", side_effect=failure):
        with pytest.raises(StorageAppError) as exc_info:
            service.list_tasks()

    assert exc_info.value.code == "storage_error"
    assert "locked" not in exc_info.value.message
