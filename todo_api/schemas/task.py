"""Pydantic schemas for task requests and responses."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class TaskCreate(BaseModel):
    """Payload for creating a task."""

    model_config = ConfigDict(str_strip_whitespace=True)

    title: str = Field(
        ..., min_length=1, max_length=255, description="Short task title (required)."
    )
    description: str | None = Field(
        default=None, description="Optional free-form details."
    )
    is_done: bool = Field(default=False, description="Whether the task starts completed.")


class TaskUpdate(BaseModel):
    """Partial update payload; only fields sent by the client are applied.

    ``description`` may be explicitly set to null to clear it.
    """

    model_config = ConfigDict(str_strip_whitespace=True)

    title: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = None
    is_done: bool | None = None


class TaskRead(BaseModel):
    """A task as stored in the ``tasks`` table."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    description: str | None = None
    is_done: bool
    created_at: datetime
    updated_at: datetime


class TaskResponse(BaseModel):
    """Envelope for single-task responses."""

    success: bool = True
    message: str | None = None
    data: TaskRead


class TaskListResponse(BaseModel):
    """Envelope for the task list."""

    success: bool = True
    data: list[TaskRead] = Field(default_factory=list)


class MessageResponse(BaseModel):
    """Envelope for responses without a payload (e.g., deletions)."""

    success: bool = True
    message: str
