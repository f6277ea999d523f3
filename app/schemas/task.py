"""Pydantic schemas for task assignment."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field, field_validator

from app.models.task import TASK_STATUSES


class TaskCreate(BaseModel):
    employee_id: int = Field(gt=0)
    project_id: int = Field(gt=0)
    description: str = Field(min_length=1, max_length=1000)


class TaskStatusUpdate(BaseModel):
    status: str

    @field_validator("status")
    @classmethod
    def _status(cls, v: str) -> str:
        if v not in TASK_STATUSES:
            raise ValueError(f"Status must be one of: {', '.join(TASK_STATUSES)}")
        return v


class TaskRead(BaseModel):
    id: int
    employee_id: int
    project_id: int
    description: str
    status: str
    created_at: datetime | None

    model_config = {"from_attributes": True}
