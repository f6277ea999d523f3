"""Pydantic schemas for monthly metrics and performance records."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from app.core.dates import Month


class PerformanceCreate(BaseModel):
    employee_id: int = Field(gt=0)
    month: Month
    year: int = Field(ge=1970, le=9999)
    achievements: str | None = Field(default=None, max_length=5000)


class PerformanceUpdate(BaseModel):
    achievements: str | None = Field(default=None, max_length=5000)
    month: Month | None = None
    year: int | None = Field(default=None, ge=1970, le=9999)


class PerformanceRead(BaseModel):
    id: int
    employee_id: int
    month: str
    year: int
    attendance_score: float
    leave_score: float
    task_score: float
    performance: float
    present_days: int
    total_days: int
    leave_days: float
    tasks_completed: int
    total_tasks: int
    achievements: str | None
    created_at: datetime | None
    updated_at: datetime | None

    model_config = {"from_attributes": True}


# ── Employee details (admin dashboard) ─────────────────────────────
class EmployeeSummary(BaseModel):
    id: int
    name: str
    email: str | None
    department: str | None
    position: str | None

    model_config = {"from_attributes": True}


class AttendanceMetrics(BaseModel):
    present_days: int
    total_days: int
    attendance_score: float


class LeaveMetrics(BaseModel):
    leave_days: float
    leave_score: float


class TaskMetrics(BaseModel):
    completed_tasks: int
    total_tasks: int
    task_score: float


class EmployeeDetailsResponse(BaseModel):
    employee: EmployeeSummary
    month: str
    year: int
    attendance: AttendanceMetrics
    leave: LeaveMetrics
    tasks: TaskMetrics
    performance: float


class DeleteResponse(BaseModel):
    success: bool
    message: str
