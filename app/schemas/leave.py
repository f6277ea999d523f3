"""Pydantic schemas for leave requests."""

from __future__ import annotations

from datetime import date, datetime

from pydantic import BaseModel, Field, field_validator, model_validator

from app.models.leave import LEAVE_APPROVED, LEAVE_REJECTED, LEAVE_TYPES


class LeaveCreate(BaseModel):
    from_date: date
    to_date: date
    leave_type: str
    reason: str | None = Field(default=None, max_length=500)

    @field_validator("leave_type")
    @classmethod
    def _leave_type(cls, v: str) -> str:
        if v not in LEAVE_TYPES:
            raise ValueError(f"Leave type must be one of: {', '.join(LEAVE_TYPES)}")
        return v

    @model_validator(mode="after")
    def _ordered(self) -> "LeaveCreate":
        if self.to_date < self.from_date:
            raise ValueError("to_date must not be before from_date")
        return self


class LeaveReview(BaseModel):
    status: str

    @field_validator("status")
    @classmethod
    def _status(cls, v: str) -> str:
        if v not in (LEAVE_APPROVED, LEAVE_REJECTED):
            raise ValueError(f"Status must be {LEAVE_APPROVED} or {LEAVE_REJECTED}")
        return v


class LeaveRead(BaseModel):
    id: int
    employee_id: int
    from_date: date
    to_date: date
    leave_type: str
    status: str
    reason: str | None
    created_at: datetime | None

    model_config = {"from_attributes": True}
