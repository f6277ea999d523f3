"""Pydantic schemas for attendance snapshots and admin corrections."""

from __future__ import annotations

from datetime import date, datetime

from pydantic import BaseModel, Field

from app.core.dates import ensure_utc
from app.models.attendance import AttendanceRecord


def _iso(ts: datetime | None) -> str | None:
    return ensure_utc(ts).isoformat() if ts is not None else None  # type: ignore[union-attr]


class AttendanceSnapshot(BaseModel):
    id: int
    employee_id: int
    date: str  # YYYY-MM-DD
    check_in: str | None = None
    check_out: str | None = None
    break_start: str | None = None
    break_end: str | None = None
    working_minutes: int = 0
    status: str

    @classmethod
    def from_record(cls, record: AttendanceRecord) -> "AttendanceSnapshot":
        return cls(
            id=record.id,
            employee_id=record.employee_id,
            date=record.attendance_date.isoformat(),
            check_in=_iso(record.check_in),
            check_out=_iso(record.check_out),
            break_start=_iso(record.break_start),
            break_end=_iso(record.break_end),
            working_minutes=record.working_minutes or 0,
            status=record.status,
        )


class AttendanceUpsert(BaseModel):
    """Admin correction of one employee-day. Omitted timestamps are cleared."""

    employee_id: int = Field(gt=0)
    attendance_date: date
    check_in: datetime | None = None
    check_out: datetime | None = None
    break_start: datetime | None = None
    break_end: datetime | None = None


# ── System ──────────────────────────────────────────────────────────
class HealthResponse(BaseModel):
    db: bool


class StatusResponse(BaseModel):
    total_employees: int
    today_attendance: int
    status: str
