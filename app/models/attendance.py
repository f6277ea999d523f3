"""
Attendance record — one row per employee per UTC calendar day.

The four timestamps are the only source of truth. ``status`` is derived on
read and ``working_minutes`` is recomputed before every flush, so neither
can drift from the timestamps. ``version`` is the optimistic-concurrency
counter: an UPDATE that lost a race matches zero rows and SQLAlchemy
raises ``StaleDataError``.
"""

from __future__ import annotations

from datetime import date, datetime, timezone

from sqlalchemy import (Column, Date, DateTime, ForeignKey, Index, Integer,
                        UniqueConstraint, event)

from app.core.dates import ensure_utc
from app.db.base import Base

STATUS_ABSENT = "absent"
STATUS_WORKING = "working"
STATUS_ON_BREAK = "onbreak"
STATUS_PRESENT = "present"


def derive_status(
    check_in: datetime | None,
    check_out: datetime | None,
    break_start: datetime | None,
    break_end: datetime | None,
) -> str:
    if check_in is None:
        return STATUS_ABSENT
    if check_out is None:
        on_break = break_start is not None and break_end is None
        return STATUS_ON_BREAK if on_break else STATUS_WORKING
    return STATUS_PRESENT


def compute_working_minutes(
    check_in: datetime | None,
    check_out: datetime | None,
    break_start: datetime | None,
    break_end: datetime | None,
) -> int:
    """Whole minutes between check-in and check-out minus the break, never negative."""
    if check_in is None or check_out is None:
        return 0
    total = ensure_utc(check_out) - ensure_utc(check_in)  # type: ignore[operator]
    if break_start is not None and break_end is not None:
        total -= ensure_utc(break_end) - ensure_utc(break_start)  # type: ignore[operator]
    # Clock skew can make the span negative
    return max(0, int(total.total_seconds() // 60))


class AttendanceRecord(Base):
    __tablename__ = "attendance_records"
    __table_args__ = (
        UniqueConstraint("employee_id", "attendance_date", name="uq_attendance_emp_day"),
        Index("ix_attendance_employee_day", "employee_id", "attendance_date"),
    )

    id: int = Column(Integer, primary_key=True, index=True)  # type: ignore[assignment]
    employee_id: int = Column(Integer, ForeignKey("employees.id"), nullable=False)  # type: ignore[assignment]
    attendance_date: date = Column(Date, nullable=False)  # type: ignore[assignment]
    check_in: datetime | None = Column(DateTime(timezone=True), nullable=True)  # type: ignore[assignment]
    check_out: datetime | None = Column(DateTime(timezone=True), nullable=True)  # type: ignore[assignment]
    break_start: datetime | None = Column(DateTime(timezone=True), nullable=True)  # type: ignore[assignment]
    break_end: datetime | None = Column(DateTime(timezone=True), nullable=True)  # type: ignore[assignment]
    working_minutes: int = Column(Integer, nullable=False, default=0)  # type: ignore[assignment]
    version: int = Column(Integer, nullable=False)  # type: ignore[assignment]
    created_at: datetime = Column(  # type: ignore[assignment]
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
    )
    updated_at: datetime = Column(  # type: ignore[assignment]
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    __mapper_args__ = {"version_id_col": version}

    @property
    def status(self) -> str:
        return derive_status(self.check_in, self.check_out, self.break_start, self.break_end)

    @property
    def on_break(self) -> bool:
        return self.break_start is not None and self.break_end is None

    @property
    def break_taken(self) -> bool:
        return self.break_start is not None and self.break_end is not None

    def refresh_working_minutes(self) -> None:
        if self.check_in is not None and self.check_out is not None:
            self.working_minutes = compute_working_minutes(
                self.check_in, self.check_out, self.break_start, self.break_end
            )
        elif self.working_minutes is None:
            self.working_minutes = 0


@event.listens_for(AttendanceRecord, "before_insert")
@event.listens_for(AttendanceRecord, "before_update")
def _recompute_working_minutes(_mapper, _connection, target: AttendanceRecord) -> None:
    target.refresh_working_minutes()
