"""
Attendance state machine.

Per employee per UTC day: absent -> working -> onbreak -> working -> present.
Each transition reads today's record, checks its guard, sets exactly one
timestamp and commits. Guards fail with a ``DomainConflict`` before
anything is written. Concurrent writers are caught by the record's
version column and surface as ``ConcurrentModification``; two racing
first check-ins are caught by the (employee, day) unique constraint.
"""

from __future__ import annotations

import logging
from datetime import date, datetime

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.exc import StaleDataError

from app.core.dates import ensure_utc, utc_day
from app.core.exceptions import (AlreadyCheckedIn, AlreadyCheckedOut,
                                 AlreadyOnBreak, BreakAlreadyTaken,
                                 ConcurrentModification, InvalidInputError,
                                 NotCheckedIn, NotOnBreak, OnBreak)
from app.models.attendance import AttendanceRecord
from app.schemas.attendance import AttendanceUpsert

logger = logging.getLogger(__name__)


async def get_day_record(
    db: AsyncSession, employee_id: int, day: date
) -> AttendanceRecord | None:
    result = await db.execute(
        select(AttendanceRecord).where(
            AttendanceRecord.employee_id == employee_id,
            AttendanceRecord.attendance_date == day,
        )
    )
    return result.scalar_one_or_none()


async def _commit(db: AsyncSession, record: AttendanceRecord, action: str) -> AttendanceRecord:
    # Rollback expires the instance, read identifiers first
    record_id, employee_id = record.id, record.employee_id
    try:
        await db.commit()
    except StaleDataError as exc:
        await db.rollback()
        logger.warning(
            "Concurrent %s on attendance %s for employee %d", action, record_id, employee_id
        )
        raise ConcurrentModification() from exc
    logger.info(
        "Attendance %s for employee %d on %s (status=%s)",
        action, record.employee_id, record.attendance_date, record.status,
    )
    return record


async def _open_record(db: AsyncSession, employee_id: int, now: datetime) -> AttendanceRecord:
    """Today's record if the employee is checked in and not yet checked out."""
    record = await get_day_record(db, employee_id, utc_day(now))
    if record is None or record.check_in is None or record.check_out is not None:
        raise NotCheckedIn()
    return record


async def check_in(db: AsyncSession, employee_id: int, now: datetime) -> AttendanceRecord:
    day = utc_day(now)
    record = await get_day_record(db, employee_id, day)
    if record is not None and record.check_in is not None:
        raise AlreadyCheckedIn()

    if record is None:
        record = AttendanceRecord(employee_id=employee_id, attendance_date=day)
        db.add(record)
    record.check_in = now

    try:
        return await _commit(db, record, "check-in")
    except IntegrityError as exc:
        # Another request created today's record first
        await db.rollback()
        raise AlreadyCheckedIn() from exc


async def break_in(db: AsyncSession, employee_id: int, now: datetime) -> AttendanceRecord:
    record = await _open_record(db, employee_id, now)
    if record.on_break:
        raise AlreadyOnBreak()
    if record.break_taken:
        raise BreakAlreadyTaken()
    record.break_start = now
    return await _commit(db, record, "break-in")


async def break_out(db: AsyncSession, employee_id: int, now: datetime) -> AttendanceRecord:
    record = await _open_record(db, employee_id, now)
    if not record.on_break:
        raise NotOnBreak()
    record.break_end = now
    return await _commit(db, record, "break-out")


async def check_out(db: AsyncSession, employee_id: int, now: datetime) -> AttendanceRecord:
    record = await get_day_record(db, employee_id, utc_day(now))
    if record is None or record.check_in is None:
        raise NotCheckedIn()
    if record.check_out is not None:
        raise AlreadyCheckedOut()
    if record.on_break:
        raise OnBreak()
    record.check_out = now
    return await _commit(db, record, "check-out")


async def list_attendance(
    db: AsyncSession,
    employee_id: int | None = None,
    day: date | None = None,
    limit: int = 30,
) -> list[AttendanceRecord]:
    """Records newest day first, optionally narrowed to one employee and/or day."""
    query = select(AttendanceRecord).order_by(
        AttendanceRecord.attendance_date.desc(), AttendanceRecord.id.desc()
    )
    if employee_id is not None:
        query = query.where(AttendanceRecord.employee_id == employee_id)
    if day is not None:
        query = query.where(AttendanceRecord.attendance_date == day)
    result = await db.execute(query.limit(limit))
    return list(result.scalars().all())


def validate_timeline(
    check_in: datetime | None,
    check_out: datetime | None,
    break_start: datetime | None,
    break_end: datetime | None,
) -> None:
    """Reject timestamp sets that no sequence of transitions could produce."""
    if check_in is None and any(ts is not None for ts in (check_out, break_start, break_end)):
        raise InvalidInputError("check_in is required when other timestamps are set")
    if break_end is not None and break_start is None:
        raise InvalidInputError("break_end requires break_start")
    if check_out is not None and break_start is not None and break_end is None:
        raise InvalidInputError("A break in progress must end before check_out")

    ordered = [ensure_utc(ts) for ts in (check_in, break_start, break_end, check_out) if ts is not None]
    if any(later < earlier for earlier, later in zip(ordered, ordered[1:])):
        raise InvalidInputError(
            "Timestamps must satisfy check_in <= break_start <= break_end <= check_out"
        )


async def upsert_attendance(db: AsyncSession, body: AttendanceUpsert) -> AttendanceRecord:
    """Admin correction: replace the four timestamps of one employee-day."""
    validate_timeline(body.check_in, body.check_out, body.break_start, body.break_end)
    if body.check_in is not None and utc_day(body.check_in) != body.attendance_date:
        raise InvalidInputError("check_in must fall on attendance_date (UTC)")

    record = await get_day_record(db, body.employee_id, body.attendance_date)
    if record is None:
        record = AttendanceRecord(employee_id=body.employee_id, attendance_date=body.attendance_date)
        db.add(record)
    record.check_in = ensure_utc(body.check_in)
    record.check_out = ensure_utc(body.check_out)
    record.break_start = ensure_utc(body.break_start)
    record.break_end = ensure_utc(body.break_end)
    record.working_minutes = 0
    return await _commit(db, record, "upsert")
