"""
Attendance endpoints — the employee's daily check-in / break / check-out
cycle and the admin's view and manual corrections.

Every transition commits first; the admin notification is queued as a
background task afterwards so its outcome cannot affect the response.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from datetime import date, datetime, timezone

from fastapi import APIRouter, BackgroundTasks, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.v1.deps import get_db, get_dispatcher, require_admin, require_employee
from app.core.config import settings
from app.models.attendance import AttendanceRecord
from app.models.employee import Employee
from app.models.user import User
from app.schemas.attendance import AttendanceSnapshot, AttendanceUpsert
from app.services import attendance as attendance_service
from app.services.notifications import NotificationDispatcher
from app.services.performance import get_employee

router = APIRouter(tags=["attendance"])
logger = logging.getLogger(__name__)

Transition = Callable[[AsyncSession, int, datetime], Awaitable[AttendanceRecord]]


async def _run_transition(
    transition: Transition,
    verb: str,
    employee: Employee,
    db: AsyncSession,
    background_tasks: BackgroundTasks,
    dispatcher: NotificationDispatcher,
) -> AttendanceSnapshot:
    record = await transition(db, employee.id, datetime.now(timezone.utc))
    background_tasks.add_task(
        dispatcher.notify_admins,
        "attendance",
        f"{employee.name} has {verb}.",
        record.id,
        "Attendance",
    )
    return AttendanceSnapshot.from_record(record)


# ── Employee actions ────────────────────────────────────────────────
@router.post("/employee/attendance/check-in", response_model=AttendanceSnapshot)
async def check_in(
    background_tasks: BackgroundTasks,
    employee: Employee = Depends(require_employee),
    db: AsyncSession = Depends(get_db),
    dispatcher: NotificationDispatcher = Depends(get_dispatcher),
) -> AttendanceSnapshot:
    return await _run_transition(
        attendance_service.check_in, "checked in", employee, db, background_tasks, dispatcher
    )


@router.post("/employee/attendance/break-in", response_model=AttendanceSnapshot)
async def break_in(
    background_tasks: BackgroundTasks,
    employee: Employee = Depends(require_employee),
    db: AsyncSession = Depends(get_db),
    dispatcher: NotificationDispatcher = Depends(get_dispatcher),
) -> AttendanceSnapshot:
    return await _run_transition(
        attendance_service.break_in, "started a break", employee, db, background_tasks, dispatcher
    )


@router.post("/employee/attendance/break-out", response_model=AttendanceSnapshot)
async def break_out(
    background_tasks: BackgroundTasks,
    employee: Employee = Depends(require_employee),
    db: AsyncSession = Depends(get_db),
    dispatcher: NotificationDispatcher = Depends(get_dispatcher),
) -> AttendanceSnapshot:
    return await _run_transition(
        attendance_service.break_out, "ended a break", employee, db, background_tasks, dispatcher
    )


@router.post("/employee/attendance/check-out", response_model=AttendanceSnapshot)
async def check_out(
    background_tasks: BackgroundTasks,
    employee: Employee = Depends(require_employee),
    db: AsyncSession = Depends(get_db),
    dispatcher: NotificationDispatcher = Depends(get_dispatcher),
) -> AttendanceSnapshot:
    return await _run_transition(
        attendance_service.check_out, "checked out", employee, db, background_tasks, dispatcher
    )


@router.get("/employee/attendance", response_model=list[AttendanceSnapshot])
async def my_attendance(
    limit: int = Query(default=settings.ATTENDANCE_HISTORY_LIMIT, ge=1, le=366),
    employee: Employee = Depends(require_employee),
    db: AsyncSession = Depends(get_db),
) -> list[AttendanceSnapshot]:
    """The caller's most recent days, newest first."""
    records = await attendance_service.list_attendance(db, employee.id, limit=limit)
    return [AttendanceSnapshot.from_record(r) for r in records]


# ── Admin ───────────────────────────────────────────────────────────
@router.get("/admin/attendance", response_model=list[AttendanceSnapshot])
async def list_attendance(
    employee_id: int | None = Query(default=None),
    day: date | None = Query(default=None, alias="date"),
    limit: int = Query(default=100, ge=1, le=1000),
    db: AsyncSession = Depends(get_db),
    _admin: User = Depends(require_admin),
) -> list[AttendanceSnapshot]:
    records = await attendance_service.list_attendance(db, employee_id, day, limit)
    return [AttendanceSnapshot.from_record(r) for r in records]


@router.put("/admin/attendance", response_model=AttendanceSnapshot)
async def upsert_attendance(
    body: AttendanceUpsert,
    db: AsyncSession = Depends(get_db),
    _admin: User = Depends(require_admin),
) -> AttendanceSnapshot:
    """Create or overwrite one employee-day (manual correction)."""
    await get_employee(db, body.employee_id)
    record = await attendance_service.upsert_attendance(db, body)
    return AttendanceSnapshot.from_record(record)
