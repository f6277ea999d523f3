"""
Monthly aggregation and performance scoring.

For one employee and one calendar month ``[start, end)``:

* attendance score — present days / days in month * 100
* leave score      — 100 - 10 per weighted leave day, 10 once above ten days
* task score       — completed / assigned tasks created in the month * 100

The composite is ``0.3 * attendance + 0.2 * leave + 0.5 * task``.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import timedelta

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.dates import Month, month_window
from app.core.exceptions import NotFoundError
from app.models.attendance import STATUS_PRESENT, AttendanceRecord
from app.models.employee import Employee
from app.models.leave import LEAVE_APPROVED, UNPAID_LEAVE, LeaveRequest
from app.models.performance import PerformanceRecord
from app.models.task import TASK_COMPLETED, Task

logger = logging.getLogger(__name__)

ATTENDANCE_WEIGHT = 0.3
LEAVE_WEIGHT = 0.2
TASK_WEIGHT = 0.5

UNPAID_LEAVE_MULTIPLIER = 1.5
LEAVE_DAY_PENALTY = 10
LEAVE_DAYS_CAP = 10
LEAVE_SCORE_FLOOR = 10


# ── Pure scoring ────────────────────────────────────────────────────
def attendance_score(present_days: int, total_days: int) -> float:
    if total_days <= 0:
        return 0.0
    return present_days / total_days * 100


def leave_days_for(leaves: Iterable[LeaveRequest]) -> float:
    """Inclusive day count of each leave, unpaid leave weighted x1.5."""
    total = 0.0
    for leave in leaves:
        days = (leave.to_date - leave.from_date).days + 1
        weight = UNPAID_LEAVE_MULTIPLIER if leave.leave_type == UNPAID_LEAVE else 1
        total += days * weight
    return total


def leave_score(leave_days: float) -> float:
    if leave_days > LEAVE_DAYS_CAP:
        return float(LEAVE_SCORE_FLOOR)
    return 100 - leave_days * LEAVE_DAY_PENALTY


def task_score(completed_tasks: int, total_tasks: int) -> float:
    if total_tasks <= 0:
        return 0.0
    return completed_tasks / total_tasks * 100


def composite_score(attendance: float, leave: float, task: float) -> float:
    return attendance * ATTENDANCE_WEIGHT + leave * LEAVE_WEIGHT + task * TASK_WEIGHT


@dataclass(frozen=True)
class MonthlyMetrics:
    present_days: int
    total_days: int
    attendance_score: float
    leave_days: float
    leave_score: float
    tasks_completed: int
    total_tasks: int
    task_score: float

    @property
    def performance(self) -> float:
        return composite_score(self.attendance_score, self.leave_score, self.task_score)


# ── Aggregation ─────────────────────────────────────────────────────
async def get_employee(db: AsyncSession, employee_id: int) -> Employee:
    employee = await db.get(Employee, employee_id)
    if employee is None:
        raise NotFoundError("Employee not found")
    return employee


async def compute_monthly_metrics(
    db: AsyncSession, employee_id: int, month: Month, year: int
) -> MonthlyMetrics:
    """Reduce one month of attendance, approved leave and tasks to sub-scores.

    Read-only: calling it twice over unchanged data gives identical results.
    """
    start, end = month_window(month, year)
    total_days = math.ceil((end - start) / timedelta(days=1))

    att_result = await db.execute(
        select(AttendanceRecord).where(
            AttendanceRecord.employee_id == employee_id,
            AttendanceRecord.attendance_date >= start.date(),
            AttendanceRecord.attendance_date < end.date(),
        )
    )
    present_days = sum(1 for r in att_result.scalars().all() if r.status == STATUS_PRESENT)

    # Leaves overlapping the window count in full
    leave_result = await db.execute(
        select(LeaveRequest).where(
            LeaveRequest.employee_id == employee_id,
            LeaveRequest.status == LEAVE_APPROVED,
            LeaveRequest.from_date < end.date(),
            LeaveRequest.to_date >= start.date(),
        )
    )
    leave_days = leave_days_for(leave_result.scalars().all())

    task_result = await db.execute(
        select(Task.status).where(
            Task.employee_id == employee_id,
            Task.created_at >= start,
            Task.created_at < end,
        )
    )
    statuses = list(task_result.scalars().all())
    completed = sum(1 for s in statuses if s == TASK_COMPLETED)

    return MonthlyMetrics(
        present_days=present_days,
        total_days=total_days,
        attendance_score=attendance_score(present_days, total_days),
        leave_days=leave_days,
        leave_score=leave_score(leave_days),
        tasks_completed=completed,
        total_tasks=len(statuses),
        task_score=task_score(completed, len(statuses)),
    )


async def compute_employee_details(
    db: AsyncSession, employee_id: int, month: Month, year: int
) -> tuple[Employee, MonthlyMetrics]:
    employee = await get_employee(db, employee_id)
    return employee, await compute_monthly_metrics(db, employee_id, month, year)


# ── Performance records ─────────────────────────────────────────────
def _apply_metrics(record: PerformanceRecord, metrics: MonthlyMetrics) -> None:
    record.attendance_score = metrics.attendance_score
    record.leave_score = metrics.leave_score
    record.task_score = metrics.task_score
    record.performance = metrics.performance
    record.present_days = metrics.present_days
    record.total_days = metrics.total_days
    record.leave_days = metrics.leave_days
    record.tasks_completed = metrics.tasks_completed
    record.total_tasks = metrics.total_tasks


async def get_performance_record(db: AsyncSession, record_id: int) -> PerformanceRecord:
    record = await db.get(PerformanceRecord, record_id)
    if record is None:
        raise NotFoundError("Performance record not found")
    return record


async def list_performance_records(
    db: AsyncSession, employee_id: int | None = None
) -> list[PerformanceRecord]:
    query = select(PerformanceRecord).order_by(
        PerformanceRecord.created_at.desc(), PerformanceRecord.id.desc()
    )
    if employee_id is not None:
        query = query.where(PerformanceRecord.employee_id == employee_id)
    result = await db.execute(query)
    return list(result.scalars().all())


async def create_performance_record(
    db: AsyncSession,
    employee_id: int,
    month: Month,
    year: int,
    achievements: str | None = None,
) -> PerformanceRecord:
    await get_employee(db, employee_id)
    metrics = await compute_monthly_metrics(db, employee_id, month, year)

    record = PerformanceRecord(
        employee_id=employee_id,
        month=month.value,
        year=year,
        achievements=achievements,
    )
    _apply_metrics(record, metrics)
    db.add(record)
    await db.commit()
    await db.refresh(record)
    logger.info(
        "Performance %.2f recorded for employee %d (%s %d)",
        record.performance, employee_id, month.value, year,
    )
    return record


async def update_performance_record(
    db: AsyncSession, record_id: int, changes: dict
) -> PerformanceRecord:
    """Apply a partial update.

    ``changes`` holds only the fields the caller sent. If ``month`` or
    ``year`` is among them every score is recomputed for the resulting
    period; otherwise only ``achievements`` changes.
    """
    record = await get_performance_record(db, record_id)

    if "achievements" in changes:
        record.achievements = changes["achievements"]

    new_month = changes.get("month")
    new_year = changes.get("year")
    if new_month is not None or new_year is not None:
        month = Month(new_month) if new_month is not None else Month(record.month)
        year = new_year if new_year is not None else record.year
        metrics = await compute_monthly_metrics(db, record.employee_id, month, year)
        record.month = month.value
        record.year = year
        _apply_metrics(record, metrics)

    await db.commit()
    await db.refresh(record)
    logger.info("Updated performance record %d", record_id)
    return record


async def delete_performance_record(db: AsyncSession, record_id: int) -> None:
    record = await get_performance_record(db, record_id)
    await db.delete(record)
    await db.commit()
    logger.info("Deleted performance record %d", record_id)
