"""
Health and status checks.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.v1.deps import get_current_active_user, get_db
from app.core.dates import utc_day, utc_now
from app.models.attendance import AttendanceRecord
from app.models.employee import Employee
from app.models.user import User
from app.schemas.attendance import HealthResponse, StatusResponse

router = APIRouter(tags=["system"])
logger = logging.getLogger(__name__)


@router.get("/health", response_model=HealthResponse)
async def health(db: AsyncSession = Depends(get_db)) -> HealthResponse:
    """Public health check — DB connectivity."""
    result = HealthResponse(db=False)
    try:
        await db.execute(select(1))
        result.db = True
    except Exception as e:
        logger.error("Health check DB failure: %s", e)
    return result


@router.get("/status", response_model=StatusResponse)
async def system_status(
    db: AsyncSession = Depends(get_db),
    _user: User = Depends(get_current_active_user),
) -> StatusResponse:
    """Active employee count and how many of them have a record today."""
    today = utc_day(utc_now())

    emp_count = await db.execute(
        select(func.count(Employee.id)).where(Employee.is_active.is_(True))
    )
    record_count = await db.execute(
        select(func.count(AttendanceRecord.id)).where(
            AttendanceRecord.attendance_date == today
        )
    )
    return StatusResponse(
        total_employees=emp_count.scalar() or 0,
        today_attendance=record_count.scalar() or 0,
        status="operational",
    )
