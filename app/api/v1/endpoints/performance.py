"""
Performance endpoints — monthly employee details and the scored
performance records built from them.

- Admin: details, list / create / update / delete records.
- Employee: read own records.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.v1.deps import get_db, require_admin, require_employee
from app.core.dates import Month
from app.models.employee import Employee
from app.models.performance import PerformanceRecord
from app.models.user import User
from app.schemas.performance import (AttendanceMetrics, DeleteResponse,
                                     EmployeeDetailsResponse, EmployeeSummary,
                                     LeaveMetrics, PerformanceCreate,
                                     PerformanceRead, PerformanceUpdate,
                                     TaskMetrics)
from app.services import performance as performance_service

router = APIRouter(tags=["performance"])


@router.get(
    "/admin/employees/{employee_id}/details", response_model=EmployeeDetailsResponse
)
async def employee_details(
    employee_id: int,
    month: Month = Query(...),
    year: int = Query(..., ge=1970, le=9999),
    db: AsyncSession = Depends(get_db),
    _admin: User = Depends(require_admin),
) -> EmployeeDetailsResponse:
    """Attendance, leave and task sub-scores for one month plus the composite."""
    employee, metrics = await performance_service.compute_employee_details(
        db, employee_id, month, year
    )
    return EmployeeDetailsResponse(
        employee=EmployeeSummary.model_validate(employee),
        month=month.value,
        year=year,
        attendance=AttendanceMetrics(
            present_days=metrics.present_days,
            total_days=metrics.total_days,
            attendance_score=metrics.attendance_score,
        ),
        leave=LeaveMetrics(leave_days=metrics.leave_days, leave_score=metrics.leave_score),
        tasks=TaskMetrics(
            completed_tasks=metrics.tasks_completed,
            total_tasks=metrics.total_tasks,
            task_score=metrics.task_score,
        ),
        performance=metrics.performance,
    )


@router.get("/admin/performances", response_model=list[PerformanceRead])
async def list_performances(
    employee_id: int | None = Query(default=None),
    db: AsyncSession = Depends(get_db),
    _admin: User = Depends(require_admin),
) -> list[PerformanceRecord]:
    return await performance_service.list_performance_records(db, employee_id)


@router.post("/admin/performances", response_model=PerformanceRead, status_code=201)
async def create_performance(
    body: PerformanceCreate,
    db: AsyncSession = Depends(get_db),
    _admin: User = Depends(require_admin),
) -> PerformanceRecord:
    return await performance_service.create_performance_record(
        db, body.employee_id, body.month, body.year, body.achievements
    )


@router.put("/admin/performances/{record_id}", response_model=PerformanceRead)
async def update_performance(
    record_id: int,
    body: PerformanceUpdate,
    db: AsyncSession = Depends(get_db),
    _admin: User = Depends(require_admin),
) -> PerformanceRecord:
    return await performance_service.update_performance_record(
        db, record_id, body.model_dump(exclude_unset=True)
    )


@router.delete("/admin/performances/{record_id}", response_model=DeleteResponse)
async def delete_performance(
    record_id: int,
    db: AsyncSession = Depends(get_db),
    _admin: User = Depends(require_admin),
) -> DeleteResponse:
    await performance_service.delete_performance_record(db, record_id)
    return DeleteResponse(success=True, message="Deleted successfully")


@router.get("/employee/performance", response_model=list[PerformanceRead])
async def my_performance(
    employee: Employee = Depends(require_employee),
    db: AsyncSession = Depends(get_db),
) -> list[PerformanceRecord]:
    return await performance_service.list_performance_records(db, employee.id)
