"""
Leave request endpoints.

Employees apply (always ``Pending``); admins approve or reject. Only
approved leave feeds the monthly leave score.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, BackgroundTasks, Depends, Query
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.v1.deps import get_db, get_dispatcher, require_admin, require_employee
from app.core.exceptions import DomainConflict, NotFoundError
from app.models.employee import Employee
from app.models.leave import LEAVE_PENDING, LeaveRequest
from app.models.notification import RECIPIENT_EMPLOYEE
from app.models.user import User
from app.schemas.leave import LeaveCreate, LeaveRead, LeaveReview
from app.services.notifications import NotificationDispatcher

router = APIRouter(tags=["leaves"])
logger = logging.getLogger(__name__)


@router.post("/employee/leaves", response_model=LeaveRead, status_code=201)
async def apply_leave(
    body: LeaveCreate,
    background_tasks: BackgroundTasks,
    employee: Employee = Depends(require_employee),
    db: AsyncSession = Depends(get_db),
    dispatcher: NotificationDispatcher = Depends(get_dispatcher),
) -> LeaveRequest:
    leave = LeaveRequest(employee_id=employee.id, status=LEAVE_PENDING, **body.model_dump())
    db.add(leave)
    await db.commit()
    await db.refresh(leave)
    logger.info("Leave %d requested by employee %d", leave.id, employee.id)

    background_tasks.add_task(
        dispatcher.notify_admins,
        "leave",
        f"{employee.name} submitted a {leave.leave_type} request "
        f"from {leave.from_date.isoformat()} to {leave.to_date.isoformat()}",
        leave.id,
        "Leave",
    )
    return leave


@router.get("/employee/leaves", response_model=list[LeaveRead])
async def my_leaves(
    employee: Employee = Depends(require_employee),
    db: AsyncSession = Depends(get_db),
) -> list[LeaveRequest]:
    result = await db.execute(
        select(LeaveRequest)
        .where(LeaveRequest.employee_id == employee.id)
        .order_by(LeaveRequest.from_date.desc())
    )
    return list(result.scalars().all())


@router.get("/admin/leaves", response_model=list[LeaveRead])
async def list_leaves(
    status: str | None = Query(default=None),
    employee_id: int | None = Query(default=None),
    db: AsyncSession = Depends(get_db),
    _admin: User = Depends(require_admin),
) -> list[LeaveRequest]:
    query = select(LeaveRequest).order_by(LeaveRequest.from_date.desc())
    if status:
        query = query.where(LeaveRequest.status == status)
    if employee_id:
        query = query.where(LeaveRequest.employee_id == employee_id)
    result = await db.execute(query)
    return list(result.scalars().all())


@router.patch("/admin/leaves/{leave_id}", response_model=LeaveRead)
async def review_leave(
    leave_id: int,
    body: LeaveReview,
    background_tasks: BackgroundTasks,
    db: AsyncSession = Depends(get_db),
    dispatcher: NotificationDispatcher = Depends(get_dispatcher),
    _admin: User = Depends(require_admin),
) -> LeaveRequest:
    leave = await db.get(LeaveRequest, leave_id)
    if leave is None:
        raise NotFoundError("Leave request not found")
    if leave.status != LEAVE_PENDING:
        raise DomainConflict(f"Leave request already {leave.status.lower()}")

    leave.status = body.status
    await db.commit()
    await db.refresh(leave)
    logger.info("Leave %d %s", leave_id, leave.status.lower())

    background_tasks.add_task(
        dispatcher.notify,
        leave.employee_id,
        RECIPIENT_EMPLOYEE,
        "leave",
        f"Your {leave.leave_type} request from {leave.from_date.isoformat()} "
        f"to {leave.to_date.isoformat()} was {leave.status.lower()}",
        leave.id,
        "Leave",
    )
    return leave
