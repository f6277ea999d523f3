"""
Employee registry — the minimum needed to put people into the system.

Creating an employee also creates the employee-role login account they
use for attendance. All routes are admin-only.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.v1.deps import get_db, require_admin
from app.core.security import get_password_hash
from app.models.employee import Employee
from app.models.user import ROLE_EMPLOYEE, User
from app.schemas.user import EmployeeCreate, EmployeeRead
from app.services.performance import get_employee

router = APIRouter(prefix="/admin/employees", tags=["employees"])
logger = logging.getLogger(__name__)


@router.get("", response_model=list[EmployeeRead])
async def list_employees(
    skip: int = 0,
    limit: int = Query(default=50, le=500),
    db: AsyncSession = Depends(get_db),
    _admin: User = Depends(require_admin),
) -> list[Employee]:
    result = await db.execute(
        select(Employee)
        .where(Employee.is_active.is_(True))
        .order_by(Employee.name)
        .offset(skip)
        .limit(limit)
    )
    return list(result.scalars().all())


@router.post("", response_model=EmployeeRead, status_code=201)
async def create_employee(
    body: EmployeeCreate,
    db: AsyncSession = Depends(get_db),
    _admin: User = Depends(require_admin),
) -> Employee:
    existing = await db.execute(select(User).where(User.email == body.email))
    if existing.scalar_one_or_none():
        raise HTTPException(status_code=400, detail=f"Email '{body.email}' already registered")

    employee = Employee(
        name=body.name,
        email=body.email,
        department=body.department,
        position=body.position,
    )
    db.add(employee)
    await db.flush()
    db.add(
        User(
            email=body.email,
            hashed_password=get_password_hash(body.password),
            full_name=body.name,
            role=ROLE_EMPLOYEE,
            employee_id=employee.id,
        )
    )
    await db.commit()
    await db.refresh(employee)
    logger.info("Created employee %d (%s)", employee.id, employee.name)
    return employee


@router.get("/{employee_id}", response_model=EmployeeRead)
async def read_employee(
    employee_id: int,
    db: AsyncSession = Depends(get_db),
    _admin: User = Depends(require_admin),
) -> Employee:
    return await get_employee(db, employee_id)
