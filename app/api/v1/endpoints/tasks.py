"""
Task endpoints — admins assign, employees report progress.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, BackgroundTasks, Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.v1.deps import get_db, get_dispatcher, require_admin, require_employee
from app.core.exceptions import NotFoundError
from app.models.employee import Employee
from app.models.notification import RECIPIENT_EMPLOYEE
from app.models.task import Task
from app.models.user import User
from app.schemas.task import TaskCreate, TaskRead, TaskStatusUpdate
from app.services.notifications import NotificationDispatcher
from app.services.performance import get_employee

router = APIRouter(tags=["tasks"])
logger = logging.getLogger(__name__)


@router.post("/admin/tasks", response_model=TaskRead, status_code=201)
async def assign_task(
    body: TaskCreate,
    background_tasks: BackgroundTasks,
    db: AsyncSession = Depends(get_db),
    dispatcher: NotificationDispatcher = Depends(get_dispatcher),
    _admin: User = Depends(require_admin),
) -> Task:
    await get_employee(db, body.employee_id)

    task = Task(**body.model_dump())
    db.add(task)
    await db.commit()
    await db.refresh(task)
    logger.info("Task %d assigned to employee %d", task.id, task.employee_id)

    background_tasks.add_task(
        dispatcher.notify,
        task.employee_id,
        RECIPIENT_EMPLOYEE,
        "project",
        f"New task assigned: {task.description}",
        task.project_id,
        "Project",
    )
    return task


@router.get("/employee/tasks", response_model=list[TaskRead])
async def my_tasks(
    employee: Employee = Depends(require_employee),
    db: AsyncSession = Depends(get_db),
) -> list[Task]:
    result = await db.execute(
        select(Task).where(Task.employee_id == employee.id).order_by(Task.created_at.desc())
    )
    return list(result.scalars().all())


@router.patch("/employee/tasks/{task_id}/status", response_model=TaskRead)
async def update_task_status(
    task_id: int,
    body: TaskStatusUpdate,
    employee: Employee = Depends(require_employee),
    db: AsyncSession = Depends(get_db),
) -> Task:
    result = await db.execute(
        select(Task).where(Task.id == task_id, Task.employee_id == employee.id)
    )
    task = result.scalar_one_or_none()
    if task is None:
        raise NotFoundError("Task not found")

    task.status = body.status
    await db.commit()
    await db.refresh(task)
    logger.info("Task %d set to %s by employee %d", task_id, task.status, employee.id)
    return task
