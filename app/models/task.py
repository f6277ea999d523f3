"""
Task model — a unit of project work assigned to one employee.
"""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, ForeignKey, Index, Integer, String

from app.db.base import Base

TASK_NOT_STARTED = "Not Started"
TASK_IN_PROGRESS = "In Progress"
TASK_COMPLETED = "Completed"
TASK_STATUSES = (TASK_NOT_STARTED, TASK_IN_PROGRESS, TASK_COMPLETED)


class Task(Base):
    __tablename__ = "tasks"
    __table_args__ = (Index("ix_task_employee_created", "employee_id", "created_at"),)

    id: int = Column(Integer, primary_key=True, index=True)  # type: ignore[assignment]
    employee_id: int = Column(Integer, ForeignKey("employees.id"), nullable=False)  # type: ignore[assignment]
    project_id: int = Column(Integer, nullable=False)  # type: ignore[assignment]
    description: str = Column(String(1000), nullable=False)  # type: ignore[assignment]
    status: str = Column(  # type: ignore[assignment]
        String(20), nullable=False, default=TASK_NOT_STARTED, server_default=TASK_NOT_STARTED
    )
    created_at: datetime = Column(  # type: ignore[assignment]
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
    )
    updated_at: datetime = Column(  # type: ignore[assignment]
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )
