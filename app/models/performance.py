"""
Performance record — one employee's scored month.

Sub-scores and their supporting counts are stored next to the composite
so a score can be audited without recomputing it.
"""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import (Column, DateTime, Float, ForeignKey, Index, Integer,
                        String, Text)

from app.db.base import Base


class PerformanceRecord(Base):
    __tablename__ = "performance_records"
    __table_args__ = (Index("ix_performance_employee_period", "employee_id", "year", "month"),)

    id: int = Column(Integer, primary_key=True, index=True)  # type: ignore[assignment]
    employee_id: int = Column(Integer, ForeignKey("employees.id"), nullable=False)  # type: ignore[assignment]
    month: str = Column(String(9), nullable=False)  # type: ignore[assignment]  # January..December
    year: int = Column(Integer, nullable=False)  # type: ignore[assignment]

    attendance_score: float = Column(Float, nullable=False, default=0.0)  # type: ignore[assignment]
    leave_score: float = Column(Float, nullable=False, default=0.0)  # type: ignore[assignment]
    task_score: float = Column(Float, nullable=False, default=0.0)  # type: ignore[assignment]
    performance: float = Column(Float, nullable=False, default=0.0)  # type: ignore[assignment]

    present_days: int = Column(Integer, nullable=False, default=0)  # type: ignore[assignment]
    total_days: int = Column(Integer, nullable=False, default=0)  # type: ignore[assignment]
    leave_days: float = Column(Float, nullable=False, default=0.0)  # type: ignore[assignment]
    tasks_completed: int = Column(Integer, nullable=False, default=0)  # type: ignore[assignment]
    total_tasks: int = Column(Integer, nullable=False, default=0)  # type: ignore[assignment]

    achievements: str | None = Column(Text, nullable=True)  # type: ignore[assignment]
    created_at: datetime = Column(  # type: ignore[assignment]
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
    )
    updated_at: datetime = Column(  # type: ignore[assignment]
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )
