"""
Employee model — the person whose attendance, leave and tasks are tracked.

Login credentials live on the linked ``users`` row; an employee without one
still appears in admin reports but cannot act for themselves.
"""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import Boolean, Column, DateTime, Index, Integer, String

from app.db.base import Base


class Employee(Base):
    __tablename__ = "employees"
    __table_args__ = (Index("ix_employee_department", "department"),)

    id: int = Column(Integer, primary_key=True, index=True)  # type: ignore[assignment]
    name: str = Column(String(200), nullable=False)  # type: ignore[assignment]
    email: str | None = Column(String(320), unique=True, nullable=True)  # type: ignore[assignment]
    department: str | None = Column(String(100), nullable=True)  # type: ignore[assignment]
    position: str | None = Column(String(100), nullable=True)  # type: ignore[assignment]
    # Inactive employees keep their history but are excluded from listings
    is_active: bool = Column(Boolean, default=True, server_default="true")  # type: ignore[assignment]
    joined_at: datetime = Column(  # type: ignore[assignment]
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
    )
