"""
Leave request model. Only ``Approved`` rows count toward monthly metrics.
"""

from __future__ import annotations

from datetime import date, datetime, timezone

from sqlalchemy import Column, Date, DateTime, ForeignKey, Index, Integer, String

from app.db.base import Base

LEAVE_PENDING = "Pending"
LEAVE_APPROVED = "Approved"
LEAVE_REJECTED = "Rejected"
LEAVE_STATUSES = (LEAVE_PENDING, LEAVE_APPROVED, LEAVE_REJECTED)

UNPAID_LEAVE = "Unpaid Leave"
LEAVE_TYPES = ("Sick Leave", "Casual Leave", "Annual Leave", UNPAID_LEAVE)


class LeaveRequest(Base):
    __tablename__ = "leave_requests"
    __table_args__ = (Index("ix_leave_employee_status", "employee_id", "status"),)

    id: int = Column(Integer, primary_key=True, index=True)  # type: ignore[assignment]
    employee_id: int = Column(Integer, ForeignKey("employees.id"), nullable=False)  # type: ignore[assignment]
    from_date: date = Column(Date, nullable=False)  # type: ignore[assignment]
    to_date: date = Column(Date, nullable=False)  # type: ignore[assignment]
    leave_type: str = Column(String(50), nullable=False)  # type: ignore[assignment]
    status: str = Column(  # type: ignore[assignment]
        String(20), nullable=False, default=LEAVE_PENDING, server_default=LEAVE_PENDING
    )
    reason: str | None = Column(String(500), nullable=True)  # type: ignore[assignment]
    created_at: datetime = Column(  # type: ignore[assignment]
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
    )
