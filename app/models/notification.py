"""
Notification model — the durable half of every pushed notification.
"""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import Boolean, Column, DateTime, Index, Integer, String

from app.db.base import Base

RECIPIENT_ADMIN = "Admin"
RECIPIENT_EMPLOYEE = "Employee"

NOTIFICATION_TYPES = ("attendance", "leave", "payroll", "project", "message")
RELATED_KINDS = ("Attendance", "Leave", "Payroll", "Project", "Message")


class Notification(Base):
    __tablename__ = "notifications"
    __table_args__ = (
        Index("ix_notification_recipient", "recipient_kind", "recipient_id", "created_at"),
    )

    id: int = Column(Integer, primary_key=True, index=True)  # type: ignore[assignment]
    recipient_id: int = Column(Integer, nullable=False)  # type: ignore[assignment]
    recipient_kind: str = Column(String(20), nullable=False)  # type: ignore[assignment]  # Admin | Employee
    type: str = Column(String(20), nullable=False)  # type: ignore[assignment]
    message: str = Column(String(1000), nullable=False)  # type: ignore[assignment]
    read: bool = Column(Boolean, nullable=False, default=False, server_default="false")  # type: ignore[assignment]
    related_id: int | None = Column(Integer, nullable=True)  # type: ignore[assignment]
    related_kind: str | None = Column(String(20), nullable=True)  # type: ignore[assignment]
    created_at: datetime = Column(  # type: ignore[assignment]
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
    )
