"""Pydantic schemas for the notification inbox."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel


class NotificationRead(BaseModel):
    id: int
    recipient_id: int
    recipient_kind: str
    type: str
    message: str
    read: bool
    related_id: int | None
    related_kind: str | None
    created_at: datetime | None

    model_config = {"from_attributes": True}


class NotificationList(BaseModel):
    status: str = "success"
    data: list[NotificationRead]


class AdminBroadcast(BaseModel):
    """One push to the ``admins`` room covering a row per admin.

    ``ids`` maps each admin's user id to the id of their own row, which is
    the id the inbox endpoints accept from that admin.
    """

    type: str
    message: str
    related_id: int | None
    related_kind: str | None
    created_at: datetime | None
    ids: dict[int, int]
