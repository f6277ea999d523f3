"""
Notification inbox + realtime socket.

Admins are addressed by their user id (kind ``Admin``), employees by
their employee id (kind ``Employee``). ``/ws`` joins an authenticated
socket to its private room and, for admins, to the shared ``admins``
room.
"""

from __future__ import annotations

import logging

from fastapi import (APIRouter, Depends, HTTPException, Query, WebSocket,
                     WebSocketDisconnect, status)
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.api.v1.deps import get_current_active_user, get_db, get_session_factory
from app.core.config import settings
from app.core.exceptions import NotFoundError
from app.core.security import decode_access_token
from app.models.notification import RECIPIENT_ADMIN, RECIPIENT_EMPLOYEE, Notification
from app.models.user import ROLE_ADMIN, User
from app.schemas.notification import NotificationList, NotificationRead
from app.services.notifications import CONNECTED_EVENT, DELETED_NOTIFICATION_EVENT
from app.services.realtime import ADMINS_ROOM, hub, private_room

router = APIRouter(tags=["notifications"])
logger = logging.getLogger(__name__)


def _recipient(user: User) -> tuple[int, str]:
    if user.role == ROLE_ADMIN:
        return user.id, RECIPIENT_ADMIN
    if user.employee_id is None:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="No employee profile")
    return user.employee_id, RECIPIENT_EMPLOYEE


async def _owned_notification(db: AsyncSession, notification_id: int, user: User) -> Notification:
    recipient_id, recipient_kind = _recipient(user)
    result = await db.execute(
        select(Notification).where(
            Notification.id == notification_id,
            Notification.recipient_id == recipient_id,
            Notification.recipient_kind == recipient_kind,
        )
    )
    notification = result.scalar_one_or_none()
    if notification is None:
        raise NotFoundError("Notification not found")
    return notification


@router.get("/notifications", response_model=NotificationList)
async def list_notifications(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> NotificationList:
    """The caller's latest notifications, newest first."""
    recipient_id, recipient_kind = _recipient(current_user)
    result = await db.execute(
        select(Notification)
        .where(
            Notification.recipient_id == recipient_id,
            Notification.recipient_kind == recipient_kind,
        )
        .order_by(Notification.created_at.desc(), Notification.id.desc())
        .limit(settings.NOTIFICATION_HISTORY_LIMIT)
    )
    return NotificationList(
        data=[NotificationRead.model_validate(n) for n in result.scalars().all()]
    )


@router.patch("/notifications/{notification_id}/read", response_model=NotificationRead)
async def mark_read(
    notification_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> Notification:
    notification = await _owned_notification(db, notification_id, current_user)
    notification.read = True
    await db.commit()
    await db.refresh(notification)
    return notification


@router.delete("/notifications/{notification_id}")
async def delete_notification(
    notification_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
):
    notification = await _owned_notification(db, notification_id, current_user)
    room = private_room(notification.recipient_kind, notification.recipient_id)
    await db.delete(notification)
    await db.commit()

    await hub.emit(room, DELETED_NOTIFICATION_EVENT, {"id": notification_id})
    return {"status": "success", "message": "Notification deleted successfully"}


# ── Realtime ────────────────────────────────────────────────────────
@router.websocket("/ws")
async def notifications_socket(
    websocket: WebSocket,
    token: str = Query(...),
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
) -> None:
    payload = decode_access_token(token)
    user = None
    if payload is not None and payload.get("sub") is not None:
        # Released before accept; an open socket must not pin a pooled connection
        async with session_factory() as session:
            user = await session.get(User, int(payload["sub"]))
    if user is None or not user.is_active or (user.role != ROLE_ADMIN and user.employee_id is None):
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    recipient_id, recipient_kind = _recipient(user)
    rooms = [private_room(recipient_kind, recipient_id)]
    if user.role == ROLE_ADMIN:
        rooms.append(ADMINS_ROOM)

    await websocket.accept()
    hub.join(websocket, *rooms)
    try:
        await websocket.send_json({"event": CONNECTED_EVENT, "data": {"rooms": rooms}})
        while True:
            # Clients only listen; inbound frames are keep-alives
            await websocket.receive_text()
    except WebSocketDisconnect:
        logger.info("Socket for %s %d disconnected", recipient_kind, recipient_id)
    finally:
        hub.leave(websocket)
