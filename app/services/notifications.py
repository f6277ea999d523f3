"""
Notification dispatcher.

Writes the durable notification rows, then pushes them over the realtime
hub. It runs as a background task after the state change it announces
has committed, with its own session, so a failure here is logged and
never reaches the caller of the original operation.
"""

from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.models.notification import RECIPIENT_ADMIN, Notification
from app.models.user import ROLE_ADMIN, User
from app.schemas.notification import AdminBroadcast, NotificationRead
from app.services.realtime import ADMINS_ROOM, RealtimeHub, hub, private_room

logger = logging.getLogger(__name__)

NEW_NOTIFICATION_EVENT = "newNotification"
DELETED_NOTIFICATION_EVENT = "notificationDeleted"
CONNECTED_EVENT = "connected"


def _payload(notification: Notification) -> dict:
    return NotificationRead.model_validate(notification).model_dump(mode="json")


def _broadcast_payload(notifications: list[Notification]) -> dict:
    first = notifications[0]
    return AdminBroadcast(
        type=first.type,
        message=first.message,
        related_id=first.related_id,
        related_kind=first.related_kind,
        created_at=first.created_at,
        ids={n.recipient_id: n.id for n in notifications},
    ).model_dump(mode="json")


class NotificationDispatcher:
    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        realtime: RealtimeHub = hub,
    ) -> None:
        self._session_factory = session_factory
        self._hub = realtime

    async def notify(
        self,
        recipient_id: int,
        recipient_kind: str,
        type_: str,
        message: str,
        related_id: int | None = None,
        related_kind: str | None = None,
    ) -> Notification | None:
        """Record one notification and push it to the recipient's private room."""
        try:
            async with self._session_factory() as session:
                notification = Notification(
                    recipient_id=recipient_id,
                    recipient_kind=recipient_kind,
                    type=type_,
                    message=message,
                    related_id=related_id,
                    related_kind=related_kind,
                )
                session.add(notification)
                await session.commit()
                await session.refresh(notification)

            await self._hub.emit(
                private_room(recipient_kind, recipient_id),
                NEW_NOTIFICATION_EVENT,
                _payload(notification),
            )
            return notification
        except Exception:
            logger.exception(
                "Notification to %s %s failed (%s)", recipient_kind, recipient_id, type_
            )
            return None

    async def notify_admins(
        self,
        type_: str,
        message: str,
        related_id: int | None = None,
        related_kind: str | None = None,
    ) -> int:
        """Record one notification per active admin and publish once to ``admins``.

        Returns the number of notifications written.
        """
        try:
            async with self._session_factory() as session:
                result = await session.execute(
                    select(User.id).where(User.role == ROLE_ADMIN, User.is_active.is_(True))
                )
                admin_ids = list(result.scalars().all())
                if not admin_ids:
                    return 0

                notifications = [
                    Notification(
                        recipient_id=admin_id,
                        recipient_kind=RECIPIENT_ADMIN,
                        type=type_,
                        message=message,
                        related_id=related_id,
                        related_kind=related_kind,
                    )
                    for admin_id in admin_ids
                ]
                session.add_all(notifications)
                await session.commit()

            await self._hub.emit(
                ADMINS_ROOM, NEW_NOTIFICATION_EVENT, _broadcast_payload(notifications)
            )
            return len(notifications)
        except Exception:
            logger.exception("Admin notification failed (%s): %s", type_, message)
            return 0
