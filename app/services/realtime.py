"""
In-process WebSocket hub.

Connections are grouped into rooms: ``admins`` for every admin session and
one private room per account (``Admin_<id>`` / ``Employee_<id>``). A push
is one ``emit`` per room regardless of how many sockets are in it.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from typing import Any

from fastapi import WebSocket

logger = logging.getLogger(__name__)

ADMINS_ROOM = "admins"


def private_room(recipient_kind: str, recipient_id: int) -> str:
    return f"{recipient_kind}_{recipient_id}"


class RealtimeHub:
    def __init__(self) -> None:
        self._rooms: dict[str, set[WebSocket]] = defaultdict(set)

    def join(self, websocket: WebSocket, *rooms: str) -> None:
        for room in rooms:
            self._rooms[room].add(websocket)
        logger.info("Socket joined rooms %s", ", ".join(rooms))

    def leave(self, websocket: WebSocket) -> None:
        for room in list(self._rooms):
            members = self._rooms[room]
            members.discard(websocket)
            if not members:
                del self._rooms[room]

    def room_size(self, room: str) -> int:
        return len(self._rooms.get(room, ()))

    async def emit(self, room: str, event: str, payload: Any) -> int:
        """Send ``{"event", "data"}`` to every socket in ``room``; return deliveries."""
        delivered = 0
        for websocket in list(self._rooms.get(room, ())):
            try:
                await websocket.send_json({"event": event, "data": payload})
                delivered += 1
            except Exception as exc:  # closed or broken socket
                logger.warning("Dropping socket from room %s: %s", room, exc)
                self.leave(websocket)
        return delivered


hub = RealtimeHub()
