import logging
from typing import Dict, List, Optional

from fastapi import WebSocket

from app.models.notification import Notification

logger = logging.getLogger(__name__)


class ConnectionManager:
    """
    Realtime change feed for notification inserts.
    Maps user_id to a list of active WebSockets (to support multiple devices).
    """

    def __init__(self):
        # user_id -> List[WebSocket]
        self.active_connections: Dict[int, List[WebSocket]] = {}

    async def connect(self, websocket: WebSocket, user_id: int):
        await websocket.accept()
        self.active_connections.setdefault(user_id, []).append(websocket)

    def disconnect(self, websocket: WebSocket, user_id: int):
        if user_id in self.active_connections:
            if websocket in self.active_connections[user_id]:
                self.active_connections[user_id].remove(websocket)
            if not self.active_connections[user_id]:
                del self.active_connections[user_id]

    async def send_personal_message(self, message: dict, user_id: int):
        for connection in list(self.active_connections.get(user_id, [])):
            try:
                await connection.send_json(message)
            except Exception as e:
                logger.warning(f"Dropping websocket for user {user_id}: {e}")
                self.disconnect(connection, user_id)

    async def publish_notification(self, notification: Optional[Notification]):
        if notification is None:
            return
        await self.send_personal_message(
            {
                "type": "notification",
                "event": "INSERT",
                "id": notification.id,
                "notification_type": notification.type,
                "title": notification.title,
                "body": notification.body,
                "related_id": notification.related_id,
                "is_read": notification.is_read,
                "created_at": notification.created_at.isoformat() if notification.created_at else None,
            },
            notification.user_id,
        )


manager = ConnectionManager()
