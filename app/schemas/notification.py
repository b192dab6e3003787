from datetime import datetime
from typing import Optional, List

from pydantic import BaseModel, ConfigDict


class NotificationItem(BaseModel):
    id: int
    user_id: int
    type: str
    title: str
    body: str
    related_id: Optional[int] = None
    is_read: bool
    read_at: Optional[datetime] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class NotificationListResponse(BaseModel):
    items: List[NotificationItem]
    total: int
    unread: int


class MarkAllReadResponse(BaseModel):
    updated: int
