from typing import Optional
from datetime import datetime

from marketplace.models.notification import NotificationType
from marketplace.schemas.base import CamelModel

class NotificationResponse(CamelModel):
    id: int
    type: NotificationType
    title: str
    message: str
    related_id: Optional[int] = None
    on_model: Optional[str] = None
    link: Optional[str] = None
    is_read: bool
    created_at: datetime

class UnreadCount(CamelModel):
    success: bool = True
    count: int
