from pydantic import BaseModel
from datetime import datetime
from typing import List, Optional
from app.models.notification import NotificationType, NotificationPriority, NotificationChannel
from app.schemas.appointment import Pagination

class NotificationResponse(BaseModel):
    id: int
    user_id: int
    appointment_id: Optional[int] = None
    type: NotificationType
    priority: NotificationPriority
    channel: NotificationChannel
    title: str
    message: str
    is_read: bool
    read_at: Optional[datetime] = None
    sent_at: Optional[datetime] = None
    created_at: datetime

    class Config:
        from_attributes = True

class NotificationListResponse(BaseModel):
    notifications: List[NotificationResponse]
    pagination: Pagination
