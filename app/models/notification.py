from sqlalchemy import Column, Integer, String, DateTime, Boolean, ForeignKey, Enum as SAEnum
from datetime import datetime
import enum
from app.config.database import Base

class NotificationType(enum.Enum):
    APPOINTMENT_CONFIRMATION = "appointment_confirmation"
    APPOINTMENT_CANCELLATION = "appointment_cancellation"
    APPOINTMENT_RESCHEDULED = "appointment_rescheduled"
    APPOINTMENT_STATUS_CHANGED = "appointment_status_changed"
    APPOINTMENT_REMINDER = "appointment_reminder"
    MISSED_APPOINTMENT = "missed_appointment"
    GENERAL = "general"

class NotificationPriority(enum.Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"

class NotificationChannel(enum.Enum):
    IN_APP = "in_app"
    SMS = "sms"

def _values(e):
    return [m.value for m in e]

class Notification(Base):
    __tablename__ = "notifications"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    appointment_id = Column(Integer, ForeignKey("appointments.id"), nullable=True, index=True)
    type = Column(SAEnum(NotificationType, name="notificationtype", values_callable=_values), nullable=False)
    priority = Column(
        SAEnum(NotificationPriority, name="notificationpriority", values_callable=_values),
        nullable=False,
        default=NotificationPriority.MEDIUM
    )
    channel = Column(
        SAEnum(NotificationChannel, name="notificationchannel", values_callable=_values),
        nullable=False,
        default=NotificationChannel.IN_APP
    )
    title = Column(String(100), nullable=False)
    message = Column(String(500), nullable=False)
    is_read = Column(Boolean, nullable=False, default=False)
    read_at = Column(DateTime)
    sent_at = Column(DateTime)
    created_at = Column(DateTime, default=datetime.utcnow, index=True)
