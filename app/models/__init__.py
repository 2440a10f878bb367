from app.models.user import User, UserRole
from app.models.clinic import Clinic
from app.models.doctor import Doctor, DoctorStatus
from app.models.appointment import Appointment, AppointmentStatus, AppointmentType
from app.models.notification import Notification, NotificationType, NotificationPriority, NotificationChannel

__all__ = [
    "User", "UserRole",
    "Clinic",
    "Doctor", "DoctorStatus",
    "Appointment", "AppointmentStatus", "AppointmentType",
    "Notification", "NotificationType", "NotificationPriority", "NotificationChannel",
]
