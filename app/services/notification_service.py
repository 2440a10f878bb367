"""
Appointment notifications.

Every lifecycle event (booking, cancellation, reschedule, status change,
reminder, missed visit) produces an in-app notification row for the
recipient. When SMS delivery is enabled and the recipient has a phone
number, the same text is pushed through Twilio; the row then records
channel=sms and the delivery time in sent_at.
"""

import logging
from datetime import datetime, timedelta
from typing import Optional
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from app.config.database import settings
from app.models.appointment import Appointment, AppointmentStatus
from app.models.notification import (
    Notification,
    NotificationChannel,
    NotificationPriority,
    NotificationType,
)
from app.models.user import User
from app.services.twilio_service import get_twilio_service
from app.utils.exceptions import NotFound

logger = logging.getLogger("notifications")


def _doctor_name(appointment: Appointment) -> str:
    doctor = appointment.doctor
    if doctor is not None and doctor.user is not None:
        return f"Dr. {doctor.user.name}"
    return "your doctor"


def _when(appointment: Appointment) -> str:
    return f"{appointment.appointment_date} at {appointment.appointment_time}"


class NotificationService:
    @staticmethod
    def create_notification(
        db: Session,
        user_id: int,
        type: NotificationType,
        title: str,
        message: str,
        priority: NotificationPriority = NotificationPriority.MEDIUM,
        appointment_id: Optional[int] = None,
    ) -> Notification:
        notification = Notification(
            user_id=user_id,
            appointment_id=appointment_id,
            type=type,
            priority=priority,
            channel=NotificationChannel.IN_APP,
            title=title[:100],
            message=message[:500],
        )
        db.add(notification)
        db.commit()
        db.refresh(notification)

        NotificationService.deliver_sms(db, notification)
        return notification

    @staticmethod
    def deliver_sms(db: Session, notification: Notification) -> bool:
        sms = get_twilio_service()
        if sms is None:
            return False

        user = db.get(User, notification.user_id)
        if not user or not user.phone:
            return False

        if not sms.send_notification_sms(user.phone, notification.title, notification.message):
            return False

        notification.channel = NotificationChannel.SMS
        notification.sent_at = datetime.utcnow()
        db.commit()
        return True

    @staticmethod
    def emit(db: Session, handler, *args):
        """
        Run a notification side effect without failing the caller.

        The triggering change is already committed, so a failure here is
        logged and rolled back rather than surfaced to the client.
        """
        try:
            return handler(db, *args)
        except SQLAlchemyError:
            db.rollback()
            logger.exception(f"Failed to create notification via {handler.__name__}")
            return None

    # ---- queries for the recipient ----

    @staticmethod
    def get_user_notifications(db: Session, user_id: int, page: int = 1, limit: int = 20, unread_only: bool = False):
        limit = min(limit, settings.max_page_size)
        query = db.query(Notification).filter(Notification.user_id == user_id)
        if unread_only:
            query = query.filter(Notification.is_read.is_(False))

        total = query.count()
        notifications = query.order_by(
            Notification.created_at.desc(), Notification.id.desc()
        ).offset((page - 1) * limit).limit(limit).all()

        return {
            "notifications": notifications,
            "pagination": {
                "page": page,
                "limit": limit,
                "total": total,
                "pages": (total + limit - 1) // limit,
            },
        }

    @staticmethod
    def get_unread_count(db: Session, user_id: int) -> int:
        return db.query(Notification).filter(
            Notification.user_id == user_id,
            Notification.is_read.is_(False)
        ).count()

    @staticmethod
    def get_user_notification(db: Session, notification_id: int, user_id: int) -> Notification:
        notification = db.query(Notification).filter(
            Notification.id == notification_id,
            Notification.user_id == user_id
        ).first()
        if not notification:
            raise NotFound(f"Notification with ID {notification_id} not found")
        return notification

    @staticmethod
    def mark_as_read(db: Session, notification_id: int, user_id: int) -> Notification:
        notification = NotificationService.get_user_notification(db, notification_id, user_id)
        if not notification.is_read:
            notification.is_read = True
            notification.read_at = datetime.utcnow()
            db.commit()
            db.refresh(notification)
        return notification

    @staticmethod
    def mark_all_as_read(db: Session, user_id: int) -> int:
        updated = db.query(Notification).filter(
            Notification.user_id == user_id,
            Notification.is_read.is_(False)
        ).update(
            {"is_read": True, "read_at": datetime.utcnow()},
            synchronize_session=False
        )
        db.commit()
        return updated

    @staticmethod
    def delete_notification(db: Session, notification_id: int, user_id: int):
        notification = NotificationService.get_user_notification(db, notification_id, user_id)
        db.delete(notification)
        db.commit()
        return {"message": f"Notification {notification_id} deleted successfully"}

    # ---- appointment lifecycle events ----

    @staticmethod
    def notify_booking(db: Session, appointment: Appointment):
        NotificationService.create_notification(
            db,
            user_id=appointment.patient_id,
            type=NotificationType.APPOINTMENT_CONFIRMATION,
            title="Appointment Booked",
            message=(
                f"Your appointment with {_doctor_name(appointment)} on {_when(appointment)} "
                f"is booked. Confirmation: {appointment.confirmation_number}"
            ),
            appointment_id=appointment.id,
        )
        if appointment.doctor is not None:
            patient_name = appointment.patient.name if appointment.patient else "A patient"
            NotificationService.create_notification(
                db,
                user_id=appointment.doctor.user_id,
                type=NotificationType.APPOINTMENT_CONFIRMATION,
                title="New Appointment",
                message=f"{patient_name} booked an appointment on {_when(appointment)}: {appointment.reason}",
                priority=NotificationPriority.LOW,
                appointment_id=appointment.id,
            )

    @staticmethod
    def notify_cancellation(db: Session, appointment: Appointment, cancelled_by: Optional[User]):
        reason = f" Reason: {appointment.cancellation_reason}" if appointment.cancellation_reason else ""
        NotificationService.create_notification(
            db,
            user_id=appointment.patient_id,
            type=NotificationType.APPOINTMENT_CANCELLATION,
            title="Appointment Cancelled",
            message=f"Your appointment with {_doctor_name(appointment)} on {_when(appointment)} was cancelled.{reason}",
            priority=NotificationPriority.HIGH,
            appointment_id=appointment.id,
        )
        doctor_user_id = appointment.doctor.user_id if appointment.doctor is not None else None
        if cancelled_by is not None and doctor_user_id is not None and cancelled_by.id != doctor_user_id:
            NotificationService.create_notification(
                db,
                user_id=doctor_user_id,
                type=NotificationType.APPOINTMENT_CANCELLATION,
                title="Appointment Cancelled",
                message=f"The appointment on {_when(appointment)} was cancelled.{reason}",
                appointment_id=appointment.id,
            )

    @staticmethod
    def notify_rescheduled(db: Session, appointment: Appointment, previous_slot: str):
        NotificationService.create_notification(
            db,
            user_id=appointment.patient_id,
            type=NotificationType.APPOINTMENT_RESCHEDULED,
            title="Appointment Rescheduled",
            message=(
                f"Your appointment with {_doctor_name(appointment)} moved from {previous_slot} "
                f"to {_when(appointment)}."
            ),
            appointment_id=appointment.id,
        )
        if appointment.doctor is not None:
            NotificationService.create_notification(
                db,
                user_id=appointment.doctor.user_id,
                type=NotificationType.APPOINTMENT_RESCHEDULED,
                title="Appointment Rescheduled",
                message=f"Appointment {appointment.confirmation_number} moved from {previous_slot} to {_when(appointment)}.",
                priority=NotificationPriority.LOW,
                appointment_id=appointment.id,
            )

    @staticmethod
    def notify_status_change(db: Session, appointment: Appointment):
        if appointment.status == AppointmentStatus.CONFIRMED:
            title = "Appointment Confirmed"
            message = f"{_doctor_name(appointment)} confirmed your appointment on {_when(appointment)}."
        elif appointment.status == AppointmentStatus.COMPLETED:
            title = "Appointment Completed"
            message = f"Your visit with {_doctor_name(appointment)} on {_when(appointment)} is complete."
        else:
            return None

        return NotificationService.create_notification(
            db,
            user_id=appointment.patient_id,
            type=NotificationType.APPOINTMENT_STATUS_CHANGED,
            title=title,
            message=message,
            appointment_id=appointment.id,
        )

    @staticmethod
    def notify_missed(db: Session, appointment: Appointment):
        return NotificationService.create_notification(
            db,
            user_id=appointment.patient_id,
            type=NotificationType.MISSED_APPOINTMENT,
            title="Missed Appointment",
            message=f"You missed your appointment scheduled for {_when(appointment)}. Please reschedule.",
            priority=NotificationPriority.HIGH,
            appointment_id=appointment.id,
        )

    @staticmethod
    def send_due_reminders(db: Session, now: Optional[datetime] = None) -> int:
        """Create reminders for active appointments starting within the reminder window"""
        now = now or datetime.now()
        window_end = now + timedelta(hours=settings.reminder_window_hours)

        candidates = db.query(Appointment).filter(
            Appointment.status.in_([AppointmentStatus.SCHEDULED, AppointmentStatus.CONFIRMED]),
            Appointment.reminder_sent.is_(False),
            Appointment.appointment_date >= now.strftime("%Y-%m-%d"),
            Appointment.appointment_date <= window_end.strftime("%Y-%m-%d"),
        ).all()

        sent = 0
        for appointment in candidates:
            if not now < appointment.scheduled_for <= window_end:
                continue
            NotificationService.create_notification(
                db,
                user_id=appointment.patient_id,
                type=NotificationType.APPOINTMENT_REMINDER,
                title="Upcoming Appointment Reminder",
                message=f"You have an appointment with {_doctor_name(appointment)} on {_when(appointment)}.",
                appointment_id=appointment.id,
            )
            appointment.reminder_sent = True
            db.commit()
            sent += 1

        logger.info(f"Sent {sent} appointment reminders")
        return sent
