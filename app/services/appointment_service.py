import logging
from collections import Counter
from datetime import datetime, timedelta
from typing import Optional
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from app.config.database import settings
from app.models.appointment import Appointment, AppointmentStatus
from app.models.user import User, UserRole
from app.schemas.appointment import (
    AppointmentCreate,
    AppointmentReschedule,
    AppointmentComplete,
)
from app.services.availability_service import AvailabilityService
from app.services.doctor_service import DoctorService
from app.services.notification_service import NotificationService
from app.services.user_service import UserService
from app.utils.exceptions import (
    Forbidden,
    InvalidStatusTransition,
    NotFound,
    SlotUnavailable,
    ValidationFailed,
)
from app.utils.validators import parse_date, parse_time

logger = logging.getLogger("appointments")

ALLOWED_TRANSITIONS = {
    AppointmentStatus.SCHEDULED: {
        AppointmentStatus.CONFIRMED,
        AppointmentStatus.CANCELLED,
        AppointmentStatus.NO_SHOW,
    },
    AppointmentStatus.CONFIRMED: {
        AppointmentStatus.IN_PROGRESS,
        AppointmentStatus.CANCELLED,
    },
    AppointmentStatus.IN_PROGRESS: {AppointmentStatus.COMPLETED},
    AppointmentStatus.COMPLETED: set(),
    AppointmentStatus.CANCELLED: set(),
    AppointmentStatus.NO_SHOW: set(),
}

RESCHEDULABLE_STATUSES = {AppointmentStatus.SCHEDULED, AppointmentStatus.CONFIRMED}


class AppointmentService:
    @staticmethod
    def can_transition(current: AppointmentStatus, target: AppointmentStatus) -> bool:
        return target in ALLOWED_TRANSITIONS[current]

    @staticmethod
    def validate_future(appointment_date: str, appointment_time: str, now: Optional[datetime] = None):
        now = now or datetime.now()
        requested = datetime.combine(parse_date(appointment_date), parse_time(appointment_time))
        if requested <= now:
            raise ValidationFailed(
                f"Appointment time {appointment_date} {appointment_time} must be in the future"
            )

    @staticmethod
    def validate_slot_rules(doctor, appointment_date: str, appointment_time: str):
        if not AvailabilityService.is_aligned(appointment_time):
            raise ValidationFailed(
                f"Appointment time must be on a {settings.appointment_interval_minutes}-minute boundary. "
                f"Invalid time: {appointment_time}"
            )

        if not AvailabilityService.is_within_availability(doctor, appointment_date, appointment_time):
            day_name = AvailabilityService.day_name(appointment_date)
            windows = doctor.availability.get(day_name, [])
            available = ", ".join(windows) if windows else "none"
            raise ValidationFailed(
                f"Appointment time {appointment_time} is outside the doctor's hours on "
                f"{day_name.capitalize()}. Available windows: {available}"
            )

    @staticmethod
    def _commit_slot(db: Session, appointment: Appointment):
        # The partial unique index settles races the pre-check cannot see.
        try:
            db.commit()
        except IntegrityError:
            db.rollback()
            logger.warning(
                f"Slot race lost for doctor {appointment.doctor_id} "
                f"on {appointment.appointment_date} {appointment.appointment_time}"
            )
            raise SlotUnavailable()
        db.refresh(appointment)

    @staticmethod
    def resolve_patient_id(appointment_data: AppointmentCreate, current_user: User) -> int:
        if current_user.role == UserRole.PATIENT:
            if appointment_data.patient_id not in (None, current_user.id):
                raise Forbidden("Patients can only book appointments for themselves")
            return current_user.id

        if appointment_data.patient_id is None:
            raise ValidationFailed("patient_id is required when booking on behalf of a patient")
        return appointment_data.patient_id

    @staticmethod
    def create_appointment(db: Session, appointment_data: AppointmentCreate, current_user: User, now: Optional[datetime] = None):
        patient_id = AppointmentService.resolve_patient_id(appointment_data, current_user)
        UserService.get_patient(db, patient_id)

        doctor = DoctorService.get_doctor_by_id(db, appointment_data.doctor_id)
        DoctorService.ensure_bookable(doctor)

        AppointmentService.validate_future(appointment_data.appointment_date, appointment_data.appointment_time, now)
        AppointmentService.validate_slot_rules(doctor, appointment_data.appointment_date, appointment_data.appointment_time)

        if AvailabilityService.find_conflict(
            db,
            doctor.id,
            appointment_data.appointment_date,
            appointment_data.appointment_time
        ):
            raise SlotUnavailable()

        db_appointment = Appointment(
            patient_id=patient_id,
            doctor_id=doctor.id,
            appointment_date=appointment_data.appointment_date,
            appointment_time=appointment_data.appointment_time,
            duration_minutes=appointment_data.duration_minutes or settings.default_appointment_duration,
            type=appointment_data.type,
            reason=appointment_data.reason,
            notes=appointment_data.notes,
            status=AppointmentStatus.SCHEDULED
        )
        db.add(db_appointment)
        AppointmentService._commit_slot(db, db_appointment)

        logger.info(
            f"Booked appointment {db_appointment.id}: patient {patient_id} with doctor {doctor.id} "
            f"on {db_appointment.appointment_date} {db_appointment.appointment_time}"
        )
        NotificationService.emit(db, NotificationService.notify_booking, db_appointment)
        return db_appointment

    @staticmethod
    def get_appointment_by_id(db: Session, appointment_id: int):
        appointment = db.get(Appointment, appointment_id)
        if not appointment:
            raise NotFound(f"Appointment with ID {appointment_id} not found")
        return appointment

    @staticmethod
    def is_treating_doctor(appointment: Appointment, user: User) -> bool:
        return appointment.doctor is not None and appointment.doctor.user_id == user.id

    @staticmethod
    def get_accessible_appointment(db: Session, appointment_id: int, current_user: User):
        appointment = AppointmentService.get_appointment_by_id(db, appointment_id)
        if current_user.role == UserRole.ADMIN:
            return appointment
        if appointment.patient_id == current_user.id or AppointmentService.is_treating_doctor(appointment, current_user):
            return appointment
        raise Forbidden("You do not have access to this appointment")

    @staticmethod
    def get_managed_appointment(db: Session, appointment_id: int, current_user: User):
        """Appointments whose clinical status only the treating doctor or an admin may change"""
        appointment = AppointmentService.get_accessible_appointment(db, appointment_id, current_user)
        if current_user.role != UserRole.ADMIN and not AppointmentService.is_treating_doctor(appointment, current_user):
            raise Forbidden("Only the treating doctor or an admin can change this appointment's status")
        return appointment

    @staticmethod
    def get_appointments(
        db: Session,
        current_user: User,
        status: Optional[AppointmentStatus] = None,
        date_from: Optional[str] = None,
        date_to: Optional[str] = None,
        doctor_id: Optional[int] = None,
        patient_id: Optional[int] = None,
        page: int = 1,
        limit: int = 20
    ):
        limit = min(limit, settings.max_page_size)
        query = db.query(Appointment)

        if current_user.role == UserRole.PATIENT:
            query = query.filter(Appointment.patient_id == current_user.id)
        elif current_user.role == UserRole.DOCTOR:
            profile = DoctorService.get_doctor_for_user(db, current_user)
            query = query.filter(Appointment.doctor_id == (profile.id if profile else -1))

        if doctor_id is not None:
            query = query.filter(Appointment.doctor_id == doctor_id)
        if patient_id is not None:
            query = query.filter(Appointment.patient_id == patient_id)
        if status is not None:
            query = query.filter(Appointment.status == status)
        if date_from:
            query = query.filter(Appointment.appointment_date >= date_from)
        if date_to:
            query = query.filter(Appointment.appointment_date <= date_to)

        total = query.count()
        appointments = query.order_by(
            Appointment.appointment_date, Appointment.appointment_time, Appointment.id
        ).offset((page - 1) * limit).limit(limit).all()

        return {
            "appointments": appointments,
            "pagination": {
                "page": page,
                "limit": limit,
                "total": total,
                "pages": (total + limit - 1) // limit,
            },
        }

    @staticmethod
    def _transition(db: Session, appointment: Appointment, target: AppointmentStatus):
        if not AppointmentService.can_transition(appointment.status, target):
            raise InvalidStatusTransition(
                f"Cannot change appointment status from {appointment.status.value} to {target.value}"
            )
        previous = appointment.status
        appointment.status = target
        logger.info(f"Appointment {appointment.id}: {previous.value} -> {target.value}")

    @staticmethod
    def cancel_appointment(db: Session, appointment_id: int, current_user: User, reason: Optional[str] = None):
        appointment = AppointmentService.get_accessible_appointment(db, appointment_id, current_user)
        AppointmentService._transition(db, appointment, AppointmentStatus.CANCELLED)
        appointment.cancellation_reason = reason
        appointment.cancelled_at = datetime.utcnow()
        db.commit()
        db.refresh(appointment)

        NotificationService.emit(db, NotificationService.notify_cancellation, appointment, current_user)
        return appointment

    @staticmethod
    def reschedule_appointment(
        db: Session,
        appointment_id: int,
        reschedule_data: AppointmentReschedule,
        current_user: User,
        now: Optional[datetime] = None
    ):
        appointment = AppointmentService.get_accessible_appointment(db, appointment_id, current_user)
        if appointment.status not in RESCHEDULABLE_STATUSES:
            raise InvalidStatusTransition(
                f"Appointments in status {appointment.status.value} cannot be rescheduled"
            )

        new_date = reschedule_data.appointment_date
        new_time = reschedule_data.appointment_time
        if (new_date, new_time) == (appointment.appointment_date, appointment.appointment_time):
            raise ValidationFailed("The new slot is the same as the current one")

        doctor = DoctorService.get_doctor_by_id(db, appointment.doctor_id)
        DoctorService.ensure_bookable(doctor)

        AppointmentService.validate_future(new_date, new_time, now)
        AppointmentService.validate_slot_rules(doctor, new_date, new_time)

        if AvailabilityService.find_conflict(db, doctor.id, new_date, new_time, exclude_id=appointment.id):
            raise SlotUnavailable("New time slot is not available")

        previous_slot = f"{appointment.appointment_date} at {appointment.appointment_time}"
        appointment.appointment_date = new_date
        appointment.appointment_time = new_time
        appointment.status = AppointmentStatus.SCHEDULED
        appointment.reminder_sent = False
        if reschedule_data.reason:
            appointment.notes = reschedule_data.reason
        AppointmentService._commit_slot(db, appointment)

        logger.info(f"Rescheduled appointment {appointment.id} from {previous_slot} to {new_date} {new_time}")
        NotificationService.emit(db, NotificationService.notify_rescheduled, appointment, previous_slot)
        return appointment

    @staticmethod
    def confirm_appointment(db: Session, appointment_id: int, current_user: User):
        return AppointmentService.change_status(db, appointment_id, AppointmentStatus.CONFIRMED, current_user)

    @staticmethod
    def start_appointment(db: Session, appointment_id: int, current_user: User):
        return AppointmentService.change_status(db, appointment_id, AppointmentStatus.IN_PROGRESS, current_user)

    @staticmethod
    def mark_no_show(db: Session, appointment_id: int, current_user: User):
        return AppointmentService.change_status(db, appointment_id, AppointmentStatus.NO_SHOW, current_user)

    @staticmethod
    def complete_appointment(db: Session, appointment_id: int, completion_data: AppointmentComplete, current_user: User):
        appointment = AppointmentService.get_managed_appointment(db, appointment_id, current_user)
        AppointmentService._transition(db, appointment, AppointmentStatus.COMPLETED)
        appointment.completed_at = datetime.utcnow()

        update_data = completion_data.model_dump(exclude_unset=True, exclude_none=True)
        for key, value in update_data.items():
            setattr(appointment, key, value)

        db.commit()
        db.refresh(appointment)
        NotificationService.emit(db, NotificationService.notify_status_change, appointment)
        return appointment

    @staticmethod
    def change_status(
        db: Session,
        appointment_id: int,
        target: AppointmentStatus,
        current_user: User,
        reason: Optional[str] = None
    ):
        if target == AppointmentStatus.CANCELLED:
            return AppointmentService.cancel_appointment(db, appointment_id, current_user, reason)
        if target == AppointmentStatus.COMPLETED:
            return AppointmentService.complete_appointment(db, appointment_id, AppointmentComplete(), current_user)

        appointment = AppointmentService.get_managed_appointment(db, appointment_id, current_user)
        AppointmentService._transition(db, appointment, target)
        db.commit()
        db.refresh(appointment)

        if target == AppointmentStatus.NO_SHOW:
            NotificationService.emit(db, NotificationService.notify_missed, appointment)
        else:
            NotificationService.emit(db, NotificationService.notify_status_change, appointment)
        return appointment

    @staticmethod
    def mark_missed_appointments(db: Session, now: Optional[datetime] = None) -> int:
        """Move scheduled appointments whose visit window has passed to no-show"""
        now = now or datetime.now()
        candidates = db.query(Appointment).filter(
            Appointment.status == AppointmentStatus.SCHEDULED,
            Appointment.appointment_date <= now.strftime("%Y-%m-%d")
        ).all()

        missed = []
        for appointment in candidates:
            if appointment.scheduled_for + timedelta(minutes=appointment.duration_minutes) < now:
                appointment.status = AppointmentStatus.NO_SHOW
                missed.append(appointment)
        db.commit()

        for appointment in missed:
            NotificationService.emit(db, NotificationService.notify_missed, appointment)

        logger.info(f"Marked {len(missed)} appointments as no-show")
        return len(missed)

    @staticmethod
    def get_doctor_statistics(db: Session, doctor_id: int, appointment_date: str, current_user: User):
        doctor = DoctorService.get_doctor_by_id(db, doctor_id)
        if current_user.role != UserRole.ADMIN and doctor.user_id != current_user.id:
            raise Forbidden("You can only view statistics for your own schedule")

        appointments = db.query(Appointment).filter(
            Appointment.doctor_id == doctor_id,
            Appointment.appointment_date == appointment_date
        ).all()
        by_status = Counter(apt.status.value for apt in appointments)
        active = [apt for apt in appointments if apt.status != AppointmentStatus.CANCELLED]

        day_name = AvailabilityService.day_name(appointment_date)
        total_capacity = sum(
            len(AvailabilityService.generate_time_slots(window))
            for window in doctor.availability.get(day_name, [])
        )

        return {
            "doctor_id": doctor_id,
            "doctor_name": doctor.name,
            "date": appointment_date,
            "total_appointments": len(active),
            "appointments_by_status": dict(by_status),
            "total_capacity": total_capacity,
            "capacity_utilization": f"{(len(active) / total_capacity * 100):.1f}%" if total_capacity > 0 else "0%"
        }
