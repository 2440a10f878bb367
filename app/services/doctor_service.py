import logging
from datetime import datetime
from typing import Optional
from sqlalchemy.orm import Session
from app.models.clinic import Clinic
from app.models.doctor import Doctor, DoctorStatus
from app.models.appointment import Appointment, AppointmentStatus
from app.models.user import User, UserRole
from app.schemas.doctor import DoctorCreate, DoctorUpdate
from app.services.notification_service import NotificationService
from app.utils.exceptions import Conflict, DoctorUnavailable, Forbidden, NotFound, ValidationFailed

logger = logging.getLogger("doctors")

class DoctorService:
    @staticmethod
    def check_clinic(db: Session, clinic_id: Optional[int]):
        if clinic_id is not None and not db.get(Clinic, clinic_id):
            raise NotFound(f"Clinic with ID {clinic_id} not found")

    @staticmethod
    def create_doctor(db: Session, doctor_data: DoctorCreate):
        user = db.get(User, doctor_data.user_id)
        if not user or not user.is_active:
            raise NotFound(f"User with ID {doctor_data.user_id} not found")
        if user.role != UserRole.DOCTOR:
            raise ValidationFailed(f"User {user.id} does not have the doctor role")

        if db.query(Doctor).filter(Doctor.user_id == user.id).first():
            raise Conflict(f"User {user.id} already has a doctor profile")

        if db.query(Doctor).filter(Doctor.license_number == doctor_data.license_number).first():
            raise Conflict(f"License number {doctor_data.license_number} is already registered")

        DoctorService.check_clinic(db, doctor_data.clinic_id)

        db_doctor = Doctor(**doctor_data.model_dump())
        db.add(db_doctor)
        db.commit()
        db.refresh(db_doctor)
        logger.info(f"Created doctor profile {db_doctor.id} for user {user.id}")
        return db_doctor

    @staticmethod
    def get_doctor_by_id(db: Session, doctor_id: int):
        doctor = db.get(Doctor, doctor_id)
        if not doctor or doctor.status == DoctorStatus.DELETED:
            raise NotFound(f"Doctor with ID {doctor_id} not found")
        return doctor

    @staticmethod
    def ensure_bookable(doctor: Doctor):
        if doctor.status != DoctorStatus.ACTIVE or not doctor.user.is_active:
            raise DoctorUnavailable(f"Doctor {doctor.id} is not accepting appointments")

    @staticmethod
    def get_doctor_for_user(db: Session, user: User) -> Optional[Doctor]:
        return db.query(Doctor).filter(Doctor.user_id == user.id).first()

    @staticmethod
    def get_all_doctors(
        db: Session,
        specialization: Optional[str] = None,
        include_inactive: bool = False,
        skip: int = 0,
        limit: int = 100,
        clinic_id: Optional[int] = None
    ):
        query = db.query(Doctor)
        if include_inactive:
            query = query.filter(Doctor.status.in_([DoctorStatus.ACTIVE, DoctorStatus.INACTIVE]))
        else:
            query = query.join(User, Doctor.user_id == User.id).filter(
                Doctor.status == DoctorStatus.ACTIVE,
                User.is_active.is_(True)
            )
        if specialization:
            query = query.filter(Doctor.specialization.ilike(specialization.strip()))
        if clinic_id is not None:
            query = query.filter(Doctor.clinic_id == clinic_id)
        return query.order_by(Doctor.id).offset(skip).limit(limit).all()

    @staticmethod
    def update_doctor(db: Session, doctor_id: int, doctor_data: DoctorUpdate, current_user: User):
        doctor = DoctorService.get_doctor_by_id(db, doctor_id)
        if current_user.role != UserRole.ADMIN and doctor.user_id != current_user.id:
            raise Forbidden("You can only update your own doctor profile")

        update_data = doctor_data.model_dump(exclude_unset=True)
        if "clinic_id" in update_data:
            DoctorService.check_clinic(db, update_data["clinic_id"])
        for key, value in update_data.items():
            setattr(doctor, key, value)

        db.commit()
        db.refresh(doctor)
        return doctor

    @staticmethod
    def delete_doctor(db: Session, doctor_id: int):
        doctor = DoctorService.get_doctor_by_id(db, doctor_id)
        doctor.status = DoctorStatus.DELETED

        now = datetime.now()
        upcoming = db.query(Appointment).filter(
            Appointment.doctor_id == doctor_id,
            Appointment.appointment_date >= now.strftime("%Y-%m-%d"),
            Appointment.status.in_([AppointmentStatus.SCHEDULED, AppointmentStatus.CONFIRMED])
        ).all()

        cancelled = []
        for appointment in upcoming:
            if appointment.scheduled_for <= now:
                continue
            appointment.status = AppointmentStatus.CANCELLED
            appointment.cancellation_reason = "Cancelled due to doctor removal"
            appointment.cancelled_at = datetime.utcnow()
            cancelled.append(appointment)

        db.commit()

        for appointment in cancelled:
            NotificationService.emit(db, NotificationService.notify_cancellation, appointment, None)

        logger.info(f"Doctor {doctor_id} marked as deleted, {len(cancelled)} appointments cancelled")
        return {
            "message": f"Doctor {doctor_id} marked as deleted, appointments cancelled",
            "cancelled_appointments": len(cancelled)
        }
