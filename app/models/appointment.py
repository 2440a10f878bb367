from sqlalchemy import Column, Integer, String, DateTime, Boolean, ForeignKey, Index, Enum, text
from sqlalchemy.orm import relationship
from datetime import datetime
import enum
from app.config.database import Base

class AppointmentStatus(enum.Enum):
    SCHEDULED = "scheduled"
    CONFIRMED = "confirmed"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    NO_SHOW = "no-show"

class AppointmentType(enum.Enum):
    CONSULTATION = "consultation"
    FOLLOW_UP = "follow-up"
    ROUTINE_CHECKUP = "routine-checkup"
    SPECIALIST = "specialist"
    TELEMEDICINE = "telemedicine"
    EMERGENCY = "emergency"

ACTIVE_SLOT_CLAUSE = text("status != 'cancelled'")

class Appointment(Base):
    __tablename__ = "appointments"
    __table_args__ = (
        Index("ix_appointments_slot", "doctor_id", "appointment_date", "appointment_time"),
        # Only one non-cancelled appointment may hold a slot.
        Index(
            "uq_appointments_active_slot",
            "doctor_id", "appointment_date", "appointment_time",
            unique=True,
            sqlite_where=ACTIVE_SLOT_CLAUSE,
            postgresql_where=ACTIVE_SLOT_CLAUSE,
        ),
    )

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    patient_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    doctor_id = Column(Integer, ForeignKey("doctors.id"), nullable=False)
    appointment_date = Column(String(10), nullable=False)  # Format: YYYY-MM-DD
    appointment_time = Column(String(5), nullable=False)  # Format: HH:MM
    duration_minutes = Column(Integer, nullable=False, default=30)
    type = Column(
        Enum(AppointmentType, name="appointmenttype", values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=AppointmentType.CONSULTATION
    )
    status = Column(
        Enum(AppointmentStatus, name="appointmentstatus", values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=AppointmentStatus.SCHEDULED
    )
    reason = Column(String(500), nullable=False)
    notes = Column(String(1000))
    cancellation_reason = Column(String(500))
    cancelled_at = Column(DateTime)
    completed_at = Column(DateTime)
    diagnosis = Column(String(1000))
    prescription = Column(String(1000))
    reminder_sent = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    patient = relationship("User", foreign_keys=[patient_id])
    doctor = relationship("Doctor")

    @property
    def confirmation_number(self):
        return f"APT-{self.id}"

    @property
    def scheduled_for(self) -> datetime:
        return datetime.strptime(f"{self.appointment_date} {self.appointment_time}", "%Y-%m-%d %H:%M")

    def __repr__(self):
        return f"<Appointment {self.id} doctor={self.doctor_id} on {self.appointment_date} {self.appointment_time}>"
