from datetime import datetime, timedelta
from typing import Optional
from sqlalchemy.orm import Session
from app.config.database import settings
from app.models.appointment import Appointment, AppointmentStatus
from app.models.doctor import Doctor
from app.services.doctor_service import DoctorService
from app.utils.validators import WEEKDAYS, on_interval, parse_date, parse_time, parse_window

class AvailabilityService:
    @staticmethod
    def find_conflict(
        db: Session,
        doctor_id: int,
        appointment_date: str,
        appointment_time: str,
        exclude_id: Optional[int] = None
    ) -> Optional[Appointment]:
        """Return the non-cancelled appointment holding the slot, if any"""
        query = db.query(Appointment).filter(
            Appointment.doctor_id == doctor_id,
            Appointment.appointment_date == appointment_date,
            Appointment.appointment_time == appointment_time,
            Appointment.status != AppointmentStatus.CANCELLED
        )
        if exclude_id is not None:
            query = query.filter(Appointment.id != exclude_id)
        return query.first()

    @staticmethod
    def is_slot_available(db: Session, doctor_id: int, appointment_date: str, appointment_time: str) -> bool:
        DoctorService.get_doctor_by_id(db, doctor_id)
        return AvailabilityService.find_conflict(db, doctor_id, appointment_date, appointment_time) is None

    @staticmethod
    def day_name(appointment_date: str) -> str:
        return WEEKDAYS[parse_date(appointment_date).weekday()]

    @staticmethod
    def is_aligned(appointment_time: str) -> bool:
        return on_interval(parse_time(appointment_time))

    @staticmethod
    def is_within_availability(doctor: Doctor, appointment_date: str, appointment_time: str) -> bool:
        # Doctors without configured windows accept any aligned time.
        if not doctor.availability:
            return True

        requested = parse_time(appointment_time)
        for window in doctor.availability.get(AvailabilityService.day_name(appointment_date), []):
            start, end = parse_window(window)
            if start <= requested < end:
                return True
        return False

    @staticmethod
    def generate_time_slots(window: str) -> list:
        start, end = parse_window(window)
        interval = settings.appointment_interval_minutes
        # Slots sit on the grid counted from midnight, even for windows stored off it.
        offset = -(start.hour * 60 + start.minute) % interval
        current_time = datetime.combine(datetime.min.date(), start) + timedelta(minutes=offset)
        end_time = datetime.combine(datetime.min.date(), end)

        slots = []
        while current_time < end_time:
            slots.append(current_time.strftime("%H:%M"))
            current_time += timedelta(minutes=interval)
        return slots

    @staticmethod
    def get_available_slots(db: Session, doctor_id: int, appointment_date: str, now: Optional[datetime] = None):
        doctor = DoctorService.get_doctor_by_id(db, doctor_id)
        now = now or datetime.now()
        day_name = AvailabilityService.day_name(appointment_date)

        all_slots = []
        for window in doctor.availability.get(day_name, []):
            all_slots.extend(AvailabilityService.generate_time_slots(window))
        all_slots = sorted(set(all_slots))

        booked_times = {
            time for (time,) in db.query(Appointment.appointment_time).filter(
                Appointment.doctor_id == doctor_id,
                Appointment.appointment_date == appointment_date,
                Appointment.status != AppointmentStatus.CANCELLED
            ).all()
        }

        day = parse_date(appointment_date)
        available_slots = [
            slot for slot in all_slots
            if slot not in booked_times and datetime.combine(day, parse_time(slot)) > now
        ]

        return {
            "doctor_id": doctor_id,
            "date": appointment_date,
            "day": day_name.capitalize(),
            "total_slots": len(all_slots),
            "booked_slots": len(booked_times),
            "slots": available_slots
        }
