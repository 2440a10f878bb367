from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from typing import Optional
from app.config.database import get_db
from app.models.appointment import AppointmentStatus
from app.models.user import User, UserRole
from app.schemas.appointment import (
    AppointmentCreate,
    AppointmentReschedule,
    AppointmentCancel,
    AppointmentComplete,
    AppointmentStatusUpdate,
    AppointmentResponse,
    AppointmentListResponse
)
from app.services.appointment_service import AppointmentService
from app.utils.auth import get_current_user, require_roles
from app.utils.validators import checked_date

router = APIRouter(prefix="/appointments", tags=["Appointments"])

staff = require_roles(UserRole.DOCTOR, UserRole.ADMIN)

@router.post(
    "",
    response_model=AppointmentResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Book an appointment",
    responses={
        201: {"description": "Appointment booked"},
        400: {"description": "Invalid date/time, past slot or slot outside the doctor's hours"},
        404: {"description": "Doctor or patient not found"},
        409: {"description": "Slot already booked or doctor not accepting appointments"}
    }
)
def create_appointment(
    appointment: AppointmentCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Book a new appointment. Accepts doctorId/date/time as aliases."""
    return AppointmentService.create_appointment(db, appointment, current_user)

@router.get("", response_model=AppointmentListResponse)
def get_appointments(
    status: Optional[AppointmentStatus] = Query(None),
    date_from: Optional[str] = Query(None, description="Format: YYYY-MM-DD"),
    date_to: Optional[str] = Query(None, description="Format: YYYY-MM-DD"),
    doctor_id: Optional[int] = Query(None),
    patient_id: Optional[int] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """List appointments visible to the caller, with filters and pagination"""
    return AppointmentService.get_appointments(
        db,
        current_user,
        status=status,
        date_from=checked_date(date_from),
        date_to=checked_date(date_to),
        doctor_id=doctor_id,
        patient_id=patient_id,
        page=page,
        limit=limit
    )

@router.get("/{appointment_id}", response_model=AppointmentResponse)
def get_appointment(
    appointment_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Get appointment by ID"""
    return AppointmentService.get_accessible_appointment(db, appointment_id, current_user)

@router.post("/{appointment_id}/cancel", response_model=AppointmentResponse)
def cancel_appointment(
    appointment_id: int,
    cancellation: Optional[AppointmentCancel] = None,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Cancel an appointment and free its slot"""
    reason = cancellation.reason if cancellation else None
    return AppointmentService.cancel_appointment(db, appointment_id, current_user, reason)

@router.post("/{appointment_id}/reschedule", response_model=AppointmentResponse)
def reschedule_appointment(
    appointment_id: int,
    reschedule: AppointmentReschedule,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Move a scheduled or confirmed appointment to a new slot"""
    return AppointmentService.reschedule_appointment(db, appointment_id, reschedule, current_user)

@router.post("/{appointment_id}/confirm", response_model=AppointmentResponse)
def confirm_appointment(
    appointment_id: int,
    current_user: User = Depends(staff),
    db: Session = Depends(get_db)
):
    return AppointmentService.confirm_appointment(db, appointment_id, current_user)

@router.post("/{appointment_id}/start", response_model=AppointmentResponse)
def start_appointment(
    appointment_id: int,
    current_user: User = Depends(staff),
    db: Session = Depends(get_db)
):
    return AppointmentService.start_appointment(db, appointment_id, current_user)

@router.post("/{appointment_id}/complete", response_model=AppointmentResponse)
def complete_appointment(
    appointment_id: int,
    completion: Optional[AppointmentComplete] = None,
    current_user: User = Depends(staff),
    db: Session = Depends(get_db)
):
    """Complete an in-progress appointment, optionally recording notes, diagnosis and prescription"""
    return AppointmentService.complete_appointment(
        db, appointment_id, completion or AppointmentComplete(), current_user
    )

@router.post("/{appointment_id}/no-show", response_model=AppointmentResponse)
def mark_no_show(
    appointment_id: int,
    current_user: User = Depends(staff),
    db: Session = Depends(get_db)
):
    return AppointmentService.mark_no_show(db, appointment_id, current_user)

@router.patch("/{appointment_id}/status", response_model=AppointmentResponse)
def update_appointment_status(
    appointment_id: int,
    status_update: AppointmentStatusUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Generic status change, validated against the allowed transitions"""
    return AppointmentService.change_status(
        db, appointment_id, status_update.status, current_user, status_update.reason
    )
