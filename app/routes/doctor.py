from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from typing import List, Optional
from app.config.database import get_db
from app.models.user import User, UserRole
from app.schemas.doctor import DoctorCreate, DoctorUpdate, DoctorResponse, AvailabilityResponse
from app.services.appointment_service import AppointmentService
from app.services.availability_service import AvailabilityService
from app.services.doctor_service import DoctorService
from app.utils.auth import get_current_user, require_roles
from app.utils.validators import checked_date

router = APIRouter(prefix="/doctors", tags=["Doctors"])

DATE_QUERY = Query(..., description="Format: YYYY-MM-DD")

@router.post(
    "",
    response_model=DoctorResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a doctor profile",
    description="Attach a doctor profile with weekday availability windows to a user with the doctor role",
    responses={
        201: {
            "description": "Doctor created successfully",
            "content": {
                "application/json": {
                    "example": {
                        "id": 1,
                        "user_id": 7,
                        "name": "Sarah Johnson",
                        "specialization": "Cardiology",
                        "license_number": "LIC-0001",
                        "degree": "MBBS, MD (Cardiology)",
                        "availability": {
                            "monday": ["09:00-12:00", "14:00-17:00"],
                            "tuesday": ["09:00-12:00"]
                        },
                        "status": "ACTIVE"
                    }
                }
            }
        },
        404: {"description": "User not found"},
        409: {"description": "Profile or license number already exists"}
    }
)
def create_doctor(
    doctor: DoctorCreate,
    admin: User = Depends(require_roles(UserRole.ADMIN)),
    db: Session = Depends(get_db)
):
    return DoctorService.create_doctor(db, doctor)

@router.get("", response_model=List[DoctorResponse], summary="List doctors")
def get_all_doctors(
    specialization: Optional[str] = Query(None, description="Filter by specialization"),
    include_inactive: bool = Query(False),
    clinic_id: Optional[int] = Query(None, description="Filter by clinic"),
    skip: int = Query(0, ge=0, description="Number of records to skip"),
    limit: int = Query(100, ge=1, le=100, description="Maximum number of records to return"),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return DoctorService.get_all_doctors(db, specialization, include_inactive, skip, limit, clinic_id)

@router.get(
    "/{doctor_id}",
    response_model=DoctorResponse,
    responses={404: {"description": "Doctor not found"}}
)
def get_doctor(
    doctor_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return DoctorService.get_doctor_by_id(db, doctor_id)

@router.put("/{doctor_id}", response_model=DoctorResponse)
def update_doctor(
    doctor_id: int,
    doctor: DoctorUpdate,
    current_user: User = Depends(require_roles(UserRole.DOCTOR, UserRole.ADMIN)),
    db: Session = Depends(get_db)
):
    """Update doctor details. Only provided fields will be updated."""
    return DoctorService.update_doctor(db, doctor_id, doctor, current_user)

@router.delete("/{doctor_id}")
def delete_doctor(
    doctor_id: int,
    admin: User = Depends(require_roles(UserRole.ADMIN)),
    db: Session = Depends(get_db)
):
    """Soft-delete a doctor and cancel their upcoming appointments"""
    return DoctorService.delete_doctor(db, doctor_id)

@router.get("/{doctor_id}/availability", response_model=AvailabilityResponse)
def get_doctor_availability(
    doctor_id: int,
    date: str = DATE_QUERY,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Get free time slots for a doctor on a specific date"""
    return AvailabilityService.get_available_slots(db, doctor_id, checked_date(date))

@router.get("/{doctor_id}/statistics")
def get_doctor_statistics(
    doctor_id: int,
    date: str = DATE_QUERY,
    current_user: User = Depends(require_roles(UserRole.DOCTOR, UserRole.ADMIN)),
    db: Session = Depends(get_db)
):
    """Get appointment statistics for a doctor on a specific date"""
    return AppointmentService.get_doctor_statistics(db, doctor_id, checked_date(date), current_user)
