from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from typing import Optional
from app.config.database import get_db
from app.models.user import User, UserRole
from app.schemas.clinic import (
    ClinicCreate,
    ClinicUpdate,
    ClinicResponse,
    ClinicListResponse,
    ClinicDoctorsResponse,
)
from app.services.clinic_service import ClinicService
from app.utils.auth import require_roles

router = APIRouter(prefix="/clinics", tags=["Clinics"])

@router.get("", response_model=ClinicListResponse, summary="List clinics")
def get_clinics(
    search: Optional[str] = Query(None, min_length=2, max_length=100, description="Match on name or address"),
    specialty: Optional[str] = Query(None, min_length=2, max_length=50),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    db: Session = Depends(get_db)
):
    """Browse clinics, highest rated first. No authentication required."""
    return ClinicService.get_clinics(db, search, specialty, page, limit)

@router.get(
    "/{clinic_id}",
    response_model=ClinicResponse,
    responses={404: {"description": "Clinic not found"}}
)
def get_clinic(clinic_id: int, db: Session = Depends(get_db)):
    return ClinicService.get_clinic_by_id(db, clinic_id)

@router.get("/{clinic_id}/doctors", response_model=ClinicDoctorsResponse)
def get_clinic_doctors(
    clinic_id: int,
    specialization: Optional[str] = Query(None, description="Filter by specialization"),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    db: Session = Depends(get_db)
):
    """Active doctors practising at a clinic"""
    return ClinicService.get_clinic_doctors(db, clinic_id, specialization, page, limit)

@router.post(
    "",
    response_model=ClinicResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        201: {
            "description": "Clinic created successfully",
            "content": {
                "application/json": {
                    "example": {
                        "id": 1,
                        "name": "Downtown Medical Center",
                        "address": "12 Market Street",
                        "phone": "+14155550123",
                        "rating": 4.6,
                        "specialties": ["Cardiology", "General Medicine"],
                        "image": None,
                        "is_open": True,
                        "opening_hours": {
                            "monday": {"open": "08:00", "close": "18:00"},
                            "sunday": None
                        }
                    }
                }
            }
        }
    }
)
def create_clinic(
    clinic: ClinicCreate,
    admin: User = Depends(require_roles(UserRole.ADMIN)),
    db: Session = Depends(get_db)
):
    return ClinicService.create_clinic(db, clinic)

@router.put("/{clinic_id}", response_model=ClinicResponse)
def update_clinic(
    clinic_id: int,
    clinic: ClinicUpdate,
    admin: User = Depends(require_roles(UserRole.ADMIN)),
    db: Session = Depends(get_db)
):
    """Update clinic details. Only provided fields will be updated."""
    return ClinicService.update_clinic(db, clinic_id, clinic)

@router.delete("/{clinic_id}")
def delete_clinic(
    clinic_id: int,
    admin: User = Depends(require_roles(UserRole.ADMIN)),
    db: Session = Depends(get_db)
):
    """Delete a clinic. Its doctors stay, without a clinic."""
    return ClinicService.delete_clinic(db, clinic_id)
