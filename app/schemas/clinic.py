from pydantic import BaseModel, Field, field_validator
from datetime import datetime
from typing import Dict, List, Optional
from app.schemas.appointment import Pagination
from app.schemas.doctor import DoctorResponse
from app.utils.validators import normalize_phone, require_text, validate_opening_hours

OpeningHours = Dict[str, Optional[Dict[str, str]]]

def _check_phone(value):
    is_valid, cleaned = normalize_phone(require_text(value, "phone"))
    if not is_valid:
        raise ValueError("Phone must include country code starting with +. Example: +14155550100")
    return cleaned

def _check_specialties(value):
    cleaned = []
    for specialty in value:
        specialty = require_text(specialty, "specialty")
        if len(specialty) > 50:
            raise ValueError("Each specialty must be at most 50 characters")
        if specialty not in cleaned:
            cleaned.append(specialty)
    if not cleaned:
        raise ValueError("At least one specialty is required")
    return cleaned

class ClinicCreate(BaseModel):
    name: str = Field(..., min_length=2, max_length=100)
    address: str = Field(..., min_length=1, max_length=200)
    phone: str = Field(..., max_length=20, description="International format, e.g. +14155550100")
    rating: float = Field(4.0, ge=0, le=5)
    specialties: List[str] = Field(..., description="At least one specialty")
    image: Optional[str] = Field(None, max_length=500)
    is_open: bool = True
    opening_hours: Optional[OpeningHours] = Field(
        None,
        description="Days left out keep the default hours; null marks a closed day"
    )

    @field_validator("name", "address")
    @classmethod
    def check_text(cls, value, info):
        return require_text(value, info.field_name)

    @field_validator("phone")
    @classmethod
    def check_phone(cls, value):
        return _check_phone(value)

    @field_validator("specialties")
    @classmethod
    def check_specialties(cls, value):
        return _check_specialties(value)

    @field_validator("opening_hours")
    @classmethod
    def check_opening_hours(cls, value):
        return validate_opening_hours(value) if value is not None else None

class ClinicUpdate(BaseModel):
    """Partial update. Only image may be cleared with null."""

    name: Optional[str] = Field(None, min_length=2, max_length=100)
    address: Optional[str] = Field(None, min_length=1, max_length=200)
    phone: Optional[str] = Field(None, max_length=20)
    rating: Optional[float] = Field(None, ge=0, le=5)
    specialties: Optional[List[str]] = None
    image: Optional[str] = Field(None, max_length=500)
    is_open: Optional[bool] = None
    opening_hours: Optional[OpeningHours] = None

    @field_validator("name", "address")
    @classmethod
    def check_text(cls, value, info):
        return require_text(value, info.field_name)

    @field_validator("phone")
    @classmethod
    def check_phone(cls, value):
        return _check_phone(value)

    @field_validator("rating", "is_open")
    @classmethod
    def check_not_null(cls, value, info):
        if value is None:
            raise ValueError(f"{info.field_name} cannot be null")
        return value

    @field_validator("specialties")
    @classmethod
    def check_specialties(cls, value):
        if value is None:
            raise ValueError("specialties cannot be null")
        return _check_specialties(value)

    @field_validator("opening_hours")
    @classmethod
    def check_opening_hours(cls, value):
        if value is None:
            raise ValueError("opening_hours cannot be null")
        return validate_opening_hours(value)

class ClinicResponse(BaseModel):
    id: int
    name: str
    address: str
    phone: str
    rating: float
    specialties: List[str]
    image: Optional[str] = None
    is_open: bool
    opening_hours: OpeningHours
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True

class ClinicListResponse(BaseModel):
    clinics: List[ClinicResponse]
    pagination: Pagination

class ClinicSummary(BaseModel):
    id: int
    name: str

    class Config:
        from_attributes = True

class ClinicDoctorsResponse(BaseModel):
    clinic: ClinicSummary
    doctors: List[DoctorResponse]
    pagination: Pagination
