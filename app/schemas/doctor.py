from pydantic import BaseModel, Field, field_validator
from typing import Dict, List, Optional
from app.models.doctor import DoctorStatus
from app.utils.validators import require_text, validate_availability

class DoctorBase(BaseModel):
    specialization: str = Field("General Medicine", min_length=1, max_length=100)
    degree: Optional[str] = Field(None, max_length=100)
    availability: Dict[str, List[str]] = Field(
        default_factory=dict,
        description="Day-wise availability windows, e.g. {\"monday\": [\"09:00-12:00\"]}"
    )
    clinic_id: Optional[int] = Field(None, description="Clinic the doctor practises at")

    @field_validator("specialization")
    @classmethod
    def check_specialization(cls, value):
        return require_text(value, "specialization")

    @field_validator("availability")
    @classmethod
    def check_availability(cls, value):
        return validate_availability(value)

class DoctorCreate(DoctorBase):
    user_id: int
    license_number: str = Field(..., min_length=1, max_length=50)

class DoctorUpdate(BaseModel):
    """Partial update. Omitted fields are kept; clinic_id and degree may be cleared with null."""

    specialization: Optional[str] = Field(None, min_length=1, max_length=100)
    degree: Optional[str] = Field(None, max_length=100)
    availability: Optional[Dict[str, List[str]]] = None
    status: Optional[DoctorStatus] = None
    clinic_id: Optional[int] = None

    @field_validator("specialization")
    @classmethod
    def check_specialization(cls, value):
        return require_text(value, "specialization")

    @field_validator("availability")
    @classmethod
    def check_availability(cls, value):
        if value is None:
            raise ValueError("availability cannot be null; send {} to clear all windows")
        return validate_availability(value)

    @field_validator("status")
    @classmethod
    def check_status(cls, value):
        if value is None:
            raise ValueError("status cannot be null")
        if value == DoctorStatus.DELETED:
            raise ValueError("Use DELETE /doctors/{id} to remove a doctor")
        return value

class DoctorResponse(BaseModel):
    id: int
    user_id: int
    name: Optional[str]
    specialization: str
    license_number: str
    degree: Optional[str]
    availability: dict
    status: DoctorStatus
    clinic_id: Optional[int] = None

    class Config:
        from_attributes = True

class AvailabilityResponse(BaseModel):
    doctor_id: int
    date: str
    day: str
    total_slots: int
    booked_slots: int
    slots: List[str]
