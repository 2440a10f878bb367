from pydantic import BaseModel, Field, AliasChoices, field_validator
from datetime import datetime
from typing import List, Optional
from app.models.appointment import AppointmentStatus, AppointmentType
from app.utils.validators import normalize_date, normalize_time, optional_text, require_text

class SlotFields(BaseModel):
    appointment_date: str = Field(
        ...,
        validation_alias=AliasChoices("appointment_date", "date"),
        description="Format: YYYY-MM-DD"
    )
    appointment_time: str = Field(
        ...,
        validation_alias=AliasChoices("appointment_time", "time"),
        description="Format: HH:MM"
    )

    @field_validator("appointment_date")
    @classmethod
    def check_date(cls, value):
        return normalize_date(value)

    @field_validator("appointment_time")
    @classmethod
    def check_time(cls, value):
        return normalize_time(value)

class AppointmentCreate(SlotFields):
    doctor_id: int = Field(..., validation_alias=AliasChoices("doctor_id", "doctorId"))
    patient_id: Optional[int] = Field(
        None,
        validation_alias=AliasChoices("patient_id", "patientId"),
        description="Required when a doctor or admin books on behalf of a patient"
    )
    reason: str = Field(..., min_length=1, max_length=500)
    type: AppointmentType = AppointmentType.CONSULTATION
    duration_minutes: Optional[int] = Field(None, ge=15, le=240)
    notes: Optional[str] = Field(None, max_length=1000)

    @field_validator("reason")
    @classmethod
    def check_reason(cls, value):
        return require_text(value, "reason")

class AppointmentReschedule(SlotFields):
    reason: Optional[str] = Field(None, max_length=500)

    @field_validator("reason")
    @classmethod
    def clean_reason(cls, value):
        return optional_text(value)

class AppointmentCancel(BaseModel):
    reason: Optional[str] = Field(None, max_length=500)

    @field_validator("reason")
    @classmethod
    def clean_reason(cls, value):
        return optional_text(value)

class AppointmentComplete(BaseModel):
    notes: Optional[str] = Field(None, max_length=1000)
    diagnosis: Optional[str] = Field(None, max_length=1000)
    prescription: Optional[str] = Field(None, max_length=1000)

class AppointmentStatusUpdate(BaseModel):
    status: AppointmentStatus
    reason: Optional[str] = Field(None, max_length=500)

    @field_validator("reason")
    @classmethod
    def clean_reason(cls, value):
        return optional_text(value)

class AppointmentResponse(BaseModel):
    id: int
    confirmation_number: str
    patient_id: int
    doctor_id: int
    appointment_date: str
    appointment_time: str
    duration_minutes: int
    type: AppointmentType
    status: AppointmentStatus
    reason: str
    notes: Optional[str] = None
    cancellation_reason: Optional[str] = None
    cancelled_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    diagnosis: Optional[str] = None
    prescription: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True

class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    pages: int

class AppointmentListResponse(BaseModel):
    appointments: List[AppointmentResponse]
    pagination: Pagination
