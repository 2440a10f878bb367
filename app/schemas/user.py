from pydantic import BaseModel, Field, EmailStr, field_validator
from datetime import datetime
from typing import Optional
from app.models.user import UserRole
from app.utils.validators import normalize_phone, require_text

def _check_phone(value):
    if value is None:
        return value
    is_valid, cleaned = normalize_phone(value)
    if not is_valid:
        raise ValueError("Phone must include country code starting with +. Example: +14155550100")
    return cleaned

class UserBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    phone: Optional[str] = Field(None, max_length=20, description="International format, e.g. +14155550100")

class UserCreate(UserBase):
    role: UserRole = UserRole.PATIENT

    @field_validator("name")
    @classmethod
    def validate_name(cls, value):
        return require_text(value, "name")

    @field_validator("phone")
    @classmethod
    def validate_phone(cls, value):
        return _check_phone(value)

class UserUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    phone: Optional[str] = Field(None, max_length=20)

    @field_validator("name")
    @classmethod
    def validate_name(cls, value):
        # Omit the field to keep the current name.
        return require_text(value, "name")

    @field_validator("phone")
    @classmethod
    def validate_phone(cls, value):
        return _check_phone(value)

class UserResponse(UserBase):
    id: int
    role: UserRole
    is_active: bool
    created_at: datetime

    class Config:
        from_attributes = True
