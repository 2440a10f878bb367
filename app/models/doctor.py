from sqlalchemy import Column, Integer, String, JSON, DateTime, ForeignKey, Enum as SQLEnum
from sqlalchemy.orm import relationship
from datetime import datetime
from app.config.database import Base
import enum

class DoctorStatus(enum.Enum):
    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"
    DELETED = "DELETED"

class Doctor(Base):
    __tablename__ = "doctors"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), unique=True, nullable=False)
    specialization = Column(String(100), nullable=False, default="General Medicine")
    license_number = Column(String(50), unique=True, nullable=False)
    degree = Column(String(100))
    # {"monday": ["09:00-12:00", "14:00-17:00"], ...}
    availability = Column(JSON, nullable=False, default=dict)
    clinic_id = Column(Integer, ForeignKey("clinics.id"), nullable=True, index=True)
    status = Column(SQLEnum(DoctorStatus), default=DoctorStatus.ACTIVE, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    user = relationship("User", back_populates="doctor_profile")
    clinic = relationship("Clinic", back_populates="doctors")

    @property
    def name(self):
        return self.user.name if self.user else None
