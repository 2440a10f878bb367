from sqlalchemy import Column, Integer, String, Float, Boolean, JSON, DateTime
from sqlalchemy.orm import relationship
from datetime import datetime
from app.config.database import Base

DEFAULT_OPENING_HOURS = {
    "monday": {"open": "08:00", "close": "18:00"},
    "tuesday": {"open": "08:00", "close": "18:00"},
    "wednesday": {"open": "08:00", "close": "18:00"},
    "thursday": {"open": "08:00", "close": "18:00"},
    "friday": {"open": "08:00", "close": "18:00"},
    "saturday": {"open": "09:00", "close": "17:00"},
    "sunday": {"open": "10:00", "close": "16:00"},
}

class Clinic(Base):
    __tablename__ = "clinics"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False, index=True)
    address = Column(String(200), nullable=False)
    phone = Column(String(20), nullable=False)
    rating = Column(Float, nullable=False, default=4.0)
    specialties = Column(JSON, nullable=False, default=list)
    image = Column(String(500))
    is_open = Column(Boolean, nullable=False, default=True)
    # {"monday": {"open": "08:00", "close": "18:00"}, "sunday": null, ...}
    opening_hours = Column(JSON, nullable=False, default=lambda: dict(DEFAULT_OPENING_HOURS))
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    doctors = relationship("Doctor", back_populates="clinic")

    def __repr__(self):
        return f"<Clinic {self.id} {self.name}>"
