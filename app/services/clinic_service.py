import logging
from typing import Optional
from sqlalchemy import or_
from sqlalchemy.orm import Session
from app.config.database import settings
from app.models.clinic import Clinic, DEFAULT_OPENING_HOURS
from app.schemas.clinic import ClinicCreate, ClinicUpdate
from app.services.doctor_service import DoctorService
from app.utils.exceptions import NotFound

logger = logging.getLogger("clinics")

def _page(total: int, page: int, limit: int) -> dict:
    return {
        "page": page,
        "limit": limit,
        "total": total,
        "pages": (total + limit - 1) // limit,
    }

class ClinicService:
    @staticmethod
    def get_clinics(
        db: Session,
        search: Optional[str] = None,
        specialty: Optional[str] = None,
        page: int = 1,
        limit: int = 20
    ):
        """
        Clinics matching a name/address search and a specialty, best rated first.

        Specialties live in a JSON list, so that filter and the ordering are
        applied after the search query.
        """
        limit = min(limit, settings.max_page_size)
        query = db.query(Clinic)
        if search and search.strip():
            pattern = f"%{search.strip()}%"
            query = query.filter(or_(Clinic.name.ilike(pattern), Clinic.address.ilike(pattern)))

        clinics = query.all()
        if specialty and specialty.strip():
            wanted = specialty.strip().lower()
            clinics = [c for c in clinics if wanted in (s.lower() for s in c.specialties or [])]

        clinics.sort(key=lambda c: (-c.rating, c.name.lower(), c.id))
        start = (page - 1) * limit
        return {
            "clinics": clinics[start:start + limit],
            "pagination": _page(len(clinics), page, limit),
        }

    @staticmethod
    def get_clinic_by_id(db: Session, clinic_id: int):
        clinic = db.get(Clinic, clinic_id)
        if not clinic:
            raise NotFound(f"Clinic with ID {clinic_id} not found")
        return clinic

    @staticmethod
    def get_clinic_doctors(
        db: Session,
        clinic_id: int,
        specialization: Optional[str] = None,
        page: int = 1,
        limit: int = 20
    ):
        clinic = ClinicService.get_clinic_by_id(db, clinic_id)
        limit = min(limit, settings.max_page_size)
        doctors = DoctorService.get_all_doctors(db, specialization, limit=None, clinic_id=clinic.id)
        start = (page - 1) * limit
        return {
            "clinic": clinic,
            "doctors": doctors[start:start + limit],
            "pagination": _page(len(doctors), page, limit),
        }

    @staticmethod
    def create_clinic(db: Session, clinic_data: ClinicCreate):
        data = clinic_data.model_dump()
        data["opening_hours"] = {**DEFAULT_OPENING_HOURS, **(data["opening_hours"] or {})}
        clinic = Clinic(**data)
        db.add(clinic)
        db.commit()
        db.refresh(clinic)
        logger.info(f"Created clinic {clinic.id} ({clinic.name})")
        return clinic

    @staticmethod
    def update_clinic(db: Session, clinic_id: int, clinic_data: ClinicUpdate):
        clinic = ClinicService.get_clinic_by_id(db, clinic_id)
        update_data = clinic_data.model_dump(exclude_unset=True)
        if "opening_hours" in update_data:
            # Reassign so the JSON column sees the change.
            update_data["opening_hours"] = {**clinic.opening_hours, **update_data["opening_hours"]}
        for key, value in update_data.items():
            setattr(clinic, key, value)

        db.commit()
        db.refresh(clinic)
        return clinic

    @staticmethod
    def delete_clinic(db: Session, clinic_id: int):
        clinic = ClinicService.get_clinic_by_id(db, clinic_id)
        detached = len(clinic.doctors)
        for doctor in clinic.doctors:
            doctor.clinic_id = None
        db.delete(clinic)
        db.commit()
        logger.info(f"Deleted clinic {clinic_id}, detached {detached} doctors")
        return {
            "message": f"Clinic {clinic_id} deleted",
            "detached_doctors": detached
        }
