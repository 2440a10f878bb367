import logging
from sqlalchemy.orm import Session
from app.models.doctor import DoctorStatus
from app.models.user import User, UserRole
from app.schemas.user import UserCreate, UserUpdate
from app.utils.exceptions import Conflict, Forbidden, NotFound

logger = logging.getLogger("users")

class UserService:
    @staticmethod
    def create_user(db: Session, user_data: UserCreate):
        if user_data.role == UserRole.ADMIN:
            raise Forbidden("Admin accounts cannot be self-registered")

        email = user_data.email.lower()
        existing_user = db.query(User).filter(User.email == email).first()
        if existing_user:
            raise Conflict(f"A user with email {email} already exists")

        db_user = User(
            name=user_data.name,
            email=email,
            phone=user_data.phone,
            role=user_data.role
        )
        db.add(db_user)
        db.commit()
        db.refresh(db_user)
        logger.info(f"Registered {db_user.role.value} user {db_user.id}")
        return db_user

    @staticmethod
    def get_user_by_id(db: Session, user_id: int):
        user = db.get(User, user_id)
        if not user:
            raise NotFound(f"User with ID {user_id} not found")
        return user

    @staticmethod
    def get_patient(db: Session, patient_id: int):
        patient = db.get(User, patient_id)
        if not patient or not patient.is_active or patient.role != UserRole.PATIENT:
            raise NotFound(f"Patient with ID {patient_id} not found")
        return patient

    @staticmethod
    def get_visible_user(db: Session, user_id: int, current_user: User):
        if current_user.role != UserRole.ADMIN and current_user.id != user_id:
            raise Forbidden("You can only view your own profile")
        return UserService.get_user_by_id(db, user_id)

    @staticmethod
    def update_user(db: Session, user: User, user_data: UserUpdate):
        update_data = user_data.model_dump(exclude_unset=True)
        for key, value in update_data.items():
            setattr(user, key, value)

        db.commit()
        db.refresh(user)
        return user

    @staticmethod
    def deactivate_user(db: Session, user_id: int):
        user = UserService.get_user_by_id(db, user_id)
        user.is_active = False
        profile = user.doctor_profile
        if profile is not None and profile.status == DoctorStatus.ACTIVE:
            profile.status = DoctorStatus.INACTIVE
            logger.info(f"Doctor profile {profile.id} set inactive with its user")
        db.commit()
        db.refresh(user)
        logger.info(f"Deactivated user {user_id}")
        return user
