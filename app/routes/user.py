from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from app.config.database import get_db
from app.models.user import User, UserRole
from app.schemas.user import UserCreate, UserUpdate, UserResponse
from app.services.user_service import UserService
from app.utils.auth import get_current_user, require_roles

router = APIRouter(prefix="/users", tags=["Users"])

@router.post(
    "",
    response_model=UserResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register a user",
    responses={
        201: {"description": "User registered"},
        403: {"description": "Admin accounts cannot be self-registered"},
        409: {"description": "Email already registered"}
    }
)
def register_user(user: UserCreate, db: Session = Depends(get_db)):
    """Register a new patient or doctor account"""
    return UserService.create_user(db, user)

@router.get("/me", response_model=UserResponse)
def get_my_profile(current_user: User = Depends(get_current_user)):
    """Get the authenticated user's profile"""
    return current_user

@router.put("/me", response_model=UserResponse)
def update_my_profile(
    user: UserUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Update the authenticated user's profile. Only provided fields will be updated."""
    return UserService.update_user(db, current_user, user)

@router.get("/{user_id}", response_model=UserResponse)
def get_user(
    user_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Get a user by ID (self or admin)"""
    return UserService.get_visible_user(db, user_id, current_user)

@router.delete("/{user_id}", response_model=UserResponse)
def deactivate_user(
    user_id: int,
    admin: User = Depends(require_roles(UserRole.ADMIN)),
    db: Session = Depends(get_db)
):
    """Deactivate a user account. Users are never hard-deleted."""
    return UserService.deactivate_user(db, user_id)
