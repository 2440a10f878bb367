# app/utils/auth.py
#
# Tokens are issued by the identity provider; this module only verifies them
# and resolves the bearer to an active user.

from typing import Optional
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import jwt, JWTError
from sqlalchemy.orm import Session
from app.config.database import get_db, settings
from app.models.user import User, UserRole
from app.utils.exceptions import NotAuthenticated, Forbidden

bearer = HTTPBearer(auto_error=False)


def decode_token(token: str) -> int:
    try:
        payload = jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
        return int(payload.get("sub"))
    except (JWTError, ValueError, TypeError):
        raise NotAuthenticated("Invalid token")


def get_current_user(
    creds: Optional[HTTPAuthorizationCredentials] = Depends(bearer),
    db: Session = Depends(get_db)
) -> User:
    if not creds:
        raise NotAuthenticated()
    user_id = decode_token(creds.credentials)
    user = db.get(User, user_id)
    if not user or not user.is_active:
        raise NotAuthenticated("Invalid user")
    return user


def require_roles(*roles: UserRole):
    """Dependency factory restricting an endpoint to the given roles"""
    def checker(current_user: User = Depends(get_current_user)) -> User:
        if current_user.role not in roles:
            allowed = ", ".join(role.value for role in roles)
            raise Forbidden(f"This action requires one of the roles: {allowed}")
        return current_user
    return checker
