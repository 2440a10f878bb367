from typing import Any, Optional
from fastapi import HTTPException, status


class AppError(HTTPException):
    """HTTPException carrying a machine-readable error type for the JSON envelope."""

    status_code = status.HTTP_400_BAD_REQUEST
    error_type = "Error"

    def __init__(self, detail: str, details: Optional[Any] = None):
        super().__init__(status_code=self.status_code, detail=detail)
        self.details = details


class ValidationFailed(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    error_type = "ValidationError"


class NotAuthenticated(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    error_type = "NotAuthenticated"

    def __init__(self, detail: str = "Not authenticated"):
        super().__init__(detail)
        self.headers = {"WWW-Authenticate": "Bearer"}


class Forbidden(AppError):
    status_code = status.HTTP_403_FORBIDDEN
    error_type = "Forbidden"


class NotFound(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    error_type = "NotFound"


class Conflict(AppError):
    status_code = status.HTTP_409_CONFLICT
    error_type = "Conflict"


class SlotUnavailable(Conflict):
    error_type = "SlotUnavailable"

    def __init__(self, detail: str = "This time slot is already booked"):
        super().__init__(detail)


class InvalidStatusTransition(Conflict):
    error_type = "InvalidStatusTransition"


class DoctorUnavailable(Conflict):
    error_type = "DoctorUnavailable"
