from typing import Any, Optional
from fastapi.responses import JSONResponse
from fastapi import status
from starlette.exceptions import HTTPException as StarletteHTTPException

class APIResponse:
    """Builders for the {"success", "data", "error"} envelope shared by all endpoints"""

    @staticmethod
    def success(data: Any, message: Optional[str] = None, status_code: int = status.HTTP_200_OK):
        content = {"success": True, "data": data, "error": None}
        if message:
            content["message"] = message
        return JSONResponse(status_code=status_code, content=content)

    @staticmethod
    def error(message: str, error_type: str, status_code: int, details: Optional[Any] = None, headers: Optional[dict] = None):
        return JSONResponse(
            status_code=status_code,
            content={
                "success": False,
                "error": {
                    "code": status_code,
                    "message": message,
                    "type": error_type,
                    "details": details
                },
                "data": None
            },
            headers=headers
        )

    @staticmethod
    def from_http_exception(exc: StarletteHTTPException):
        # AppError subclasses carry their own type and details; framework errors fall back.
        return APIResponse.error(
            message=exc.detail,
            error_type=getattr(exc, "error_type", "HTTPException"),
            status_code=exc.status_code,
            details=getattr(exc, "details", None),
            headers=getattr(exc, "headers", None)
        )
