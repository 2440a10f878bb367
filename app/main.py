from contextlib import asynccontextmanager
from fastapi import FastAPI, Request, status, APIRouter, Depends
from fastapi.middleware.cors import CORSMiddleware
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from app.config.database import engine, Base, settings
from app.config.redis_config import redis_config, get_redis_client, check_redis
from app.routes import user, clinic, doctor, appointment, notification, assistant
from app.utils.response import APIResponse
import time
import logging
import redis

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s"
)
logger = logging.getLogger("api")

Base.metadata.create_all(bind=engine)

@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"Starting {settings.api_title} v{settings.api_version}")
    yield
    redis_config.close()
    logger.info("Application shutting down...")

app = FastAPI(
    lifespan=lifespan,
    title=settings.api_title,
    description="""
    Healthcare Appointment Management API

    Book, reschedule and track appointments between patients and doctors.

    ### Features:
    * **User Accounts**: Patients, doctors and admins authenticated with bearer tokens
    * **Clinics**: Public clinic directory with search and specialty filters
    * **Doctor Management**: Doctor profiles with weekly availability windows
    * **Appointment Booking**: Conflict-free booking with a validated status lifecycle
    * **Notifications**: In-app notifications with optional SMS delivery
    * **Health Assistant**: Rule-based conversational guidance and symptom checks

    ### Business Rules:
    * One active appointment per doctor, date and time
    * Appointment times fall on the configured interval (30 minutes by default)
    * Cancelled appointments free their slot

    ### For Frontend Developers:
    * Errors share one JSON envelope with code, type, message and details
    * `doctorId`, `date` and `time` are accepted as booking aliases
    * OpenAPI schema available at `/api/openapi.json`
    """,
    version=settings.api_version,
    debug=settings.debug,
    docs_url="/api/docs",
    redoc_url="/api/redoc",
    openapi_url="/api/openapi.json",
    swagger_ui_parameters={
        "defaultModelsExpandDepth": -1,
        "docExpansion": "none",
        "filter": True
    }
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

@app.middleware("http")
async def log_requests(request: Request, call_next):
    start = time.perf_counter()
    response = await call_next(request)
    elapsed_ms = (time.perf_counter() - start) * 1000
    logger.info(f"{request.method} {request.url.path} -> {response.status_code} ({elapsed_ms:.1f}ms)")
    return response


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return APIResponse.from_http_exception(exc)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = []
    for error in exc.errors():
        errors.append({
            "field": " -> ".join(str(loc) for loc in error["loc"]),
            "message": error["msg"],
            "type": error["type"]
        })

    return APIResponse.error(
        message="Validation Error",
        error_type="ValidationError",
        status_code=status.HTTP_400_BAD_REQUEST,
        details=errors
    )


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return APIResponse.error(
        message="Internal server error",
        error_type="InternalError",
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR
    )


system_router = APIRouter(prefix="/api", tags=["System"])

@system_router.get("")
def api_root():
    """Root API endpoint with information"""
    return {
        "success": True,
        "data": {
            "message": settings.api_title,
            "version": settings.api_version,
            "documentation": {
                "swagger_ui": "/api/docs",
                "redoc": "/api/redoc",
                "openapi_schema": "/api/openapi.json"
            },
            "endpoints": {
                "users": "/api/v1/users",
                "clinics": "/api/v1/clinics",
                "doctors": "/api/v1/doctors",
                "appointments": "/api/v1/appointments",
                "notifications": "/api/v1/notifications",
                "assistant": "/api/v1/assistant"
            }
        }
    }

@system_router.get("/health")
def health_check(redis_client: redis.Redis = Depends(get_redis_client)):
    """Health check endpoint for monitoring"""
    redis_ok = check_redis(redis_client)
    return {
        "success": True,
        "data": {
            "status": "healthy" if redis_ok else "degraded",
            "service": "healthcare-api",
            "version": settings.api_version,
            "redis": "connected" if redis_ok else "unavailable"
        }
    }

app.include_router(system_router)

app.include_router(user.router, prefix="/api/v1")
app.include_router(clinic.router, prefix="/api/v1")
app.include_router(doctor.router, prefix="/api/v1")
app.include_router(appointment.router, prefix="/api/v1")
app.include_router(notification.router, prefix="/api/v1")
app.include_router(assistant.router, prefix="/api/v1")

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "app.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.debug,
        log_level=settings.log_level
    )
