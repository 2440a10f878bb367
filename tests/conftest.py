"""Shared test fixtures."""
import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["JWT_SECRET"] = "test-secret"
os.environ["ENABLE_SMS_NOTIFICATIONS"] = "false"

import fakeredis
import pytest
from fastapi.testclient import TestClient
from jose import jwt
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.config.database import Base, get_db, settings
from app.config.redis_config import get_redis_client
from app.main import app
from app.models import Doctor, User, UserRole

engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# 2099-01-05 is a Monday, 2099-01-06 a Tuesday and 2099-01-04 a Sunday.
MONDAY = "2099-01-05"
TUESDAY = "2099-01-06"
SUNDAY = "2099-01-04"

AVAILABILITY = {
    "monday": ["09:00-12:00", "14:00-17:00"],
    "tuesday": ["09:00-12:00"],
}


def make_token(user_id: int) -> str:
    return jwt.encode({"sub": str(user_id)}, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def auth(user: User) -> dict:
    return {"Authorization": f"Bearer {make_token(user.id)}"}


def create_user(db, name: str, email: str, role: UserRole = UserRole.PATIENT, phone: str = None) -> User:
    user = User(name=name, email=email, role=role, phone=phone)
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture
def db():
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def redis_client():
    return fakeredis.FakeRedis(decode_responses=True)


@pytest.fixture
def client(db, redis_client):
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_redis_client] = lambda: redis_client
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def patient(db) -> User:
    return create_user(db, "Jane Patient", "jane@example.com", phone="+14155550100")


@pytest.fixture
def other_patient(db) -> User:
    return create_user(db, "John Other", "john@example.com")


@pytest.fixture
def admin(db) -> User:
    return create_user(db, "Ada Admin", "admin@example.com", role=UserRole.ADMIN)


@pytest.fixture
def doctor_user(db) -> User:
    return create_user(db, "Sarah Johnson", "sarah@example.com", role=UserRole.DOCTOR)


@pytest.fixture
def doctor(db, doctor_user) -> Doctor:
    profile = Doctor(
        user_id=doctor_user.id,
        specialization="Cardiology",
        license_number="LIC-0001",
        degree="MBBS, MD",
        availability=AVAILABILITY,
    )
    db.add(profile)
    db.commit()
    db.refresh(profile)
    return profile


@pytest.fixture
def book(client, patient, doctor):
    """Book an appointment as the patient and return the response"""
    def _book(date: str = MONDAY, time: str = "09:00", user: User = None, **extra):
        payload = {
            "doctor_id": doctor.id,
            "appointment_date": date,
            "appointment_time": time,
            "reason": "Chest discomfort",
        }
        payload.update(extra)
        return client.post("/api/v1/appointments", json=payload, headers=auth(user or patient))
    return _book
