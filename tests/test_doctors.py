"""Doctor profile management."""
import pytest

from app.models import AppointmentStatus, DoctorStatus, UserRole
from conftest import MONDAY, auth, create_user


def _doctor_payload(user_id, **extra):
    payload = {
        "user_id": user_id,
        "specialization": "Neurology",
        "license_number": "LIC-1000",
        "availability": {"Monday": ["9:00-12:00"]},
    }
    payload.update(extra)
    return payload


def test_admin_creates_doctor(db, client, admin):
    user = create_user(db, "Tom Lee", "tom@example.com", role=UserRole.DOCTOR)

    response = client.post("/api/v1/doctors", json=_doctor_payload(user.id), headers=auth(admin))

    data = response.json()
    assert response.status_code == 201
    assert data["name"] == "Tom Lee"
    assert data["status"] == "ACTIVE"
    assert data["availability"] == {"monday": ["09:00-12:00"]}


def test_only_admin_creates_doctor(db, client, patient):
    user = create_user(db, "Tom Lee", "tom@example.com", role=UserRole.DOCTOR)

    response = client.post("/api/v1/doctors", json=_doctor_payload(user.id), headers=auth(patient))

    assert response.status_code == 403


def test_doctor_profile_requires_doctor_role(client, admin, patient):
    response = client.post("/api/v1/doctors", json=_doctor_payload(patient.id), headers=auth(admin))

    assert response.status_code == 400


def test_duplicate_license_rejected(db, client, admin, doctor):
    user = create_user(db, "Tom Lee", "tom@example.com", role=UserRole.DOCTOR)

    response = client.post(
        "/api/v1/doctors",
        json=_doctor_payload(user.id, license_number=doctor.license_number),
        headers=auth(admin),
    )

    assert response.status_code == 409


def test_invalid_availability_window_rejected(db, client, admin):
    user = create_user(db, "Tom Lee", "tom@example.com", role=UserRole.DOCTOR)

    response = client.post(
        "/api/v1/doctors",
        json=_doctor_payload(user.id, availability={"monday": ["12:00-09:00"]}),
        headers=auth(admin),
    )

    assert response.status_code == 400


def test_list_doctors_by_specialization(client, patient, doctor):
    matched = client.get("/api/v1/doctors", params={"specialization": "cardiology"}, headers=auth(patient))
    unmatched = client.get("/api/v1/doctors", params={"specialization": "Dermatology"}, headers=auth(patient))

    assert [d["id"] for d in matched.json()] == [doctor.id]
    assert unmatched.json() == []


def test_doctor_updates_own_availability(client, doctor, doctor_user):
    response = client.put(
        f"/api/v1/doctors/{doctor.id}",
        json={"availability": {"friday": ["08:00-10:00"]}},
        headers=auth(doctor_user),
    )

    assert response.status_code == 200
    assert response.json()["availability"] == {"friday": ["08:00-10:00"]}
    assert response.json()["specialization"] == "Cardiology"


def test_doctor_cannot_update_another_profile(db, client, doctor):
    other = create_user(db, "Tom Lee", "tom@example.com", role=UserRole.DOCTOR)

    response = client.put(f"/api/v1/doctors/{doctor.id}", json={"degree": "PhD"}, headers=auth(other))

    assert response.status_code == 403


def test_update_cannot_set_deleted(client, admin, doctor):
    response = client.put(f"/api/v1/doctors/{doctor.id}", json={"status": "DELETED"}, headers=auth(admin))

    assert response.status_code == 400


def test_delete_doctor_cancels_upcoming_appointments(book, db, client, admin, patient, doctor):
    appointment_id = book().json()["id"]

    response = client.delete(f"/api/v1/doctors/{doctor.id}", headers=auth(admin))

    assert response.status_code == 200
    assert response.json()["cancelled_appointments"] == 1
    assert client.get(f"/api/v1/doctors/{doctor.id}", headers=auth(patient)).status_code == 404

    appointment = client.get(f"/api/v1/appointments/{appointment_id}", headers=auth(patient)).json()
    assert appointment["status"] == AppointmentStatus.CANCELLED.value

    rebook = book(date=MONDAY, time="10:00")
    assert rebook.status_code == 404


def test_update_rejects_null_availability(client, patient, doctor, doctor_user):
    response = client.put(
        f"/api/v1/doctors/{doctor.id}", json={"availability": None}, headers=auth(doctor_user)
    )

    assert response.status_code == 400
    slots = client.get(f"/api/v1/doctors/{doctor.id}/availability", params={"date": MONDAY}, headers=auth(patient))
    assert slots.status_code == 200
    assert slots.json()["total_slots"] == 12


@pytest.mark.parametrize("field", ["specialization", "status"])
def test_update_rejects_null_for_required_fields(client, admin, doctor, field):
    response = client.put(f"/api/v1/doctors/{doctor.id}", json={field: None}, headers=auth(admin))

    assert response.status_code == 400
    profile = client.get(f"/api/v1/doctors/{doctor.id}", headers=auth(admin)).json()
    assert profile["specialization"] == "Cardiology"
    assert profile["status"] == "ACTIVE"


def test_update_can_clear_degree(client, admin, doctor):
    response = client.put(f"/api/v1/doctors/{doctor.id}", json={"degree": None}, headers=auth(admin))

    assert response.status_code == 200
    assert response.json()["degree"] is None


def test_window_off_the_booking_grid_rejected(db, client, admin, doctor):
    user = create_user(db, "Tom Lee", "tom@example.com", role=UserRole.DOCTOR)

    created = client.post(
        "/api/v1/doctors",
        json=_doctor_payload(user.id, availability={"monday": ["09:15-10:15"]}),
        headers=auth(admin),
    )
    updated = client.put(
        f"/api/v1/doctors/{doctor.id}",
        json={"availability": {"monday": ["10:45-12:00"]}},
        headers=auth(admin),
    )

    assert created.status_code == 400
    assert updated.status_code == 400
    assert "boundary" in str(updated.json()["error"]["details"])


def test_deactivating_doctor_account_stops_bookings(book, db, client, admin, patient, doctor, doctor_user):
    response = client.delete(f"/api/v1/users/{doctor_user.id}", headers=auth(admin))

    assert response.status_code == 200
    db.refresh(doctor)
    assert doctor.status == DoctorStatus.INACTIVE
    assert client.get("/api/v1/doctors", headers=auth(patient)).json() == []

    booking = book()
    assert booking.status_code == 409
    assert booking.json()["error"]["type"] == "DoctorUnavailable"


def test_inactive_account_hides_doctor_even_if_profile_active(book, db, client, patient, doctor, doctor_user):
    doctor_user.is_active = False
    db.commit()

    assert client.get("/api/v1/doctors", headers=auth(patient)).json() == []
    assert book().status_code == 409


def test_doctor_clinic_must_exist(db, client, admin):
    user = create_user(db, "Tom Lee", "tom@example.com", role=UserRole.DOCTOR)

    response = client.post("/api/v1/doctors", json=_doctor_payload(user.id, clinic_id=999), headers=auth(admin))

    assert response.status_code == 404
