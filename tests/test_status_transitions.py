"""Appointment lifecycle: confirm, start, complete, cancel, no-show and reschedule."""
import pytest

from app.models import AppointmentStatus, Doctor, UserRole
from app.services.appointment_service import ALLOWED_TRANSITIONS, AppointmentService
from conftest import MONDAY, TUESDAY, auth, create_user


def _post(client, appointment_id, action, user, json=None):
    return client.post(f"/api/v1/appointments/{appointment_id}/{action}", json=json, headers=auth(user))


@pytest.mark.parametrize("current,target,allowed", [
    (AppointmentStatus.SCHEDULED, AppointmentStatus.CONFIRMED, True),
    (AppointmentStatus.SCHEDULED, AppointmentStatus.NO_SHOW, True),
    (AppointmentStatus.SCHEDULED, AppointmentStatus.COMPLETED, False),
    (AppointmentStatus.CONFIRMED, AppointmentStatus.IN_PROGRESS, True),
    (AppointmentStatus.CONFIRMED, AppointmentStatus.SCHEDULED, False),
    (AppointmentStatus.IN_PROGRESS, AppointmentStatus.COMPLETED, True),
    (AppointmentStatus.IN_PROGRESS, AppointmentStatus.CANCELLED, False),
    (AppointmentStatus.COMPLETED, AppointmentStatus.CANCELLED, False),
    (AppointmentStatus.NO_SHOW, AppointmentStatus.SCHEDULED, False),
])
def test_can_transition(current, target, allowed):
    assert AppointmentService.can_transition(current, target) is allowed


def test_terminal_states_have_no_exits():
    for terminal in (AppointmentStatus.COMPLETED, AppointmentStatus.CANCELLED, AppointmentStatus.NO_SHOW):
        assert ALLOWED_TRANSITIONS[terminal] == set()


def test_full_visit_lifecycle(book, client, doctor_user):
    appointment_id = book().json()["id"]

    assert _post(client, appointment_id, "confirm", doctor_user).json()["status"] == "confirmed"
    assert _post(client, appointment_id, "start", doctor_user).json()["status"] == "in-progress"

    response = _post(
        client, appointment_id, "complete", doctor_user,
        json={"diagnosis": "Mild arrhythmia", "prescription": "Rest"},
    )

    data = response.json()
    assert response.status_code == 200
    assert data["status"] == "completed"
    assert data["diagnosis"] == "Mild arrhythmia"
    assert data["completed_at"] is not None


def test_patient_cannot_confirm(book, client, patient):
    appointment_id = book().json()["id"]

    response = _post(client, appointment_id, "confirm", patient)

    assert response.status_code == 403


def test_other_doctor_cannot_confirm(book, db, client):
    appointment_id = book().json()["id"]
    stranger = create_user(db, "Greg House", "greg@example.com", role=UserRole.DOCTOR)
    db.add(Doctor(user_id=stranger.id, license_number="LIC-0099"))
    db.commit()

    response = _post(client, appointment_id, "confirm", stranger)

    assert response.status_code == 403


def test_cannot_complete_scheduled_appointment(book, client, doctor_user):
    appointment_id = book().json()["id"]

    response = _post(client, appointment_id, "complete", doctor_user)

    assert response.status_code == 409
    assert response.json()["error"]["type"] == "InvalidStatusTransition"


def test_cancel_records_reason(book, client, patient):
    appointment_id = book().json()["id"]

    response = _post(client, appointment_id, "cancel", patient, json={"reason": "Feeling better"})

    data = response.json()
    assert data["status"] == "cancelled"
    assert data["cancellation_reason"] == "Feeling better"
    assert data["cancelled_at"] is not None


def test_blank_cancel_reason_is_dropped(book, client, patient):
    appointment_id = book().json()["id"]

    response = _post(client, appointment_id, "cancel", patient, json={"reason": "   "})

    assert response.status_code == 200
    assert response.json()["cancellation_reason"] is None


def test_cannot_cancel_twice(book, client, patient):
    appointment_id = book().json()["id"]
    _post(client, appointment_id, "cancel", patient)

    response = _post(client, appointment_id, "cancel", patient)

    assert response.status_code == 409


def test_cannot_cancel_in_progress(book, client, patient, doctor_user):
    appointment_id = book().json()["id"]
    _post(client, appointment_id, "confirm", doctor_user)
    _post(client, appointment_id, "start", doctor_user)

    assert _post(client, appointment_id, "cancel", patient).status_code == 409


def test_no_show_keeps_slot_taken(book, client, other_patient, doctor_user):
    appointment_id = book().json()["id"]

    response = _post(client, appointment_id, "no-show", doctor_user)

    assert response.json()["status"] == "no-show"
    assert book(user=other_patient).status_code == 409


def test_generic_status_endpoint_validates_transition(book, client, patient, doctor_user):
    appointment_id = book().json()["id"]
    url = f"/api/v1/appointments/{appointment_id}/status"

    skipped = client.patch(url, json={"status": "in-progress"}, headers=auth(doctor_user))
    cancelled = client.patch(url, json={"status": "cancelled", "reason": "Travel"}, headers=auth(patient))

    assert skipped.status_code == 409
    assert cancelled.status_code == 200
    assert cancelled.json()["cancellation_reason"] == "Travel"


def test_generic_status_endpoint_rejects_unknown_status(book, client, doctor_user):
    appointment_id = book().json()["id"]

    response = client.patch(
        f"/api/v1/appointments/{appointment_id}/status",
        json={"status": "postponed"},
        headers=auth(doctor_user),
    )

    assert response.status_code == 400


def test_reschedule_moves_slot_and_resets_status(book, client, patient, other_patient, doctor_user):
    appointment_id = book().json()["id"]
    _post(client, appointment_id, "confirm", doctor_user)

    response = _post(client, appointment_id, "reschedule", patient, json={"date": TUESDAY, "time": "10:00"})

    data = response.json()
    assert response.status_code == 200
    assert data["appointment_date"] == TUESDAY
    assert data["appointment_time"] == "10:00"
    assert data["status"] == "scheduled"
    # The old slot is free again.
    assert book(user=other_patient).status_code == 201


def test_reschedule_to_same_slot_rejected(book, client, patient):
    appointment_id = book().json()["id"]

    response = _post(client, appointment_id, "reschedule", patient, json={"date": MONDAY, "time": "09:00"})

    assert response.status_code == 400


def test_reschedule_into_booked_slot_rejected(book, client, patient, other_patient):
    book(time="09:30", user=other_patient)
    appointment_id = book().json()["id"]

    response = _post(client, appointment_id, "reschedule", patient, json={"date": MONDAY, "time": "09:30"})

    assert response.status_code == 409


def test_reschedule_outside_hours_rejected(book, client, patient):
    appointment_id = book().json()["id"]

    response = _post(client, appointment_id, "reschedule", patient, json={"date": TUESDAY, "time": "15:00"})

    assert response.status_code == 400


def test_cannot_reschedule_cancelled(book, client, patient):
    appointment_id = book().json()["id"]
    _post(client, appointment_id, "cancel", patient)

    response = _post(client, appointment_id, "reschedule", patient, json={"date": TUESDAY, "time": "10:00"})

    assert response.status_code == 409
