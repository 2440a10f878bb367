"""User registration and profile endpoints."""
from conftest import auth


def test_register_patient(client):
    response = client.post(
        "/api/v1/users",
        json={"name": "Mia Wong", "email": "Mia@Example.com", "phone": "+1 (415) 555-0199"},
    )

    data = response.json()
    assert response.status_code == 201
    assert data["role"] == "patient"
    assert data["email"] == "mia@example.com"
    assert data["phone"] == "+14155550199"
    assert data["is_active"] is True


def test_register_duplicate_email(client, patient):
    response = client.post("/api/v1/users", json={"name": "Jane", "email": "JANE@example.com"})

    assert response.status_code == 409
    assert response.json()["error"]["type"] == "Conflict"


def test_admin_cannot_self_register(client):
    response = client.post("/api/v1/users", json={"name": "Eve", "email": "eve@example.com", "role": "admin"})

    assert response.status_code == 403


def test_register_rejects_bad_phone(client):
    response = client.post("/api/v1/users", json={"name": "Bob", "email": "bob@example.com", "phone": "5551234"})

    assert response.status_code == 400
    assert response.json()["error"]["type"] == "ValidationError"


def test_register_rejects_bad_email(client):
    response = client.post("/api/v1/users", json={"name": "Bob", "email": "not-an-email"})

    assert response.status_code == 400


def test_get_and_update_profile(client, patient):
    me = client.get("/api/v1/users/me", headers=auth(patient))
    updated = client.put("/api/v1/users/me", json={"name": "Jane Doe"}, headers=auth(patient))

    assert me.json()["email"] == "jane@example.com"
    assert updated.json()["name"] == "Jane Doe"
    assert updated.json()["phone"] == "+14155550100"


def test_users_see_only_themselves(client, patient, other_patient, admin):
    assert client.get(f"/api/v1/users/{other_patient.id}", headers=auth(patient)).status_code == 403
    assert client.get(f"/api/v1/users/{other_patient.id}", headers=auth(admin)).status_code == 200
    assert client.get("/api/v1/users/999", headers=auth(admin)).status_code == 404


def test_deactivated_user_loses_access(client, patient, admin):
    response = client.delete(f"/api/v1/users/{patient.id}", headers=auth(admin))

    assert response.json()["is_active"] is False
    assert client.get("/api/v1/users/me", headers=auth(patient)).status_code == 401


def test_only_admin_deactivates(client, patient, other_patient):
    response = client.delete(f"/api/v1/users/{other_patient.id}", headers=auth(patient))

    assert response.status_code == 403


def test_update_rejects_null_or_blank_name(client, patient):
    null_name = client.put("/api/v1/users/me", json={"name": None}, headers=auth(patient))
    blank_name = client.put("/api/v1/users/me", json={"name": "   "}, headers=auth(patient))

    assert null_name.status_code == 400
    assert blank_name.status_code == 400
    assert client.get("/api/v1/users/me", headers=auth(patient)).json()["name"] == "Jane Patient"


def test_update_can_clear_phone(client, patient):
    response = client.put("/api/v1/users/me", json={"phone": None}, headers=auth(patient))

    assert response.status_code == 200
    assert response.json()["phone"] is None
