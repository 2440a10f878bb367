"""Rule-based health assistant and its Redis-backed conversations."""
from types import SimpleNamespace

import pytest

from app.services.assistant_service import assess_urgency, classify_message, generate_reply
from app.services.redis_service import ConversationStore
from app.utils.symptom_mapper import match_doctors, rank_specializations, score_symptom, suggest_specialization
from conftest import auth


@pytest.mark.parametrize("message,category", [
    ("I have crushing chest pain", "emergency"),
    ("I've had a fever since yesterday", "symptoms"),
    ("Can I get a refill of my prescription?", "medication"),
    ("I want to book a checkup", "appointment"),
    ("What are your opening hours?", "general"),
])
def test_classify_message(message, category):
    assert classify_message(message) == category


def test_emergency_reply_recommends_emergency_services():
    reply = generate_reply("my father is unconscious")

    assert reply["category"] == "emergency"
    assert reply["confidence"] == 0.95
    assert reply["requires_follow_up"] is True
    assert all(action["priority"] == "high" for action in reply["recommended_actions"])


def test_general_reply_needs_no_follow_up():
    assert generate_reply("hello")["requires_follow_up"] is False


@pytest.mark.parametrize("symptoms,urgency", [
    (["Chest pain", "sweating"], "emergency"),
    (["high fever"], "high"),
    (["cough"], "medium"),
    (["feeling tired of work"], "low"),
])
def test_assess_urgency(symptoms, urgency):
    assert assess_urgency(symptoms)["urgency"] == urgency


def test_specific_phrases_decide_the_specialty():
    assert suggest_specialization(["sharp knee pain after running"]) == "Orthopedics"
    assert suggest_specialization(["palpitations and high blood pressure"]) == "Cardiology"
    assert suggest_specialization([""]) is None


def test_symptoms_are_scored_one_by_one():
    ranking = rank_specializations(["persistent cough", "wheezing at night", "mild fever"])

    assert ranking[0] == ("Pulmonology", 3)
    assert ("General Medicine", 2) in ranking


def test_whole_words_only():
    assert suggest_specialization(["heartburn after meals"]) == "Gastroenterology"
    assert score_symptom("kidney stones") == {}
    assert score_symptom("recurring headaches") == {"Neurology": 1}


def test_match_doctors_falls_back_to_first_doctors():
    doctors = [SimpleNamespace(id=i, specialization="General Medicine") for i in range(8)]

    assert len(match_doctors(doctors, "Dermatology")) == 5
    assert len(match_doctors(doctors, None, fallback_count=3)) == 3
    assert match_doctors([], "Dermatology") == []
    assert [d.id for d in match_doctors(doctors, "general medicine")] == list(range(8))


def test_store_trims_history(redis_client):
    store = ConversationStore(redis_client, ttl=60, max_messages=3)
    conversation = store.create_conversation(user_id=1)

    for i in range(5):
        store.append_message(conversation, "user", f"message {i}")

    saved = store.get_conversation(conversation["id"])
    assert [m["content"] for m in saved["messages"]] == ["message 2", "message 3", "message 4"]
    assert 0 < redis_client.ttl(store._get_key(conversation["id"])) <= 60


def test_conversation_flow(client, patient):
    conversation = client.post("/api/v1/assistant/conversations", headers=auth(patient))
    assert conversation.status_code == 201
    conversation_id = conversation.json()["id"]

    exchange = client.post(
        f"/api/v1/assistant/conversations/{conversation_id}/messages",
        json={"content": "I have a headache and fever"},
        headers=auth(patient),
    )

    assert exchange.status_code == 200
    assert exchange.json()["reply"]["category"] == "symptoms"
    history = client.get(f"/api/v1/assistant/conversations/{conversation_id}", headers=auth(patient)).json()
    assert [m["role"] for m in history["messages"]] == ["user", "assistant"]
    assert history["messages"][1]["category"] == "symptoms"


def test_conversation_is_private(client, patient, other_patient):
    conversation_id = client.post("/api/v1/assistant/conversations", headers=auth(patient)).json()["id"]
    url = f"/api/v1/assistant/conversations/{conversation_id}"

    assert client.get(url, headers=auth(other_patient)).status_code == 404
    assert client.delete(url, headers=auth(other_patient)).status_code == 404


def test_delete_conversation(client, patient):
    conversation_id = client.post("/api/v1/assistant/conversations", headers=auth(patient)).json()["id"]
    url = f"/api/v1/assistant/conversations/{conversation_id}"

    assert client.delete(url, headers=auth(patient)).status_code == 200
    assert client.get(url, headers=auth(patient)).status_code == 404


def test_message_to_unknown_conversation(client, patient):
    response = client.post(
        "/api/v1/assistant/conversations/missing/messages",
        json={"content": "hello"},
        headers=auth(patient),
    )

    assert response.status_code == 404


def test_empty_message_rejected(client, patient):
    conversation_id = client.post("/api/v1/assistant/conversations", headers=auth(patient)).json()["id"]

    response = client.post(
        f"/api/v1/assistant/conversations/{conversation_id}/messages",
        json={"content": ""},
        headers=auth(patient),
    )

    assert response.status_code == 400


def test_symptom_check_suggests_matching_doctors(client, patient, doctor):
    response = client.post(
        "/api/v1/assistant/symptom-check",
        json={"symptoms": ["palpitations", "chest pain"]},
        headers=auth(patient),
    )

    data = response.json()
    assert response.status_code == 200
    assert data["urgency"] == "emergency"
    assert data["suggested_specialization"] == "Cardiology"
    assert data["doctors"] == [{"id": doctor.id, "name": "Sarah Johnson", "specialization": "Cardiology"}]


def test_symptom_check_requires_symptoms(client, patient):
    response = client.post("/api/v1/assistant/symptom-check", json={"symptoms": []}, headers=auth(patient))

    assert response.status_code == 400
