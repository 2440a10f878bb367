"""
Rule-based health assistant.

Messages are classified by keyword (emergency first) and answered with
fixed guidance text, suggested follow-up prompts and recommended actions.
No language model is involved.
"""

import logging
from typing import Any, Dict, List
from sqlalchemy.orm import Session
from app.models.user import User
from app.services.doctor_service import DoctorService
from app.services.redis_service import ConversationStore
from app.utils.exceptions import NotFound
from app.utils.symptom_mapper import match_doctors, suggest_specialization
from app.utils.validators import sanitize_text

logger = logging.getLogger("assistant")

MEDICAL_KEYWORDS = {
    "emergency": [
        "chest pain", "heart attack", "stroke", "difficulty breathing", "severe bleeding",
        "unconscious", "seizure", "severe allergic reaction", "poisoning", "overdose"
    ],
    "symptoms": [
        "headache", "fever", "cough", "nausea", "dizziness", "fatigue", "pain",
        "rash", "swelling", "shortness of breath", "vomiting", "diarrhea"
    ],
    "medication": [
        "prescription", "medication", "pills", "dosage", "side effects", "drug interaction",
        "pharmacy", "refill"
    ],
    "appointment": [
        "appointment", "schedule", "book", "doctor visit", "consultation", "checkup",
        "specialist", "follow-up", "reschedule", "cancel"
    ],
}

CONFIDENCE = {
    "emergency": 0.95,
    "symptoms": 0.8,
    "medication": 0.85,
    "appointment": 0.9,
    "general": 0.6,
}

EMERGENCY_SYMPTOMS = ["chest pain", "difficulty breathing", "severe bleeding", "unconscious"]
HIGH_URGENCY_SYMPTOMS = ["severe pain", "high fever", "persistent vomiting"]


def classify_message(message: str) -> str:
    lower_message = message.lower()
    for category in ("emergency", "symptoms", "medication", "appointment"):
        if any(keyword in lower_message for keyword in MEDICAL_KEYWORDS[category]):
            return category
    return "general"


def _action(type: str, label: str, priority: str) -> Dict[str, str]:
    return {"type": type, "label": label, "priority": priority}


def generate_reply(message: str) -> Dict[str, Any]:
    category = classify_message(message)
    lower_message = message.lower()

    if category == "emergency":
        text = (
            "This sounds like a medical emergency. Please call your local emergency number "
            "immediately or go to the nearest emergency room. Do not wait for an appointment."
        )
        suggestions = ["Call emergency services now", "Go to nearest ER", "Call poison control"]
        actions = [
            _action("emergency", "Call emergency services", "high"),
            _action("emergency", "Find nearest ER", "high"),
        ]
    elif category == "symptoms":
        if "pain" in lower_message:
            text = (
                "I understand you're experiencing pain. Can you describe the location and type of pain, "
                "when it started, and how severe it is (1-10)? For severe or persistent pain, "
                "please consider scheduling an appointment."
            )
            suggestions = [
                "The pain is sharp and sudden",
                "It's a dull, constant ache",
                "The pain comes and goes",
                "I need to see a doctor",
            ]
        elif "fever" in lower_message:
            text = (
                "Fever can indicate infection or illness. Have you taken your temperature or noticed "
                "other symptoms? Seek medical attention if the fever is over 38.3°C (101°F) or persists."
            )
            suggestions = [
                "My temperature is over 38.3°C",
                "I have chills and body aches",
                "The fever won't go down",
                "I need medical attention",
            ]
        else:
            text = (
                "I understand you're experiencing symptoms. I can share general information, but a "
                "proper medical evaluation is important. Would you like help scheduling an appointment?"
            )
            suggestions = [
                "Tell me more about my symptoms",
                "Book an appointment",
                "Find a specialist",
            ]
        actions = [
            _action("book_appointment", "Schedule appointment", "medium"),
            _action("call_doctor", "Call your doctor", "medium"),
        ]
    elif category == "medication":
        text = (
            "For medication questions, please consult your healthcare provider or pharmacist about "
            "dosages, interactions and side effects. Never stop or change medications without "
            "medical supervision."
        )
        suggestions = [
            "I'm having side effects",
            "Can I take this with other medications?",
            "I missed a dose",
        ]
        actions = [
            _action("call_doctor", "Contact your doctor", "high"),
            _action("learn_more", "Medication safety tips", "low"),
        ]
    elif category == "appointment":
        text = (
            "I can help with appointments. You can browse doctors by specialty, check their "
            "available slots, and book, reschedule or cancel visits."
        )
        suggestions = [
            "Show me available doctors",
            "I need a specialist",
            "Reschedule existing appointment",
        ]
        actions = [
            _action("book_appointment", "Book appointment now", "high"),
            _action("learn_more", "View doctor profiles", "medium"),
        ]
    else:
        text = (
            "I'm here to help with general health questions and to guide you through our services. "
            "For personalised medical advice, please consult one of our healthcare providers."
        )
        suggestions = [
            "Help me book an appointment",
            "I have symptoms to discuss",
            "Questions about medications",
        ]
        actions = [
            _action("book_appointment", "Schedule consultation", "medium"),
            _action("learn_more", "Browse health resources", "low"),
        ]

    return {
        "message": text,
        "category": category,
        "confidence": CONFIDENCE[category],
        "suggestions": suggestions,
        "requires_follow_up": category != "general",
        "recommended_actions": actions,
    }


def assess_urgency(symptoms: List[str]) -> Dict[str, Any]:
    symptom_text = " ".join(symptoms).lower()

    if any(symptom in symptom_text for symptom in EMERGENCY_SYMPTOMS):
        return {
            "urgency": "emergency",
            "recommendations": [
                "Seek immediate emergency care",
                "Call emergency services or go to the nearest ER",
                "Do not drive yourself",
            ],
        }

    if any(symptom in symptom_text for symptom in HIGH_URGENCY_SYMPTOMS):
        return {
            "urgency": "high",
            "recommendations": [
                "Schedule an appointment within 24 hours",
                "Consider urgent care if your doctor is unavailable",
                "Monitor symptoms closely",
            ],
        }

    if any(symptom in symptom_text for symptom in MEDICAL_KEYWORDS["symptoms"]):
        return {
            "urgency": "medium",
            "recommendations": [
                "Schedule an appointment with a primary care physician",
                "Monitor symptoms and note any changes",
                "Rest and stay hydrated",
            ],
        }

    return {
        "urgency": "low",
        "recommendations": [
            "Book a routine checkup if symptoms persist",
            "Rest and stay hydrated",
        ],
    }


class AssistantService:
    def __init__(self, store: ConversationStore):
        self.store = store

    def start_conversation(self, user: User) -> Dict[str, Any]:
        return self.store.create_conversation(user.id)

    def get_conversation(self, conversation_id: str, user: User) -> Dict[str, Any]:
        conversation = self.store.get_conversation(conversation_id)
        # Other users' conversations are reported as missing.
        if not conversation or conversation["user_id"] != user.id:
            raise NotFound(f"Conversation {conversation_id} not found")
        return conversation

    def send_message(self, conversation_id: str, content: str, user: User) -> Dict[str, Any]:
        conversation = self.get_conversation(conversation_id, user)
        cleaned = sanitize_text(content, max_length=2000)

        reply = generate_reply(cleaned)
        self.store.append_message(conversation, "user", cleaned)
        self.store.append_message(conversation, "assistant", reply["message"], category=reply["category"])

        logger.info(f"Conversation {conversation_id}: classified message as {reply['category']}")
        return {"conversation_id": conversation_id, "reply": reply}

    def delete_conversation(self, conversation_id: str, user: User):
        self.get_conversation(conversation_id, user)
        self.store.delete_conversation(conversation_id)
        return {"message": f"Conversation {conversation_id} deleted successfully"}

    @staticmethod
    def check_symptoms(db: Session, symptoms: List[str]) -> Dict[str, Any]:
        assessment = assess_urgency(symptoms)
        specialization = suggest_specialization(symptoms)
        doctors = match_doctors(DoctorService.get_all_doctors(db), specialization)

        return {
            "urgency": assessment["urgency"],
            "recommendations": assessment["recommendations"],
            "suggested_specialization": specialization,
            "doctors": [
                {"id": doctor.id, "name": doctor.name, "specialization": doctor.specialization}
                for doctor in doctors
            ],
        }
