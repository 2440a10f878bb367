"""
Symptom to specialist routing for the symptom check.

Each reported symptom is scored on its own against the phrases below; a
phrase scores its word count, so "knee pain" outweighs "pain"-like single
words. Ties go to the specialty listed first.
"""

import logging
import re
from typing import Iterable, List, Optional, Sequence, Tuple

logger = logging.getLogger("assistant")

SPECIALTY_PHRASES = (
    ("Cardiology", (
        "chest pain", "chest tightness", "palpitations", "blood pressure",
        "hypertension", "irregular heartbeat", "racing heart", "cholesterol",
        "angina", "heart",
    )),
    ("Pulmonology", (
        "shortness of breath", "difficulty breathing", "wheezing", "asthma",
        "persistent cough", "coughing blood",
    )),
    ("Neurology", (
        "headache", "migraine", "seizure", "numbness", "tingling",
        "memory loss", "dizziness", "vertigo", "fainting",
    )),
    ("Gastroenterology", (
        "stomach pain", "abdominal pain", "nausea", "vomiting", "diarrhea",
        "constipation", "heartburn", "acid reflux", "bloating",
    )),
    ("Orthopedics", (
        "back pain", "knee pain", "shoulder pain", "neck pain", "joint pain",
        "fracture", "sprain", "swelling", "arthritis", "stiffness",
    )),
    ("Dermatology", (
        "rash", "acne", "eczema", "psoriasis", "hair loss", "itching", "hives",
    )),
    ("Psychiatry", (
        "anxiety", "depression", "panic attack", "insomnia", "mood swings",
    )),
    ("Pediatrics", (
        "child", "children", "baby", "infant", "toddler",
    )),
    ("Gynecology", (
        "pregnancy", "pregnant", "missed period", "menstrual pain", "pcos",
    )),
    ("General Medicine", (
        "fever", "cough", "cold", "flu", "fatigue", "sore throat", "checkup",
    )),
)

_PATTERNS = [
    (specialty, [(re.compile(rf"\b{re.escape(phrase)}(?:s|es)?\b"), len(phrase.split())) for phrase in phrases])
    for specialty, phrases in SPECIALTY_PHRASES
]


def score_symptom(symptom: str) -> dict:
    """Per-specialty score for a single symptom description"""
    text = symptom.lower()
    scores = {}
    for specialty, patterns in _PATTERNS:
        score = sum(weight for pattern, weight in patterns if pattern.search(text))
        if score:
            scores[specialty] = score
    return scores


def rank_specializations(symptoms: Iterable[str]) -> List[Tuple[str, int]]:
    totals = {}
    for symptom in symptoms:
        for specialty, score in score_symptom(symptom or "").items():
            totals[specialty] = totals.get(specialty, 0) + score

    order = {specialty: index for index, (specialty, _) in enumerate(SPECIALTY_PHRASES)}
    return sorted(totals.items(), key=lambda item: (-item[1], order[item[0]]))


def suggest_specialization(symptoms: Iterable[str]) -> Optional[str]:
    ranking = rank_specializations(symptoms)
    if not ranking:
        logger.debug("No specialty matched the reported symptoms")
        return None
    logger.debug(f"Specialty ranking: {ranking}")
    return ranking[0][0]


def match_doctors(doctors: Sequence, specialization: Optional[str], fallback_count: int = 5) -> list:
    """
    Doctors practising the suggested specialization.

    Without a suggestion, or when nobody practises it, the first
    ``fallback_count`` doctors are offered instead.
    """
    if not specialization:
        return list(doctors[:fallback_count])

    wanted = specialization.lower()
    matching = [doctor for doctor in doctors if (doctor.specialization or "").lower() == wanted]
    if matching:
        return matching

    logger.info(f"No {specialization} specialists available, offering {fallback_count} other doctors")
    return list(doctors[:fallback_count])
