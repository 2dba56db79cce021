import re
from typing import Dict, Pattern, Tuple


VIDEO_LABEL = "Video"
PDF_LABEL = "Medical Report (PDF)"
IMAGE_LABEL = "Image"

EMERGENCY_FOCUS = "Emergency Room / Urgent Care"
GENERAL_FOCUS = "General Practitioner"

# checked in order; patterns match at word starts
SPECIALTY_PATTERNS: Tuple[Tuple[Pattern[str], str], ...] = tuple(
    (re.compile(pattern), specialist)
    for pattern, specialist in (
        (r"\b(skin|rash|mole|acne|eczema|itch|lesion|hives|psoriasis)", "Dermatologist"),
        (r"\b(eye|vision|conjunctiv)", "Ophthalmologist"),
        (r"\b(ears?\b|earache|throat|nose|sinus|tonsil)", "ENT Specialist"),
        (r"\b(tooth|teeth|gum|dental)", "Dentist"),
        (r"\b(bone|joint|fracture|sprain|knee|ankle|wrist)", "Orthopedist"),
        (r"\b(heart|palpitation|cardiac)", "Cardiologist"),
        (r"\b(lung|breath|asthma|cough)", "Pulmonologist"),
        (r"\b(stomach|abdom|bowel|digest)", "Gastroenterologist"),
        (r"\b(wound|burn|laceration)", "Urgent Care"),
    )
)


def classify_modality(mime_type: str) -> str:
    """Label used in prompts for the uploaded media. Unknown types are treated as images."""
    mime = (mime_type or "").strip().lower()
    if mime.startswith("video/"):
        return VIDEO_LABEL
    if mime == "application/pdf":
        return PDF_LABEL
    return IMAGE_LABEL


def media_kind(mime_type: str) -> str:
    return {VIDEO_LABEL: "video", PDF_LABEL: "pdf"}.get(classify_modality(mime_type), "image")


def match_specialty(condition_context: str) -> str | None:
    text = (condition_context or "").lower()
    for pattern, specialist in SPECIALTY_PATTERNS:
        if pattern.search(text):
            return specialist
    return None


def facility_guidance(risk_level: str, condition_context: str) -> str:
    """Pick the kind of facility to prioritise for a nearby-care search."""
    if (risk_level or "").strip().lower() == "urgent":
        return EMERGENCY_FOCUS

    specialist = match_specialty(condition_context)
    if specialist:
        return specialist
    return GENERAL_FOCUS


RISK_LABELS: Dict[str, str] = {
    "low": "Low risk",
    "medium": "Medium risk",
    "urgent": "Urgent",
}
