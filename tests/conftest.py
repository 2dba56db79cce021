import copy

import pytest


ASSESSMENT_PAYLOAD = {
    "risk_level": "medium",
    "risk_reasoning": "Spreading redness without fever.",
    "visual_confidence_score": 0.82,
    "symptom_severity": "moderate",
    "visual_findings_summary": "Raised red patches on the left forearm.",
    "image_regions": [
        {"area": "Left forearm lesion", "bbox": [0.1, 0.2, 0.4, 0.5], "finding": "Erythematous plaque"},
    ],
    "symptom_summary": "Itchy rash for 3 days.",
    "possible_factors": ["Contact irritation", "Eczema flare"],
    "recommended_actions": ["Keep the area clean"],
    "urgent_signs_to_watch": ["Fever", "Red streaks spreading"],
    "do_list": ["Keep dry"],
    "avoid_list": ["Scratching"],
    "doctor_questions": ["Could this be an allergy?"],
    "followup_recommendation": "Check again in 48 hours",
    "doctor_report": {
        "title": "Skin Finding Summary",
        "visual_description": "Well-demarcated red plaque.",
        "symptom_notes": "Pruritus for 3 days.",
        "risk_level": "medium",
        "suggested_questions": [
            "Is this contact dermatitis?",
            "Should I try a topical steroid?",
            "Do I need a patch test?",
            "When should I come back?",
        ],
    },
    "estimated_lifestyle_factors": {"stress": "Moderate", "sleep_quality": "Disturbed by itching", "diet_impact": "Low"},
    "deep_reasoning": "Findings are consistent with an eczematous process.",
    "user_friendly_summary": "This looks like an irritated skin patch.",
    "disclaimer": "Educational only. Not a diagnosis.",
}


@pytest.fixture
def assessment_payload():
    return copy.deepcopy(ASSESSMENT_PAYLOAD)
