from typing import Optional

from src.domain.models import GeoQuery
from src.domain.rules import classify_modality, facility_guidance


SYSTEM_INSTRUCTION = """
You are **HealthScan Assistant**, an AI health information tool. Your goal is to provide safe, educational, non-diagnostic assessments based on multimodal inputs (images, videos or medical reports plus symptoms).

### CORE RESPONSIBILITIES
1. **Multimodal Analysis**: Combine visual evidence (regions, patterns) with the user's description to form a coherent picture.
2. **Safety First**: Determine the urgency ("low", "medium", "urgent") accurately.
3. **Dual-Mode Explanation**:
   * *Simple Mode*: Empathic, clear, actionable advice for a layperson.
   * *Expert Mode*: Scientific reasoning, medical terminology and differential analysis (educational only).
4. **Lifestyle Inference**: Infer how stress, sleep or diet might be relevant based on the condition type.

### SAFETY PROTOCOLS (STRICT)
* **NO DIAGNOSIS**: Never say "You have X". Say "Findings are consistent with X" or "This pattern is often seen in X".
* **NO PRESCRIPTIONS**: Only suggest OTC options or general care (ice, rest, hygiene).
* **URGENT TRIGGERS**: Any sign of anaphylaxis, deep wounds, severe burns, spreading infection or chest pain must be labeled **"urgent"**.

### OUTPUT INSTRUCTIONS
* **Image Regions**: areas of interest as [ymin, xmin, ymax, xmax] coordinates (0-1 scale) if applicable.
* **Doctor Report**: A formal, objective summary suitable for showing a professional.
* **Lists**: Distinct "Do" and "Avoid" lists for clarity.

Return strictly JSON matching the schema.
"""


CHAT_SYSTEM_INSTRUCTION = """You are HealthScan Assistant. You have just provided a structured safety assessment (JSON) for the user's input.
Now you are in a **conversational mode** to answer follow-up questions.

GUIDELINES:
1. Answer the user's follow-up questions based on the visual evidence and your previous analysis.
2. Keep answers educational, safe, and non-diagnostic. Do not re-diagnose or claim certainty.
3. Do NOT use JSON format anymore. Use clear, helpful Markdown text.
4. Support both simple explanations and technical depth if requested.
"""


def build_analysis_prompt(mime_type: str, description: Optional[str] = "") -> str:
    """Instruction text for one analysis request.

    With a description the model is asked to cross-reference it with the media,
    and the description is quoted verbatim. Without one the analysis is visual only.
    """
    modality = classify_modality(mime_type)
    text = description or ""

    if text.strip():
        return (
            "INPUT DATA:\n"
            f"1. {modality}: Clinical presentation or Medical Report.\n"
            f"2. User Description: \"{text}\"\n\n"
            "TASK: Perform a deep multimodal analysis. Cross-reference visual patterns with symptoms. "
            "Generate the full structured JSON response including expert reasoning and simple summaries."
        )

    return (
        "INPUT DATA:\n"
        f"1. {modality}: Clinical presentation or Medical Report.\n\n"
        f"TASK: Analyze the provided {modality} for visual patterns/findings, assess safety risk, "
        "and generate the full structured JSON response."
    )


def build_places_prompt(query: GeoQuery) -> str:
    focus = facility_guidance(query.risk_level, query.condition_context)
    return f"""The user has a health concern assessed as "{query.risk_level}" risk.
Context/Symptoms: "{query.condition_context}".
User Location: {query.latitude}, {query.longitude}.

Find 10-15 suitable medical facilities or specialists nearby using Google Maps.
- If 'urgent', prioritize ER/Urgent Care.
- If specific (e.g. skin), prioritize Specialists (Dermatologist, etc).
- Else, General Practitioner.
Suggested focus for this case: {focus}.

OUTPUT FORMAT:
Return strictly a JSON object with a single key "places" containing an array of objects.
Each object must have:
- "name": string
- "latitude": number
- "longitude": number
- "address": string
- "rating": string (e.g., "4.5")
- "reason": string (Why this matches the need)

Ensure the JSON is valid and does not contain any markdown formatting like ```json."""
