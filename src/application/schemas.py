import json
from typing import Annotated, Any, List, Literal, Optional, Tuple

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, field_validator


RiskLevel = Literal["low", "medium", "urgent"]
SymptomSeverity = Literal["mild", "moderate", "severe"]

NOT_AVAILABLE = "N/A"


def _none_to_empty_str(v: Any) -> Any:
    return "" if v is None else v


def _none_to_empty_tuple(v: Any) -> Any:
    return () if v is None else v


# Optional backend fields arrive as missing or null; both become empty values
Text = Annotated[str, BeforeValidator(_none_to_empty_str)]
TextTuple = Annotated[Tuple[str, ...], BeforeValidator(_none_to_empty_tuple)]


class ImageRegion(BaseModel):
    model_config = ConfigDict(frozen=True)

    area: Text = ""
    bbox: Tuple[float, ...] = ()  # (ymin, xmin, ymax, xmax), 0-1 scale
    finding: Text = ""

    @field_validator("bbox", mode="before")
    @classmethod
    def drop_malformed_bbox(cls, v: Any):
        # A bad box makes the region unplottable, not the assessment unreadable
        if not isinstance(v, (list, tuple)):
            return ()
        if not all(isinstance(n, (int, float)) and not isinstance(n, bool) for n in v):
            return ()
        return tuple(v)

    @property
    def has_valid_bbox(self) -> bool:
        return len(self.bbox) == 4 and all(0.0 <= n <= 1.0 for n in self.bbox)


class DoctorReport(BaseModel):
    model_config = ConfigDict(frozen=True)

    title: Text = ""
    visual_description: Text = ""
    symptom_notes: Text = ""
    risk_level: Text = ""
    suggested_questions: TextTuple = ()


class LifestyleFactors(BaseModel):
    model_config = ConfigDict(frozen=True)

    stress: Text = ""
    sleep_quality: Text = ""
    diet_impact: Text = ""


class Assessment(BaseModel):
    """Structured health-information result for one submitted case.

    Immutable once decoded: nested records are frozen and every sequence is a tuple.
    """

    model_config = ConfigDict(frozen=True)

    risk_level: RiskLevel
    risk_reasoning: str
    # NaN and infinity are rejected before clamping
    visual_confidence_score: float = Field(allow_inf_nan=False)
    symptom_severity: SymptomSeverity

    visual_findings_summary: str
    image_regions: Tuple[ImageRegion, ...] = ()

    symptom_summary: str
    possible_factors: Tuple[str, ...]
    recommended_actions: TextTuple = ()
    urgent_signs_to_watch: Tuple[str, ...]

    do_list: Tuple[str, ...]
    avoid_list: Tuple[str, ...]

    doctor_questions: TextTuple = ()
    followup_recommendation: Text = ""

    doctor_report: DoctorReport
    estimated_lifestyle_factors: LifestyleFactors = Field(default_factory=LifestyleFactors)

    deep_reasoning: str
    user_friendly_summary: str
    disclaimer: str

    suggested_followup_questions: TextTuple = ()

    @field_validator("risk_level", "symptom_severity", mode="before")
    @classmethod
    def lower_enum(cls, v: Any):
        return v.strip().lower() if isinstance(v, str) else v

    @field_validator("visual_confidence_score")
    @classmethod
    def clamp_confidence(cls, v: float):
        return min(max(v, 0.0), 1.0)

    @field_validator("image_regions", mode="before")
    @classmethod
    def optional_regions(cls, v: Any):
        return _none_to_empty_tuple(v)

    @field_validator("estimated_lifestyle_factors", mode="before")
    @classmethod
    def optional_lifestyle(cls, v: Any):
        return {} if v is None else v

    @classmethod
    def from_response_text(cls, text: str) -> "Assessment":
        """Decode backend JSON. Raises ``json.JSONDecodeError`` or ``pydantic.ValidationError``."""
        data = json.loads(text)
        if not isinstance(data, dict):
            raise ValueError("Assessment JSON must be an object")
        return cls.model_validate(data)

    def to_canonical_text(self) -> str:
        return json.dumps(self.model_dump(mode="json"), ensure_ascii=False)

    @property
    def plottable_regions(self) -> List[ImageRegion]:
        return [r for r in self.image_regions if r.has_valid_bbox]

    def conversation_starters(self, limit: int = 3) -> List[str]:
        for questions in (
            self.doctor_report.suggested_questions,
            self.doctor_questions,
            self.suggested_followup_questions,
        ):
            cleaned = [q.strip() for q in questions if q and q.strip()]
            if cleaned:
                return cleaned[:limit]
        return []

    @property
    def condition_context(self) -> str:
        return f"{self.visual_findings_summary} {self.symptom_summary}".strip()

    @property
    def followup_display(self) -> str:
        return self.followup_recommendation or "As needed"


class Place(BaseModel):
    name: Text = ""
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    address: Text = ""
    rating: str = ""
    reason: Text = ""

    @field_validator("rating", mode="before")
    @classmethod
    def rating_as_text(cls, v: Any):
        if v is None:
            return ""
        if isinstance(v, (int, float)) and not isinstance(v, bool):
            return str(v)
        return v

    @field_validator("latitude", "longitude", mode="before")
    @classmethod
    def coordinate_or_none(cls, v: Any):
        if isinstance(v, str):
            try:
                return float(v)
            except ValueError:
                return None
        return v

    @property
    def has_coordinates(self) -> bool:
        return self.latitude is not None and self.longitude is not None

    @property
    def rating_display(self) -> str:
        return self.rating or NOT_AVAILABLE


class SearchCenter(BaseModel):
    lat: float
    lng: float


class GeoResult(BaseModel):
    places: List[Place] = Field(default_factory=list)
    search_center: SearchCenter
    recovery_stage: str = "direct"


def _string_list(description: str | None = None) -> dict:
    schema: dict = {"type": "ARRAY", "items": {"type": "STRING"}}
    if description:
        schema["description"] = description
    return schema


ASSESSMENT_REQUIRED_FIELDS = [
    "risk_level",
    "risk_reasoning",
    "visual_confidence_score",
    "symptom_severity",
    "visual_findings_summary",
    "symptom_summary",
    "possible_factors",
    "do_list",
    "avoid_list",
    "urgent_signs_to_watch",
    "deep_reasoning",
    "user_friendly_summary",
    "doctor_report",
    "disclaimer",
]


ASSESSMENT_RESPONSE_SCHEMA: dict = {
    "type": "OBJECT",
    "properties": {
        "risk_level": {
            "type": "STRING",
            "enum": ["low", "medium", "urgent"],
            "description": "Safety risk assessment.",
        },
        "risk_reasoning": {
            "type": "STRING",
            "description": "Brief explanation of why this risk level was assigned.",
        },
        "visual_confidence_score": {
            "type": "NUMBER",
            "description": "Confidence in the visual clarity and finding identification (0.0 to 1.0).",
        },
        "symptom_severity": {"type": "STRING", "enum": ["mild", "moderate", "severe"]},
        "visual_findings_summary": {
            "type": "STRING",
            "description": "Detailed description of visible physical signs.",
        },
        "image_regions": {
            "type": "ARRAY",
            "items": {
                "type": "OBJECT",
                "properties": {
                    "area": {"type": "STRING", "description": "Name of the area (e.g. 'Left forearm lesion')."},
                    "bbox": {"type": "ARRAY", "items": {"type": "NUMBER"}},
                    "finding": {"type": "STRING", "description": "What is seen in this box."},
                },
            },
        },
        "symptom_summary": {"type": "STRING", "description": "Summary of user-reported symptoms."},
        "possible_factors": _string_list("3-5 potential non-diagnostic causes."),
        "recommended_actions": _string_list("General recommended steps."),
        "urgent_signs_to_watch": _string_list("Early warning signs that would require immediate care."),
        "do_list": _string_list("Specific positive actions (e.g., 'Keep dry', 'Elevate')."),
        "avoid_list": _string_list("Specific actions to avoid (e.g., 'Scratching', 'Hot water')."),
        "doctor_questions": _string_list(),
        "followup_recommendation": {
            "type": "STRING",
            "description": "Suggestion on when to re-assess (e.g., 'Check again in 24 hours').",
        },
        "doctor_report": {
            "type": "OBJECT",
            "properties": {
                "title": {"type": "STRING"},
                "visual_description": {"type": "STRING"},
                "symptom_notes": {"type": "STRING"},
                "risk_level": {"type": "STRING"},
                "suggested_questions": _string_list(),
            },
        },
        "estimated_lifestyle_factors": {
            "type": "OBJECT",
            "properties": {
                "stress": {"type": "STRING"},
                "sleep_quality": {"type": "STRING"},
                "diet_impact": {"type": "STRING"},
            },
        },
        "deep_reasoning": {
            "type": "STRING",
            "description": "Complex scientific reasoning and differential analysis (Expert Mode).",
        },
        "user_friendly_summary": {
            "type": "STRING",
            "description": "Simple, empathic summary for the user (Simple Mode).",
        },
        "disclaimer": {"type": "STRING"},
    },
    "required": ASSESSMENT_REQUIRED_FIELDS,
}
