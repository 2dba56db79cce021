from typing import Literal, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator


Role = Literal["user", "model"]


class AnalysisRequest(BaseModel):
    """One submitted case: the media, the user's notes and the exact prompt sent for it."""

    model_config = ConfigDict(frozen=True)

    media_bytes: bytes
    mime_type: str
    description: str = ""
    prompt: str


class ChatTurn(BaseModel):
    model_config = ConfigDict(frozen=True)

    role: Role
    text: str
    media_bytes: Optional[bytes] = None
    mime_type: Optional[str] = None


class GeoQuery(BaseModel):
    model_config = ConfigDict(frozen=True)

    latitude: float = Field(..., ge=-90.0, le=90.0)
    longitude: float = Field(..., ge=-180.0, le=180.0)
    condition_context: str = ""
    risk_level: str = "low"

    @field_validator("condition_context", "risk_level", mode="before")
    @classmethod
    def strip_text(cls, v: Optional[str]):
        return (v or "").strip()
