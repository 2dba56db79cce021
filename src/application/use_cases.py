import logging
from typing import Optional

from src.application.errors import (
    AssessmentDecodeError,
    BackendError,
    ConfigurationError,
    EmptyResponseError,
    HealthScanError,
)
from src.application.ports import GenerativeBackendPort
from src.application.prompts import SYSTEM_INSTRUCTION, build_analysis_prompt, build_places_prompt
from src.application.recovery import places_from_payload, recover_json_object
from src.application.schemas import ASSESSMENT_RESPONSE_SCHEMA, Assessment, GeoResult, SearchCenter
from src.domain.models import AnalysisRequest, GeoQuery


logger = logging.getLogger(__name__)


DEFAULT_ASSESSMENT_TEMPERATURE = 0.3

ANALYSIS_FAILED_MESSAGE = "Failed to analyze the input. Please try again."
PLACES_FAILED_MESSAGE = "Failed to search for nearby places."


def prepare_request(media_bytes: bytes, mime_type: str, description: Optional[str] = "") -> AnalysisRequest:
    """Build the request once so the same prompt text seeds the follow-up conversation."""
    return AnalysisRequest(
        media_bytes=media_bytes,
        mime_type=mime_type,
        description=description or "",
        prompt=build_analysis_prompt(mime_type, description),
    )


class AssessmentUseCase:
    def __init__(self, llm: GenerativeBackendPort, temperature: float = DEFAULT_ASSESSMENT_TEMPERATURE):
        self.llm = llm
        self.temperature = temperature

    def request_assessment(self, media_bytes: bytes, mime_type: str, description: Optional[str] = "") -> Assessment:
        return self.assess(prepare_request(media_bytes, mime_type, description))

    def assess(self, request: AnalysisRequest) -> Assessment:
        try:
            raw = self.llm.generate_structured(
                request.prompt,
                request.media_bytes,
                request.mime_type,
                system_instruction=SYSTEM_INSTRUCTION,
                response_schema=ASSESSMENT_RESPONSE_SCHEMA,
                temperature=self.temperature,
            )
        except HealthScanError:
            raise
        except Exception as e:
            logger.exception("Assessment request failed: %s", e)
            raise BackendError(str(e) or ANALYSIS_FAILED_MESSAGE) from e

        if not raw or not raw.strip():
            raise EmptyResponseError()

        # No repair or retry here
        try:
            return Assessment.from_response_text(raw)
        except ValueError as e:
            logger.error("Assessment JSON invalid: %s. Raw: %s", e, raw[:200])
            raise AssessmentDecodeError() from e


class NearbyCareUseCase:
    def __init__(self, llm: GenerativeBackendPort):
        self.llm = llm

    def find_nearby_places(
        self, latitude: float, longitude: float, condition_context: str, risk_level: str
    ) -> GeoResult:
        query = GeoQuery(
            latitude=latitude,
            longitude=longitude,
            condition_context=condition_context,
            risk_level=risk_level,
        )
        return self.search(query)

    def search(self, query: GeoQuery) -> GeoResult:
        prompt = build_places_prompt(query)
        try:
            raw = self.llm.generate_with_maps(prompt, query.latitude, query.longitude)
        except ConfigurationError:
            raise
        except Exception as e:
            logger.exception("Map search failed: %s", e)
            raise BackendError(PLACES_FAILED_MESSAGE) from e

        if not raw or not raw.strip():
            raise EmptyResponseError("No response received from the map search.")

        outcome = recover_json_object(raw)
        if outcome.degraded:
            logger.warning("Map search output recovered via %s. Raw: %s", outcome.stage.value, raw[:200])

        return GeoResult(
            places=places_from_payload(outcome.payload),
            search_center=SearchCenter(lat=query.latitude, lng=query.longitude),
            recovery_stage=outcome.stage.value,
        )
