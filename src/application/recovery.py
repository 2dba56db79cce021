"""Best-effort recovery of a JSON object from free model text.

Tool-augmented requests cannot carry a response schema, so their output is only
*asked* to be JSON. The chain below runs in a fixed order and every step is a
pure function of its input:

    raw text -> fences stripped -> direct parse
                                -> first-to-last brace span parse
                                -> empty fallback

It never raises. The stage reached is reported so callers can log degraded output.
"""
import json
import logging
import re
from enum import Enum
from typing import Any, List, NamedTuple, Optional

from pydantic import ValidationError

from src.application.schemas import Place


logger = logging.getLogger(__name__)


FENCE_PATTERN = re.compile(r"```json\n?|\n?```")
BRACED_SPAN_PATTERN = re.compile(r"\{[\s\S]*\}")


class RecoveryStage(str, Enum):
    DIRECT = "direct"
    EXTRACTED = "extracted"
    EMPTY_FALLBACK = "empty_fallback"


class RecoveryOutcome(NamedTuple):
    stage: RecoveryStage
    payload: dict

    @property
    def degraded(self) -> bool:
        return self.stage is not RecoveryStage.DIRECT


def strip_fences(text: str) -> str:
    return FENCE_PATTERN.sub("", text or "").strip()


def parse_object(text: str) -> Optional[dict]:
    try:
        data = json.loads(text)
    except (TypeError, ValueError):
        return None
    return data if isinstance(data, dict) else None


def extract_braced_span(text: str) -> Optional[str]:
    match = BRACED_SPAN_PATTERN.search(text or "")
    return match.group(0) if match else None


def recover_json_object(raw_text: str) -> RecoveryOutcome:
    stripped = strip_fences(raw_text)

    data = parse_object(stripped)
    if data is not None:
        return RecoveryOutcome(RecoveryStage.DIRECT, data)

    span = extract_braced_span(stripped)
    if span is not None:
        data = parse_object(span)
        if data is not None:
            return RecoveryOutcome(RecoveryStage.EXTRACTED, data)

    return RecoveryOutcome(RecoveryStage.EMPTY_FALLBACK, {})


def places_from_payload(payload: dict) -> List[Place]:
    items: Any = payload.get("places") if isinstance(payload, dict) else None
    if not isinstance(items, list):
        return []

    places: List[Place] = []
    for item in items:
        if not isinstance(item, dict):
            logger.warning("Dropping non-object place entry: %r", item)
            continue
        try:
            places.append(Place.model_validate(item))
        except ValidationError as e:
            logger.warning("Dropping invalid place entry %r: %s", item.get("name"), e)
    return places
