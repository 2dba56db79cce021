"""Pure rendering helpers for the Streamlit app."""
import io
import logging
from typing import Iterable, Optional, Tuple

import pandas as pd
from PIL import Image, ImageDraw, UnidentifiedImageError

from src.application.schemas import NOT_AVAILABLE, Assessment, GeoResult, ImageRegion, Place
from src.domain.rules import RISK_LABELS


logger = logging.getLogger(__name__)


RISK_COLORS = {
    "low": "green",
    "medium": "orange",
    "urgent": "red",
}

REGION_COLOR = (37, 99, 235)


def risk_badge(risk_level: str) -> Tuple[str, str]:
    level = (risk_level or "").lower()
    return RISK_LABELS.get(level, "Unknown"), RISK_COLORS.get(level, "gray")


def draw_regions(image_bytes: bytes, regions: Iterable[ImageRegion]) -> Optional[Image.Image]:
    """Outline each reliable region on the image. Returns None if the image cannot be read."""
    try:
        image = Image.open(io.BytesIO(image_bytes)).convert("RGB")
    except (UnidentifiedImageError, OSError, ValueError) as e:
        logger.warning("Could not open image for region overlay: %s", e)
        return None

    width, height = image.size
    draw = ImageDraw.Draw(image)
    line_width = max(2, min(width, height) // 150)

    for idx, region in enumerate(regions, 1):
        if not region.has_valid_bbox:
            logger.debug("Skipping region %r with unreliable bbox %r", region.area, region.bbox)
            continue
        ymin, xmin, ymax, xmax = region.bbox
        x0, x1 = sorted((xmin * width, xmax * width))
        y0, y1 = sorted((ymin * height, ymax * height))
        draw.rectangle([x0, y0, x1, y1], outline=REGION_COLOR, width=line_width)
        draw.text((x0 + line_width + 2, y0 + line_width + 2), str(idx), fill=REGION_COLOR)

    return image


def format_doctor_report(assessment: Assessment) -> str:
    report = assessment.doctor_report
    lines = [f"### {report.title or 'HealthScan Report'}", ""]

    lines.append("**Visual description**")
    lines.append(report.visual_description or "No visual description available.")
    lines.append("")
    lines.append("**Symptom notes**")
    lines.append(report.symptom_notes or "No symptom notes available.")
    lines.append("")
    lines.append(f"**Assessed risk:** {report.risk_level or 'Pending'}")
    lines.append("")
    lines.append("**Questions for your clinician**")
    if report.suggested_questions:
        for q in report.suggested_questions:
            lines.append(f"- {q}")
    else:
        lines.append("- No specific questions generated.")
    lines.append("")
    lines.append(f"📅 Follow-up: {assessment.followup_display}")
    return "\n".join(lines)


def format_share_summary(assessment: Assessment) -> str:
    """Plain-text summary a user can save or forward."""
    return "\n".join([
        "HealthScan Analysis",
        f"Analysis Result: {assessment.risk_level.upper()}. Findings: {assessment.visual_findings_summary}",
        "",
        assessment.disclaimer,
    ])


def format_lifestyle(assessment: Assessment) -> dict:
    factors = assessment.estimated_lifestyle_factors
    return {
        "Stress": factors.stress or NOT_AVAILABLE,
        "Sleep": factors.sleep_quality or NOT_AVAILABLE,
        "Diet": factors.diet_impact or NOT_AVAILABLE,
    }


def format_place(place: Place) -> str:
    lines = [f"**{place.name or 'Unnamed facility'}** · ⭐ {place.rating_display}"]
    if place.address:
        lines.append(f"📍 {place.address}")
    if place.reason:
        lines.append(f"_{place.reason}_")
    return "  \n".join(lines)


def places_frame(result: GeoResult) -> pd.DataFrame:
    """Points for ``st.map``: the search center plus every place with coordinates."""
    rows = [
        {
            "name": "You",
            "latitude": result.search_center.lat,
            "longitude": result.search_center.lng,
            "color": "#ef4444",
        }
    ]
    for place in result.places:
        if place.has_coordinates:
            rows.append(
                {
                    "name": place.name,
                    "latitude": place.latitude,
                    "longitude": place.longitude,
                    "color": "#2563eb",
                }
            )
    return pd.DataFrame(rows, columns=["name", "latitude", "longitude", "color"])
