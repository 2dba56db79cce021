"""Tests for the rendering helpers."""
import io

import pytest
from PIL import Image

from src.application.schemas import Assessment, GeoResult, ImageRegion, Place, SearchCenter
from src.presentation.views import (
    REGION_COLOR,
    draw_regions,
    format_doctor_report,
    format_lifestyle,
    format_place,
    format_share_summary,
    places_frame,
    risk_badge,
)


def _png_bytes(size=(100, 80)):
    buf = io.BytesIO()
    Image.new("RGB", size, (255, 255, 255)).save(buf, format="PNG")
    return buf.getvalue()


class TestDrawRegions:
    def test_draws_valid_region(self):
        region = ImageRegion(area="lesion", bbox=[0.25, 0.25, 0.75, 0.75], finding="red")
        image = draw_regions(_png_bytes(), [region])
        assert image is not None
        assert image.size == (100, 80)
        assert image.getpixel((25, 40)) == REGION_COLOR

    @pytest.mark.parametrize(
        "bbox",
        [[0.1, 0.2, 0.3], [0.1, 0.2, 0.3, 0.4, 0.5], [0.1, 0.2, 1.5, 0.4], [-1.0, 0.0, 0.5, 0.5], []],
    )
    def test_unreliable_boxes_are_skipped(self, bbox):
        image = draw_regions(_png_bytes(), [ImageRegion(area="x", bbox=bbox)])
        assert image is not None
        assert set(image.getdata()) == {(255, 255, 255)}

    def test_inverted_box_does_not_raise(self):
        region = ImageRegion(area="inverted", bbox=[0.8, 0.8, 0.2, 0.2])
        assert draw_regions(_png_bytes(), [region]) is not None

    def test_unreadable_image(self):
        assert draw_regions(b"not an image", [ImageRegion(bbox=[0, 0, 1, 1])]) is None


class TestFormatting:
    def test_doctor_report_fallbacks(self, assessment_payload):
        assessment_payload["doctor_report"] = {}
        assessment_payload.pop("followup_recommendation")
        text = format_doctor_report(Assessment.model_validate(assessment_payload))
        assert "### HealthScan Report" in text
        assert "No visual description available." in text
        assert "No symptom notes available." in text
        assert "**Assessed risk:** Pending" in text
        assert "Follow-up: As needed" in text

    def test_doctor_report_content(self, assessment_payload):
        text = format_doctor_report(Assessment.model_validate(assessment_payload))
        assert "### Skin Finding Summary" in text
        assert "- Is this contact dermatitis?" in text
        assert "Follow-up: Check again in 48 hours" in text

    def test_lifestyle_fallbacks(self, assessment_payload):
        assessment_payload.pop("estimated_lifestyle_factors")
        factors = format_lifestyle(Assessment.model_validate(assessment_payload))
        assert factors == {"Stress": "N/A", "Sleep": "N/A", "Diet": "N/A"}

    def test_format_place(self):
        text = format_place(Place(name="City Clinic", address="1 Main St", rating="4.2", reason="GP"))
        assert "**City Clinic** · ⭐ 4.2" in text
        assert "1 Main St" in text
        assert format_place(Place()).startswith("**Unnamed facility** · ⭐ N/A")

    def test_share_summary(self, assessment_payload):
        assessment_payload["risk_level"] = "medium"
        text = format_share_summary(Assessment.model_validate(assessment_payload))
        lines = text.splitlines()
        assert lines[0] == "HealthScan Analysis"
        assert lines[1] == "Analysis Result: MEDIUM. Findings: Raised red patches on the left forearm."
        assert lines[-1] == assessment_payload["disclaimer"]

    def test_risk_badge(self):
        assert risk_badge("urgent") == ("Urgent", "red")
        assert risk_badge("low") == ("Low risk", "green")
        assert risk_badge("") == ("Unknown", "gray")


def test_places_frame_skips_places_without_coordinates():
    result = GeoResult(
        places=[
            Place(name="A", latitude=1.0, longitude=2.0),
            Place(name="B"),
        ],
        search_center=SearchCenter(lat=1.5, lng=2.5),
    )
    frame = places_frame(result)
    assert list(frame["name"]) == ["You", "A"]
    assert list(frame["latitude"]) == [1.5, 1.0]


def test_places_frame_empty_result():
    frame = places_frame(GeoResult(places=[], search_center=SearchCenter(lat=0.0, lng=0.0)))
    assert len(frame) == 1
