"""Tests for modality and triage rules."""
from src.domain.rules import (
    EMERGENCY_FOCUS,
    GENERAL_FOCUS,
    classify_modality,
    facility_guidance,
    match_specialty,
    media_kind,
)


def test_classify_modality():
    assert classify_modality("image/png") == "Image"
    assert classify_modality("VIDEO/MP4") == "Video"
    assert classify_modality("application/pdf") == "Medical Report (PDF)"
    assert classify_modality("application/pdf; charset=binary") == "Image"
    assert classify_modality("application/zip") == "Image"
    assert classify_modality(None) == "Image"


def test_media_kind():
    assert media_kind("image/heic") == "image"
    assert media_kind("video/webm") == "video"
    assert media_kind("application/pdf") == "pdf"
    assert media_kind("unknown/type") == "image"


def test_urgent_overrides_specialty():
    assert facility_guidance("urgent", "itchy skin rash") == EMERGENCY_FOCUS
    assert facility_guidance(" URGENT ", "") == EMERGENCY_FOCUS


def test_specialty_from_context():
    assert facility_guidance("low", "Itchy skin rash on the arm") == "Dermatologist"
    assert facility_guidance("medium", "swollen knee joint") == "Orthopedist"
    assert match_specialty("Red, watery eye") == "Ophthalmologist"


def test_general_practice_fallback():
    assert facility_guidance("low", "general tiredness") == GENERAL_FOCUS
    assert facility_guidance("medium", "") == GENERAL_FOCUS
    assert match_specialty("") is None
