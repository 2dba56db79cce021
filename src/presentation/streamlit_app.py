import logging
import os
from typing import Optional, Tuple

import streamlit as st
from PIL import UnidentifiedImageError

from src.application.conversation import CHAT_ERROR_REPLY, ConversationSession
from src.application.errors import HealthScanError, SessionBusyError
from src.application.schemas import Assessment
from src.application.use_cases import AssessmentUseCase, NearbyCareUseCase, prepare_request
from src.domain.rules import media_kind
from src.infrastructure.config import Settings
from src.infrastructure.llm.gemini_client import GeminiBackendAdapter
from src.infrastructure.media.validators import UPLOADER_EXTENSIONS, resolve_mime_type, validate_media
from src.presentation.views import (
    draw_regions,
    format_doctor_report,
    format_lifestyle,
    format_place,
    format_share_summary,
    places_frame,
    risk_badge,
)


logger = logging.getLogger(__name__)


DISCLAIMER = (
    "⚕️ **DISCLAIMER:** This is NOT medical advice and NOT a diagnosis. "
    "HealthScan is for educational purposes only. "
    "If you experience emergency symptoms, seek immediate care (call local emergency number)."
)

# Keys cleared on "New Scan"
SCAN_STATE_KEYS = ("scan_request", "assessment", "analysis_error", "conversation", "chat_messages", "map_result", "map_error")


def _init_session_state():
    defaults = {
        "scan_request": None,
        "assessment": None,
        "analysis_error": None,
        "conversation": None,
        "chat_messages": [],
        "map_result": None,
        "map_error": None,
    }
    for key, value in defaults.items():
        if key not in st.session_state:
            st.session_state[key] = value


def _reset_scan():
    for key in SCAN_STATE_KEYS:
        st.session_state[key] = [] if key == "chat_messages" else None


def _require_gemini_key(settings: Settings) -> bool:
    if not settings.gemini_api_key:
        st.error(
            "❌ **Gemini API Key Missing**\n\n"
            "Add `GEMINI_API_KEY` to `.streamlit/secrets.toml` or as an environment variable.\n\n"
            "See README for setup instructions."
        )
        return False
    return True


def _render_sidebar(settings: Settings):
    st.sidebar.title("⚙️ Settings")

    st.sidebar.markdown("### Model")
    st.sidebar.caption(f"**Analysis:** {settings.gemini_model}")
    st.sidebar.caption(f"**Maps search:** {settings.maps_model}")

    st.sidebar.markdown("### Your Location")
    st.sidebar.caption("Used only to find nearby care.")
    # Empty until the user enters a location; there is no usable default position
    st.session_state["latitude"] = st.sidebar.number_input(
        "Latitude", min_value=-90.0, max_value=90.0, value=st.session_state.get("latitude"), format="%.5f"
    )
    st.session_state["longitude"] = st.sidebar.number_input(
        "Longitude", min_value=-180.0, max_value=180.0, value=st.session_state.get("longitude"), format="%.5f"
    )

    st.sidebar.divider()

    if st.sidebar.button("🔄 New Scan", use_container_width=True):
        _reset_scan()
        st.rerun()


def _location() -> Optional[Tuple[float, float]]:
    lat = st.session_state.get("latitude")
    lng = st.session_state.get("longitude")
    if lat is None or lng is None:
        return None
    return lat, lng


def _run_analysis(llm, settings: Settings, uploaded, description: str):
    mime_type = resolve_mime_type(uploaded.name, uploaded.type)
    media_bytes = uploaded.getvalue()
    is_valid, error = validate_media(mime_type, len(media_bytes), settings.max_upload_bytes)
    if not is_valid:
        st.session_state.analysis_error = error
        return

    _reset_scan()
    request = prepare_request(media_bytes, mime_type, description)
    try:
        with st.spinner("🔬 Analyzing scan..."):
            assessment = AssessmentUseCase(llm=llm, temperature=settings.assessment_temperature).assess(request)
    except HealthScanError as e:
        st.session_state.analysis_error = e.user_message
        return

    st.session_state.scan_request = request
    st.session_state.assessment = assessment
    try:
        st.session_state.conversation = ConversationSession.create(
            llm, request, assessment, temperature=settings.chat_temperature
        )
    except HealthScanError as e:
        logger.error("Could not start follow-up chat: %s", e)


def _render_preview(uploaded):
    # HEIC and other formats Pillow cannot open are still accepted for analysis
    try:
        st.image(uploaded.getvalue(), use_container_width=True)
    except (UnidentifiedImageError, OSError) as e:
        logger.info("No preview for %s: %s", uploaded.name, e)
        st.caption(f"🖼️ {uploaded.name} (preview unavailable)")


def _render_input(llm, settings: Settings):
    st.markdown("Upload a photo, video, or medical report. Get a deep multimodal safety assessment.")

    uploaded = st.file_uploader("1. Upload Image, Video, or PDF", type=UPLOADER_EXTENSIONS)
    if uploaded is not None:
        kind = media_kind(resolve_mime_type(uploaded.name, uploaded.type))
        if kind == "image":
            _render_preview(uploaded)
        elif kind == "video":
            st.video(uploaded.getvalue())
        else:
            st.caption(f"📄 {uploaded.name}")

    description = st.text_area(
        "2. Describe Symptoms",
        placeholder="Describe how it feels, how long you've had it, or any other details...",
        height=140,
    )

    if st.button("✨ Run Health Scan", type="primary", disabled=uploaded is None, use_container_width=True):
        _run_analysis(llm, settings, uploaded, description)
        if st.session_state.assessment is not None:
            st.rerun()

    if st.session_state.analysis_error:
        st.error(st.session_state.analysis_error)


def _render_list(title: str, items, empty: str):
    st.markdown(f"**{title}**")
    if items:
        for item in items:
            st.markdown(f"- {item}")
    else:
        st.caption(empty)


def _render_assessment(assessment: Assessment):
    label, color = risk_badge(assessment.risk_level)
    st.markdown(f"## :{color}[{label}]")
    st.caption(assessment.risk_reasoning)

    col1, col2 = st.columns(2)
    col1.metric("Visual confidence", f"{assessment.visual_confidence_score * 100:.0f}%")
    col2.metric("Symptom severity", assessment.symptom_severity.title())

    mode = st.radio("View", ["Simple", "Expert"], horizontal=True, key="view_mode")
    if mode == "Simple":
        st.markdown(assessment.user_friendly_summary)
    else:
        st.markdown(assessment.visual_findings_summary)
        with st.expander("🧠 Deep reasoning", expanded=True):
            st.markdown(assessment.deep_reasoning)

    request = st.session_state.scan_request
    if request is not None and media_kind(request.mime_type) == "image" and assessment.image_regions:
        plotted = assessment.plottable_regions
        overlay = draw_regions(request.media_bytes, plotted) if plotted else None
        if overlay is not None:
            st.image(overlay, caption="Areas of interest", use_container_width=True)
        # Numbers match the labels drawn on the overlay
        for idx, region in enumerate(plotted, 1):
            st.markdown(f"**{idx}. {region.area or 'Region'}:** {region.finding}")
        for region in assessment.image_regions:
            if not region.has_valid_bbox:
                st.markdown(f"**{region.area or 'Region'}:** {region.finding}")

    if assessment.urgent_signs_to_watch:
        st.warning("**Seek care right away if you notice:**\n\n" + "\n".join(
            f"- {sign}" for sign in assessment.urgent_signs_to_watch
        ))

    col_do, col_avoid = st.columns(2)
    with col_do:
        _render_list("✅ Do", assessment.do_list, "No specific actions.")
    with col_avoid:
        _render_list("⛔ Avoid", assessment.avoid_list, "Nothing specific to avoid.")

    _render_list("🔍 Possible factors (NOT a diagnosis)", assessment.possible_factors, "None listed.")
    if assessment.recommended_actions:
        _render_list("📝 Recommended next steps", assessment.recommended_actions, "")

    st.markdown("**🌙 Lifestyle factors**")
    for col, (name, value) in zip(st.columns(3), format_lifestyle(assessment).items()):
        col.caption(name)
        col.markdown(value)

    with st.expander("👨‍⚕️ Doctor report"):
        st.markdown(format_doctor_report(assessment))

    st.caption(assessment.disclaimer)

    st.download_button(
        "📤 Share summary",
        data=format_share_summary(assessment),
        file_name="healthscan-summary.txt",
        mime="text/plain",
    )


def _render_nearby_care(llm, assessment: Assessment):
    st.markdown("### 🗺️ Find Nearby Care")
    location = _location()
    if location is None:
        st.caption("Enter your latitude and longitude in the sidebar to search nearby care.")
    if st.button("📍 Search near my location", disabled=location is None, use_container_width=True):
        lat, lng = location
        try:
            with st.spinner("Searching nearby facilities..."):
                result = NearbyCareUseCase(llm=llm).find_nearby_places(
                    lat,
                    lng,
                    assessment.condition_context,
                    assessment.risk_level,
                )
            st.session_state.map_result = result
            st.session_state.map_error = None
        except HealthScanError as e:
            logger.warning("Nearby care search failed: %s", e)
            st.session_state.map_error = "Failed to find nearby places. Please try again."

    if st.session_state.map_error:
        st.error(st.session_state.map_error)

    result = st.session_state.map_result
    if result is None:
        return
    st.map(places_frame(result), latitude="latitude", longitude="longitude", color="color")
    if not result.places:
        st.info("No facilities could be listed for this location. Try again or search your maps app directly.")
    for place in result.places:
        st.markdown(format_place(place))


def _handle_chat(conversation: ConversationSession, text: str):
    if not text or not text.strip():
        return

    st.session_state.chat_messages.append({"role": "user", "content": text})
    try:
        with st.spinner("⏳ Thinking..."):
            reply = conversation.send_turn(text)
    except SessionBusyError as e:
        st.session_state.chat_messages.pop()
        st.warning(e.user_message)
        return
    except HealthScanError as e:
        logger.warning("Follow-up chat failed: %s", e)
        reply = CHAT_ERROR_REPLY
    st.session_state.chat_messages.append({"role": "assistant", "content": reply})


def _render_chat(assessment: Assessment):
    st.markdown("### 💬 Ask Follow-up Questions")
    conversation = st.session_state.conversation
    if conversation is None:
        st.caption("Follow-up chat is unavailable for this scan.")
        return

    for msg in st.session_state.chat_messages:
        with st.chat_message(msg["role"]):
            st.markdown(msg["content"])

    pending = None
    if not st.session_state.chat_messages:
        for idx, question in enumerate(assessment.conversation_starters()):
            if st.button(question, key=f"starter_{idx}"):
                pending = question

    typed = st.chat_input("Ask about your results...", disabled=conversation.is_busy)
    pending = pending or typed
    if pending and pending.strip():
        _handle_chat(conversation, pending)
        st.rerun()


def main():
    logging.basicConfig(level=os.environ.get("LOG_LEVEL", "INFO"))

    st.set_page_config(
        page_title="HealthScan Assistant",
        page_icon="⚕️",
        layout="centered",
        initial_sidebar_state="expanded",
    )

    settings = Settings()
    if not _require_gemini_key(settings):
        st.stop()

    llm = GeminiBackendAdapter(settings=settings)
    _init_session_state()
    _render_sidebar(settings)

    st.markdown("# 🩺 HealthScan Assistant")
    st.info(DISCLAIMER)

    assessment = st.session_state.assessment
    if assessment is None:
        _render_input(llm, settings)
        return

    _render_assessment(assessment)
    st.divider()
    _render_chat(assessment)
    st.divider()
    _render_nearby_care(llm, assessment)


if __name__ == "__main__":
    main()
