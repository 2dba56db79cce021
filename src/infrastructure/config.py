import os
import logging

try:
    import streamlit as st  # type: ignore
    _HAS_STREAMLIT = True
except Exception:
    _HAS_STREAMLIT = False

logger = logging.getLogger(__name__)


def get_secret(name: str, default: str | None = None) -> str | None:
    # Prefer Streamlit secrets if available
    if _HAS_STREAMLIT:
        try:
            if name in st.secrets:
                return str(st.secrets.get(name))
        except Exception:
            # No secrets.toml outside `streamlit run`
            logger.debug("Streamlit secrets unavailable for %s", name)
    # Fallback to environment variables
    return os.environ.get(name, default)


def _get_float(name: str, default: float) -> float:
    raw = get_secret(name)
    if raw is None or raw == "":
        return default
    try:
        return float(raw)
    except ValueError:
        logger.warning("Invalid value for %s: %r; using %s", name, raw, default)
        return default


class Settings:
    @property
    def gemini_api_key(self) -> str | None:
        return get_secret("GEMINI_API_KEY") or get_secret("API_KEY")

    @property
    def gemini_model(self) -> str:
        return get_secret("GEMINI_MODEL", "gemini-3-pro-preview") or "gemini-3-pro-preview"

    @property
    def maps_model(self) -> str:
        return get_secret("GEMINI_MAPS_MODEL", "gemini-2.5-flash") or "gemini-2.5-flash"

    @property
    def assessment_temperature(self) -> float:
        return _get_float("ASSESSMENT_TEMPERATURE", 0.3)

    @property
    def chat_temperature(self) -> float:
        return _get_float("CHAT_TEMPERATURE", 0.5)

    @property
    def max_upload_mb(self) -> float:
        return _get_float("MAX_UPLOAD_MB", 50.0)

    @property
    def max_upload_bytes(self) -> int:
        return int(self.max_upload_mb * 1024 * 1024)
