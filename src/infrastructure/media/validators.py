"""Upload checks for the media attached to a health scan."""
import mimetypes
from typing import Optional, Tuple


ACCEPTED_PREFIXES = ("image/", "video/")
ACCEPTED_EXACT = ("application/pdf",)
UPLOADER_EXTENSIONS = ["png", "jpg", "jpeg", "webp", "heic", "gif", "mp4", "mov", "webm", "pdf"]
DEFAULT_MAX_BYTES = 50 * 1024 * 1024


def resolve_mime_type(filename: str, declared: Optional[str] = None) -> str:
    """
    Pick the MIME type for an upload.

    Args:
        filename: Original file name, used when the browser sent no type
        declared: MIME type reported by the uploader

    Returns:
        Lower-cased MIME type, or an empty string if it cannot be determined
    """
    if declared and declared.strip():
        return declared.strip().lower()
    guessed, _ = mimetypes.guess_type(filename or "")
    return (guessed or "").lower()


def is_accepted_type(mime_type: str) -> bool:
    mime = (mime_type or "").lower()
    return mime.startswith(ACCEPTED_PREFIXES) or mime in ACCEPTED_EXACT


def validate_media(mime_type: str, size_bytes: int, max_bytes: int = DEFAULT_MAX_BYTES) -> Tuple[bool, str]:
    """
    Validate an uploaded file before it is sent for analysis.

    Requirements:
    - Image, video, or PDF
    - Not empty
    - Not larger than ``max_bytes`` (50MB by default)

    Args:
        mime_type: Resolved MIME type of the upload
        size_bytes: Size of the upload in bytes
        max_bytes: Upper size limit

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not mime_type:
        return False, "Could not determine the file type"

    if not is_accepted_type(mime_type):
        return False, "Please upload an image, video, or PDF file."

    if size_bytes <= 0:
        return False, "The uploaded file is empty"

    if size_bytes > max_bytes:
        limit_mb = max_bytes / (1024 * 1024)
        return False, f"File size too large. Please upload files smaller than {limit_mb:g}MB."

    return True, ""
