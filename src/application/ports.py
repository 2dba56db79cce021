from typing import List, Optional, Protocol

from src.domain.models import ChatTurn


class ChatPort(Protocol):
    def send_message(self, text: str) -> Optional[str]:
        """Send one user turn on a backend chat and return the model's text (may be empty)."""
        ...


class GenerativeBackendPort(Protocol):
    def generate_structured(
        self,
        prompt: str,
        media_bytes: bytes,
        mime_type: str,
        *,
        system_instruction: str,
        response_schema: dict,
        temperature: float,
    ) -> Optional[str]:
        """
        Single multimodal request constrained to ``response_schema``; returns the raw JSON text.
        """
        ...

    def start_chat(
        self,
        history: List[ChatTurn],
        *,
        system_instruction: str,
        temperature: float,
    ) -> ChatPort:
        ...

    def generate_with_maps(self, prompt: str, latitude: float, longitude: float) -> Optional[str]:
        """
        Free-text request with location retrieval biased to (latitude, longitude). No schema.
        """
        ...
