import logging
from typing import List, Optional

from src.application.errors import BackendError, ConfigurationError
from src.domain.models import ChatTurn
from src.infrastructure.config import Settings


logger = logging.getLogger(__name__)


GENERIC_BACKEND_MESSAGE = "The generative backend request failed. Please try again."


def _backend_error(e: Exception) -> BackendError:
    message = getattr(e, "message", None) or str(e) or GENERIC_BACKEND_MESSAGE
    return BackendError(message)


def _create_client(api_key: str):
    from google import genai
    from google.genai import types
    return genai.Client(api_key=api_key), types


class GeminiChatAdapter:
    def __init__(self, chat):
        self._chat = chat

    def send_message(self, text: str) -> Optional[str]:
        try:
            response = self._chat.send_message(text)
        except Exception as e:
            logger.exception("Gemini chat call failed: %s", e)
            raise _backend_error(e) from e
        return response.text


class GeminiBackendAdapter:
    def __init__(self, settings: Settings | None = None):
        self.settings = settings or Settings()
        self._client = None
        self._types = None
        self._init_error: Optional[Exception] = None
        self._model = self.settings.gemini_model
        self._maps_model = self.settings.maps_model
        self._init_client()

    def _init_client(self):
        api_key = self.settings.gemini_api_key
        if not api_key:
            logger.error("Gemini API key is missing.")
            self._client = None
            return
        try:
            self._client, self._types = _create_client(api_key)
        except Exception as e:
            logger.exception("Failed to initialize Gemini client: %s", e)
            self._client = None
            self._init_error = e

    def _require_client(self):
        if not self._client:
            if self._init_error is not None:
                raise ConfigurationError(f"Failed to initialize the Gemini client: {self._init_error}")
            raise ConfigurationError()
        return self._client

    def _content(self, turn: ChatTurn):
        types = self._types
        parts = [types.Part.from_text(text=turn.text)]
        if turn.media_bytes is not None and turn.mime_type:
            parts.append(types.Part.from_bytes(data=turn.media_bytes, mime_type=turn.mime_type))
        return types.Content(role=turn.role, parts=parts)

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
        client = self._require_client()
        types = self._types
        request = ChatTurn(role="user", text=prompt, media_bytes=media_bytes, mime_type=mime_type)
        try:
            response = client.models.generate_content(
                model=self._model,
                contents=[self._content(request)],
                config=types.GenerateContentConfig(
                    system_instruction=system_instruction,
                    response_mime_type="application/json",
                    response_schema=response_schema,
                    temperature=temperature,
                ),
            )
        except Exception as e:
            logger.exception("Gemini analysis call failed: %s", e)
            raise _backend_error(e) from e
        return response.text

    def start_chat(
        self,
        history: List[ChatTurn],
        *,
        system_instruction: str,
        temperature: float,
    ) -> GeminiChatAdapter:
        client = self._require_client()
        types = self._types
        try:
            chat = client.chats.create(
                model=self._model,
                history=[self._content(turn) for turn in history],
                config=types.GenerateContentConfig(
                    system_instruction=system_instruction,
                    temperature=temperature,
                ),
            )
        except Exception as e:
            logger.exception("Gemini chat creation failed: %s", e)
            raise _backend_error(e) from e
        return GeminiChatAdapter(chat)

    def generate_with_maps(self, prompt: str, latitude: float, longitude: float) -> Optional[str]:
        client = self._require_client()
        types = self._types
        try:
            # response_mime_type / response_schema cannot be combined with the Maps tool
            response = client.models.generate_content(
                model=self._maps_model,
                contents=prompt,
                config=types.GenerateContentConfig(
                    tools=[types.Tool(google_maps=types.GoogleMaps())],
                    tool_config=types.ToolConfig(
                        retrieval_config=types.RetrievalConfig(
                            lat_lng=types.LatLng(latitude=latitude, longitude=longitude),
                        ),
                    ),
                ),
            )
        except Exception as e:
            logger.exception("Gemini map search call failed: %s", e)
            raise _backend_error(e) from e
        return response.text
