import logging
import threading
from typing import List, Optional

from src.application.errors import ChatError, ConfigurationError, SessionBusyError
from src.application.ports import ChatPort, GenerativeBackendPort
from src.application.prompts import CHAT_SYSTEM_INSTRUCTION
from src.application.schemas import Assessment
from src.domain.models import AnalysisRequest, ChatTurn


logger = logging.getLogger(__name__)


DEFAULT_CHAT_TEMPERATURE = 0.5
SEED_TURN_COUNT = 2

EMPTY_REPLY = "I couldn't generate a response."
CHAT_ERROR_REPLY = "Sorry, I encountered an error answering that. Please try again."


class ConversationSession:
    """Follow-up conversation grounded in one assessment and its original media.

    The history starts with two seed turns: the original prompt plus inline media,
    then the assessment as the model's answer. Later turns are text only and are
    appended strictly in order; a turn sent while another is in flight is rejected.
    """

    def __init__(self, chat: ChatPort, request: AnalysisRequest, assessment: Assessment, seed: List[ChatTurn]):
        self._chat = chat
        self.request = request
        self.assessment = assessment
        self.turns: List[ChatTurn] = list(seed)
        self._in_flight = threading.Lock()

    @classmethod
    def create(
        cls,
        llm: GenerativeBackendPort,
        request: AnalysisRequest,
        assessment: Assessment,
        temperature: float = DEFAULT_CHAT_TEMPERATURE,
    ) -> "ConversationSession":
        seed = [
            ChatTurn(role="user", text=request.prompt, media_bytes=request.media_bytes, mime_type=request.mime_type),
            ChatTurn(role="model", text=assessment.to_canonical_text()),
        ]
        chat = llm.start_chat(seed, system_instruction=CHAT_SYSTEM_INSTRUCTION, temperature=temperature)
        return cls(chat, request, assessment, seed)

    @property
    def seed_turns(self) -> List[ChatTurn]:
        return self.turns[:SEED_TURN_COUNT]

    @property
    def visible_turns(self) -> List[ChatTurn]:
        return self.turns[SEED_TURN_COUNT:]

    @property
    def is_busy(self) -> bool:
        return self._in_flight.locked()

    def send_turn(self, text: str) -> Optional[str]:
        """Send one user message and return the model's reply.

        Blank text is ignored and returns ``None`` without touching the backend.
        On failure the user turn stays in the history with no model turn after it.
        """
        if not text or not text.strip():
            return None

        if not self._in_flight.acquire(blocking=False):
            raise SessionBusyError()
        try:
            self.turns.append(ChatTurn(role="user", text=text))
            try:
                reply = self._chat.send_message(text)
            except ConfigurationError:
                raise
            except Exception as e:
                logger.exception("Chat turn failed: %s", e)
                raise ChatError() from e

            reply = reply or EMPTY_REPLY
            self.turns.append(ChatTurn(role="model", text=reply))
            return reply
        finally:
            self._in_flight.release()


def create_session(
    llm: GenerativeBackendPort,
    request: AnalysisRequest,
    assessment: Assessment,
    temperature: float = DEFAULT_CHAT_TEMPERATURE,
) -> ConversationSession:
    return ConversationSession.create(llm, request, assessment, temperature=temperature)
