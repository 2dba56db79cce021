"""Tests for the follow-up conversation session."""
import threading

import pytest

from src.application.conversation import EMPTY_REPLY, ConversationSession, create_session
from src.application.errors import ChatError, SessionBusyError
from src.application.prompts import CHAT_SYSTEM_INSTRUCTION
from src.application.schemas import Assessment
from src.application.use_cases import prepare_request


class DummyChat:
    def __init__(self, replies=None, error=None):
        self.replies = list(replies or [])
        self.error = error
        self.sent = []

    def send_message(self, text):
        self.sent.append(text)
        if self.error:
            raise self.error
        return self.replies.pop(0) if self.replies else None


class DummyLLM:
    def __init__(self, chat):
        self.chat = chat
        self.history = None
        self.config = None

    def start_chat(self, history, *, system_instruction, temperature):
        self.history = history
        self.config = {"system_instruction": system_instruction, "temperature": temperature}
        return self.chat


@pytest.fixture
def request_():
    return prepare_request(b"\x89PNG-bytes", "image/png", "itchy rash for 3 days")


@pytest.fixture
def assessment(assessment_payload):
    return Assessment.model_validate(assessment_payload)


class TestSeeding:
    def test_two_seed_turns(self, request_, assessment):
        llm = DummyLLM(DummyChat())
        session = create_session(llm, request_, assessment)

        user, model = session.seed_turns
        assert user.role == "user"
        assert user.text == request_.prompt
        assert user.media_bytes == b"\x89PNG-bytes"
        assert user.mime_type == "image/png"
        assert model.role == "model"
        assert model.text == assessment.to_canonical_text()
        assert model.media_bytes is None
        assert llm.history == session.seed_turns
        assert session.visible_turns == []

    def test_chat_config(self, request_, assessment):
        llm = DummyLLM(DummyChat())
        ConversationSession.create(llm, request_, assessment)
        assert llm.config["system_instruction"] == CHAT_SYSTEM_INSTRUCTION
        assert llm.config["temperature"] == 0.5

    def test_seed_text_round_trips(self, request_, assessment):
        session = create_session(DummyLLM(DummyChat()), request_, assessment)
        seeded = session.seed_turns[1].text
        assert Assessment.from_response_text(seeded).to_canonical_text() == seeded

    def test_uses_stored_prompt(self, assessment):
        request = prepare_request(b"x", "application/pdf", "lab report")
        stored = request.model_copy(update={"prompt": "stored prompt text"})
        llm = DummyLLM(DummyChat())
        create_session(llm, stored, assessment)
        assert llm.history[0].text == "stored prompt text"


class TestSendTurn:
    def test_appends_user_and_model_turns(self, request_, assessment):
        chat = DummyChat(replies=["**Keep it dry.**", "Usually a few days."])
        session = create_session(DummyLLM(chat), request_, assessment)

        assert session.send_turn("What should I do?") == "**Keep it dry.**"
        assert session.send_turn("How long will it last?") == "Usually a few days."

        assert [(t.role, t.text) for t in session.visible_turns] == [
            ("user", "What should I do?"),
            ("model", "**Keep it dry.**"),
            ("user", "How long will it last?"),
            ("model", "Usually a few days."),
        ]
        assert chat.sent == ["What should I do?", "How long will it last?"]

    def test_empty_reply_gets_apology(self, request_, assessment):
        session = create_session(DummyLLM(DummyChat(replies=[""])), request_, assessment)
        assert session.send_turn("Is it contagious?") == EMPTY_REPLY
        assert session.visible_turns[-1].text == "I couldn't generate a response."

    @pytest.mark.parametrize("text", ["", "   ", "\n\t", None])
    def test_blank_text_is_a_no_op(self, request_, assessment, text):
        chat = DummyChat(replies=["unused"])
        session = create_session(DummyLLM(chat), request_, assessment)
        assert session.send_turn(text) is None
        assert chat.sent == []
        assert session.visible_turns == []
        assert not session.is_busy

    def test_failure_keeps_user_turn_only(self, request_, assessment):
        session = create_session(DummyLLM(DummyChat(error=RuntimeError("boom"))), request_, assessment)
        with pytest.raises(ChatError) as exc:
            session.send_turn("Should I worry?")
        assert exc.value.user_message == "Failed to send message."
        assert [(t.role, t.text) for t in session.visible_turns] == [("user", "Should I worry?")]
        assert not session.is_busy

    def test_concurrent_turn_is_rejected(self, request_, assessment):
        started = threading.Event()
        release = threading.Event()

        class SlowChat(DummyChat):
            def send_message(self, text):
                started.set()
                release.wait(timeout=5)
                return "done"

        session = create_session(DummyLLM(SlowChat()), request_, assessment)
        results = []
        worker = threading.Thread(target=lambda: results.append(session.send_turn("first")))
        worker.start()
        try:
            assert started.wait(timeout=5)
            assert session.is_busy
            with pytest.raises(SessionBusyError):
                session.send_turn("second")
        finally:
            release.set()
            worker.join(timeout=5)

        assert results == ["done"]
        assert [(t.role, t.text) for t in session.visible_turns] == [("user", "first"), ("model", "done")]
        assert not session.is_busy
