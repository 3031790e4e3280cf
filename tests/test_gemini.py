"""Tests for GeminiLanguageModel with the chat model mocked out."""

from unittest.mock import AsyncMock, MagicMock, PropertyMock, patch

import pytest

import sys, os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from langchain_core.language_models.fake_chat_models import FakeListChatModel
from langchain_core.messages import AIMessage, HumanMessage, SystemMessage
from langchain_core.runnables import RunnableLambda

from reservations.errors import ExtractionFailure, GenerationFailure
from reservations.llm.gemini import GeminiLanguageModel, _content_text
from reservations.models.slots import SlotState, SlotUpdate
from reservations.session import Turn


def _model():
    return GeminiLanguageModel(api_key="test-key", model="gemini-2.5-flash", temperature=0.2)


def _with_llm(llm):
    return patch.object(GeminiLanguageModel, "llm", new_callable=PropertyMock, return_value=llm)


def _network_down(prompt):
    raise ConnectionError("network down")


# ── Construction ───────────────────────────────────────────────────


class TestConstruction:
    def test_requires_api_key(self):
        with pytest.raises(ValueError, match="GEMINI_API_KEY"):
            GeminiLanguageModel(api_key="")

    def test_chat_model_built_lazily_once(self):
        with patch("reservations.llm.gemini.ChatGoogleGenerativeAI") as chat_cls:
            model = _model()
            chat_cls.assert_not_called()

            first = model.llm
            second = model.llm

        assert first is second
        chat_cls.assert_called_once_with(
            model="gemini-2.5-flash",
            temperature=0.2,
            google_api_key="test-key",
        )


# ── Content flattening ─────────────────────────────────────────────


class TestContentText:
    def test_plain_string(self):
        assert _content_text("Hello") == "Hello"

    def test_list_of_parts(self):
        content = [
            {"type": "text", "text": "Lovely, "},
            {"type": "image_url", "image_url": "ignored"},
            "see you soon.",
        ]
        assert _content_text(content) == "Lovely, see you soon."

    def test_empty(self):
        assert _content_text(None) == ""
        assert _content_text([]) == ""


# ── Extraction ─────────────────────────────────────────────────────


class TestExtract:
    async def test_parses_fenced_json(self):
        reply = '```json\n{"customerName": "Mani", "numberOfGuests": "4", "seatingPreference": "inside"}\n```'
        with _with_llm(FakeListChatModel(responses=[reply])):
            update = await _model().extract("I'm Mani, four of us, inside please", SlotState())

        assert isinstance(update, SlotUpdate)
        assert update.customer_name == "Mani"
        assert update.number_of_guests == 4
        assert update.seating_preference == "indoor"
        assert update.booking_date is None

    async def test_unparseable_reply_raises_extraction_failure(self):
        with _with_llm(FakeListChatModel(responses=["Sorry, I can't help with that."])):
            with pytest.raises(ExtractionFailure) as exc_info:
                await _model().extract("hello", SlotState(customer_name="Mani"))
        assert "error" in exc_info.value.details

    async def test_transport_error_raises_extraction_failure(self):
        with _with_llm(RunnableLambda(_network_down)):
            with pytest.raises(ExtractionFailure):
                await _model().extract("hello", SlotState())


# ── Generation ─────────────────────────────────────────────────────


class TestGenerate:
    async def test_history_mapped_to_chat_messages(self):
        llm = MagicMock()
        llm.ainvoke = AsyncMock(return_value=AIMessage(content="  What date works?  "))
        history = [
            Turn(role="agent", text="May I have your name?"),
            Turn(role="user", text="Mani"),
        ]

        with _with_llm(llm):
            text = await _model().generate("CONTEXT", history, "table for four")

        assert text == "What date works?"
        messages = llm.ainvoke.call_args.args[0]
        assert [type(m) for m in messages] == [SystemMessage, AIMessage, HumanMessage, HumanMessage]
        assert [m.content for m in messages] == [
            "CONTEXT",
            "May I have your name?",
            "Mani",
            "table for four",
        ]

    async def test_list_content_joined(self):
        llm = MagicMock()
        llm.ainvoke = AsyncMock(return_value=AIMessage(content=[
            {"type": "text", "text": "Great, "},
            {"type": "text", "text": "which time?"},
        ]))
        with _with_llm(llm):
            assert await _model().generate("CONTEXT", [], "tomorrow") == "Great, which time?"

    async def test_empty_reply_raises_generation_failure(self):
        llm = MagicMock()
        llm.ainvoke = AsyncMock(return_value=AIMessage(content="   "))
        with _with_llm(llm):
            with pytest.raises(GenerationFailure, match="empty"):
                await _model().generate("CONTEXT", [], "hi")

    async def test_model_error_raises_generation_failure(self):
        llm = MagicMock()
        llm.ainvoke = AsyncMock(side_effect=TimeoutError("deadline exceeded"))
        with _with_llm(llm):
            with pytest.raises(GenerationFailure) as exc_info:
                await _model().generate("CONTEXT", [], "hi")
        assert exc_info.value.details == {"error": "deadline exceeded"}
