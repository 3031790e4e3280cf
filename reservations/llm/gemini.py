"""Gemini language model via LangChain.

Extraction runs ``prompt | llm | PydanticOutputParser(SlotUpdate)`` so the
model's JSON is validated and normalised by the same model the engine merges.
Generation sends the system context, recent history, and the new utterance
as chat messages.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Any, Sequence

from langchain_core.messages import AIMessage, BaseMessage, HumanMessage, SystemMessage
from langchain_core.output_parsers import PydanticOutputParser
from langchain_google_genai import ChatGoogleGenerativeAI

from reservations.errors import ExtractionFailure, GenerationFailure
from reservations.models.booking import CUISINES
from reservations.models.slots import SLOT_LABELS, SlotState, SlotUpdate
from reservations.session import Turn

from .base import LanguageModel
from .prompts import EXTRACTION_PROMPT, describe_slots

log = logging.getLogger("reservations.llm")

slot_parser = PydanticOutputParser(pydantic_object=SlotUpdate)


def _content_text(content: Any) -> str:
    """Chat model content can be a string or a list of parts."""
    if isinstance(content, str):
        return content
    parts = []
    for part in content or []:
        if isinstance(part, str):
            parts.append(part)
        elif isinstance(part, dict) and part.get("type") == "text":
            parts.append(part.get("text", ""))
    return "".join(parts)


class GeminiLanguageModel(LanguageModel):
    def __init__(
        self,
        api_key: str,
        model: str = "gemini-2.5-flash",
        temperature: float = 0.4,
    ) -> None:
        if not api_key:
            raise ValueError("Gemini API key must be provided via GEMINI_API_KEY.")
        self._api_key = api_key
        self._model = model
        self._temperature = temperature
        self._llm: ChatGoogleGenerativeAI | None = None

    @property
    def llm(self) -> ChatGoogleGenerativeAI:
        if self._llm is None:
            self._llm = ChatGoogleGenerativeAI(
                model=self._model,
                temperature=self._temperature,
                google_api_key=self._api_key,
            )
        return self._llm

    async def extract(self, utterance: str, existing: SlotState) -> SlotUpdate:
        chain = EXTRACTION_PROMPT | self.llm | slot_parser
        missing = ", ".join(SLOT_LABELS[name] for name in existing.missing()) or "nothing"
        try:
            update: SlotUpdate = await chain.ainvoke({
                "utterance": utterance,
                "missing": missing,
                "known": describe_slots(existing),
                "today": date.today().isoformat(),
                "cuisines": ", ".join(CUISINES),
                "format_instructions": slot_parser.get_format_instructions(),
            })
        except Exception as exc:
            log.warning("Slot extraction failed: %s", exc)
            raise ExtractionFailure("Slot extraction failed", {"error": str(exc)}) from exc
        log.debug("Extracted fields: %s", sorted(update.provided()))
        return update

    async def generate(
        self, system_context: str, history: Sequence[Turn], utterance: str
    ) -> str:
        messages: list[BaseMessage] = [SystemMessage(content=system_context)]
        for turn in history:
            if turn.role == "user":
                messages.append(HumanMessage(content=turn.text))
            else:
                messages.append(AIMessage(content=turn.text))
        messages.append(HumanMessage(content=utterance))

        try:
            result = await self.llm.ainvoke(messages)
        except Exception as exc:
            log.warning("Reply generation failed: %s", exc)
            raise GenerationFailure("Reply generation failed", {"error": str(exc)}) from exc

        text = _content_text(result.content).strip()
        if not text:
            raise GenerationFailure("Model returned an empty reply")
        return text
