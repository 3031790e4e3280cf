"""Abstract base class for the language model behind the dialogue."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Sequence

from reservations.models.slots import SlotState, SlotUpdate
from reservations.session import Turn


class LanguageModel(ABC):
    """Two capabilities: pull booking fields out of an utterance, and phrase a reply.

    Implementations raise ``ExtractionFailure`` / ``GenerationFailure``; the
    dialogue engine absorbs both.
    """

    @abstractmethod
    async def extract(self, utterance: str, existing: SlotState) -> SlotUpdate:
        """Return only the fields stated in ``utterance``.

        Args:
            utterance: What the guest just said.
            existing: Current slots, so the model can focus on what is missing.
        """

    @abstractmethod
    async def generate(
        self, system_context: str, history: Sequence[Turn], utterance: str
    ) -> str:
        """Return the assistant's next utterance.

        Args:
            system_context: Persona plus the booking state and next step.
            history: Recent turns, oldest first.
            utterance: What the guest just said.
        """
