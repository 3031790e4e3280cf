"""Language model backends for extraction and reply generation."""

from __future__ import annotations

import logging
from typing import Optional

from .base import LanguageModel
from .gemini import GeminiLanguageModel

log = logging.getLogger("reservations.llm")

__all__ = ["GeminiLanguageModel", "LanguageModel", "build_language_model"]


def build_language_model(settings) -> Optional[LanguageModel]:
    """Gemini model when a key is configured, else None (fallback replies only)."""
    if not settings.gemini_api_key:
        log.info("No Gemini API key configured, dialogue will use fallback replies")
        return None
    return GeminiLanguageModel(
        settings.gemini_api_key,
        model=settings.gemini_model,
        temperature=settings.llm_temperature,
    )
