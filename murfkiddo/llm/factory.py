"""Factory for selecting the generative text backend."""

from __future__ import annotations

from murfkiddo.config import settings
from murfkiddo.llm.base import GenerativeBackend
from murfkiddo.llm.gemini import GeminiBackend
from murfkiddo.llm.openai_backend import OpenAIBackend


def create_llm_backend(name: str | None = None, *, voice: bool = False) -> GenerativeBackend:
    """Build the backend called ``name`` (defaults to ``LLM_BACKEND``).

    ``voice`` tunes OpenAI sampling for short spoken replies.
    """
    backend = (name or settings.llm_backend).strip().lower()
    if backend == "openai":
        if voice:
            return OpenAIBackend(presence_penalty=0.3, frequency_penalty=0.2)
        return OpenAIBackend()
    if backend == "gemini":
        return GeminiBackend()
    raise ValueError(f"unknown LLM backend: {backend}")
