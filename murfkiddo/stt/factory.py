"""Speech-to-text backend selection."""

from __future__ import annotations

from typing import Protocol

from murfkiddo.config import settings
from murfkiddo.stt.openai_whisper import OpenAIWhisperSTT
from murfkiddo.stt.whisper import WhisperSTT


class Transcriber(Protocol):
    @property
    def backend_name(self) -> str: ...

    async def start(self) -> None: ...

    async def close(self) -> None: ...

    async def transcribe(
        self,
        audio: bytes,
        filename: str = ...,
        content_type: str = ...,
        *,
        timeout_s: float,
    ) -> str: ...


def create_transcriber(name: str | None = None) -> Transcriber | None:
    """Return the configured transcriber, or None when STT is ``off``."""
    backend = (name or settings.stt_backend).strip().lower()
    if backend == "off":
        return None
    if backend == "local":
        return WhisperSTT()
    if backend == "openai":
        return OpenAIWhisperSTT()
    raise ValueError(f"unknown STT backend: {backend}")
