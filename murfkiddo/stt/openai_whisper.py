"""Hosted Whisper transcription through the OpenAI audio API."""

from __future__ import annotations

import asyncio
import logging

import httpx

from murfkiddo.config import settings
from murfkiddo.errors import TranscriptionFailure

log = logging.getLogger(__name__)


class OpenAIWhisperSTT:
    """Multipart upload to ``/v1/audio/transcriptions``."""

    def __init__(
        self,
        base_url: str = settings.openai_url,
        api_key: str = settings.openai_api_key,
        model: str = settings.whisper_model,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._api_key = api_key
        self._model = model
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    @property
    def backend_name(self) -> str:
        return "openai"

    async def start(self) -> None:
        self._client = httpx.AsyncClient(
            base_url=self._base_url,
            timeout=httpx.Timeout(None, connect=5.0),
            headers={"Authorization": f"Bearer {self._api_key}"},
            transport=self._transport,
        )

    async def close(self) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None

    async def transcribe(
        self,
        audio: bytes,
        filename: str = "audio.webm",
        content_type: str = "audio/webm",
        *,
        timeout_s: float,
    ) -> str:
        if self._client is None:
            raise TranscriptionFailure("whisper client not started")
        if not self._api_key:
            raise TranscriptionFailure("OPENAI_API_KEY is not configured")
        if not audio:
            raise TranscriptionFailure("empty audio upload")

        data = {
            "model": self._model,
            "language": "en",
            "response_format": "text",
            "temperature": "0.2",
        }
        files = {"file": (filename or "audio.webm", audio, content_type or "audio/webm")}
        try:
            resp = await asyncio.wait_for(
                self._client.post("/v1/audio/transcriptions", data=data, files=files),
                timeout=timeout_s,
            )
        except (asyncio.TimeoutError, httpx.TimeoutException) as exc:
            raise TranscriptionFailure("whisper_timeout", timed_out=True) from exc
        except httpx.HTTPError as exc:
            raise TranscriptionFailure(f"whisper request failed: {exc}") from exc

        if resp.status_code != 200:
            log.warning("Whisper returned %d: %s", resp.status_code, resp.text[:200])
            raise TranscriptionFailure(f"Whisper returned {resp.status_code}")

        text = resp.text.strip()
        if not text:
            raise TranscriptionFailure("Whisper returned an empty transcript")
        log.info("Transcribed %d bytes of audio -> %d chars", len(audio), len(text))
        return text
