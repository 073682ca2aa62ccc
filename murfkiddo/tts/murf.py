"""Murf text-to-speech adapter."""

from __future__ import annotations

import asyncio
import logging

import httpx

from murfkiddo.config import settings
from murfkiddo.errors import SpeechSynthesisFailure
from murfkiddo.tts.schemas import SpeechRequest, SpeechResult

log = logging.getLogger(__name__)


class MurfTTS:
    """POSTs one request to ``/v1/speech/generate`` and returns the audio URL."""

    def __init__(
        self,
        base_url: str = settings.murf_url,
        api_key: str = settings.murf_api_key,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._api_key = api_key
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def start(self) -> None:
        self._client = httpx.AsyncClient(
            base_url=self._base_url,
            timeout=httpx.Timeout(None, connect=5.0),
            headers={"api-key": self._api_key},
            transport=self._transport,
        )

    async def close(self) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None

    @property
    def configured(self) -> bool:
        return bool(self._api_key)

    async def synthesize(self, request: SpeechRequest, *, timeout_s: float) -> SpeechResult:
        if self._client is None:
            raise SpeechSynthesisFailure("murf client not started")
        if not self._api_key:
            raise SpeechSynthesisFailure("MURF_API_KEY is not configured")

        try:
            resp = await asyncio.wait_for(
                self._client.post("/v1/speech/generate", json=request.to_murf_body()),
                timeout=timeout_s,
            )
        except (asyncio.TimeoutError, httpx.TimeoutException) as exc:
            log.warning("Murf synthesis timed out after %.1fs", timeout_s)
            raise SpeechSynthesisFailure("murf_timeout", timed_out=True) from exc
        except httpx.HTTPError as exc:
            raise SpeechSynthesisFailure(f"murf request failed: {exc}") from exc

        if resp.status_code != 200:
            log.warning("Murf returned %d: %s", resp.status_code, resp.text[:200])
            raise SpeechSynthesisFailure(f"Murf returned {resp.status_code}")

        try:
            data = resp.json()
        except ValueError as exc:
            raise SpeechSynthesisFailure("Murf returned non-JSON body") from exc
        audio_url = data.get("audioFile") if isinstance(data, dict) else None
        if not audio_url:
            raise SpeechSynthesisFailure("Murf reply has no audioFile")

        log.info(
            "Synthesized %d chars with %s (%s, speed %+d)",
            len(request.text),
            request.voice_id,
            request.style.value,
            request.speed_adjustment,
        )
        return SpeechResult(audio_file_url=str(audio_url))
