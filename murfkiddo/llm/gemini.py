"""Gemini ``generateContent`` backend."""

from __future__ import annotations

import logging

import httpx

from murfkiddo.config import settings
from murfkiddo.errors import GenerationFailure
from murfkiddo.llm.base import GenerativeBackend, bounded_call

log = logging.getLogger(__name__)


class GeminiBackend(GenerativeBackend):
    """Thin async wrapper around the Gemini REST API."""

    def __init__(
        self,
        base_url: str = settings.gemini_url,
        model: str = settings.gemini_model,
        api_key: str = settings.gemini_api_key,
        temperature: float = settings.temperature,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._model = model
        self._api_key = api_key
        self._temperature = temperature
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    @property
    def backend_name(self) -> str:
        return "gemini"

    @property
    def model_name(self) -> str:
        return self._model

    async def start(self) -> None:
        self._client = httpx.AsyncClient(
            base_url=self._base_url,
            timeout=httpx.Timeout(None, connect=5.0),
            transport=self._transport,
        )

    async def close(self) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None

    async def health_check(self) -> bool:
        return self._client is not None and bool(self._api_key)

    async def generate(
        self,
        prompt: str,
        *,
        system: str | None = None,
        timeout_s: float,
        max_output_tokens: int | None = None,
        temperature: float | None = None,
    ) -> str:
        if self._client is None:
            raise GenerationFailure("gemini backend not started")
        if not self._api_key:
            raise GenerationFailure("GEMINI_API_KEY is not configured")

        generation_config: dict = {
            "temperature": self._temperature if temperature is None else temperature,
        }
        if max_output_tokens is not None:
            generation_config["maxOutputTokens"] = max_output_tokens
        body: dict = {
            "contents": [{"role": "user", "parts": [{"text": prompt}]}],
            "generationConfig": generation_config,
        }
        if system:
            body["systemInstruction"] = {"parts": [{"text": system}]}

        resp = await bounded_call(
            self._client.post(
                f"/v1beta/models/{self._model}:generateContent",
                params={"key": self._api_key},
                json=body,
            ),
            timeout_s=timeout_s,
            backend=self.backend_name,
        )
        if resp.status_code != 200:
            log.warning("Gemini returned %d: %s", resp.status_code, resp.text[:200])
            raise GenerationFailure(f"Gemini returned {resp.status_code}")

        text = self._extract_text(resp)
        if not text:
            raise GenerationFailure("Empty content in Gemini response")
        return text

    @staticmethod
    def _extract_text(resp: httpx.Response) -> str:
        try:
            data = resp.json()
        except ValueError as exc:
            raise GenerationFailure("Gemini returned non-JSON body") from exc
        try:
            candidates = data.get("candidates") or []
            if not candidates or not isinstance(candidates[0], dict):
                return ""
            parts = (candidates[0].get("content") or {}).get("parts") or []
            return "".join(
                str(part.get("text", "")) for part in parts if isinstance(part, dict)
            ).strip()
        except (AttributeError, TypeError) as exc:
            raise GenerationFailure("Malformed Gemini payload") from exc
