"""OpenAI chat completions backend."""

from __future__ import annotations

import logging

import httpx

from murfkiddo.config import settings
from murfkiddo.errors import GenerationFailure
from murfkiddo.llm.base import GenerativeBackend, bounded_call

log = logging.getLogger(__name__)


class OpenAIBackend(GenerativeBackend):
    """Thin async wrapper around ``/v1/chat/completions``."""

    def __init__(
        self,
        base_url: str = settings.openai_url,
        model: str = settings.openai_model,
        api_key: str = settings.openai_api_key,
        temperature: float = settings.temperature,
        presence_penalty: float = 0.0,
        frequency_penalty: float = 0.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._model = model
        self._api_key = api_key
        self._temperature = temperature
        self._presence_penalty = presence_penalty
        self._frequency_penalty = frequency_penalty
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    @property
    def backend_name(self) -> str:
        return "openai"

    @property
    def model_name(self) -> str:
        return self._model

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
            raise GenerationFailure("openai backend not started")
        if not self._api_key:
            raise GenerationFailure("OPENAI_API_KEY is not configured")

        messages = []
        if system:
            messages.append({"role": "system", "content": system})
        messages.append({"role": "user", "content": prompt})
        body: dict = {
            "model": self._model,
            "messages": messages,
            "temperature": self._temperature if temperature is None else temperature,
        }
        if max_output_tokens is not None:
            body["max_tokens"] = max_output_tokens
        if self._presence_penalty:
            body["presence_penalty"] = self._presence_penalty
        if self._frequency_penalty:
            body["frequency_penalty"] = self._frequency_penalty

        resp = await bounded_call(
            self._client.post("/v1/chat/completions", json=body),
            timeout_s=timeout_s,
            backend=self.backend_name,
        )
        if resp.status_code != 200:
            log.warning("OpenAI returned %d: %s", resp.status_code, resp.text[:200])
            raise GenerationFailure(f"OpenAI returned {resp.status_code}")

        try:
            data = resp.json()
            content = data["choices"][0]["message"]["content"] or ""
        except (ValueError, KeyError, IndexError, TypeError) as exc:
            raise GenerationFailure("Malformed OpenAI completion payload") from exc

        text = str(content).strip()
        if not text:
            raise GenerationFailure("No response generated from OpenAI")
        return text
