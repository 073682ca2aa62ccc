"""Backend abstraction for generative text inference."""

from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Awaitable, TypeVar

import httpx

from murfkiddo.errors import GenerationFailure

log = logging.getLogger(__name__)

T = TypeVar("T")


class GenerativeBackend(ABC):
    """Unified async interface over a hosted text generation API."""

    @property
    @abstractmethod
    def backend_name(self) -> str:
        raise NotImplementedError

    @property
    @abstractmethod
    def model_name(self) -> str:
        raise NotImplementedError

    @abstractmethod
    async def start(self) -> None:
        raise NotImplementedError

    @abstractmethod
    async def close(self) -> None:
        raise NotImplementedError

    @abstractmethod
    async def health_check(self) -> bool:
        raise NotImplementedError

    @abstractmethod
    async def generate(
        self,
        prompt: str,
        *,
        system: str | None = None,
        timeout_s: float,
        max_output_tokens: int | None = None,
        temperature: float | None = None,
    ) -> str:
        """Return the model's text for ``prompt``.

        Raises ``GenerationFailure`` on timeout, transport error, non-2xx
        status or an empty completion.
        """
        raise NotImplementedError

    def debug_snapshot(self) -> dict:
        return {
            "backend": self.backend_name,
            "model": self.model_name,
        }


async def bounded_call(call: Awaitable[T], *, timeout_s: float, backend: str) -> T:
    """Await ``call`` under ``timeout_s``, mapping transport errors."""
    try:
        return await asyncio.wait_for(call, timeout=timeout_s)
    except (asyncio.TimeoutError, httpx.TimeoutException) as exc:
        log.warning("%s generation timed out after %.1fs", backend, timeout_s)
        raise GenerationFailure(f"{backend}_timeout", timed_out=True) from exc
    except httpx.HTTPError as exc:
        raise GenerationFailure(f"{backend} request failed: {exc}") from exc
