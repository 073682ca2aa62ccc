"""Shared fakes for route tests.

The ASGI transport does not run the app lifespan, so tests build the app
with ``create_app()`` and attach providers to ``app.state`` directly.
"""

from __future__ import annotations

import httpx
import pytest

from murfkiddo.errors import GenerationFailure, SpeechSynthesisFailure, TranscriptionFailure
from murfkiddo.main import create_app
from murfkiddo.tts.schemas import SpeechRequest, SpeechResult


class FakeLLM:
    backend_name = "fake"
    model_name = "fake-1"

    def __init__(self, reply: str = "Hello, friend!", error: Exception | None = None) -> None:
        self.reply = reply
        self.error = error
        self.calls: list[dict] = []

    async def health_check(self) -> bool:
        return True

    async def generate(
        self,
        prompt: str,
        *,
        system: str | None = None,
        timeout_s: float,
        max_output_tokens: int | None = None,
        temperature: float | None = None,
    ) -> str:
        self.calls.append(
            {
                "prompt": prompt,
                "system": system,
                "timeout_s": timeout_s,
                "max_output_tokens": max_output_tokens,
                "temperature": temperature,
            }
        )
        if self.error is not None:
            raise self.error
        return self.reply


class FakeTTS:
    def __init__(
        self,
        url: str = "https://cdn.murf.ai/reply.mp3",
        error: Exception | None = None,
        configured: bool = True,
    ) -> None:
        self.url = url
        self.error = error
        self.configured = configured
        self.requests: list[SpeechRequest] = []

    async def synthesize(self, request: SpeechRequest, *, timeout_s: float) -> SpeechResult:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        return SpeechResult(audio_file_url=self.url)


class FakeTranscriber:
    backend_name = "fake"

    def __init__(self, text: str = "what is a rainbow", error: Exception | None = None) -> None:
        self.text = text
        self.error = error
        self.uploads: list[bytes] = []

    async def transcribe(
        self,
        audio: bytes,
        filename: str = "audio.webm",
        content_type: str = "audio/webm",
        *,
        timeout_s: float,
    ) -> str:
        self.uploads.append(audio)
        if self.error is not None:
            raise self.error
        return self.text


def llm_timeout() -> GenerationFailure:
    return GenerationFailure("fake_timeout", timed_out=True)


def llm_failure() -> GenerationFailure:
    return GenerationFailure("fake exploded")


def tts_failure() -> SpeechSynthesisFailure:
    return SpeechSynthesisFailure("Murf returned 500")


def stt_failure() -> TranscriptionFailure:
    return TranscriptionFailure("Whisper returned 400")


@pytest.fixture
def app():
    app = create_app()
    app.state.llm = FakeLLM()
    app.state.voice_llm = FakeLLM("Rainbows are sunlight bending!")
    app.state.tts = FakeTTS()
    app.state.stt = FakeTranscriber()
    return app


@pytest.fixture
def call(app):
    """Send one request to ``app`` through the ASGI transport."""

    async def _request(method: str, path: str, **kwargs) -> httpx.Response:
        transport = httpx.ASGITransport(app=app)
        async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
            return await client.request(method, path, **kwargs)

    return _request
