"""Tests for POST /api/voice-agent."""

from __future__ import annotations

import json

import pytest

from conftest import FakeLLM, FakeTranscriber, llm_timeout, stt_failure
from murfkiddo.config import settings
from murfkiddo.errors import TIMEOUT_MESSAGE
from murfkiddo.llm.prompts import VOICE_AGENT_SYSTEM_PROMPT
from murfkiddo.routers.voice import TRANSCRIPTION_FALLBACK_MESSAGE, parse_history

AUDIO = {"audio": ("clip.webm", b"\x1a\x45\xdf\xa3" * 8, "audio/webm")}


@pytest.mark.asyncio
async def test_typed_text_skips_transcription(app, call):
    resp = await call(
        "POST", "/api/voice-agent", data={"userText": " what is a rainbow? ", "childName": "Mia"}
    )
    assert resp.status_code == 200
    data = resp.json()
    assert data["success"] is True
    assert data["userMessage"] == "what is a rainbow?"
    assert data["message"] == "Rainbows are sunlight bending!"
    assert data["timestamp"].endswith("Z")
    assert app.state.stt.uploads == []

    generation = app.state.voice_llm.calls[0]
    assert generation["system"] == VOICE_AGENT_SYSTEM_PROMPT
    assert generation["timeout_s"] == settings.voice_timeout_s
    assert generation["max_output_tokens"] == settings.voice_max_output_tokens
    assert generation["temperature"] == 0.7
    assert generation["prompt"].endswith('Child named Mia just said: "what is a rainbow?"')


@pytest.mark.asyncio
async def test_typed_text_wins_over_audio(app, call):
    resp = await call("POST", "/api/voice-agent", data={"userText": "hello"}, files=AUDIO)
    assert resp.status_code == 200
    assert resp.json()["userMessage"] == "hello"
    assert app.state.stt.uploads == []


@pytest.mark.asyncio
async def test_audio_is_transcribed(app, call):
    resp = await call("POST", "/api/voice-agent", files=AUDIO)
    assert resp.status_code == 200
    assert resp.json()["userMessage"] == "what is a rainbow"
    assert app.state.stt.uploads == [AUDIO["audio"][1]]


@pytest.mark.asyncio
async def test_history_is_trimmed_to_recent_turns(app, call):
    history = [f"line {i}" for i in range(12)]
    resp = await call(
        "POST",
        "/api/voice-agent",
        data={"userText": "hi", "conversationHistory": json.dumps(history)},
    )
    assert resp.status_code == 200
    prompt = app.state.voice_llm.calls[0]["prompt"]
    assert "line 3\n" not in prompt
    assert "line 4\nline 5" in prompt
    assert "line 11\n\n" in prompt


@pytest.mark.asyncio
async def test_transcription_failure_points_to_web_speech(app, call):
    app.state.stt = FakeTranscriber(error=stt_failure())
    resp = await call("POST", "/api/voice-agent", files=AUDIO)
    assert resp.status_code == 400
    assert resp.json() == {
        "success": False,
        "error": TRANSCRIPTION_FALLBACK_MESSAGE,
        "useWebSpeechAPI": True,
    }
    assert app.state.voice_llm.calls == []


@pytest.mark.asyncio
async def test_no_transcriber_points_to_web_speech(app, call):
    app.state.stt = None
    resp = await call("POST", "/api/voice-agent", files=AUDIO)
    assert resp.status_code == 400
    assert resp.json()["useWebSpeechAPI"] is True


@pytest.mark.asyncio
async def test_oversized_upload_rejected(app, call, monkeypatch):
    monkeypatch.setattr(settings, "max_upload_bytes", 4)
    resp = await call("POST", "/api/voice-agent", files=AUDIO)
    assert resp.status_code == 400
    assert "too long" in resp.json()["error"]
    assert app.state.stt.uploads == []


@pytest.mark.asyncio
async def test_no_input_is_400(app, call):
    resp = await call("POST", "/api/voice-agent", data={"childName": "Mia"})
    assert resp.status_code == 400
    assert resp.json()["error"] == "Audio file or text is required"


@pytest.mark.asyncio
async def test_blank_transcript_is_400(app, call):
    app.state.stt = FakeTranscriber(text="   ")
    resp = await call("POST", "/api/voice-agent", files=AUDIO)
    assert resp.status_code == 400
    assert resp.json()["error"] == "Could not understand input. Please try speaking again."


@pytest.mark.asyncio
async def test_voice_generation_timeout_is_408(app, call):
    app.state.voice_llm = FakeLLM(error=llm_timeout())
    resp = await call("POST", "/api/voice-agent", data={"userText": "hi"})
    assert resp.status_code == 408
    assert resp.json()["error"] == TIMEOUT_MESSAGE


def test_parse_history_ignores_garbage():
    assert parse_history("", 8) == []
    assert parse_history("{not json", 8) == []
    assert parse_history('{"a": 1}', 8) == []
    assert parse_history('["a", "", "b"]', 8) == ["a", "b"]
    assert parse_history('["a", "b", "c"]', 2) == ["b", "c"]
    assert parse_history('["a"]', 0) == []
