"""Configuration validation tests."""

from __future__ import annotations

import pytest

from murfkiddo.config import Settings


def test_settings_reject_unknown_llm_backend() -> None:
    with pytest.raises(ValueError, match="LLM_BACKEND must be one of: gemini, openai"):
        Settings(llm_backend="llama")


def test_settings_reject_unknown_stt_backend() -> None:
    with pytest.raises(ValueError, match="STT_BACKEND must be one of"):
        Settings(stt_backend="cloud")


def test_settings_reject_tiny_tts_limit() -> None:
    with pytest.raises(ValueError, match="TTS_MAX_CHARS must be >= 100"):
        Settings(tts_max_chars=50)


def test_settings_reject_non_positive_timeouts() -> None:
    with pytest.raises(ValueError, match="VOICE_TIMEOUT_S must be > 0"):
        Settings(voice_timeout_s=0.0)


def test_settings_reject_zero_activity_cap() -> None:
    with pytest.raises(ValueError, match="ACTIVITY_HISTORY_CAP must be >= 1"):
        Settings(activity_history_cap=0)


def test_cors_origins_include_extras() -> None:
    settings = Settings(cors_extra_origins=" https://kiddo.example , ,https://b.example")
    origins = settings.cors_origins()
    assert "http://localhost:3000" in origins
    assert origins[-2:] == ["https://kiddo.example", "https://b.example"]
