"""Server configuration with environment variable overrides."""

from __future__ import annotations

import os
from dataclasses import dataclass

try:
    from dotenv import load_dotenv

    load_dotenv(override=False)
except Exception:
    # Optional dependency; env vars still work without .env loading.
    pass


def _env_bool(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None:
        return default
    return raw.strip().lower() not in {"0", "false", "no", "off"}


def _env_key(name: str) -> str:
    # Keys pasted into .env files often carry quotes or a trailing newline.
    return os.environ.get(name, "").strip().strip('"').strip("'")


_LLM_BACKENDS = {"gemini", "openai"}
_STT_BACKENDS = {"openai", "local", "off"}


@dataclass(slots=True)
class Settings:
    """MurfKiddo server settings. Override any field via environment variable."""

    llm_backend: str = os.environ.get("LLM_BACKEND", "gemini").strip().lower()
    voice_llm_backend: str = (
        os.environ.get("VOICE_LLM_BACKEND", "openai").strip().lower()
    )
    gemini_api_key: str = _env_key("GEMINI_API_KEY")
    gemini_url: str = os.environ.get(
        "GEMINI_URL", "https://generativelanguage.googleapis.com"
    )
    gemini_model: str = os.environ.get("GEMINI_MODEL", "gemini-1.5-flash")
    openai_api_key: str = _env_key("OPENAI_API_KEY")
    openai_url: str = os.environ.get("OPENAI_URL", "https://api.openai.com")
    openai_model: str = os.environ.get("OPENAI_MODEL", "gpt-4o-mini")
    temperature: float = float(os.environ.get("TEMPERATURE", "0.7"))
    generation_timeout_s: float = float(os.environ.get("GENERATION_TIMEOUT_S", "30.0"))
    voice_timeout_s: float = float(os.environ.get("VOICE_TIMEOUT_S", "8.0"))
    voice_max_output_tokens: int = int(os.environ.get("VOICE_MAX_OUTPUT_TOKENS", "100"))
    voice_history_turns: int = int(os.environ.get("VOICE_HISTORY_TURNS", "8"))
    murf_api_key: str = _env_key("MURF_API_KEY")
    murf_url: str = os.environ.get("MURF_URL", "https://api.murf.ai")
    murf_default_voice: str = os.environ.get("MURF_DEFAULT_VOICE", "en-US-natalie")
    tts_timeout_s: float = float(os.environ.get("TTS_TIMEOUT_S", "30.0"))
    tts_max_chars: int = int(os.environ.get("TTS_MAX_CHARS", "3000"))
    stt_backend: str = os.environ.get("STT_BACKEND", "openai").strip().lower()
    stt_timeout_s: float = float(os.environ.get("STT_TIMEOUT_S", "30.0"))
    whisper_model: str = os.environ.get("WHISPER_MODEL", "whisper-1")
    stt_model_size: str = os.environ.get("STT_MODEL_SIZE", "base.en")
    stt_device: str = os.environ.get("STT_DEVICE", "cpu")
    stt_compute_type: str = os.environ.get("STT_COMPUTE_TYPE", "int8")
    max_upload_bytes: int = int(
        os.environ.get("MAX_UPLOAD_BYTES", str(25 * 1024 * 1024))
    )
    activity_history_cap: int = int(os.environ.get("ACTIVITY_HISTORY_CAP", "10"))
    seed_demo_activity: bool = _env_bool("SEED_DEMO_ACTIVITY", True)
    cors_extra_origins: str = os.environ.get("CORS_EXTRA_ORIGINS", "")
    host: str = os.environ.get("SERVER_HOST", "0.0.0.0")
    port: int = int(os.environ.get("SERVER_PORT", "8000"))

    def __post_init__(self) -> None:
        if self.llm_backend not in _LLM_BACKENDS:
            raise ValueError("LLM_BACKEND must be one of: gemini, openai")
        if self.voice_llm_backend not in _LLM_BACKENDS:
            raise ValueError("VOICE_LLM_BACKEND must be one of: gemini, openai")
        if self.stt_backend not in _STT_BACKENDS:
            raise ValueError("STT_BACKEND must be one of: openai, local, off")
        if not (0.0 <= self.temperature <= 2.0):
            raise ValueError("TEMPERATURE must be in [0.0, 2.0]")
        if self.generation_timeout_s <= 0.0:
            raise ValueError("GENERATION_TIMEOUT_S must be > 0")
        if self.voice_timeout_s <= 0.0:
            raise ValueError("VOICE_TIMEOUT_S must be > 0")
        if self.tts_timeout_s <= 0.0:
            raise ValueError("TTS_TIMEOUT_S must be > 0")
        if self.stt_timeout_s <= 0.0:
            raise ValueError("STT_TIMEOUT_S must be > 0")
        if self.voice_max_output_tokens < 16:
            raise ValueError("VOICE_MAX_OUTPUT_TOKENS must be >= 16")
        if self.voice_history_turns < 0:
            raise ValueError("VOICE_HISTORY_TURNS must be >= 0")
        if self.tts_max_chars < 100:
            raise ValueError("TTS_MAX_CHARS must be >= 100")
        if self.max_upload_bytes < 1024:
            raise ValueError("MAX_UPLOAD_BYTES must be >= 1024")
        if self.activity_history_cap < 1:
            raise ValueError("ACTIVITY_HISTORY_CAP must be >= 1")

    def cors_origins(self) -> list[str]:
        defaults = [
            "http://localhost:3000",
            "http://127.0.0.1:3000",
            "http://localhost:5173",
            "http://127.0.0.1:5173",
        ]
        extra = [o.strip() for o in self.cors_extra_origins.split(",") if o.strip()]
        return defaults + extra


settings = Settings()
