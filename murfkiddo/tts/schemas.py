"""Speech synthesis request/result models."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field, field_validator

from murfkiddo.speech.normalizer import fit_to_length

MURF_SPEED_LIMIT = 50


class SpeechStyle(str, Enum):
    CONVERSATIONAL = "Conversational"
    NARRATION = "Narration"


class SpeechRequest(BaseModel):
    """One Murf synthesis call. Text is always non-empty."""

    text: str = Field(min_length=1)
    voice_id: str
    style: SpeechStyle = SpeechStyle.CONVERSATIONAL
    speed_adjustment: int = Field(default=0, ge=-MURF_SPEED_LIMIT, le=MURF_SPEED_LIMIT)

    @field_validator("text")
    @classmethod
    def _text_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("text must not be blank")
        return value

    @classmethod
    def build(
        cls,
        text: str,
        *,
        voice_id: str,
        max_chars: int,
        style: SpeechStyle = SpeechStyle.CONVERSATIONAL,
        speed_adjustment: int = 0,
    ) -> SpeechRequest:
        """Trim ``text`` to ``max_chars`` and clamp the speed into range."""
        speed = max(-MURF_SPEED_LIMIT, min(MURF_SPEED_LIMIT, speed_adjustment))
        return cls(
            text=fit_to_length(text.strip(), max_chars),
            voice_id=voice_id,
            style=style,
            speed_adjustment=speed,
        )

    def to_murf_body(self) -> dict:
        return {
            "text": self.text,
            "voiceId": self.voice_id,
            "style": self.style.value,
            "rate": self.speed_adjustment,
        }


class SpeechResult(BaseModel):
    audio_file_url: str
