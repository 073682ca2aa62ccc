"""Request models for the feature endpoints.

Required fields default to empty strings so the route can answer with its
own kid-readable 400 message instead of a generic schema error.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import AliasChoices, BaseModel, Field


class StoryRequest(BaseModel):
    topic: str = ""
    voiceType: str = "playful"


class TutorRequest(BaseModel):
    question: str = ""
    subject: str = ""


class ChatHistoryItem(BaseModel):
    role: Literal["user", "assistant"]
    content: str = ""


class ChatRequest(BaseModel):
    message: str = ""
    childName: str = ""
    voiceType: str = "friendly"
    chatHistory: list[ChatHistoryItem] = Field(default_factory=list)


class GameRequest(BaseModel):
    action: str = ""
    gameType: str = "riddle"
    userResponse: str = ""
    gameState: str = ""


class LanguageRequest(BaseModel):
    action: str = Field(
        default="", validation_alias=AliasChoices("action", "lessonType")
    )
    targetLanguage: str = Field(
        default="", validation_alias=AliasChoices("targetLanguage", "language")
    )
    input: str = ""


class BedtimeRequest(BaseModel):
    action: str = ""
    contentType: str = ""
    childName: str = ""
    favoriteThings: str = ""


class SpeechTextRequest(BaseModel):
    text: str = ""
    voice: str = "friendly"


class ParentalRequest(BaseModel):
    action: str = ""
    settings: dict[str, Any] = Field(default_factory=dict)
    activityUpdate: dict[str, Any] = Field(default_factory=dict)
