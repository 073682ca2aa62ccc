"""Murf voice catalogue per mode."""

from __future__ import annotations

from murfkiddo.tts.schemas import SpeechStyle

CHAT_VOICES = {
    "friendly": "en-US-natalie",
    "cheerful": "en-US-sarah",
    "calm": "en-US-kate",
    "playful": "en-US-katie",
}

STORY_VOICES = {
    "playful": "en-US-natalie",
    "calm": "en-US-terrell",
    "dramatic": "en-US-joe",
}

BEDTIME_VOICE = "en-US-natalie"

LANGUAGE_STYLES = {
    "spanish": SpeechStyle.CONVERSATIONAL,
    "french": SpeechStyle.NARRATION,
    "chinese": SpeechStyle.CONVERSATIONAL,
    "german": SpeechStyle.NARRATION,
    "italian": SpeechStyle.CONVERSATIONAL,
    "japanese": SpeechStyle.NARRATION,
    "english": SpeechStyle.CONVERSATIONAL,
}


def chat_voice(voice_type: str) -> str:
    return CHAT_VOICES.get(voice_type.strip().lower(), CHAT_VOICES["friendly"])


def story_voice(voice_type: str) -> str:
    return STORY_VOICES.get(voice_type.strip().lower(), STORY_VOICES["playful"])


def style_for_language(language: str) -> SpeechStyle:
    return LANGUAGE_STYLES.get(language.strip().lower(), SpeechStyle.CONVERSATIONAL)
