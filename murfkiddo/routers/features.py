"""POST endpoints for the six MurfKiddo modes.

Each endpoint is a ``FeatureSpec`` handed to the shared pipeline; this
module only says what differs per mode.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends

from murfkiddo.dependencies import get_llm, get_tts
from murfkiddo.llm.base import GenerativeBackend
from murfkiddo.llm.prompts import (
    build_bedtime_prompt,
    build_chat_prompt,
    build_game_prompt,
    build_language_prompt,
    build_story_prompt,
    build_tutor_prompt,
)
from murfkiddo.pipeline import FeatureSpec, run_feature
from murfkiddo.schemas import (
    BedtimeRequest,
    ChatRequest,
    GameRequest,
    LanguageRequest,
    StoryRequest,
    TutorRequest,
)
from murfkiddo.speech.normalizer import (
    normalize_for_bedtime,
    normalize_for_conversation,
    normalize_for_education,
    normalize_for_storytelling,
)
from murfkiddo.tts.murf import MurfTTS
from murfkiddo.tts.schemas import SpeechStyle
from murfkiddo.tts.voices import BEDTIME_VOICE, chat_voice, story_voice, style_for_language

log = logging.getLogger(__name__)

router = APIRouter(prefix="/api")


def _utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


STORY = FeatureSpec(
    name="story",
    build_prompt=build_story_prompt,
    normalize=normalize_for_storytelling,
    voice=lambda req, _plan: story_voice(req.voiceType),
    style=lambda _req, _plan: SpeechStyle.NARRATION,
    render=lambda _req, plan, text, audio_url: {
        "storyText": text,
        "audioUrl": audio_url,
        "title": plan.title,
    },
    failure_message="Failed to generate story. Please try again.",
)

TUTOR = FeatureSpec(
    name="tutor",
    build_prompt=build_tutor_prompt,
    normalize=normalize_for_education,
    voice=lambda _req, _plan: chat_voice("friendly"),
    speed=-5,
    render=lambda _req, plan, text, audio_url: {
        "question": plan.metadata["question"],
        "explanation": text,
        "audioUrl": audio_url,
        "subject": plan.metadata["subject"],
    },
    failure_message="Failed to generate explanation. Please try asking again!",
)

# The only mode where a reply without audio still counts as a success.
CHAT = FeatureSpec(
    name="chat",
    build_prompt=build_chat_prompt,
    normalize=normalize_for_conversation,
    voice=lambda req, _plan: chat_voice(req.voiceType),
    render=lambda _req, _plan, text, audio_url: {
        "message": text,
        "audioUrl": audio_url,
        "timestamp": _utc_timestamp(),
    },
    failure_message="Failed to generate chat response",
    audio_required=False,
)

GAME = FeatureSpec(
    name="game",
    build_prompt=build_game_prompt,
    normalize=normalize_for_conversation,
    voice=lambda _req, _plan: chat_voice("friendly"),
    render=lambda _req, plan, text, audio_url: {
        "gameType": plan.metadata["gameType"],
        "responseText": text,
        "audioUrl": audio_url,
        "action": plan.metadata["action"],
    },
    failure_message="Failed to process game. Let's try another game!",
)

LANGUAGE = FeatureSpec(
    name="language",
    build_prompt=build_language_prompt,
    normalize=normalize_for_education,
    voice=lambda _req, _plan: chat_voice("friendly"),
    style=lambda _req, plan: style_for_language(plan.metadata["language"]),
    speed=-8,
    render=lambda _req, plan, text, audio_url: {
        "responseText": text,
        "audioUrl": audio_url,
        "language": plan.metadata["language"],
        "learningType": plan.metadata["learningType"],
        "title": plan.title,
    },
    failure_message="Failed to process language request. Let's try again!",
)

BEDTIME = FeatureSpec(
    name="bedtime",
    build_prompt=build_bedtime_prompt,
    normalize=normalize_for_bedtime,
    voice=lambda _req, _plan: BEDTIME_VOICE,
    style=lambda _req, _plan: SpeechStyle.NARRATION,
    speed=-10,
    render=lambda _req, plan, text, audio_url: {
        "action": plan.metadata["action"],
        "contentType": plan.content_type,
        "responseText": text,
        "audioUrl": audio_url,
        "childName": plan.metadata["childName"],
    },
    failure_message=(
        "Failed to create bedtime content. Let's try again with sweet dreams!"
    ),
)


@router.post("/generate-story")
async def generate_story(
    req: StoryRequest,
    llm: GenerativeBackend = Depends(get_llm),
    tts: MurfTTS = Depends(get_tts),
) -> dict:
    return await run_feature(STORY, req, llm, tts)


@router.post("/ask-tutor")
async def ask_tutor(
    req: TutorRequest,
    llm: GenerativeBackend = Depends(get_llm),
    tts: MurfTTS = Depends(get_tts),
) -> dict:
    return await run_feature(TUTOR, req, llm, tts)


@router.post("/chat")
async def chat(
    req: ChatRequest,
    llm: GenerativeBackend = Depends(get_llm),
    tts: MurfTTS = Depends(get_tts),
) -> dict:
    return await run_feature(CHAT, req, llm, tts)


@router.post("/play-game")
async def play_game(
    req: GameRequest,
    llm: GenerativeBackend = Depends(get_llm),
    tts: MurfTTS = Depends(get_tts),
) -> dict:
    return await run_feature(GAME, req, llm, tts)


@router.post("/learn-language")
async def learn_language(
    req: LanguageRequest,
    llm: GenerativeBackend = Depends(get_llm),
    tts: MurfTTS = Depends(get_tts),
) -> dict:
    return await run_feature(LANGUAGE, req, llm, tts)


@router.post("/bedtime-companion")
async def bedtime_companion(
    req: BedtimeRequest,
    llm: GenerativeBackend = Depends(get_llm),
    tts: MurfTTS = Depends(get_tts),
) -> dict:
    return await run_feature(BEDTIME, req, llm, tts)
