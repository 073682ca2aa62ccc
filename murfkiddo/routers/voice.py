"""POST /api/voice-agent: short spoken-style replies to voice or typed input."""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, File, Form, UploadFile

from murfkiddo.config import settings
from murfkiddo.dependencies import get_transcriber, get_voice_llm
from murfkiddo.errors import (
    GenerationFailure,
    TranscriptionFailure,
    ValidationError,
    map_adapter_error,
)
from murfkiddo.llm.base import GenerativeBackend
from murfkiddo.llm.prompts import VOICE_AGENT_SYSTEM_PROMPT, format_voice_user_prompt
from murfkiddo.stt.factory import Transcriber

log = logging.getLogger(__name__)

router = APIRouter(prefix="/api")

TRANSCRIPTION_FALLBACK_MESSAGE = (
    "Audio transcription failed. Using browser speech recognition instead."
)
VOICE_FAILURE_MESSAGE = "I had trouble processing that. Please try again!"


def parse_history(raw: str, max_turns: int) -> list[str]:
    """Decode the JSON list of prior lines and keep the newest ``max_turns``."""
    if not raw or max_turns <= 0:
        return []
    try:
        decoded = json.loads(raw)
    except ValueError:
        log.warning("Ignoring malformed conversationHistory")
        return []
    if not isinstance(decoded, list):
        log.warning("Ignoring conversationHistory that is not a list")
        return []
    return [str(line) for line in decoded if line][-max_turns:]


async def _transcribe_upload(audio: UploadFile, transcriber: Transcriber | None) -> str:
    fallback = ValidationError(
        TRANSCRIPTION_FALLBACK_MESSAGE, extra={"useWebSpeechAPI": True}
    )
    if transcriber is None:
        raise fallback

    payload = await audio.read(settings.max_upload_bytes + 1)
    if len(payload) > settings.max_upload_bytes:
        raise ValidationError("That recording is too long. Try a shorter one!")
    try:
        return await transcriber.transcribe(
            payload,
            audio.filename or "audio.webm",
            audio.content_type or "audio/webm",
            timeout_s=settings.stt_timeout_s,
        )
    except TranscriptionFailure as exc:
        log.warning("Transcription failed (%s): %s", transcriber.backend_name, exc)
        raise fallback from exc


@router.post("/voice-agent")
async def voice_agent(
    audio: UploadFile | None = File(default=None),
    userText: str = Form(default=""),
    childName: str = Form(default=""),
    conversationHistory: str = Form(default=""),
    llm: GenerativeBackend = Depends(get_voice_llm),
    transcriber: Transcriber | None = Depends(get_transcriber),
) -> dict:
    """Reply to one spoken turn.

    Text already recognised by the browser wins over an uploaded recording.
    """
    if userText.strip():
        user_message = userText.strip()
    elif audio is not None:
        user_message = (await _transcribe_upload(audio, transcriber)).strip()
    else:
        raise ValidationError("Audio file or text is required")

    if not user_message:
        raise ValidationError("Could not understand input. Please try speaking again.")

    history = parse_history(conversationHistory, settings.voice_history_turns)
    prompt = format_voice_user_prompt(user_message, childName.strip(), history)
    try:
        reply = await llm.generate(
            prompt,
            system=VOICE_AGENT_SYSTEM_PROMPT,
            timeout_s=settings.voice_timeout_s,
            max_output_tokens=settings.voice_max_output_tokens,
            temperature=0.7,
        )
    except GenerationFailure as exc:
        log.warning("Voice reply failed: %s", exc)
        raise map_adapter_error(exc, VOICE_FAILURE_MESSAGE) from exc

    return {
        "success": True,
        "userMessage": user_message,
        "message": reply,
        "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
    }
