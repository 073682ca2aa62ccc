"""POST /api/text-to-speech: direct synthesis with a browser fallback."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends

from murfkiddo.config import settings
from murfkiddo.dependencies import get_tts
from murfkiddo.errors import SpeechSynthesisFailure, ValidationError
from murfkiddo.schemas import SpeechTextRequest
from murfkiddo.speech.normalizer import normalize_for_conversation
from murfkiddo.tts.murf import MurfTTS
from murfkiddo.tts.schemas import SpeechRequest
from murfkiddo.tts.voices import chat_voice

log = logging.getLogger(__name__)

router = APIRouter(prefix="/api")

# Slower, slightly higher and softer than the browser default.
BROWSER_TTS_CONFIG = {
    "rate": 0.85,
    "pitch": 1.15,
    "volume": 0.8,
    "voice": "child-friendly",
}


def browser_fallback(reason: str) -> dict:
    return {
        "success": False,
        "error": reason,
        "useBrowserTTS": True,
        "browserTTSConfig": dict(BROWSER_TTS_CONFIG),
    }


@router.post("/text-to-speech")
async def text_to_speech(req: SpeechTextRequest, tts: MurfTTS = Depends(get_tts)) -> dict:
    """Speak ``text`` with Murf, or tell the client to use browser speech.

    A Murf failure is not an error here: the reply is a 200 carrying
    ``useBrowserTTS`` so the page can speak the text itself.
    """
    text = req.text.strip()
    if not text:
        raise ValidationError("Text is required")

    if not tts.configured:
        return browser_fallback("Using browser TTS for better reliability")

    try:
        spoken = normalize_for_conversation(text) or text
        speech = SpeechRequest.build(
            spoken,
            voice_id=chat_voice(req.voice),
            max_chars=settings.tts_max_chars,
        )
        result = await tts.synthesize(speech, timeout_s=settings.tts_timeout_s)
    except SpeechSynthesisFailure as exc:
        log.warning("Direct synthesis failed, falling back to browser TTS: %s", exc)
        return browser_fallback("TTS service error")

    return {"success": True, "audioUrl": result.audio_file_url}
