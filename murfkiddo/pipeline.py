"""Shared generate -> normalize -> synthesize flow for the six modes."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable

from pydantic import BaseModel

from murfkiddo.config import settings
from murfkiddo.errors import GenerationFailure, SpeechSynthesisFailure, map_adapter_error
from murfkiddo.llm.base import GenerativeBackend
from murfkiddo.llm.prompts import PromptPlan
from murfkiddo.tts.murf import MurfTTS
from murfkiddo.tts.schemas import SpeechRequest, SpeechStyle

log = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class FeatureSpec:
    """Everything that differs between two modes.

    ``render`` turns the request, prompt plan, generated text and audio URL
    into the mode's success payload (without the ``success`` flag).
    ``audio_required`` decides whether a TTS failure fails the whole call.
    """

    name: str
    build_prompt: Callable[[Any], PromptPlan]
    normalize: Callable[[str], str]
    voice: Callable[[Any, PromptPlan], str]
    render: Callable[[Any, PromptPlan, str, str | None], dict[str, Any]]
    failure_message: str
    style: Callable[[Any, PromptPlan], SpeechStyle] = (
        lambda _req, _plan: SpeechStyle.CONVERSATIONAL
    )
    speed: int = 0
    audio_required: bool = True


async def run_feature(
    feature: FeatureSpec,
    request: BaseModel,
    llm: GenerativeBackend,
    tts: MurfTTS,
) -> dict[str, Any]:
    """Run one mode end to end and return the success envelope.

    Raises ``KiddoError`` subclasses; validation happens before any
    provider is called.
    """
    plan = feature.build_prompt(request)

    try:
        text = await llm.generate(plan.prompt, timeout_s=settings.generation_timeout_s)
    except GenerationFailure as exc:
        log.warning("%s generation failed: %s", feature.name, exc)
        raise map_adapter_error(exc, feature.failure_message) from exc

    audio_url: str | None = None
    try:
        spoken = feature.normalize(text)
        if not spoken.strip():
            raise SpeechSynthesisFailure("nothing left to speak after normalization")
        speech = SpeechRequest.build(
            spoken,
            voice_id=feature.voice(request, plan),
            max_chars=settings.tts_max_chars,
            style=feature.style(request, plan),
            speed_adjustment=feature.speed,
        )
        result = await tts.synthesize(speech, timeout_s=settings.tts_timeout_s)
        audio_url = result.audio_file_url
    except SpeechSynthesisFailure as exc:
        if feature.audio_required:
            log.warning("%s synthesis failed: %s", feature.name, exc)
            raise map_adapter_error(exc, feature.failure_message) from exc
        log.warning("%s synthesis failed, replying without audio: %s", feature.name, exc)

    return {"success": True, **feature.render(request, plan, text, audio_url)}
