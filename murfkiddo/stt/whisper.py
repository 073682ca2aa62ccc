"""Local Whisper STT using faster-whisper (CTranslate2)."""

from __future__ import annotations

import asyncio
import io
import logging
from typing import TYPE_CHECKING

from murfkiddo.config import settings
from murfkiddo.errors import TranscriptionFailure

if TYPE_CHECKING:
    from faster_whisper import WhisperModel

log = logging.getLogger(__name__)


class WhisperSTT:
    """Speech-to-text on this machine.

    The model is loaded lazily on the first transcribe() call so the server
    starts quickly when no one talks to it. faster-whisper decodes the
    browser's compressed upload (webm/ogg/mp4) itself.
    """

    def __init__(
        self,
        model_size: str = settings.stt_model_size,
        device: str = settings.stt_device,
        compute_type: str = settings.stt_compute_type,
    ) -> None:
        self._model_size = model_size
        self._device = device
        self._compute_type = compute_type
        self._model: WhisperModel | None = None

    @property
    def backend_name(self) -> str:
        return "local"

    async def start(self) -> None:
        return None

    async def close(self) -> None:
        self._model = None

    def _ensure_model(self) -> WhisperModel:
        if self._model is None:
            try:
                from faster_whisper import WhisperModel
            except ImportError as exc:
                raise TranscriptionFailure(
                    "STT_BACKEND=local needs the local-stt extra (faster-whisper)"
                ) from exc

            log.info(
                "Loading Whisper model %s on %s (%s)...",
                self._model_size,
                self._device,
                self._compute_type,
            )
            self._model = WhisperModel(
                self._model_size,
                device=self._device,
                compute_type=self._compute_type,
            )
            log.info("Whisper model loaded.")
        return self._model

    async def transcribe(
        self,
        audio: bytes,
        filename: str = "audio.webm",
        content_type: str = "audio/webm",
        *,
        timeout_s: float,
    ) -> str:
        """Run the model in a worker thread, bounded by ``timeout_s``."""
        if not audio:
            raise TranscriptionFailure("empty audio upload")
        try:
            text = await asyncio.wait_for(
                asyncio.to_thread(self._transcribe_sync, audio), timeout=timeout_s
            )
        except asyncio.TimeoutError as exc:
            raise TranscriptionFailure("whisper_timeout", timed_out=True) from exc
        if not text:
            raise TranscriptionFailure("no speech detected")
        return text

    def _transcribe_sync(self, audio: bytes) -> str:
        model = self._ensure_model()
        try:
            segments, info = model.transcribe(
                io.BytesIO(audio),
                language="en",
                vad_filter=True,
                beam_size=5,
                temperature=0.2,
            )
            text = " ".join(seg.text.strip() for seg in segments).strip()
        except Exception as exc:
            raise TranscriptionFailure(f"local transcription failed: {exc}") from exc

        log.info(
            "Transcribed %.1fs audio -> %d chars (lang=%s prob=%.2f)",
            info.duration,
            len(text),
            info.language,
            info.language_probability,
        )
        return text
