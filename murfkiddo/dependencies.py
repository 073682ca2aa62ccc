"""Request-scoped dependencies and exception handlers."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from murfkiddo.errors import KiddoError
from murfkiddo.llm.base import GenerativeBackend
from murfkiddo.store import SettingsStore
from murfkiddo.stt.factory import Transcriber
from murfkiddo.tts.murf import MurfTTS

log = logging.getLogger(__name__)


def get_llm(request: Request) -> GenerativeBackend:
    return request.app.state.llm


def get_voice_llm(request: Request) -> GenerativeBackend:
    return getattr(request.app.state, "voice_llm", None) or request.app.state.llm


def get_tts(request: Request) -> MurfTTS:
    return request.app.state.tts


def get_transcriber(request: Request) -> Transcriber | None:
    return getattr(request.app.state, "stt", None)


def get_settings_store(request: Request) -> SettingsStore:
    return request.app.state.settings_store


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(KiddoError)
    async def handle_kiddo_error(_request: Request, exc: KiddoError) -> JSONResponse:
        return JSONResponse(status_code=exc.status_code, content=exc.to_envelope())

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(
        request: Request,
        exc: RequestValidationError,
    ) -> JSONResponse:
        errors = exc.errors()
        first_error = errors[0]["msg"] if errors else "Invalid request"
        log.info("Rejected %s body: %s", request.url.path, first_error)
        return JSONResponse(
            status_code=400,
            content={
                "success": False,
                "error": "Oops, that request didn't look right. Please try again!",
                "detail": first_error,
            },
        )
