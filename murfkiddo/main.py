"""MurfKiddo server entry point."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from murfkiddo import __version__
from murfkiddo.config import settings
from murfkiddo.dependencies import register_exception_handlers
from murfkiddo.llm.factory import create_llm_backend
from murfkiddo.routers.features import router as features_router
from murfkiddo.routers.parental import router as parental_router
from murfkiddo.routers.speech import router as speech_router
from murfkiddo.routers.voice import router as voice_router
from murfkiddo.store import InMemorySettingsStore
from murfkiddo.stt.factory import create_transcriber
from murfkiddo.tts.murf import MurfTTS

log = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Open provider clients on startup and close them on shutdown."""
    llm = create_llm_backend(settings.llm_backend)
    voice_llm = create_llm_backend(settings.voice_llm_backend, voice=True)
    tts = MurfTTS()
    stt = create_transcriber(settings.stt_backend)

    for client in (llm, voice_llm, tts, stt):
        if client is not None:
            await client.start()
    app.state.llm = llm
    app.state.voice_llm = voice_llm
    app.state.tts = tts
    app.state.stt = stt

    if not await llm.health_check():
        log.warning("%s backend has no API key; feature calls will fail", llm.backend_name)
    if not tts.configured:
        log.warning("MURF_API_KEY missing; replies will come back without audio")
    log.info(
        "MurfKiddo ready: llm=%s voice_llm=%s stt=%s",
        llm.backend_name,
        voice_llm.backend_name,
        stt.backend_name if stt is not None else "off",
    )

    yield

    for client in (stt, tts, voice_llm, llm):
        if client is not None:
            await client.close()


def create_app() -> FastAPI:
    app = FastAPI(
        title="MurfKiddo Voice Server",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.settings_store = InMemorySettingsStore(
        seed_demo=settings.seed_demo_activity
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins(),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_exception_handlers(app)

    app.include_router(features_router)
    app.include_router(voice_router)
    app.include_router(speech_router)
    app.include_router(parental_router)

    @app.get("/health")
    async def health():
        """Liveness plus which providers are wired in."""
        llm = getattr(app.state, "llm", None)
        voice_llm = getattr(app.state, "voice_llm", None)
        tts = getattr(app.state, "tts", None)
        stt = getattr(app.state, "stt", None)
        llm_ok = bool(llm is not None and await llm.health_check())
        store = app.state.settings_store
        return JSONResponse(
            {
                "status": "ok" if llm_ok else "degraded",
                "version": __version__,
                "llm_backend": llm.backend_name if llm is not None else None,
                "llm_model": llm.model_name if llm is not None else None,
                "voice_llm_backend": (
                    voice_llm.backend_name if voice_llm is not None else None
                ),
                "tts_configured": bool(tts is not None and tts.configured),
                "stt_backend": stt.backend_name if stt is not None else "off",
                "activity_entries": len(store.read_activity()),
            }
        )

    return app


app = create_app()


def main() -> None:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)-8s %(name)s  %(message)s",
    )
    uvicorn.run(
        "murfkiddo.main:app",
        host=settings.host,
        port=settings.port,
        log_level="info",
    )


if __name__ == "__main__":
    main()
