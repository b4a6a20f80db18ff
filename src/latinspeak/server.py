"""HTTP API for latinspeak.

Routes:
    POST /tts            get-or-synthesize audio for Latin text
    GET  /ipa            IPA transcripts for one or both dialects
    GET  /audio/{path}   cached audio blobs
    GET  /status         liveness and in-flight request count

Errors are always returned as ``{"error": "<message>"}``.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, JSONResponse
from pydantic import BaseModel

from . import __version__
from .dialects import Dialect
from .phonetics import normalize, phonetic_examples, transliterate
from .tts.errors import LatinspeakError, SynthesisProviderError, ValidationError
from .tts.pipeline import SynthesisOrchestrator

logger = logging.getLogger(__name__)


class TTSRequest(BaseModel):
    """Inbound synthesis request. Required fields are checked by the orchestrator."""

    text: str | None = None
    dialect: str | None = None
    kind: str = "word"
    item_id: str | None = None
    voice_model: str | None = None
    speed: float | None = None


class TTSResponse(BaseModel):
    url: str
    cached: bool
    duration_ms: int | None = None


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


def _describe_validation_error(exc: RequestValidationError) -> str:
    parts = []
    for err in exc.errors():
        location = ".".join(str(p) for p in err.get("loc", ()) if p != "body")
        parts.append(f"{location}: {err.get('msg')}" if location else err.get("msg"))
    return "Invalid request: " + "; ".join(parts)


def create_app(orchestrator: SynthesisOrchestrator) -> FastAPI:
    """Build the FastAPI application around an orchestrator.

    Args:
        orchestrator: Orchestrator serving synthesis requests; its store
            backs the /audio route

    Returns:
        Configured FastAPI app
    """

    @asynccontextmanager
    async def lifespan(application: FastAPI):
        logger.info(f"latinspeak {__version__} HTTP API starting")
        yield
        # Let pending item reference updates finish before exit
        await orchestrator.drain()
        logger.info("latinspeak HTTP API shut down")

    app = FastAPI(title="latinspeak", version=__version__, lifespan=lifespan)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["authorization", "x-client-info", "apikey", "content-type"],
    )

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        return _error(400, _describe_validation_error(exc))

    @app.exception_handler(ValidationError)
    async def validation_handler(request: Request, exc: ValidationError) -> JSONResponse:
        return _error(400, str(exc))

    @app.exception_handler(SynthesisProviderError)
    async def provider_handler(
        request: Request, exc: SynthesisProviderError
    ) -> JSONResponse:
        logger.error(f"Synthesis failed for {request.url.path}: {exc}")
        return _error(502, str(exc))

    @app.exception_handler(LatinspeakError)
    async def latinspeak_handler(request: Request, exc: LatinspeakError) -> JSONResponse:
        logger.error(f"Request to {request.url.path} failed: {exc}")
        return _error(500, str(exc))

    @app.exception_handler(Exception)
    async def unexpected_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception(f"Unexpected error handling {request.url.path}")
        return _error(500, "Internal server error")

    @app.post("/tts", response_model=TTSResponse)
    async def tts(body: TTSRequest) -> TTSResponse:
        result = await orchestrator.get_or_synthesize(
            body.text,
            body.dialect,
            kind=body.kind,
            item_id=body.item_id,
            voice_model=body.voice_model,
            speed=body.speed,
        )
        return TTSResponse(**result.to_dict())

    @app.get("/ipa")
    async def ipa(text: str = "", dialect: str | None = None) -> dict:
        normalized = normalize(text)
        if not normalized:
            raise ValidationError("Missing required fields: text")
        if dialect is None:
            return {"text": normalized, **phonetic_examples(normalized)}

        try:
            resolved = Dialect.parse(dialect)
        except ValueError as e:
            raise ValidationError(str(e)) from None
        return {
            "text": normalized,
            "dialect": resolved.value,
            "ipa": transliterate(normalized, resolved),
        }

    @app.get("/audio/{storage_path:path}")
    async def audio(storage_path: str):
        path = orchestrator.store.blob_path(storage_path)
        if path is None:
            return _error(404, f"Audio not found: {storage_path}")
        return FileResponse(path, media_type="audio/mpeg")

    @app.get("/status")
    async def status() -> dict:
        return {"status": "ok", "in_flight": orchestrator.in_flight}

    return app
