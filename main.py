"""
Podcast Cover Studio
FastAPI server that analyzes uploaded audio with a hosted AI model and
generates podcast cover candidates from the analysis
"""

import logging
import os
from contextlib import asynccontextmanager
from typing import Any, Optional

from dotenv import load_dotenv
from fastapi import Body, FastAPI, File, Request, UploadFile
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from ai_client import create_client
from analysis_requestor import AnalysisRequestor, offline_analysis
from cover_requestor import CoverRequestor
from errors import (
    AnalysisServiceError,
    CoverGenerationError,
    CoverStudioError,
    InvalidRequestError,
    MissingAnalysisError,
    MissingUploadError,
    UploadTooLargeError,
)
from mime_classifier import resolve_forward_mime
from models import AnalysisResult
from settings import Settings
from uploads import UploadReceiver

# Configure logging
logging.basicConfig(
    level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

VERSION = "1.0.0"
UPLOAD_FIELD = "audio"
UPLOAD_PATHS = ("/analyze",)
MULTIPART_OVERHEAD_BYTES = 64 * 1024


def create_app(settings: Optional[Settings] = None, client: Optional[Any] = None) -> FastAPI:
    """
    Build the application.

    Args:
        settings: Service configuration; read from the environment if omitted
        client: OpenAI-compatible client; built from settings if omitted
    """
    settings = settings or Settings.from_env()
    if client is None:
        client = create_client(settings)

    if settings.offline_mode:
        if not settings.api_key:
            logger.warning(
                "No API key configured (OPENROUTER_API_KEY). Enabling offline analysis mode."
            )
        logger.warning(
            "[offline] Offline mode active - endpoints return canned data and no AI service is contacted"
        )

    receiver = UploadReceiver(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        receiver.ensure_directory()
        logger.info(f"Upload directory ready: {receiver.upload_dir}")
        yield

    app = FastAPI(
        title="Podcast Cover Studio",
        description="Audio content analysis and AI-generated podcast covers",
        version=VERSION,
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.receiver = receiver
    app.state.analysis_requestor = AnalysisRequestor(settings, client)
    app.state.cover_requestor = CoverRequestor(settings, client)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=False,
        allow_methods=["GET", "POST"],
        allow_headers=["Content-Type"],
    )

    # Coarse size guard, runs before multipart parsing. Content-Length includes
    # multipart framing; the receiver enforces the exact file ceiling.
    @app.middleware("http")
    async def limit_upload_size(request: Request, call_next):
        if request.method == "POST" and request.url.path in UPLOAD_PATHS:
            content_length = request.headers.get("content-length")
            if content_length and content_length.isdigit():
                body_limit = settings.max_upload_bytes + MULTIPART_OVERHEAD_BYTES
                if int(content_length) > body_limit:
                    logger.warning(
                        f"Upload too large: {content_length} bytes (max {settings.max_upload_bytes})"
                    )
                    error = UploadTooLargeError(settings.max_upload_bytes)
                    return JSONResponse(
                        status_code=error.http_status, content=error.to_payload()
                    )
        return await call_next(request)

    @app.exception_handler(CoverStudioError)
    async def cover_studio_error_handler(request: Request, exc: CoverStudioError):
        return JSONResponse(status_code=exc.http_status, content=exc.to_payload())

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        error = InvalidRequestError(str(exc.errors()))
        return JSONResponse(status_code=error.http_status, content=error.to_payload())

    @app.get("/health")
    async def health():
        """Liveness check with configuration status."""
        return {
            "status": "healthy",
            "version": VERSION,
            "config": {
                "offlineMode": settings.offline_mode,
                "apiKeyConfigured": bool(settings.api_key),
                "analysisModel": settings.analysis_model,
                "imageModel": settings.image_model,
                "maxUploadMb": settings.max_upload_mb,
            },
        }

    @app.post("/analyze")
    async def analyze(request: Request, audio: Optional[UploadFile] = File(None)):
        """
        Analyze an uploaded audio file.

        Multipart field ``audio``. Returns ``{success, analysis}``.
        """
        state = request.app.state

        if audio is None or not audio.filename:
            if settings.offline_mode:
                analysis = offline_analysis("No file uploaded but offline mode active")
                return {"success": True, "analysis": analysis.model_dump()}
            raise MissingUploadError(UPLOAD_FIELD)

        try:
            async with state.receiver.stored(audio) as stored:
                if settings.offline_mode:
                    analysis = await state.analysis_requestor.analyze(
                        stored, stored.declared_mime_type
                    )
                else:
                    forward_mime = resolve_forward_mime(
                        stored.declared_mime_type, stored.original_name
                    )
                    analysis = await state.analysis_requestor.analyze(stored, forward_mime)
        except CoverStudioError:
            raise
        except Exception as e:
            logger.error(f"Analyze error: {e}", exc_info=True)
            raise AnalysisServiceError(str(e)) from e

        return {"success": True, "analysis": analysis.model_dump()}

    @app.post("/generate-covers")
    async def generate_covers(request: Request, analysis: Optional[AnalysisResult] = Body(None)):
        """
        Generate cover candidates for an analysis.

        JSON body ``{topic, mood, genre, audience, keywords}``.
        Returns ``{success, covers: [{title, image}]}``.
        """
        if analysis is None:
            raise MissingAnalysisError()

        try:
            covers = await request.app.state.cover_requestor.generate(analysis)
        except CoverStudioError:
            raise
        except Exception as e:
            logger.error(f"Generate covers error: {e}", exc_info=True)
            raise CoverGenerationError(str(e)) from e

        return {"success": True, "covers": [cover.model_dump() for cover in covers]}

    # Browser client
    if settings.static_dir and os.path.isdir(settings.static_dir):
        app.mount("/", StaticFiles(directory=settings.static_dir, html=True), name="static")

    return app


load_dotenv()
app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host=app.state.settings.host, port=app.state.settings.port)
