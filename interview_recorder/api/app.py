"""
FastAPI application factory.

``create_app()`` assembles the application with CORS, the upload size
limit, error handlers, routers, static playback of stored answers and the
health endpoint.  Run it through uvicorn's factory mode::

    uvicorn interview_recorder.api.app:create_app --factory --port 3000
"""

from contextlib import asynccontextmanager
from datetime import UTC, datetime

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from interview_recorder import __version__
from interview_recorder.api.middleware.error_handler import register_error_handlers
from interview_recorder.api.middleware.upload_limit import UploadSizeLimitMiddleware
from interview_recorder.api.routes import answers, session
from interview_recorder.core.config import Settings, get_settings
from interview_recorder.core.logging_config import configure_logging
from interview_recorder.core.models import HealthResponse
from interview_recorder.services.audio import FFmpegTranscoder
from interview_recorder.services.pipeline import TranscriptionPipeline
from interview_recorder.services.storage import AuditLog, SessionStore
from interview_recorder.services.transcription import create_stt


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build and return a fully configured FastAPI application.

    Args:
        settings: Configuration to use; defaults to the cached ``get_settings()``.
    """
    settings = settings or get_settings()
    settings.ensure_dirs()

    @asynccontextmanager
    async def lifespan(_app: FastAPI):
        configure_logging(settings.log_level)
        yield

    app = FastAPI(
        title="Interview Recorder",
        description="Records interview answers, stores them per session "
        "and transcribes each answer with an external recognizer.",
        version=__version__,
        lifespan=lifespan,
    )

    # -- Services (one set per application; all session state lives on disk) --
    store = SessionStore(
        settings.uploads_dir,
        artifact_extension=settings.artifact_extension,
        default_user_name=settings.default_user_name,
    )
    app.state.settings = settings
    app.state.store = store
    app.state.audit_log = AuditLog(settings.audit_log_path)
    app.state.pipeline = TranscriptionPipeline(
        store,
        FFmpegTranscoder(settings=settings),
        create_stt(settings.stt_provider, settings=settings),
        max_concurrent=settings.max_concurrent_transcriptions,
    )

    # -- Upload size limit (before the multipart body is parsed) --
    app.add_middleware(
        UploadSizeLimitMiddleware,
        max_body_bytes=settings.max_upload_bytes + settings.upload_overhead_bytes,
        limit_bytes=settings.max_upload_bytes,
    )

    # -- CORS (added last so it wraps the 413 responses too) --
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # -- Error handlers --
    register_error_handlers(app)

    # -- Health check --
    @app.get("/health", response_model=HealthResponse, tags=["system"])
    async def health() -> HealthResponse:
        return HealthResponse(version=__version__, timestamp=datetime.now(UTC))

    # -- REST routes --
    app.include_router(session.router, prefix="/api")
    app.include_router(answers.router, prefix="/api")

    # -- Stored answers for playback: /uploads/<folder>/Q<n>.webm --
    app.mount(
        "/uploads",
        StaticFiles(directory=settings.uploads_dir, check_dir=False),
        name="uploads",
    )

    return app
