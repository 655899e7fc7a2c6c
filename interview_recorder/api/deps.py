"""FastAPI dependencies resolving the per-application services.

``create_app()`` builds the settings, session store, audit log and
transcription pipeline once and parks them on ``app.state``; routes pull
them from there so tests can build an app around a temporary directory.
"""

from fastapi import Request

from interview_recorder.core.config import Settings
from interview_recorder.services.pipeline import TranscriptionPipeline
from interview_recorder.services.storage import AuditLog, SessionStore


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_store(request: Request) -> SessionStore:
    return request.app.state.store


def get_audit_log(request: Request) -> AuditLog:
    return request.app.state.audit_log


def get_pipeline(request: Request) -> TranscriptionPipeline:
    return request.app.state.pipeline
