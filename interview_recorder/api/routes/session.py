"""
Session lifecycle endpoints.

``start`` creates the session folder and returns its name; ``finish`` only
records the completion event.  Both require the shared session token and
perform no state change when it is wrong.
"""

import hmac
import logging

from fastapi import APIRouter, Depends

from interview_recorder.api.deps import get_app_settings, get_audit_log, get_store
from interview_recorder.core.config import Settings
from interview_recorder.core.exceptions import AuthenticationError
from interview_recorder.core.models import (
    FinishSessionRequest,
    OkResponse,
    StartSessionRequest,
    StartSessionResponse,
)
from interview_recorder.services.storage import AuditLog, SessionStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/session", tags=["session"])


def _require_token(token: str, settings: Settings) -> None:
    """Raise :class:`AuthenticationError` unless ``token`` is the shared secret."""
    if not hmac.compare_digest(token.encode(), settings.session_token.encode()):
        logger.warning("Rejected session request with an invalid token")
        raise AuthenticationError()


@router.post("/start", response_model=StartSessionResponse)
async def start_session(
    body: StartSessionRequest,
    settings: Settings = Depends(get_app_settings),
    store: SessionStore = Depends(get_store),
    audit: AuditLog = Depends(get_audit_log),
):
    """Create a session folder for a new interview."""
    _require_token(body.token, settings)
    folder = store.create_session(body.user_name)
    audit.session_started(folder)
    return StartSessionResponse(folder=folder)


@router.post("/finish", response_model=OkResponse)
async def finish_session(
    body: FinishSessionRequest,
    settings: Settings = Depends(get_app_settings),
    audit: AuditLog = Depends(get_audit_log),
):
    """Record that an interview is complete. No cleanup or aggregation happens."""
    _require_token(body.token, settings)
    audit.session_finished(body.folder)
    logger.info("Session %s finished with %s questions", body.folder, body.questions_count)
    return OkResponse()
