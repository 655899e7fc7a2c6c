"""
Storage module - Session folders, answer artifacts, transcripts and audit trail.
"""

from interview_recorder.services.storage.audit import AuditLog
from interview_recorder.services.storage.session_store import (
    TRANSCRIPT_FILE_NAME,
    SessionStore,
    transcript_block,
)

__all__ = [
    "AuditLog",
    "SessionStore",
    "TRANSCRIPT_FILE_NAME",
    "transcript_block",
]
