"""
Per-question answer endpoints: upload, transcribe, save transcript.

None of these enforce the session token; the folder name supplied by the
client is trusted as long as it is a safe single path component.
"""

import logging
from collections.abc import AsyncIterator

from fastapi import APIRouter, Depends, File, Form, UploadFile

from interview_recorder.api.deps import get_app_settings, get_pipeline, get_store
from interview_recorder.core.config import Settings
from interview_recorder.core.models import (
    OkResponse,
    SaveTranscriptRequest,
    TranscribeRequest,
    TranscribeResponse,
    UploadResponse,
)
from interview_recorder.services.pipeline import TranscriptionPipeline
from interview_recorder.services.storage import SessionStore

logger = logging.getLogger(__name__)

router = APIRouter(tags=["answers"])

_CHUNK_SIZE = 1024 * 1024


async def _iter_upload(upload: UploadFile) -> AsyncIterator[bytes]:
    while chunk := await upload.read(_CHUNK_SIZE):
        yield chunk


@router.post("/upload-one", response_model=UploadResponse)
async def upload_answer(
    folder: str = Form(...),
    question_index: int = Form(..., alias="questionIndex", ge=1),
    file: UploadFile = File(...),
    token: str | None = Form(None),  # accepted for compatibility, not checked
    settings: Settings = Depends(get_app_settings),
    store: SessionStore = Depends(get_store),
):
    """Store one recorded answer as ``Q<index>.<ext>``, replacing any earlier upload.

    ``<ext>`` is ``mp4`` for MP4 uploads and ``webm`` otherwise.
    """
    try:
        saved_as = await store.save_artifact(
            folder,
            question_index,
            _iter_upload(file),
            max_bytes=settings.max_upload_bytes,
            content_type=file.content_type,
        )
    finally:
        await file.close()
    return UploadResponse(saved_as=saved_as)


@router.post("/transcribe", response_model=TranscribeResponse)
async def transcribe_answer(
    body: TranscribeRequest,
    pipeline: TranscriptionPipeline = Depends(get_pipeline),
):
    """Transcode and recognize a stored answer. Runs both tools on every call."""
    text = await pipeline.transcribe_question(body.folder, body.question_index)
    return TranscribeResponse(text=text)


@router.post("/save-transcript", response_model=OkResponse)
async def save_transcript(
    body: SaveTranscriptRequest,
    store: SessionStore = Depends(get_store),
):
    """Append a question block to the session transcript."""
    store.append_transcript(body.folder, body.question_index, body.text)
    logger.info("Saved transcript block for %s/Q%s", body.folder, body.question_index)
    return OkResponse()
