"""Per-question transcription pipeline.

artifact (``Q<n>.webm``) → ffmpeg → waveform (``Q<n>.wav``) → recognizer → text

Both steps run as external processes.  A shared ``asyncio.Semaphore`` caps
how many questions are transcribed at once across all sessions; further
requests wait their turn instead of piling up processes.  Nothing is cached:
every call re-runs both steps and overwrites the waveform.

Usage::

    pipeline = TranscriptionPipeline(store, FFmpegTranscoder(), create_stt("vosk"))
    text = await pipeline.transcribe_question(folder, 1)
"""

import asyncio
import logging
import time

from interview_recorder.services.audio.transcoder import FFmpegTranscoder
from interview_recorder.services.storage.session_store import SessionStore
from interview_recorder.services.transcription.base import BaseSTT

logger = logging.getLogger(__name__)


class TranscriptionPipeline:
    """Turns one stored answer into recognized text.

    Args:
        store: Session storage used to locate artifacts and waveform paths.
        transcoder: Produces the mono 16 kHz waveform.
        stt: Recognizer run against the waveform.
        max_concurrent: Upper bound on simultaneous transcriptions.
    """

    def __init__(
        self,
        store: SessionStore,
        transcoder: FFmpegTranscoder,
        stt: BaseSTT,
        max_concurrent: int = 2,
    ) -> None:
        self._store = store
        self._transcoder = transcoder
        self._stt = stt
        self._semaphore = asyncio.Semaphore(max(1, max_concurrent))

    async def transcribe_question(self, folder: str, question_index: int) -> str:
        """Transcode and recognize the answer stored for ``question_index``.

        Raises:
            ArtifactNotFoundError: If no answer was uploaded for the question.
            ExternalToolError: If either external step fails.
        """
        artifact = self._store.require_artifact(folder, question_index)
        waveform = self._store.waveform_path(folder, question_index)

        async with self._semaphore:
            started = time.monotonic()
            await self._transcoder.extract_waveform(artifact, waveform)
            result = await self._stt.transcribe(str(waveform))

        text = result.get("text", "")
        logger.info(
            "Transcribed %s/Q%s in %.2fs",
            folder,
            question_index,
            time.monotonic() - started,
        )
        return text
