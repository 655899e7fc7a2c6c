"""
Per-question interview state machine.

States: idle -> session_starting -> recording(q) -> stopping(q) -> uploading(q)
-> transcribing(q) -> saving(q) -> recording(q+1) | finished -> playback,
with retry_upload(q) reachable from a failed upload and failed from a
session start or pipeline error.  A transcription or save failure keeps the
folder and question cursor so retry_transcription can resume from failed.

All mutable state lives in one :class:`InterviewState`; the
:class:`InterviewController` has one method per user action and runs each
pipeline as a strictly sequential chain of blocking calls.  It never talks
to a real device or network directly, so tests drive it with a fake
recorder and a mocked :class:`APIClient`.
"""

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import StrEnum

from tenacity import (
    RetryCallState,
    Retrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from interview_recorder.ui.api_client import APIClient, APIError, UploadFailedError
from interview_recorder.ui.capture import Artifact, MediaRecorder, RecorderError
from interview_recorder.ui.questions import DEFAULT_QUESTIONS

logger = logging.getLogger(__name__)

MAX_UPLOAD_ATTEMPTS = 3
RETRY_BASE_DELAY_SECONDS = 2.0


class InterviewPhase(StrEnum):
    """Where the interview currently is."""

    idle = "idle"
    session_starting = "session_starting"
    recording = "recording"
    stopping = "stopping"
    uploading = "uploading"
    retry_upload = "retry_upload"
    transcribing = "transcribing"
    saving = "saving"
    finished = "finished"
    playback = "playback"
    failed = "failed"


class InterviewStateError(Exception):
    """Raised when an action is not allowed in the current phase."""


@dataclass
class InterviewState:
    """Everything the client knows about one interview in progress."""

    token: str
    questions: tuple[str, ...] = DEFAULT_QUESTIONS
    user_name: str = "guest"
    folder: str | None = None
    current_question: int = 1
    phase: InterviewPhase = InterviewPhase.idle
    artifact: Artifact | None = None
    upload_progress: int = 0
    upload_attempts: int = 0
    status_message: str = ""
    error: str | None = None
    advance_enabled: bool = False
    finish_enabled: bool = False
    retry_available: bool = False
    transcription_pending: bool = False
    last_transcript: str = ""
    saved_artifacts: dict[int, str] = field(default_factory=dict)

    @property
    def question_count(self) -> int:
        return len(self.questions)

    @property
    def current_question_text(self) -> str:
        if 1 <= self.current_question <= self.question_count:
            return self.questions[self.current_question - 1]
        return ""


@dataclass(frozen=True)
class PlaybackItem:
    """One answer in the playback view."""

    question_index: int
    question: str
    url: str


class InterviewController:
    """Drives one interview through its states.

    Args:
        api: Client for the session/transcription service.
        recorder: Capture device adapter.
        state: The interview state this controller mutates.
        sleep: Blocking sleep used between upload retries.
        on_change: Called with the state after every visible change
            (phase, status message, upload progress).
        max_upload_attempts: Attempts per explicit retry action.
        retry_base_delay: Wait after the first failed retry attempt; doubles each time.
    """

    def __init__(
        self,
        api: APIClient,
        recorder: MediaRecorder,
        state: InterviewState,
        sleep: Callable[[float], None] = time.sleep,
        on_change: Callable[[InterviewState], None] | None = None,
        max_upload_attempts: int = MAX_UPLOAD_ATTEMPTS,
        retry_base_delay: float = RETRY_BASE_DELAY_SECONDS,
    ) -> None:
        self.api = api
        self.recorder = recorder
        self.state = state
        self._sleep = sleep
        self.on_change = on_change
        self._max_upload_attempts = max_upload_attempts
        self._retry_base_delay = retry_base_delay

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _notify(self) -> None:
        if self.on_change is not None:
            self.on_change(self.state)

    def _set(self, phase: InterviewPhase | None = None, message: str | None = None) -> None:
        if phase is not None:
            self.state.phase = phase
        if message is not None:
            self.state.status_message = message
        self._notify()

    def _require(self, *phases: InterviewPhase) -> None:
        if self.state.phase not in phases:
            allowed = ", ".join(p.value for p in phases)
            raise InterviewStateError(
                f"Action not allowed in phase {self.state.phase.value!r} (expected {allowed})"
            )

    def _fail(self, message: str) -> None:
        logger.warning("Interview failed: %s", message)
        self.state.error = message
        self.state.advance_enabled = False
        self._set(InterviewPhase.failed, message)

    def _on_upload_progress(self, percent: int) -> None:
        self.state.upload_progress = percent
        self._set(message=f"Uploading {percent}%")

    # ------------------------------------------------------------------
    # Actions
    # ------------------------------------------------------------------

    def start(self, user_name: str | None = None) -> bool:
        """Open a session, acquire the device and start recording question 1.

        Returns:
            True when recording has started; False when the start failed and
            the state moved to ``failed``.
        """
        self._require(InterviewPhase.idle)
        if user_name:
            self.state.user_name = user_name
        self.state.error = None
        self._set(InterviewPhase.session_starting, "Starting session...")

        try:
            out = self.api.start_session(self.state.token, self.state.user_name)
            self.state.folder = out["folder"]
            self.recorder.acquire()
        except (APIError, RecorderError) as exc:
            self._fail(f"Cannot begin session: {exc}")
            return False

        logger.info("Session started in folder %s", self.state.folder)
        self._begin_question()
        return True

    def advance(self) -> InterviewPhase:
        """Stop the current answer, upload it and run the post-upload pipeline.

        If the recorder has nothing to hand over the phase stays
        ``recording`` with the reason in ``error``.

        Returns:
            The phase reached: ``recording`` (next question), ``finished``,
            ``retry_upload`` or ``failed``.
        """
        self._require(InterviewPhase.recording)
        q = self.state.current_question
        self.state.advance_enabled = False
        self._set(InterviewPhase.stopping, f"Processing question {q}...")

        try:
            self.state.artifact = self.recorder.stop()
        except RecorderError as exc:
            logger.warning("Could not finalize answer %s: %s", q, exc)
            self.state.error = str(exc)
            self.state.advance_enabled = True
            self._set(InterviewPhase.recording, str(exc))
            return self.state.phase

        try:
            self._send_artifact()
        except UploadFailedError as exc:
            self.state.error = exc.message
            self.state.retry_available = True
            self._set(InterviewPhase.retry_upload, "Upload failed!")
            return self.state.phase

        self._after_upload()
        return self.state.phase

    def retry_upload(self) -> InterviewPhase:
        """Re-send the finalized answer with exponential backoff.

        Up to ``max_upload_attempts`` attempts, waiting 2 s then 4 s between
        them.  If every attempt fails the retry action is offered again.
        """
        self._require(InterviewPhase.retry_upload)
        self.state.retry_available = False
        self.state.upload_attempts = 0

        retrying = Retrying(
            stop=stop_after_attempt(self._max_upload_attempts),
            wait=wait_exponential(multiplier=self._retry_base_delay),
            retry=retry_if_exception_type(UploadFailedError),
            sleep=self._sleep,
            before_sleep=self._announce_retry,
            reraise=True,
        )
        try:
            for attempt in retrying:
                with attempt:
                    n = attempt.retry_state.attempt_number
                    self.state.upload_attempts = n
                    self._set(message=f"Retry attempt {n}")
                    self._send_artifact()
        except UploadFailedError as exc:
            self.state.error = exc.message
            self.state.retry_available = True
            self._set(
                InterviewPhase.retry_upload,
                f"Upload failed after {self._max_upload_attempts} attempts",
            )
            return self.state.phase

        self._after_upload()
        return self.state.phase

    def retry_transcription(self) -> InterviewPhase:
        """Re-run transcription and saving for an answer that already uploaded.

        Only reachable from ``failed`` after a transcription or save error.
        The session folder and question cursor are kept and nothing is
        uploaded again.
        """
        self._require(InterviewPhase.failed)
        if not self.state.transcription_pending:
            raise InterviewStateError("No uploaded answer is waiting for transcription")
        self.state.transcription_pending = False
        self.state.error = None
        self._after_upload()
        return self.state.phase

    def finish(self) -> bool:
        """Tell the service the interview is over and switch to playback."""
        self._require(InterviewPhase.finished)
        self.state.finish_enabled = False
        self._set(message="Processing...")
        try:
            self.api.finish_session(self.state.token, self.state.folder, self.state.question_count)
        except APIError as exc:
            self.state.error = f"Could not finish session: {exc.message}"
            self.state.finish_enabled = True
            self._set(message=self.state.error)
            return False

        self._set(InterviewPhase.playback, "Interview complete")
        return True

    def playback_items(self) -> list[PlaybackItem]:
        """One entry per question pointing at its stored answer. No requests are made."""
        if self.state.folder is None:
            raise InterviewStateError("No session folder to play back")
        return [
            PlaybackItem(
                question_index=i,
                question=text,
                url=self.api.artifact_url(self.state.folder, i, self._stored_extension(i)),
            )
            for i, text in enumerate(self.state.questions, start=1)
        ]

    # ------------------------------------------------------------------
    # Pipeline steps
    # ------------------------------------------------------------------

    def _stored_extension(self, question_index: int) -> str:
        name = self.state.saved_artifacts.get(question_index, "")
        _, dot, extension = name.rpartition(".")
        return extension if dot else "webm"

    def _begin_question(self) -> None:
        self.recorder.start()
        self.state.artifact = None
        self.state.upload_progress = 0
        self.state.upload_attempts = 0
        self.state.retry_available = False
        self.state.error = None
        self.state.advance_enabled = True
        self._set(InterviewPhase.recording, "Recording...")

    def _send_artifact(self) -> None:
        if self.state.artifact is None:
            raise UploadFailedError("No recorded answer to upload")
        self.state.upload_progress = 0
        self._set(InterviewPhase.uploading)
        q = self.state.current_question
        try:
            out = self.api.upload_answer(
                self.state.folder,
                q,
                self.state.artifact,
                token=self.state.token,
                on_progress=self._on_upload_progress,
            )
        except UploadFailedError:
            self.state.upload_progress = 0
            raise
        saved_as = out.get("savedAs") or f"Q{q}.{self.state.artifact.extension}"
        self.state.saved_artifacts[q] = saved_as
        self.state.upload_progress = 100
        self._set(message="Upload success!")

    def _announce_retry(self, retry_state: RetryCallState) -> None:
        wait = retry_state.next_action.sleep if retry_state.next_action else 0
        logger.info("Upload attempt %s failed; retrying in %ss", retry_state.attempt_number, wait)
        self._set(InterviewPhase.retry_upload, f"Retry in {wait:g}s...")

    def _after_upload(self) -> None:
        q = self.state.current_question
        folder = self.state.folder
        self._set(InterviewPhase.transcribing, "Transcribing on server...")
        try:
            text = self.api.transcribe(folder, q).get("text", "")
            self._set(InterviewPhase.saving, "Saving transcript...")
            self.api.save_transcript(folder, q, text)
        except APIError as exc:
            self.state.transcription_pending = True
            self._fail(f"Question {q} could not be transcribed: {exc.message}")
            return

        self.state.last_transcript = text
        self.state.current_question += 1

        if self.state.current_question > self.state.question_count:
            self.recorder.release()
            self.state.artifact = None
            self.state.advance_enabled = False
            self.state.finish_enabled = True
            self._set(InterviewPhase.finished, "Interview finished!")
            return

        self._begin_question()
