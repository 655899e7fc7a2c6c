"""Tests for the per-question interview state machine.

The controller is driven with a fake recorder and a mocked APIClient, and a
recording sleep function so the retry backoff is observable without waiting.
"""

from unittest.mock import MagicMock

import pytest

from interview_recorder.ui.api_client import APIClient, APIError, UploadFailedError
from interview_recorder.ui.capture import Artifact, MediaRecorder, RecorderError
from interview_recorder.ui.interview import (
    InterviewController,
    InterviewPhase,
    InterviewState,
    InterviewStateError,
)
from interview_recorder.ui.questions import DEFAULT_QUESTIONS


class FakeRecorder(MediaRecorder):
    """Recorder whose every stop yields a distinct artifact."""

    def __init__(self, fail_acquire: bool = False, empty_stops: int = 0) -> None:
        self.fail_acquire = fail_acquire
        self.empty_stops = empty_stops
        self.calls: list[str] = []
        self._recording = False
        self._takes = 0

    def acquire(self) -> None:
        self.calls.append("acquire")
        if self.fail_acquire:
            raise RecorderError("Permission denied")

    def start(self) -> None:
        self.calls.append("start")
        self._recording = True

    def stop(self) -> Artifact:
        self.calls.append("stop")
        if self.empty_stops:
            self.empty_stops -= 1
            raise RecorderError("Nothing was recorded for this answer")
        self._recording = False
        self._takes += 1
        return Artifact(data=f"take-{self._takes}".encode())

    def release(self) -> None:
        self.calls.append("release")
        self._recording = False

    @property
    def is_recording(self) -> bool:
        return self._recording


@pytest.fixture
def api():
    mock = MagicMock(spec=APIClient)
    mock.start_session.return_value = {"ok": True, "folder": "2026-10-18T09_00_00_000000Z_ada"}
    mock.upload_answer.return_value = {"ok": True, "savedAs": "Q1.webm"}
    mock.transcribe.return_value = {"ok": True, "text": "an answer"}
    mock.save_transcript.return_value = {"ok": True}
    mock.finish_session.return_value = {"ok": True}
    mock.artifact_url.side_effect = (
        lambda folder, idx, extension="webm": f"http://svc/uploads/{folder}/Q{idx}.{extension}"
    )
    return mock


@pytest.fixture
def recorder():
    return FakeRecorder()


@pytest.fixture
def sleeps():
    return []


@pytest.fixture
def ctrl(api, recorder, sleeps):
    return InterviewController(
        api=api,
        recorder=recorder,
        state=InterviewState(token="12345"),
        sleep=sleeps.append,
    )


def _fail_upload(api, times: int) -> None:
    """Make the next ``times`` uploads fail, then succeed."""
    effects = [UploadFailedError("Upload failed (HTTP 500)")] * times
    effects.append({"ok": True, "savedAs": "Q1.webm"})
    api.upload_answer.side_effect = effects


# ---------------------------------------------------------------------------
# Start
# ---------------------------------------------------------------------------


def test_start_begins_recording_question_one(ctrl, api, recorder):
    assert ctrl.start("Ada") is True

    api.start_session.assert_called_once_with("12345", "Ada")
    assert ctrl.state.folder == "2026-10-18T09_00_00_000000Z_ada"
    assert ctrl.state.phase == InterviewPhase.recording
    assert ctrl.state.current_question == 1
    assert ctrl.state.current_question_text == DEFAULT_QUESTIONS[0]
    assert ctrl.state.advance_enabled is True
    assert recorder.calls == ["acquire", "start"]


def test_start_failure_is_visible_and_not_retried(ctrl, api, recorder):
    api.start_session.side_effect = APIError("Invalid session token", category="http")

    assert ctrl.start("Ada") is False

    assert ctrl.state.phase == InterviewPhase.failed
    assert ctrl.state.error == "Cannot begin session: Invalid session token"
    assert api.start_session.call_count == 1
    assert recorder.calls == []


def test_device_failure_fails_session_start(api, sleeps):
    recorder = FakeRecorder(fail_acquire=True)
    ctrl = InterviewController(api, recorder, InterviewState(token="12345"), sleep=sleeps.append)

    assert ctrl.start() is False
    assert ctrl.state.phase == InterviewPhase.failed
    assert "Permission denied" in ctrl.state.error


# ---------------------------------------------------------------------------
# Advance
# ---------------------------------------------------------------------------


def test_advance_uploads_transcribes_and_saves(ctrl, api):
    ctrl.start("Ada")
    phases: list[InterviewPhase] = []
    ctrl.on_change = lambda s: phases.append(s.phase)

    assert ctrl.advance() == InterviewPhase.recording

    folder = ctrl.state.folder
    args, kwargs = api.upload_answer.call_args
    assert args == (folder, 1, Artifact(data=b"take-1"))
    assert kwargs["token"] == "12345"
    api.transcribe.assert_called_once_with(folder, 1)
    api.save_transcript.assert_called_once_with(folder, 1, "an answer")
    assert ctrl.state.current_question == 2
    assert ctrl.state.last_transcript == "an answer"
    assert ctrl.state.advance_enabled is True

    # the pipeline runs strictly in order
    order = [p for i, p in enumerate(phases) if i == 0 or phases[i - 1] != p]
    assert order == [
        InterviewPhase.stopping,
        InterviewPhase.uploading,
        InterviewPhase.transcribing,
        InterviewPhase.saving,
        InterviewPhase.recording,
    ]


def test_advance_is_disabled_while_pipeline_runs(ctrl, api):
    ctrl.start("Ada")
    seen: list[bool] = []

    def _transcribe(folder, idx):
        seen.append(ctrl.state.advance_enabled)
        with pytest.raises(InterviewStateError):
            ctrl.advance()
        return {"text": "x"}

    api.transcribe.side_effect = _transcribe
    ctrl.advance()
    assert seen == [False]


def test_empty_take_keeps_question_open(api, sleeps):
    recorder = FakeRecorder(empty_stops=1)
    ctrl = InterviewController(api, recorder, InterviewState(token="12345"), sleep=sleeps.append)
    ctrl.start("Ada")

    assert ctrl.advance() == InterviewPhase.recording
    assert ctrl.state.error == "Nothing was recorded for this answer"
    assert ctrl.state.advance_enabled is True
    assert ctrl.state.current_question == 1
    api.upload_answer.assert_not_called()

    assert ctrl.advance() == InterviewPhase.recording
    assert ctrl.state.current_question == 2
    assert ctrl.state.error is None


def test_upload_progress_reaches_state(ctrl, api):
    ctrl.start("Ada")
    reported: list[int] = []

    def _upload(folder, idx, artifact, token="", on_progress=None):
        for pct in (10, 55, 100):
            on_progress(pct)
            reported.append(ctrl.state.upload_progress)
        return {"ok": True, "savedAs": f"Q{idx}.webm"}

    api.upload_answer.side_effect = _upload
    ctrl.advance()
    assert reported == [10, 55, 100]


def test_full_interview_reaches_playback(ctrl, api, recorder):
    ctrl.start("Ada")
    for _ in DEFAULT_QUESTIONS:
        ctrl.advance()

    assert ctrl.state.phase == InterviewPhase.finished
    assert ctrl.state.advance_enabled is False
    assert ctrl.state.finish_enabled is True
    assert recorder.calls[-1] == "release"
    assert api.upload_answer.call_count == 5
    assert [c.args[1] for c in api.save_transcript.call_args_list] == [1, 2, 3, 4, 5]

    with pytest.raises(InterviewStateError):
        ctrl.advance()

    assert ctrl.finish() is True
    api.finish_session.assert_called_once_with("12345", ctrl.state.folder, 5)
    assert ctrl.state.phase == InterviewPhase.playback

    items = ctrl.playback_items()
    assert [i.question_index for i in items] == [1, 2, 3, 4, 5]
    assert items[0].question == DEFAULT_QUESTIONS[0]
    assert items[4].url == f"http://svc/uploads/{ctrl.state.folder}/Q5.webm"


def test_transcribe_failure_stops_pipeline(ctrl, api):
    ctrl.start("Ada")
    api.transcribe.side_effect = APIError("vosk failed: model missing", category="http")

    assert ctrl.advance() == InterviewPhase.failed
    assert "Question 1 could not be transcribed" in ctrl.state.error
    api.save_transcript.assert_not_called()
    assert ctrl.state.current_question == 1
    assert ctrl.state.advance_enabled is False
    assert ctrl.state.transcription_pending is True


def test_retry_transcription_resumes_same_question(ctrl, api, recorder):
    ctrl.start("Ada")
    folder = ctrl.state.folder
    api.transcribe.side_effect = [APIError("vosk failed", category="http"), {"text": "second try"}]
    ctrl.advance()
    recorder.calls.clear()

    assert ctrl.retry_transcription() == InterviewPhase.recording

    assert ctrl.state.folder == folder
    assert ctrl.state.current_question == 2
    assert ctrl.state.error is None
    assert ctrl.state.transcription_pending is False
    assert api.upload_answer.call_count == 1
    assert [c.args for c in api.transcribe.call_args_list] == [(folder, 1), (folder, 1)]
    api.save_transcript.assert_called_once_with(folder, 1, "second try")
    assert recorder.calls == ["start"]


def test_retry_transcription_after_save_failure(ctrl, api):
    ctrl.start("Ada")
    api.save_transcript.side_effect = [APIError("Disk full", category="http"), {"ok": True}]

    assert ctrl.advance() == InterviewPhase.failed
    assert ctrl.retry_transcription() == InterviewPhase.recording
    assert api.save_transcript.call_count == 2


def test_retry_transcription_failing_again_stays_retryable(ctrl, api):
    ctrl.start("Ada")
    api.transcribe.side_effect = APIError("vosk failed", category="http")
    ctrl.advance()

    assert ctrl.retry_transcription() == InterviewPhase.failed
    assert ctrl.state.transcription_pending is True
    assert ctrl.state.current_question == 1


def test_retry_transcription_not_offered_after_start_failure(ctrl, api):
    api.start_session.side_effect = APIError("Invalid session token", category="http")
    ctrl.start("Ada")

    assert ctrl.state.transcription_pending is False
    with pytest.raises(InterviewStateError):
        ctrl.retry_transcription()


def test_retry_transcription_only_from_failed(ctrl):
    ctrl.start("Ada")
    with pytest.raises(InterviewStateError):
        ctrl.retry_transcription()


# ---------------------------------------------------------------------------
# Upload failure and retry
# ---------------------------------------------------------------------------


def test_upload_failure_offers_retry(ctrl, api):
    ctrl.start("Ada")
    _fail_upload(api, 1)

    assert ctrl.advance() == InterviewPhase.retry_upload

    assert ctrl.state.status_message == "Upload failed!"
    assert ctrl.state.retry_available is True
    assert ctrl.state.advance_enabled is False
    assert ctrl.state.upload_progress == 0
    api.transcribe.assert_not_called()


def test_retry_gives_up_after_three_attempts(ctrl, api, sleeps):
    ctrl.start("Ada")
    _fail_upload(api, 10)
    ctrl.advance()
    api.upload_answer.reset_mock()

    assert ctrl.retry_upload() == InterviewPhase.retry_upload

    assert api.upload_answer.call_count == 3
    assert sleeps == [2.0, 4.0]
    assert ctrl.state.status_message == "Upload failed after 3 attempts"
    assert ctrl.state.upload_attempts == 3
    assert ctrl.state.retry_available is True
    api.transcribe.assert_not_called()


def test_retry_resends_the_same_artifact(ctrl, api, sleeps):
    ctrl.start("Ada")
    _fail_upload(api, 2)
    ctrl.advance()

    assert ctrl.retry_upload() == InterviewPhase.recording

    artifacts = {c.args[2] for c in api.upload_answer.call_args_list}
    assert artifacts == {Artifact(data=b"take-1")}
    assert sleeps == [2.0]
    api.transcribe.assert_called_once()
    assert ctrl.state.current_question == 2


def test_retry_announces_wait(ctrl, api):
    ctrl.start("Ada")
    _fail_upload(api, 2)
    ctrl.advance()
    messages: list[str] = []
    ctrl.on_change = lambda s: messages.append(s.status_message)

    ctrl.retry_upload()

    assert "Retry attempt 1" in messages
    assert "Retry in 2s..." in messages
    assert "Retry attempt 2" in messages


def test_retry_only_in_retry_phase(ctrl):
    ctrl.start("Ada")
    with pytest.raises(InterviewStateError):
        ctrl.retry_upload()


# ---------------------------------------------------------------------------
# Finish
# ---------------------------------------------------------------------------


def test_finish_not_allowed_before_last_question(ctrl):
    ctrl.start("Ada")
    with pytest.raises(InterviewStateError):
        ctrl.finish()


def test_finish_failure_keeps_finish_available(ctrl, api):
    ctrl.start("Ada")
    for _ in DEFAULT_QUESTIONS:
        ctrl.advance()
    api.finish_session.side_effect = APIError("Request timed out.", category="timeout")

    assert ctrl.finish() is False
    assert ctrl.state.phase == InterviewPhase.finished
    assert ctrl.state.finish_enabled is True
    assert "Request timed out." in ctrl.state.error


def test_single_question_interview(api, recorder, sleeps):
    state = InterviewState(token="12345", questions=("Only question?",))
    ctrl = InterviewController(api, recorder, state, sleep=sleeps.append)
    ctrl.start()
    assert ctrl.advance() == InterviewPhase.finished


def test_playback_points_at_stored_container(ctrl, api):
    ctrl.start("Ada")
    api.upload_answer.side_effect = lambda folder, idx, artifact, **kw: {
        "ok": True,
        "savedAs": f"Q{idx}.mp4",
    }
    for _ in DEFAULT_QUESTIONS:
        ctrl.advance()
    ctrl.finish()

    items = ctrl.playback_items()
    assert ctrl.state.saved_artifacts[2] == "Q2.mp4"
    assert items[1].url == f"http://svc/uploads/{ctrl.state.folder}/Q2.mp4"


def test_playback_requires_session(ctrl):
    with pytest.raises(InterviewStateError):
        ctrl.playback_items()
