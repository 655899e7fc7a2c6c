"""
Interview component: renders the question-by-question state machine.

States shown: idle -> recording / retry_upload -> finished -> playback,
plus failed.  Answers are captured from the browser camera and microphone
with streamlit-webrtc: one stream per question, started and stopped by the
candidate.  The transient pipeline phases (stopping, uploading,
transcribing, saving) run inside one button click and surface through the
status line and progress bar updated by the controller's ``on_change`` hook.
"""

import streamlit as st
from streamlit_webrtc import WebRtcMode, webrtc_streamer

from interview_recorder.core.config import get_settings
from interview_recorder.ui.api_client import get_api_client
from interview_recorder.ui.components.playback import render_playback
from interview_recorder.ui.interview import (
    InterviewController,
    InterviewPhase,
    InterviewState,
)
from interview_recorder.ui.utils import open_folder_in_explorer
from interview_recorder.ui.webrtc_capture import WebRTCRecorder

_MEDIA_CONSTRAINTS = {"video": True, "audio": True}


def _get_controller() -> InterviewController:
    """Return the controller for this browser session, creating it on first use."""
    ctrl = st.session_state.get("interview_controller")
    if ctrl is None:
        ctrl = InterviewController(
            api=get_api_client(st.session_state.api_base_url),
            recorder=WebRTCRecorder(),
            state=InterviewState(token=st.session_state.session_token),
        )
        st.session_state.interview_controller = ctrl
    return ctrl


def _reset_controller() -> None:
    ctrl = st.session_state.pop("interview_controller", None)
    if ctrl is not None:
        ctrl.recorder.release()


def render_interview() -> None:
    """Render the interview UI based on the controller's current phase."""
    ctrl = _get_controller()
    phase = ctrl.state.phase

    if phase == InterviewPhase.idle:
        _render_idle(ctrl)
    elif phase in (InterviewPhase.recording, InterviewPhase.retry_upload):
        _render_question(ctrl)
    elif phase == InterviewPhase.finished:
        _render_finished(ctrl)
    elif phase == InterviewPhase.playback:
        render_playback(ctrl.playback_items())
        if st.button("Open Session Folder"):
            open_folder_in_explorer(get_settings().uploads_dir, ctrl.state.folder)
        if st.button("New Interview"):
            _reset_controller()
            st.rerun()
    elif phase == InterviewPhase.failed:
        _render_failed(ctrl)
    else:
        # A pipeline was interrupted mid-run (e.g. the page was reloaded)
        st.info(ctrl.state.status_message)


def _render_idle(ctrl: InterviewController) -> None:
    """Show the name input, the camera check and the start button."""
    ctrl.state.token = st.session_state.session_token
    user_name = st.text_input("Your name", value=ctrl.state.user_name)

    preview = webrtc_streamer(
        key="device_check",
        mode=WebRtcMode.SENDRECV,
        media_stream_constraints=_MEDIA_CONSTRAINTS,
    )
    ctrl.recorder.device_ready = lambda: preview.state.playing
    st.caption("Press START on the preview to allow camera and microphone access.")
    st.caption(f"{ctrl.state.question_count} questions. Answer each one, then press Next.")

    if st.button("Start Interview", type="primary"):
        with st.spinner("Starting session..."):
            ctrl.start(user_name)
        st.rerun()


def _render_question(ctrl: InterviewController) -> None:
    """Show the current question, the answer recorder and the advance / retry controls."""
    state = ctrl.state
    st.subheader(f"Question {state.current_question}: {state.current_question_text}")
    st.caption(f"Question {state.current_question} of {state.question_count}")

    status = st.empty()
    progress = st.progress(state.upload_progress)

    def _on_change(s: InterviewState) -> None:
        status.info(s.status_message)
        progress.progress(s.upload_progress, text=f"Upload {s.upload_progress}%")

    ctrl.on_change = _on_change
    if state.status_message:
        status.info(state.status_message)

    if state.phase == InterviewPhase.recording:
        stream = webrtc_streamer(
            key=f"answer_{state.folder}_{state.current_question}",
            mode=WebRtcMode.SENDRECV,
            media_stream_constraints=_MEDIA_CONSTRAINTS,
            in_recorder_factory=ctrl.recorder.in_recorder_factory,
        )
        st.caption("Press START to record your answer and STOP when you are done.")
        answered = not stream.state.playing and ctrl.recorder.has_take
        label = (
            "Finish Last Question"
            if state.current_question == state.question_count
            else "Next Question"
        )
        if st.button(label, type="primary", disabled=not state.advance_enabled or not answered):
            ctrl.advance()
            st.rerun()
        return

    # retry_upload
    st.error(state.error or "Upload failed!")
    if st.button("Retry Upload", type="primary", disabled=not state.retry_available):
        ctrl.retry_upload()
        st.rerun()


def _render_finished(ctrl: InterviewController) -> None:
    state = ctrl.state
    st.success(state.status_message or "Interview finished!")
    if state.last_transcript:
        st.subheader("Last Transcript")
        st.code(state.last_transcript, language=None)
    if state.error:
        st.error(state.error)

    if st.button("Finish Interview", type="primary", disabled=not state.finish_enabled):
        with st.spinner("Processing..."):
            ctrl.finish()
        st.rerun()


def _render_failed(ctrl: InterviewController) -> None:
    st.error(ctrl.state.error or "Something went wrong.")
    if ctrl.state.transcription_pending and st.button("Retry Transcription", type="primary"):
        with st.spinner("Transcribing on server..."):
            ctrl.retry_transcription()
        st.rerun()
    if st.button("Start Over"):
        _reset_controller()
        st.rerun()
