"""Playback grid: one player per question, pointing at the stored answers."""

import streamlit as st

from interview_recorder.ui.interview import PlaybackItem


def render_playback(items: list[PlaybackItem], columns: int = 2) -> None:
    """Render every answer with its question text."""
    st.header("Your Answers")
    cols = st.columns(columns)
    for i, item in enumerate(items):
        with cols[i % columns], st.container(border=True):
            st.markdown(f"**Question {item.question_index}:** {item.question}")
            st.video(item.url)
