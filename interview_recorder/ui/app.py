"""
Interview Recorder Streamlit UI: main entry point.

Run with: ``streamlit run interview_recorder/ui/app.py``
"""

# ---------------------------------------------------------------------------
# Ensure project root is on sys.path so ``from interview_recorder.xxx`` imports
# work without an install. Streamlit replaces sys.path[0] with the script
# directory (interview_recorder/ui/).
# ---------------------------------------------------------------------------
import sys  # noqa: E402
from pathlib import Path  # noqa: E402

_project_root = str(Path(__file__).resolve().parent.parent.parent)
if _project_root not in sys.path:
    sys.path.insert(0, _project_root)

import streamlit as st  # noqa: E402

from interview_recorder.core.config import get_settings  # noqa: E402
from interview_recorder.core.logging_config import configure_logging  # noqa: E402
from interview_recorder.ui.api_client import get_api_client  # noqa: E402
from interview_recorder.ui.components.recorder import render_interview  # noqa: E402
from interview_recorder.ui.utils import open_folder_in_explorer  # noqa: E402

# ---------------------------------------------------------------------------
# Page config (must be first Streamlit call)
# ---------------------------------------------------------------------------
st.set_page_config(
    page_title="Interview Recorder",
    page_icon="\U0001f3a5",
    layout="wide",
)

_settings = get_settings()
configure_logging(_settings.log_level)

# ---------------------------------------------------------------------------
# Session state defaults
# ---------------------------------------------------------------------------
_DEFAULTS = {
    "api_base_url": _settings.api_base_url,
    "session_token": "",
}

for key, value in _DEFAULTS.items():
    if key not in st.session_state:
        st.session_state[key] = value

# ---------------------------------------------------------------------------
# Sidebar
# ---------------------------------------------------------------------------
with st.sidebar:
    st.title("\U0001f3a5 Interview Recorder")
    st.caption("Answer each question on camera; we transcribe as you go")
    st.divider()
    st.session_state.api_base_url = st.text_input(
        "Service URL",
        value=st.session_state.api_base_url,
        help="URL of the Interview Recorder service (default: http://localhost:3000)",
    )
    st.session_state.session_token = st.text_input(
        "Access token",
        value=st.session_state.session_token,
        type="password",
    )

    # Connection status indicator
    _client = get_api_client(st.session_state.api_base_url)
    _conn_ok, _conn_msg = _client.check_connection()
    if _conn_ok:
        st.success(f"Service: {_conn_msg}")
    else:
        st.error(f"Service: {_conn_msg}")

    st.divider()
    if st.button("Open Uploads Folder", use_container_width=True):
        open_folder_in_explorer(_settings.uploads_dir)

# ---------------------------------------------------------------------------
# Interview
# ---------------------------------------------------------------------------
render_interview()
