"""Shared pytest fixtures for the Interview Recorder test suite.

Provides settings rooted in a temporary directory and small shell scripts
standing in for the ffmpeg and Vosk executables, so the transcription
pipeline runs end to end without the real tools installed.
"""

import stat
from pathlib import Path

import pytest

from interview_recorder.core.config import Settings

RECOGNIZED_TEXT = "i have five years of experience"


def _write_script(path: Path, body: str) -> Path:
    """Write an executable ``/bin/sh`` script and return its path."""
    path.write_text("#!/bin/sh\n" + body)
    path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return path


# ---------------------------------------------------------------------------
# External tool fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def fake_ffmpeg(tmp_path):
    """ffmpeg stand-in: records its arguments and writes a dummy WAV to the last one."""
    bin_dir = tmp_path / "bin"
    bin_dir.mkdir(exist_ok=True)
    return _write_script(
        bin_dir / "ffmpeg",
        'echo "$@" > "$(dirname "$0")/ffmpeg.args"\n'
        'for last; do :; done\n'
        'printf "RIFF" > "$last"\n',
    )


@pytest.fixture
def fake_vosk(tmp_path):
    """Vosk stand-in: records its arguments and prints a recognition result."""
    bin_dir = tmp_path / "bin"
    bin_dir.mkdir(exist_ok=True)
    return _write_script(
        bin_dir / "vosk",
        'echo "$@" > "$(dirname "$0")/vosk.args"\n'
        f"echo '{{\"text\": \"{RECOGNIZED_TEXT}\"}}'\n",
    )


@pytest.fixture
def failing_tool(tmp_path):
    """Executable that complains on stderr and exits non-zero."""
    bin_dir = tmp_path / "bin"
    bin_dir.mkdir(exist_ok=True)
    return _write_script(
        bin_dir / "broken",
        'echo "Invalid data found when processing input" >&2\nexit 1\n',
    )


# ---------------------------------------------------------------------------
# Settings / payload fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def settings(tmp_path, fake_ffmpeg, fake_vosk):
    """Settings writing into tmp_path and using the fake external tools."""
    return Settings(
        _env_file=None,
        uploads_dir=str(tmp_path / "uploads"),
        logs_dir=str(tmp_path / "logs"),
        ffmpeg_bin=str(fake_ffmpeg),
        vosk_bin=str(fake_vosk),
        vosk_model_dir=str(tmp_path / "model"),
        transcode_timeout_seconds=10.0,
        stt_timeout_seconds=10.0,
    )


@pytest.fixture
def answer_bytes():
    """A small fake WebM payload (EBML magic followed by filler)."""
    return b"\x1a\x45\xdf\xa3" + b"\x00" * 2048


@pytest.fixture
def recognized_text():
    """Text the fake recognizer prints for every waveform."""
    return RECOGNIZED_TEXT


@pytest.fixture
def make_script(tmp_path):
    """Factory writing extra executables into tmp_path/bin."""
    bin_dir = tmp_path / "bin"
    bin_dir.mkdir(exist_ok=True)

    def _make(name: str, body: str) -> Path:
        return _write_script(bin_dir / name, body)

    return _make
