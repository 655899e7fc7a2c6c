"""
Browser camera and microphone capture through streamlit-webrtc.

Every answer is its own WebRTC stream.  While the stream plays, aiortc's
``MediaRecorder`` writes the incoming audio and video tracks to a take file
(H.264 + AAC in MP4).  ``stop()`` feeds that file through the chunk buffer
and seals it as the answer artifact, so re-recording an answer before
pressing Next simply overwrites the take.
"""

import logging
import shutil
import tempfile
from collections.abc import Callable
from pathlib import Path

from aiortc.contrib.media import MediaRecorder as TrackRecorder

from interview_recorder.ui.capture import Artifact, ChunkRecorder, RecorderError

logger = logging.getLogger(__name__)

TAKE_FORMAT = "mp4"
TAKE_MIME_TYPE = "video/mp4"
_READ_CHUNK_SIZE = 64 * 1024


class WebRTCRecorder(ChunkRecorder):
    """Recorder fed by take files that streamlit-webrtc writes per answer.

    Args:
        capture_dir: Where take files go. A temporary directory is created on
            ``acquire()`` when omitted and removed again on ``release()``.
        device_ready: Reports whether the browser has granted the camera and
            microphone. The UI binds it to the preview stream's playing state.
    """

    def __init__(
        self,
        capture_dir: str | Path | None = None,
        device_ready: Callable[[], bool] | None = None,
    ) -> None:
        super().__init__(mime_type=TAKE_MIME_TYPE)
        self._capture_dir = Path(capture_dir) if capture_dir is not None else None
        self._owns_dir = capture_dir is None
        self.device_ready = device_ready or (lambda: False)
        self._takes = 0
        self._take_path: Path | None = None

    @property
    def take_path(self) -> Path | None:
        return self._take_path

    @property
    def has_take(self) -> bool:
        """True once the current answer's stream has written something."""
        path = self._take_path
        return path is not None and path.is_file() and path.stat().st_size > 0

    def acquire(self) -> None:
        if not self.device_ready():
            raise RecorderError(
                "Camera and microphone are not available. "
                "Press START on the camera preview and allow access."
            )
        try:
            if self._capture_dir is None:
                self._capture_dir = Path(tempfile.mkdtemp(prefix="interview-capture-"))
            else:
                self._capture_dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise RecorderError(f"Cannot prepare capture directory: {exc}") from exc
        super().acquire()

    def start(self) -> None:
        super().start()
        self._takes += 1
        self._take_path = self._capture_dir / f"take_{self._takes}.{TAKE_FORMAT}"
        self._take_path.unlink(missing_ok=True)

    def in_recorder_factory(self) -> TrackRecorder:
        """Track recorder for the current answer's stream (``in_recorder_factory``)."""
        if not self.is_recording or self._take_path is None:
            raise RecorderError("Recorder is not running")
        logger.debug("Recording stream to %s", self._take_path)
        return TrackRecorder(str(self._take_path), format=TAKE_FORMAT)

    def stop(self) -> Artifact:
        if self.is_recording:
            if not self.has_take:
                raise RecorderError(
                    "Nothing was recorded for this answer. Press START, answer, then STOP."
                )
            try:
                data = self._take_path.read_bytes()
            except OSError as exc:
                raise RecorderError(f"Cannot read recorded answer: {exc}") from exc
            for offset in range(0, len(data), _READ_CHUNK_SIZE):
                self.push_chunk(data[offset : offset + _READ_CHUNK_SIZE])
        return super().stop()

    def release(self) -> None:
        super().release()
        self._take_path = None
        if self._owns_dir and self._capture_dir is not None:
            shutil.rmtree(self._capture_dir, ignore_errors=True)
            self._capture_dir = None
