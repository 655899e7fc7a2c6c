"""
Local media capture for one interview.

A recorder buffers the chunks produced by the capture device between
``start()`` and ``stop()``; ``stop()`` seals them into one immutable
:class:`Artifact` which is what gets uploaded.  The device itself (a WebRTC
take file, a test fixture) only has to push bytes.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass

from interview_recorder.core.utils import artifact_extension

logger = logging.getLogger(__name__)

DEFAULT_MIME_TYPE = "video/webm"


class RecorderError(Exception):
    """Raised when the capture device is unavailable or used out of order."""


@dataclass(frozen=True)
class Artifact:
    """One finalized recording: every chunk captured since the last start."""

    data: bytes
    mime_type: str = DEFAULT_MIME_TYPE

    @property
    def size(self) -> int:
        return len(self.data)

    @property
    def extension(self) -> str:
        """Container extension the service stores this artifact under."""
        return artifact_extension(self.mime_type)


class MediaRecorder(ABC):
    """Interface every capture device adapter must implement."""

    @abstractmethod
    def acquire(self) -> None:
        """Open the audio+video device. Raises :class:`RecorderError` on failure."""

    @abstractmethod
    def start(self) -> None:
        """Begin a fresh recording, discarding anything buffered before."""

    @abstractmethod
    def stop(self) -> Artifact:
        """End the recording and return it as a single artifact."""

    @abstractmethod
    def release(self) -> None:
        """Stop all capture and give the device back."""

    @property
    @abstractmethod
    def is_recording(self) -> bool: ...


class ChunkRecorder(MediaRecorder):
    """Recorder that assembles artifacts from chunks pushed by a media source.

    Args:
        mime_type: MIME type stamped on every artifact.
    """

    def __init__(self, mime_type: str = DEFAULT_MIME_TYPE) -> None:
        self._mime_type = mime_type
        self._chunks: list[bytes] = []
        self._acquired = False
        self._recording = False

    @property
    def is_acquired(self) -> bool:
        return self._acquired

    @property
    def is_recording(self) -> bool:
        return self._recording

    @property
    def buffered_bytes(self) -> int:
        return sum(len(c) for c in self._chunks)

    def acquire(self) -> None:
        self._acquired = True

    def start(self) -> None:
        if not self._acquired:
            raise RecorderError("Recording device has not been acquired")
        if self._recording:
            raise RecorderError("Recorder is already running")
        self._chunks = []
        self._recording = True

    def push_chunk(self, data: bytes) -> None:
        """Buffer one chunk from the media source. Empty chunks are ignored."""
        if not self._recording:
            raise RecorderError("Recorder is not running")
        if data:
            self._chunks.append(bytes(data))

    def stop(self) -> Artifact:
        if not self._recording:
            raise RecorderError("Recorder is not running")
        self._recording = False
        artifact = Artifact(data=b"".join(self._chunks), mime_type=self._mime_type)
        self._chunks = []
        logger.debug("Recorder stopped with %d bytes", artifact.size)
        return artifact

    def release(self) -> None:
        self._recording = False
        self._chunks = []
        self._acquired = False
