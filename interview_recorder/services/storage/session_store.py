"""
Filesystem storage for interview sessions.

Every session is a folder under ``uploads_dir`` holding one artifact per
question (``Q<index>.webm``, or ``Q<index>.mp4`` for MP4 uploads), the
waveform extracted from it (``Q<index>.wav``) and an append-only
``transcript.txt``.  Nothing is kept in memory between requests; the folder
name is the only session handle.
"""

import logging
import os
import uuid
from collections.abc import AsyncIterator
from datetime import UTC, datetime, timedelta
from pathlib import Path

from interview_recorder.core.exceptions import (
    ArtifactNotFoundError,
    InvalidFolderError,
    SessionNotFoundError,
    SessionStorageError,
    UploadTooLargeError,
)
from interview_recorder.core.utils import (
    ARTIFACT_EXTENSIONS,
    artifact_extension,
    is_safe_folder_name,
    make_folder_name,
)

logger = logging.getLogger(__name__)

TRANSCRIPT_FILE_NAME = "transcript.txt"


def transcript_block(question_index: int, text: str) -> str:
    """Format one transcript block exactly as it is appended to disk."""
    return f"===== Question {question_index} =====\n{text}\n\n"


class SessionStore:
    """Folder-per-session storage rooted at ``uploads_dir``.

    Folder names coming from clients are trusted (a missing folder is created
    on upload) but must be a single ``[A-Za-z0-9_-]`` path component so they
    can never escape ``uploads_dir``.

    Args:
        uploads_dir: Root directory for all session folders.
        artifact_extension: Extension for answers whose content type is unknown.
        default_user_name: Placeholder used when a session has no display name.
    """

    def __init__(
        self,
        uploads_dir: str | Path,
        artifact_extension: str = "webm",
        default_user_name: str = "user",
    ) -> None:
        self._root = Path(uploads_dir)
        self._extension = artifact_extension.lstrip(".")
        self._default_user_name = default_user_name

    @property
    def root(self) -> Path:
        return self._root

    # ------------------------------------------------------------------
    # Sessions
    # ------------------------------------------------------------------

    def create_session(self, user_name: str | None) -> str:
        """Create a new session folder and return its name.

        The folder name is ``<timestamp>_<sanitized name>``.  If a folder with
        that name already exists (two starts within the same microsecond) the
        timestamp is pushed forward until creation succeeds.

        Raises:
            SessionStorageError: If the filesystem refuses the directory.
        """
        moment = datetime.now(UTC)
        try:
            self._root.mkdir(parents=True, exist_ok=True)
            while True:
                folder = make_folder_name(user_name, moment, self._default_user_name)
                try:
                    (self._root / folder).mkdir()
                except FileExistsError:
                    moment += timedelta(microseconds=1)
                    continue
                break
        except OSError as exc:
            raise SessionStorageError(detail=f"Could not create session folder: {exc}") from exc

        logger.info("Created session folder %s", folder)
        return folder

    def session_path(self, folder: str, must_exist: bool = False) -> Path:
        """Return the directory for ``folder`` after validating the name.

        Raises:
            InvalidFolderError: If ``folder`` is not a single safe path component.
            SessionNotFoundError: If ``must_exist`` and the directory is missing.
        """
        if not folder or not is_safe_folder_name(folder):
            raise InvalidFolderError(folder)
        path = self._root / folder
        if must_exist and not path.is_dir():
            raise SessionNotFoundError(folder)
        return path

    # ------------------------------------------------------------------
    # Artifacts
    # ------------------------------------------------------------------

    def artifact_name(self, question_index: int, content_type: str | None = None) -> str:
        return f"Q{question_index}.{artifact_extension(content_type, self._extension)}"

    def artifact_path(self, folder: str, question_index: int) -> Path:
        return self.session_path(folder) / self.artifact_name(question_index)

    def _artifact_candidates(self, folder: str, question_index: int) -> list[Path]:
        extensions = dict.fromkeys([self._extension, *ARTIFACT_EXTENSIONS.values()])
        base = self.session_path(folder)
        return [base / f"Q{question_index}.{ext}" for ext in extensions]

    def waveform_path(self, folder: str, question_index: int) -> Path:
        return self.session_path(folder) / f"Q{question_index}.wav"

    def require_artifact(self, folder: str, question_index: int) -> Path:
        """Return the stored artifact path or raise :class:`ArtifactNotFoundError`."""
        for path in self._artifact_candidates(folder, question_index):
            if path.is_file():
                return path
        raise ArtifactNotFoundError(folder, question_index)

    async def save_artifact(
        self,
        folder: str,
        question_index: int,
        chunks: AsyncIterator[bytes],
        max_bytes: int,
        content_type: str | None = None,
    ) -> str:
        """Stream an uploaded answer to ``Q<index>.<ext>``, replacing any prior one.

        The extension follows ``content_type`` (``webm`` or ``mp4``).  A prior
        answer stored under the other extension is removed so each question
        keeps exactly one artifact.

        Bytes go to a temporary sibling file which is renamed over the
        destination only once the whole upload has arrived, so a rejected or
        interrupted upload never leaves a partial artifact behind.

        Args:
            folder: Session folder (created if missing).
            question_index: 1-based question number.
            chunks: Async iterator over the uploaded bytes.
            max_bytes: Largest accepted artifact size.
            content_type: MIME type declared for the uploaded file.

        Returns:
            The stored file name, e.g. ``"Q1.webm"``.

        Raises:
            UploadTooLargeError: If more than ``max_bytes`` arrive.
            SessionStorageError: If the file cannot be written.
        """
        dest_dir = self.session_path(folder)
        name = self.artifact_name(question_index, content_type)
        dest = dest_dir / name
        tmp = dest_dir / f".{name}.{uuid.uuid4().hex}.part"

        written = 0
        try:
            dest_dir.mkdir(parents=True, exist_ok=True)
            with open(tmp, "wb") as fh:
                async for chunk in chunks:
                    written += len(chunk)
                    if written > max_bytes:
                        raise UploadTooLargeError(max_bytes)
                    fh.write(chunk)
            os.replace(tmp, dest)
            for stale in self._artifact_candidates(folder, question_index):
                if stale != dest:
                    stale.unlink(missing_ok=True)
        except UploadTooLargeError:
            tmp.unlink(missing_ok=True)
            logger.warning("Rejected oversized upload for %s/%s", folder, name)
            raise
        except OSError as exc:
            tmp.unlink(missing_ok=True)
            raise SessionStorageError(detail=f"Could not store {name}: {exc}") from exc

        logger.info("Stored %s/%s (%d bytes)", folder, name, written)
        return name

    # ------------------------------------------------------------------
    # Transcript
    # ------------------------------------------------------------------

    def transcript_path(self, folder: str) -> Path:
        return self.session_path(folder) / TRANSCRIPT_FILE_NAME

    def append_transcript(self, folder: str, question_index: int, text: str) -> None:
        """Append one question block to the session transcript.

        Blocks land in call order; nothing is rewritten or deduplicated.

        Raises:
            SessionNotFoundError: If the session folder does not exist.
        """
        path = self.session_path(folder, must_exist=True) / TRANSCRIPT_FILE_NAME
        try:
            with open(path, "a", encoding="utf-8") as fh:
                fh.write(transcript_block(question_index, text))
        except OSError as exc:
            raise SessionStorageError(detail=f"Could not append transcript: {exc}") from exc

    def read_transcript(self, folder: str) -> str:
        """Return the transcript text, or an empty string if none was saved yet."""
        path = self.transcript_path(folder)
        if not path.is_file():
            return ""
        return path.read_text(encoding="utf-8")
