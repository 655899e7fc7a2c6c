"""
Interview Recorder exception hierarchy.

All service-side exceptions inherit from InterviewRecorderError,
enabling centralized error handling in the API middleware layer.
"""

from datetime import UTC, datetime


class InterviewRecorderError(Exception):
    """Base exception for all Interview Recorder errors."""

    def __init__(
        self,
        detail: str = "An unexpected error occurred",
        code: str = "INTERVIEW_RECORDER_ERROR",
        status_code: int = 500,
    ) -> None:
        self.detail = detail
        self.code = code
        self.status_code = status_code
        self.timestamp = datetime.now(UTC).isoformat()
        super().__init__(detail)


class AuthenticationError(InterviewRecorderError):
    """Raised when the shared session token does not match."""

    def __init__(self) -> None:
        super().__init__(
            detail="Invalid session token",
            code="AUTH_FAILED",
            status_code=401,
        )


class InvalidFolderError(InterviewRecorderError):
    """Raised when a folder identifier is not a single safe path component."""

    def __init__(self, folder: str) -> None:
        super().__init__(
            detail=f"Invalid session folder: {folder!r}",
            code="INVALID_FOLDER",
            status_code=400,
        )


class SessionNotFoundError(InterviewRecorderError):
    """Raised when a session folder does not exist on disk."""

    def __init__(self, folder: str) -> None:
        super().__init__(
            detail=f"Session not found: {folder}",
            code="SESSION_NOT_FOUND",
            status_code=404,
        )


class SessionStorageError(InterviewRecorderError):
    """Raised when the filesystem refuses a session write."""

    def __init__(self, detail: str = "Session storage failed") -> None:
        super().__init__(
            detail=detail,
            code="SESSION_STORAGE_ERROR",
            status_code=500,
        )


class ArtifactNotFoundError(InterviewRecorderError):
    """Raised when no recorded answer exists for a question."""

    def __init__(self, folder: str, question_index: int) -> None:
        super().__init__(
            detail=f"No recorded answer for question {question_index} in {folder}",
            code="ARTIFACT_NOT_FOUND",
            status_code=404,
        )


class UploadTooLargeError(InterviewRecorderError):
    """Raised when an uploaded artifact exceeds the configured size limit."""

    def __init__(self, limit_bytes: int) -> None:
        super().__init__(
            detail=f"Upload exceeds the {limit_bytes} byte limit",
            code="UPLOAD_TOO_LARGE",
            status_code=413,
        )


class ExternalToolError(InterviewRecorderError):
    """Raised when the transcoder or the recognizer fails.

    ``diagnostic`` carries the tool's own stderr (or a description of the
    unparsable output) so callers can see why it failed.
    """

    def __init__(self, tool: str, diagnostic: str) -> None:
        self.tool = tool
        self.diagnostic = diagnostic
        super().__init__(
            detail=f"{tool} failed: {diagnostic}",
            code="EXTERNAL_TOOL_ERROR",
            status_code=500,
        )
