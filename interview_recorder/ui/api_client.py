"""
Synchronous HTTP client for the Interview Recorder service.

Uses ``httpx.Client`` (sync) because Streamlit scripts run synchronously.
"""

import logging
from collections.abc import Callable, Iterator

import httpx
import streamlit as st

from interview_recorder.core.config import get_settings
from interview_recorder.ui.capture import Artifact

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int], None]


class APIError(Exception):
    """User-friendly API error with categorized message.

    Categories: "connection", "timeout", "http", "network", "upload", "unknown".
    Used by the UI to display appropriate error messages.
    """

    def __init__(self, message: str, category: str = "unknown") -> None:
        self.message = message
        self.category = category
        super().__init__(message)


class UploadFailedError(APIError):
    """Any failed answer upload: non-2xx status or transport error alike."""

    def __init__(self, message: str = "Upload failed") -> None:
        super().__init__(message, category="upload")


class APIClient:
    """Thin synchronous wrapper around httpx for calling the FastAPI service.

    All methods return parsed JSON dicts or raise ``APIError`` with
    user-friendly messages for display in the UI.
    """

    def __init__(
        self,
        base_url: str = "http://localhost:3000",
        timeout: float = 30.0,
        upload_timeout: float = 300.0,
        transcribe_timeout: float = 600.0,
        upload_chunk_size: int = 64 * 1024,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        """Initialize the HTTP client.

        Args:
            base_url: Base URL of the Interview Recorder service.
            timeout: Default request timeout in seconds.
            upload_timeout: Timeout for answer uploads.
            transcribe_timeout: Timeout for transcription, which runs external tools.
            upload_chunk_size: Bytes sent between two progress reports.
            transport: Optional httpx transport (tests use ``httpx.MockTransport``).
        """
        self._base_url = base_url.rstrip("/")
        self._upload_timeout = upload_timeout
        self._transcribe_timeout = transcribe_timeout
        self._upload_chunk_size = upload_chunk_size
        self._client = httpx.Client(base_url=self._base_url, timeout=timeout, transport=transport)

    @property
    def base_url(self) -> str:
        return self._base_url

    @property
    def upload_timeout(self) -> float:
        return self._upload_timeout

    def _request(self, method: str, path: str, **kwargs) -> httpx.Response:
        """Execute an HTTP request with user-friendly error handling.

        Args:
            method: HTTP method name ("get", "post").
            path: API endpoint path (e.g. "/api/session/start").
            **kwargs: Passed through to httpx (json, params, timeout, etc.).

        Returns:
            The httpx Response object with a successful status code.

        Raises:
            APIError: On connection, timeout, HTTP status, or network errors.
        """
        try:
            resp = getattr(self._client, method)(path, **kwargs)
            resp.raise_for_status()
            return resp
        except httpx.ConnectError:
            raise APIError(
                "Service is not running. "
                "Start it with: `python -m interview_recorder`",
                category="connection",
            ) from None
        except httpx.TimeoutException:
            raise APIError(
                "Request timed out. The server may be overloaded.",
                category="timeout",
            ) from None
        except httpx.HTTPStatusError as exc:
            try:
                detail = exc.response.json().get("detail", exc.response.text)
            except Exception:
                detail = exc.response.text or str(exc)
            raise APIError(str(detail), category="http") from None
        except httpx.HTTPError as exc:
            raise APIError(f"Network error: {exc}", category="network") from None

    # -- health --

    def health_check(self) -> dict:
        return self._request("get", "/health").json()

    def check_connection(self) -> tuple[bool, str]:
        """Check if the service is reachable. Returns (ok, message)."""
        try:
            self.health_check()
            return True, "Connected"
        except APIError as exc:
            return False, exc.message

    # -- session --

    def start_session(self, token: str, user_name: str | None = None) -> dict:
        return self._request(
            "post", "/api/session/start", json={"token": token, "userName": user_name}
        ).json()

    def finish_session(self, token: str, folder: str, questions_count: int) -> dict:
        return self._request(
            "post",
            "/api/session/finish",
            json={"token": token, "folder": folder, "questionsCount": questions_count},
        ).json()

    # -- answers --

    def upload_answer(
        self,
        folder: str,
        question_index: int,
        artifact: Artifact,
        token: str = "",
        on_progress: ProgressCallback | None = None,
    ) -> dict:
        """Upload one recorded answer as a single multipart request.

        The encoded body is streamed in ``upload_chunk_size`` pieces and
        ``on_progress`` receives the integer percentage of bytes sent after
        each piece.

        Raises:
            UploadFailedError: On any non-2xx status or transport failure.
        """
        request = self._client.build_request(
            "POST",
            "/api/upload-one",
            data={"token": token, "folder": folder, "questionIndex": str(question_index)},
            files={
                "file": (
                    f"Q{question_index}.{artifact.extension}",
                    artifact.data,
                    artifact.mime_type,
                )
            },
        )
        body = request.read()
        total = len(body)
        headers = {
            "Content-Type": request.headers["Content-Type"],
            "Content-Length": str(total),
        }

        def _stream() -> Iterator[bytes]:
            sent = 0
            for offset in range(0, total, self._upload_chunk_size):
                chunk = body[offset : offset + self._upload_chunk_size]
                yield chunk
                sent += len(chunk)
                if on_progress is not None:
                    on_progress(round(sent * 100 / total))

        try:
            resp = self._client.post(
                "/api/upload-one",
                content=_stream(),
                headers=headers,
                timeout=self._upload_timeout,
            )
        except httpx.HTTPError as exc:
            logger.warning("Upload of Q%s failed: %s", question_index, exc)
            raise UploadFailedError(f"Network error: {exc}") from None

        if not resp.is_success:
            logger.warning("Upload of Q%s rejected with HTTP %s", question_index, resp.status_code)
            raise UploadFailedError(f"Upload failed (HTTP {resp.status_code})")
        try:
            return resp.json()
        except ValueError:
            raise UploadFailedError("Upload acknowledgement was not valid JSON") from None

    def transcribe(self, folder: str, question_index: int) -> dict:
        return self._request(
            "post",
            "/api/transcribe",
            json={"folder": folder, "questionIndex": question_index},
            timeout=self._transcribe_timeout,
        ).json()

    def save_transcript(self, folder: str, question_index: int, text: str) -> dict:
        return self._request(
            "post",
            "/api/save-transcript",
            json={"folder": folder, "questionIndex": question_index, "text": text},
        ).json()

    # -- playback --

    def artifact_url(self, folder: str, question_index: int, extension: str = "webm") -> str:
        """Static URL of a stored answer. Built locally, no request is made."""
        return f"{self._base_url}/uploads/{folder}/Q{question_index}.{extension}"


@st.cache_resource
def get_api_client(base_url: str = "http://localhost:3000") -> APIClient:
    """Return a cached APIClient, keyed by base_url.

    Uses Streamlit's ``cache_resource`` to persist the client across reruns.
    When the base URL changes (e.g. user updates sidebar), a new client
    is created automatically because the cache key includes the parameter.
    The upload timeout comes from ``Settings.upload_timeout_seconds``.
    """
    return APIClient(base_url=base_url, upload_timeout=get_settings().upload_timeout_seconds)
