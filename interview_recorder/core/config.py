"""
Application configuration via pydantic-settings.

Loads values from .env file with sensible defaults for local development.
Use ``get_settings()`` to obtain the cached singleton instance.
"""

from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Interview Recorder settings loaded from environment / .env file.

    All settings can be overridden via environment variables or a `.env` file.
    Field names map directly to env var names (case-insensitive).

    Attributes:
        session_token: Shared secret required to start and finish a session.
        uploads_dir: Root directory holding one folder per interview session.
        max_upload_bytes: Largest accepted answer artifact.
        ffmpeg_bin: Transcoder executable used to extract the waveform.
        vosk_bin: Speech-recognition executable run against the waveform.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",  # Silently ignore unrecognized env vars
    )

    # --- Auth ---
    session_token: str = "12345"

    # --- Storage ---
    # Paths are relative to the working directory; absolute paths also supported
    uploads_dir: str = "uploads"  # One sub-folder per session
    logs_dir: str = "logs"
    audit_log_name: str = "sessions.log"  # START / FINISH lines
    artifact_extension: str = "webm"
    default_user_name: str = "user"  # Used when the display name is empty

    # --- Uploads ---
    max_upload_bytes: int = 100 * 1024 * 1024
    # Slack allowed on top of max_upload_bytes for multipart framing and form fields
    upload_overhead_bytes: int = 64 * 1024

    # --- External tools ---
    ffmpeg_bin: str = "bin/ffmpeg"
    vosk_bin: str = "models/vosk-osx-0.3.32"
    vosk_model_dir: str = "models/vosk-model-small-en-us-0.15"
    stt_provider: str = "vosk"
    transcode_timeout_seconds: float = 120.0
    stt_timeout_seconds: float = 300.0
    max_concurrent_transcriptions: int = 2

    # --- Application ---
    app_host: str = "0.0.0.0"  # Bind address for the FastAPI server
    app_port: int = 3000
    log_level: str = "INFO"  # Python logging level
    cors_origins: list[str] = Field(
        default_factory=lambda: [
            "http://localhost:8501",  # Streamlit
            "http://localhost:3000",  # Same-origin dev frontend
        ]
    )

    # --- Client ---
    api_base_url: str = "http://localhost:3000"
    upload_timeout_seconds: float = 300.0

    @property
    def uploads_path(self) -> Path:
        return Path(self.uploads_dir)

    @property
    def audit_log_path(self) -> Path:
        return Path(self.logs_dir) / self.audit_log_name

    def ensure_dirs(self) -> None:
        """Create the uploads and logs directories if they are missing."""
        self.uploads_path.mkdir(parents=True, exist_ok=True)
        Path(self.logs_dir).mkdir(parents=True, exist_ok=True)


@lru_cache
def get_settings() -> Settings:
    """Return a cached Settings singleton.

    Uses ``functools.lru_cache`` so the .env file is read only once.
    Subsequent calls return the same ``Settings`` instance.

    Returns:
        Settings: The application-wide configuration object.
    """
    return Settings()
