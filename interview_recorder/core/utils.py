"""Shared utility functions for Interview Recorder."""

import re
from datetime import UTC, datetime

_UNSAFE_NAME_CHARS = re.compile(r"[^a-z0-9]", re.IGNORECASE | re.ASCII)
_SAFE_FOLDER = re.compile(r"[A-Za-z0-9_-]+")


def sanitize_user_name(name: str | None, placeholder: str = "user") -> str:
    """Reduce a display name to lowercase ASCII letters, digits and underscores."""
    return _UNSAFE_NAME_CHARS.sub("_", name or placeholder).lower()


def folder_timestamp(moment: datetime) -> str:
    """ISO-8601 UTC timestamp with ``:`` and ``.`` replaced by ``_``.

    >>> folder_timestamp(datetime(2026, 10, 18, 9, 15, 2, 123456, tzinfo=UTC))
    '2026-10-18T09_15_02_123456Z'
    """
    return moment.astimezone(UTC).strftime("%Y-%m-%dT%H_%M_%S_%fZ")


def make_folder_name(
    user_name: str | None,
    moment: datetime | None = None,
    placeholder: str = "user",
) -> str:
    """Build a session folder name: ``<timestamp>_<sanitized name>``."""
    moment = moment or datetime.now(UTC)
    return f"{folder_timestamp(moment)}_{sanitize_user_name(user_name, placeholder)}"


def is_safe_folder_name(folder: str) -> bool:
    """True when ``folder`` is a single path component with no separators or dots."""
    return _SAFE_FOLDER.fullmatch(folder) is not None


# Container types an answer may be recorded in; "wav" is reserved for the
# extracted waveform and never names an artifact.
ARTIFACT_EXTENSIONS = {
    "video/webm": "webm",
    "audio/webm": "webm",
    "video/mp4": "mp4",
    "audio/mp4": "mp4",
}


def artifact_extension(content_type: str | None, default: str = "webm") -> str:
    """File extension for an uploaded answer of ``content_type``.

    Parameters such as ``;codecs=vp8,opus`` are ignored; unknown or missing
    types fall back to ``default``.

    >>> artifact_extension("video/webm;codecs=vp8,opus")
    'webm'
    >>> artifact_extension("video/mp4")
    'mp4'
    """
    if not content_type:
        return default
    media_type = content_type.split(";", 1)[0].strip().lower()
    return ARTIFACT_EXTENSIONS.get(media_type, default)
