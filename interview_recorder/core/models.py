"""
Pydantic v2 request / response models used across the API layer.

Wire names are camelCase (``userName``, ``questionIndex``, ``savedAs``) to
match the browser client; Python attributes stay snake_case via aliases.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

# ---------------------------------------------------------------------------
# Health
# ---------------------------------------------------------------------------


class HealthResponse(BaseModel):
    """GET /health response."""

    status: str = "ok"
    version: str = "0.1.0"
    timestamp: datetime


# ---------------------------------------------------------------------------
# Base
# ---------------------------------------------------------------------------


class _CamelModel(BaseModel):
    """Accepts both the camelCase alias and the field name on input."""

    model_config = ConfigDict(populate_by_name=True)


class OkResponse(BaseModel):
    """Bare acknowledgement returned by save-transcript and finish."""

    ok: bool = True


# ---------------------------------------------------------------------------
# Session
# ---------------------------------------------------------------------------


class StartSessionRequest(_CamelModel):
    """POST /api/session/start request body."""

    token: str = ""
    user_name: str | None = Field(None, alias="userName")


class StartSessionResponse(OkResponse):
    """Folder identifier for the newly created session."""

    folder: str


class FinishSessionRequest(_CamelModel):
    """POST /api/session/finish request body."""

    token: str = ""
    folder: str
    questions_count: int | None = Field(None, alias="questionsCount", ge=0)


# ---------------------------------------------------------------------------
# Answers
# ---------------------------------------------------------------------------


class UploadResponse(_CamelModel):
    """POST /api/upload-one response: the stored artifact's file name."""

    ok: bool = True
    saved_as: str = Field(alias="savedAs")


class TranscribeRequest(_CamelModel):
    """POST /api/transcribe request body."""

    folder: str
    question_index: int = Field(alias="questionIndex", ge=1)


class TranscribeResponse(OkResponse):
    """Recognized text for one answer."""

    text: str


class SaveTranscriptRequest(_CamelModel):
    """POST /api/save-transcript request body."""

    folder: str
    question_index: int = Field(alias="questionIndex", ge=1)
    text: str = ""


# ---------------------------------------------------------------------------
# Error
# ---------------------------------------------------------------------------


class ErrorResponse(BaseModel):
    """Standard error envelope returned by the API."""

    ok: bool = False
    detail: str
    code: str
    timestamp: str
