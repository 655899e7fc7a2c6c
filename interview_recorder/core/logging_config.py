"""Process-wide logging setup shared by the API server and the Streamlit client."""

import logging

_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """Install one stream handler on the root logger (idempotent)."""
    root = logging.getLogger()
    if not any(getattr(h, "_interview_recorder", False) for h in root.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(fmt=_FORMAT))
        handler._interview_recorder = True  # type: ignore[attr-defined]
        root.addHandler(handler)
    root.setLevel(level.upper())
