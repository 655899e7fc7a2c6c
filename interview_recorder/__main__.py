"""Run the session/transcription service: ``python -m interview_recorder``."""

import uvicorn

from interview_recorder.core.config import get_settings
from interview_recorder.core.logging_config import configure_logging


def main() -> None:
    settings = get_settings()
    configure_logging(settings.log_level)
    uvicorn.run(
        "interview_recorder.api.app:create_app",
        factory=True,
        host=settings.app_host,
        port=settings.app_port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
