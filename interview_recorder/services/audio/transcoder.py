"""Waveform extraction from recorded answers via the ffmpeg executable."""

import logging
from pathlib import Path

from interview_recorder.core.config import get_settings
from interview_recorder.services.process_runner import run_tool

logger = logging.getLogger(__name__)

SAMPLE_RATE = 16000
CHANNELS = 1


class FFmpegTranscoder:
    """Converts any media file ffmpeg can read into mono 16 kHz WAV.

    Args:
        bin_path: Path to the ffmpeg executable.
        timeout: Seconds before a conversion is killed.
        settings: Optional Settings instance (defaults to get_settings()).
    """

    def __init__(
        self,
        bin_path: str | None = None,
        timeout: float | None = None,
        settings=None,
    ) -> None:
        self._settings = settings or get_settings()
        self._bin_path = bin_path or self._settings.ffmpeg_bin
        self._timeout = timeout or self._settings.transcode_timeout_seconds

    def build_command(self, source: Path, target: Path) -> list[str]:
        return [
            self._bin_path,
            "-y",
            "-i",
            str(source),
            "-ar",
            str(SAMPLE_RATE),
            "-ac",
            str(CHANNELS),
            str(target),
        ]

    async def extract_waveform(self, source: str | Path, target: str | Path) -> Path:
        """Write the mono 16 kHz waveform of ``source`` to ``target`` (overwriting it).

        Raises:
            ExternalToolError: If ffmpeg fails, times out, or cannot be started.
        """
        source, target = Path(source), Path(target)
        await run_tool("ffmpeg", self.build_command(source, target), self._timeout)
        logger.info("Extracted waveform %s", target)
        return target
