"""Vosk STT implementation driving the Vosk command-line recognizer.

The executable is called as ``<vosk_bin> -i <wav> -m <model_dir>`` and must
print a JSON object with a ``text`` field on stdout.
"""

import json
import logging

from interview_recorder.core.config import get_settings
from interview_recorder.core.exceptions import ExternalToolError
from interview_recorder.services.process_runner import run_tool
from interview_recorder.services.transcription.base import BaseSTT

logger = logging.getLogger(__name__)


class VoskCLISTT(BaseSTT):
    """Speech-to-text provider backed by the Vosk CLI.

    Args:
        bin_path: Path to the Vosk executable.
        model_dir: Directory holding the Vosk acoustic model.
        timeout: Seconds before recognition is killed.
        settings: Optional Settings instance (defaults to get_settings()).
    """

    def __init__(
        self,
        bin_path: str | None = None,
        model_dir: str | None = None,
        timeout: float | None = None,
        settings=None,
    ) -> None:
        self._settings = settings or get_settings()
        self._bin_path = bin_path or self._settings.vosk_bin
        self._model_dir = model_dir or self._settings.vosk_model_dir
        self._timeout = timeout or self._settings.stt_timeout_seconds

    @staticmethod
    def parse_output(stdout: str) -> str:
        """Extract the recognized text from the CLI's JSON output.

        A missing or empty ``text`` field means nothing was recognized and
        yields ``""``.

        Raises:
            ExternalToolError: If stdout is not a JSON object.
        """
        try:
            payload = json.loads(stdout)
        except json.JSONDecodeError as exc:
            raise ExternalToolError("vosk", f"unparsable output: {exc}") from exc
        if not isinstance(payload, dict):
            raise ExternalToolError("vosk", "unparsable output: expected a JSON object")
        return payload.get("text") or ""

    async def transcribe(self, audio_path: str, **kwargs) -> dict:
        """Recognize speech in a mono 16 kHz WAV file.

        Returns:
            Dict with key ``text``.
        """
        cmd = [self._bin_path, "-i", str(audio_path), "-m", self._model_dir]
        output = await run_tool("vosk", cmd, self._timeout)
        text = self.parse_output(output.stdout)
        logger.info("Recognized %d characters from %s", len(text), audio_path)
        return {"text": text}
