"""
Transcription module - recognizers that turn a mono 16 kHz waveform into text.

``create_stt`` picks the recognizer named by ``Settings.stt_provider``.
"""

from .base import BaseSTT

__all__ = ["BaseSTT", "create_stt"]


def create_stt(provider: str, **kwargs) -> BaseSTT:
    """Build the recognizer for ``provider``.

    Args:
        provider: Recognizer name; only ``"vosk"`` (the Vosk CLI) is available.
        **kwargs: Passed to the recognizer constructor (``settings``, ``bin_path``...).

    Raises:
        ValueError: If ``provider`` is not a known recognizer.
    """
    if provider == "vosk":
        from .vosk import VoskCLISTT

        return VoskCLISTT(**kwargs)
    raise ValueError(f"Unknown STT provider: {provider}")
