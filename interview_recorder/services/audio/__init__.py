"""
Audio module - Waveform extraction for the recognizer.
"""

from .transcoder import FFmpegTranscoder

__all__ = ["FFmpegTranscoder"]
