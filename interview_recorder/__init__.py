"""Interview Recorder - record, upload and transcribe interview answers."""

__version__ = "0.1.0"
