"""Append-only audit trail of session start / finish events.

One line per event: ``[<ISO-8601 UTC>] <EVENT>: <folder>``.  The file is
write-only from the application's point of view; nothing reads it back.
"""

import logging
from datetime import UTC, datetime
from pathlib import Path

logger = logging.getLogger(__name__)


def _ts_iso() -> str:
    return datetime.now(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class AuditLog:
    """Writes timestamped session events to a single log file."""

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def record(self, event: str, folder: str) -> None:
        line = f"[{_ts_iso()}] {event}: {folder}\n"
        self._path.parent.mkdir(parents=True, exist_ok=True)
        with open(self._path, "a", encoding="utf-8") as fh:
            fh.write(line)
        logger.info("%s: %s", event, folder)

    def session_started(self, folder: str) -> None:
        self.record("START", folder)

    def session_finished(self, folder: str) -> None:
        self.record("FINISH", folder)
