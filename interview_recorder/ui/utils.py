"""UI utility functions."""

import platform
import subprocess
from pathlib import Path

_OPEN_COMMANDS = {
    "Darwin": "open",
    "Windows": "explorer",
}


def open_folder_in_explorer(uploads_dir: str, folder: str | None = None) -> Path:
    """Open the uploads root, or one session folder inside it, in the OS file browser.

    Only useful when the UI runs on the same machine as the service.
    """
    path = Path(uploads_dir).resolve()
    if folder:
        path = path / folder
    path.mkdir(parents=True, exist_ok=True)

    command = _OPEN_COMMANDS.get(platform.system(), "xdg-open")
    subprocess.Popen([command, str(path)])  # noqa: S603
    return path
