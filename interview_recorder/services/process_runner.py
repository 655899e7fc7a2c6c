"""Run external command-line tools as cancellable asyncio subprocesses.

Both external collaborators (the transcoder and the recognizer) are plain
executables with an exit-code contract.  ``run_tool`` gives them a common
shape: bounded by a timeout, killed on timeout or cancellation, and any
failure surfaced as :class:`ExternalToolError` carrying the tool's stderr.
"""

import asyncio
import contextlib
import logging
from dataclasses import dataclass

from interview_recorder.core.exceptions import ExternalToolError

logger = logging.getLogger(__name__)

# Keep error envelopes readable when a tool dumps a long log to stderr
_MAX_DIAGNOSTIC_CHARS = 2000


@dataclass(frozen=True)
class ToolOutput:
    """Captured result of a finished external process."""

    returncode: int
    stdout: str
    stderr: str


def _truncate(text: str) -> str:
    text = text.strip()
    if len(text) > _MAX_DIAGNOSTIC_CHARS:
        return "..." + text[-_MAX_DIAGNOSTIC_CHARS:]
    return text


async def _kill(proc: asyncio.subprocess.Process) -> None:
    if proc.returncode is None:
        with contextlib.suppress(ProcessLookupError):
            proc.kill()
        await proc.wait()


async def run_tool(tool: str, cmd: list[str], timeout: float) -> ToolOutput:
    """Run ``cmd`` and return its output, or raise on any failure.

    Args:
        tool: Short tool name used in logs and error messages ("ffmpeg", "vosk").
        cmd: Executable followed by its arguments.
        timeout: Seconds to wait before the process is killed.

    Returns:
        ToolOutput with decoded stdout / stderr.

    Raises:
        ExternalToolError: If the executable cannot be started, exceeds
            ``timeout``, or exits non-zero.
    """
    logger.debug("Running %s: %s", tool, " ".join(cmd))
    try:
        proc = await asyncio.create_subprocess_exec(
            *cmd,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
    except OSError as exc:
        raise ExternalToolError(tool, f"could not start {cmd[0]}: {exc}") from exc

    try:
        stdout, stderr = await asyncio.wait_for(proc.communicate(), timeout=timeout)
    except TimeoutError:
        await _kill(proc)
        logger.warning("%s timed out after %.1fs", tool, timeout)
        raise ExternalToolError(tool, f"timed out after {timeout:g}s") from None
    except asyncio.CancelledError:
        await _kill(proc)
        raise

    output = ToolOutput(
        returncode=proc.returncode if proc.returncode is not None else -1,
        stdout=stdout.decode("utf-8", errors="replace"),
        stderr=stderr.decode("utf-8", errors="replace"),
    )
    if output.returncode != 0:
        diagnostic = _truncate(output.stderr) or f"exit code {output.returncode}"
        logger.warning("%s exited with %s: %s", tool, output.returncode, diagnostic)
        raise ExternalToolError(tool, diagnostic)
    return output
