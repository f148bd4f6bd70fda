"""Subprocess helpers shared by the jj and gh gateways."""

import logging
import subprocess
import time
from pathlib import Path

logger = logging.getLogger(__name__)


def run_subprocess_with_context(
    cmd: list[str],
    *,
    operation_context: str,
    cwd: Path | None = None,
) -> subprocess.CompletedProcess[str]:
    """Run a command, raising RuntimeError with context when it fails.

    Args:
        cmd: Command and arguments to execute
        operation_context: Description of the operation, used in error messages
            (e.g. "merge PR #12")
        cwd: Working directory for command execution

    Returns:
        The completed process (stdout/stderr captured as text)

    Raises:
        RuntimeError: If the command exits non-zero. The message includes the
            operation context and the command's stderr.
        FileNotFoundError: If the executable is not installed
    """
    start = time.monotonic()
    logger.debug("$ %s", " ".join(cmd))
    try:
        result = subprocess.run(
            cmd,
            cwd=cwd,
            capture_output=True,
            text=True,
            check=True,
        )
    except subprocess.CalledProcessError as e:
        stderr = (e.stderr or "").strip()
        stdout = (e.stdout or "").strip()
        detail = stderr or stdout or f"exit code {e.returncode}"
        logger.debug("command failed after %.2fs: %s", time.monotonic() - start, detail)
        msg = f"Failed to {operation_context}: {detail}"
        raise RuntimeError(msg) from e

    logger.debug("command finished in %.2fs", time.monotonic() - start)
    return result
