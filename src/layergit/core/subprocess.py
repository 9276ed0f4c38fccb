"""Subprocess execution with operation context in every failure.

Both adapters (git and p4) shell out through this module. A failed command
becomes a RuntimeError whose first line names the operation; the following
lines carry the command, its exit code and whatever the tool printed. The CLI
shows the first line together with the ``stderr:`` line.
"""

import logging
import shlex
import subprocess
from collections.abc import Sequence
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)


def format_command_failure(
    operation_context: str,
    cmd: Sequence[str],
    returncode: int,
    stdout: str | None,
    stderr: str | None,
) -> str:
    """Build the message carried by the RuntimeError for a failed command."""
    lines = [
        f"Failed to {operation_context}",
        f"Command: {shlex.join(str(arg) for arg in cmd)}",
        f"Exit code: {returncode}",
    ]
    if stdout and stdout.strip():
        lines.append(f"stdout: {stdout.strip()}")
    if stderr and stderr.strip():
        lines.append(f"stderr: {stderr.strip()}")
    return "\n".join(lines)


def run_subprocess_with_context(
    cmd: Sequence[str],
    operation_context: str,
    cwd: Path | None = None,
    check: bool = True,
    input: str | None = None,
    **kwargs: Any,
) -> subprocess.CompletedProcess[str]:
    """Run cmd with captured UTF-8 output.

    Args:
        cmd: Command and arguments
        operation_context: What the command is for, phrased to follow "Failed to"
        cwd: Working directory
        check: Raise when the command exits non-zero
        input: Text piped to stdin
        **kwargs: Passed through to subprocess.run()

    Raises:
        RuntimeError: If the binary is missing, or the command fails and check is set
    """
    logger.debug("Running %s (cwd=%s)", shlex.join(str(arg) for arg in cmd), cwd)
    try:
        result = subprocess.run(
            cmd,
            cwd=cwd,
            capture_output=True,
            text=True,
            encoding="utf-8",
            check=False,
            input=input,
            **kwargs,
        )
    except FileNotFoundError as e:
        raise RuntimeError(
            f"Failed to {operation_context}: '{cmd[0]}' is not installed or not on PATH"
        ) from e

    if check and result.returncode != 0:
        raise RuntimeError(
            format_command_failure(
                operation_context, cmd, result.returncode, result.stdout, result.stderr
            )
        )
    return result
