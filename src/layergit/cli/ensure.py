"""CLI error handling utilities with styled output.

This module provides the Ensure class for asserting invariants in CLI commands
with consistent, user-friendly error messages. Every error is a single line on
stderr prefixed with the tool name, followed by exit code 1.
"""

import logging
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from typing import NoReturn

from layergit.cli.output import error_line, user_output
from layergit.core.diff_translator import DiffParseError
from layergit.core.errors import LgError

logger = logging.getLogger(__name__)


class Ensure:
    """Helper class for asserting invariants with consistent error handling."""

    @staticmethod
    def fail(error_message: str) -> NoReturn:
        """Output styled error and exit.

        Raises:
            SystemExit: Always (with exit code 1)
        """
        user_output(error_line(error_message))
        raise SystemExit(1)

    @staticmethod
    def invariant(condition: bool, error_message: str) -> None:
        """Ensure condition is true, otherwise output styled error and exit.

        Args:
            condition: Boolean condition to check
            error_message: Error message to display if condition is false.
                          "lg: " prefix will be added automatically in red.

        Raises:
            SystemExit: If condition is false (with exit code 1)
        """
        if not condition:
            Ensure.fail(error_message)

    @staticmethod
    @contextmanager
    def reported_errors(
        on_error: Callable[[Exception], None] | None = None,
    ) -> Iterator[None]:
        """Turn layergit and integration failures into a styled exit.

        Args:
            on_error: Called with the exception before exiting, for commands
                that want to add guidance

        Example:
            >>> with Ensure.reported_errors():
            ...     sync_baseline(ctx, message)
        """
        try:
            yield
        except (LgError, DiffParseError, RuntimeError) as e:
            logger.debug("Command failed: %s", e, exc_info=True)
            if on_error is not None:
                on_error(e)
            Ensure.fail(summarize_error(e))


def summarize_error(error: Exception) -> str:
    """Reduce an enriched subprocess error to one line, keeping git's own complaint."""
    lines = str(error).strip().splitlines() or ["unknown error"]
    stderr = next((line[len("stderr: ") :] for line in lines if line.startswith("stderr: ")), None)
    if stderr:
        return f"{lines[0]}: {stderr}"
    return lines[0]
