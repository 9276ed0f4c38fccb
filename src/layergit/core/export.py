"""Reflect topic-branch changes into a Perforce pending changelist.

The diff between the baseline branch and HEAD is translated in export mode
and each FileChange becomes one p4 command. Commands are all attempted: a
failure is recorded and the batch continues, so one run reports every
rejected command at once.
"""

import logging
from dataclasses import dataclass
from typing import Literal

from layergit.core.context import LgContext
from layergit.core.diff_translator import FileChange, translate
from layergit.core.errors import EnvironmentFailure
from layergit.core.perforce.abc import P4Result
from layergit.core.workflow import require_repo

logger = logging.getLogger(__name__)

P4Op = Literal["edit", "add", "delete", "move"]

# Perforce reserves these in file specs; "%" must be escaped first
_P4_ESCAPES = (("%", "%25"), ("@", "%40"), ("#", "%23"), ("*", "%2A"))


@dataclass(frozen=True)
class ExportCommand:
    """One p4 command, with paths already escaped."""

    op: P4Op
    args: tuple[str, ...]

    def display(self) -> str:
        return " ".join((self.op, *self.args))


@dataclass(frozen=True)
class ExportResult:
    """Every command attempted, paired with its outcome."""

    outcomes: list[tuple[ExportCommand, P4Result]]

    @property
    def failures(self) -> list[tuple[ExportCommand, P4Result]]:
        return [(command, result) for command, result in self.outcomes if not result.success]

    @property
    def success(self) -> bool:
        return not self.failures


def escape_path(path: str) -> str:
    """Percent-escape Perforce's special characters in a path.

    Example:
        >>> escape_path("icons/logo@2x.png")
        'icons/logo%402x.png'
    """
    for char, replacement in _P4_ESCAPES:
        path = path.replace(char, replacement)
    return path


def command_for_change(change: FileChange) -> ExportCommand:
    """Map an export-mode FileChange to the p4 command that reproduces it."""
    if change.kind == "move":
        if change.from_path is None:
            raise ValueError(f"move without a source path: {change}")
        return ExportCommand(op="move", args=(escape_path(change.from_path), escape_path(change.path)))
    return ExportCommand(op=change.kind, args=(escape_path(change.path),))


def export_commands(ctx: LgContext) -> list[ExportCommand]:
    """Commands reproducing baseline..HEAD in Perforce, in diff order."""
    repo = require_repo(ctx)
    diff_text = ctx.git.get_diff(repo.root, f"{repo.baseline_branch}..HEAD")
    return [command_for_change(change) for change in translate(diff_text, "export")]


def check_environment(ctx: LgContext) -> None:
    """Refuse to export when Perforce is unusable.

    Raises:
        EnvironmentFailure: If p4 is missing or there is no client workspace
    """
    repo = require_repo(ctx)
    if not ctx.perforce.is_available():
        raise EnvironmentFailure(f"'{ctx.config.p4_executable}' not found on PATH")
    if ctx.perforce.get_client_root(repo.root) is None:
        raise EnvironmentFailure("no Perforce client root; check P4CLIENT and P4PORT")


def run_export(ctx: LgContext, commands: list[ExportCommand]) -> ExportResult:
    """Issue every command against ctx.perforce, collecting all outcomes."""
    repo = require_repo(ctx)
    outcomes: list[tuple[ExportCommand, P4Result]] = []

    for command in commands:
        if command.op == "move":
            from_path, to_path = command.args
            result = ctx.perforce.move(repo.root, from_path, to_path)
        elif command.op == "edit":
            result = ctx.perforce.edit(repo.root, command.args[0])
        elif command.op == "add":
            result = ctx.perforce.add(repo.root, command.args[0])
        else:
            result = ctx.perforce.delete(repo.root, command.args[0])

        if not result.success:
            logger.debug("p4 %s failed: %s", command.display(), result.output)
        outcomes.append((command, result))

    return ExportResult(outcomes=outcomes)
