"""No-op wrapper for Perforce operations."""

from pathlib import Path

from layergit.cli.output import machine_output
from layergit.core.perforce.abc import P4Result, Perforce


class DryRunPerforce(Perforce):
    """No-op wrapper for Perforce operations.

    Read operations are delegated to the wrapped implementation.
    Write operations print the command they stand for, one per line, and
    report success without executing anything.
    """

    def __init__(self, wrapped: Perforce) -> None:
        """Initialize dry-run wrapper with a real implementation.

        Args:
            wrapped: The real Perforce implementation to wrap
        """
        self._wrapped = wrapped

    def is_available(self) -> bool:
        """Delegate read operation to wrapped implementation."""
        return self._wrapped.is_available()

    def get_client_root(self, cwd: Path) -> Path | None:
        """Delegate read operation to wrapped implementation."""
        return self._wrapped.get_client_root(cwd)

    def edit(self, cwd: Path, path: str) -> P4Result:
        return self._print("edit", path)

    def add(self, cwd: Path, path: str) -> P4Result:
        return self._print("add", path)

    def delete(self, cwd: Path, path: str) -> P4Result:
        return self._print("delete", path)

    def move(self, cwd: Path, from_path: str, to_path: str) -> P4Result:
        return self._print("move", from_path, to_path)

    def _print(self, *words: str) -> P4Result:
        line = " ".join(words)
        machine_output(line)
        return P4Result(success=True, output=line)
