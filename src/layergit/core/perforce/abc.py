"""Legacy SCM (Perforce) operations interface.

The export bridge reflects topic-branch changes into a Perforce pending
changelist through this interface. Only the four file-level verbs the bridge
needs are exposed, plus the environment checks it runs before issuing any.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class P4Result:
    """Outcome of a single p4 command."""

    success: bool
    output: str


class Perforce(ABC):
    """Abstract interface for Perforce client operations.

    Paths are passed already escaped for Perforce's special characters.
    """

    @abstractmethod
    def is_available(self) -> bool:
        """Check whether the p4 executable can be found."""
        ...

    @abstractmethod
    def get_client_root(self, cwd: Path) -> Path | None:
        """Get the root of the current client workspace, or None if there is none."""
        ...

    @abstractmethod
    def edit(self, cwd: Path, path: str) -> P4Result:
        """Open a file for edit."""
        ...

    @abstractmethod
    def add(self, cwd: Path, path: str) -> P4Result:
        """Open a new file for add."""
        ...

    @abstractmethod
    def delete(self, cwd: Path, path: str) -> P4Result:
        """Open a file for delete."""
        ...

    @abstractmethod
    def move(self, cwd: Path, from_path: str, to_path: str) -> P4Result:
        """Move a file already opened for edit."""
        ...
