"""High-level git operations interface.

This module provides a clean abstraction over git subprocess calls, making the
workflow engine testable against an in-memory fake.

Architecture:
- Git: Abstract base class defining the interface
- RealGit: Production implementation using subprocess
"""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Literal

ResetMode = Literal["soft", "mixed"]


class Git(ABC):
    """Abstract interface for git operations.

    All implementations (real and fake) must implement this interface.
    This interface contains ONLY runtime operations - no test setup methods.
    """

    @abstractmethod
    def init_repository(
        self, root: Path, *, initial_branch: str, separate_git_dir: Path | None
    ) -> None:
        """Create a new repository at root.

        Args:
            root: Working tree root
            initial_branch: Name of the unborn branch HEAD points at
            separate_git_dir: Where to place the git directory instead of root/.git.
                git leaves a ``.git`` pointer file in the working tree when set.
        """
        ...

    @abstractmethod
    def get_repo_root(self, cwd: Path) -> Path | None:
        """Get the working tree root containing cwd, or None outside a repository."""
        ...

    @abstractmethod
    def get_git_dir(self, cwd: Path) -> Path | None:
        """Get the absolute git directory, following ``.git`` pointer files."""
        ...

    @abstractmethod
    def get_current_branch(self, cwd: Path) -> str | None:
        """Get the currently checked-out branch (None for detached HEAD)."""
        ...

    @abstractmethod
    def list_local_branches(self, repo_root: Path) -> list[str]:
        """List all local branch names in the repository."""
        ...

    @abstractmethod
    def list_remote_branches(self, repo_root: Path) -> list[str]:
        """List remote branch names with remote prefix (e.g., 'origin/baseline')."""
        ...

    @abstractmethod
    def checkout_branch(self, cwd: Path, branch: str) -> None:
        """Checkout an existing branch."""
        ...

    @abstractmethod
    def checkout_new_branch(self, cwd: Path, branch: str) -> None:
        """Create a branch at HEAD and check it out, leaving files untouched."""
        ...

    @abstractmethod
    def list_tracked_files(self, repo_root: Path, ref: str) -> list[str]:
        """List every path in the tree of ref, relative to the repository root."""
        ...

    @abstractmethod
    def list_index_files(self, repo_root: Path) -> list[str]:
        """List every path in the index of the checked-out branch, staged or committed."""
        ...

    @abstractmethod
    def has_uncommitted_changes(self, cwd: Path) -> bool:
        """Check for staged or unstaged changes to tracked files.

        Untracked files are ignored: files never imported are not local edits.
        """
        ...

    @abstractmethod
    def add_paths(self, cwd: Path, paths: list[str], *, force: bool) -> None:
        """Stage the given paths.

        Args:
            cwd: Working directory
            paths: Paths relative to cwd
            force: Add even if the path matches an ignore rule
        """
        ...

    @abstractmethod
    def stage_tracked_changes(self, cwd: Path, paths: list[str]) -> None:
        """Stage modifications and deletions of already-tracked paths only."""
        ...

    @abstractmethod
    def commit(self, cwd: Path, message: str, *, allow_empty: bool = False) -> bool:
        """Commit the index.

        Returns:
            True if a commit was created, False if there was nothing to commit
        """
        ...

    @abstractmethod
    def stash_push(self, cwd: Path, message: str) -> None:
        """Save uncommitted changes to tracked files onto the stash."""
        ...

    @abstractmethod
    def stash_pop(self, cwd: Path) -> None:
        """Re-apply and drop the most recent stash entry.

        Raises:
            RuntimeError: If the stash cannot be applied cleanly
        """
        ...

    @abstractmethod
    def count_stashes(self, cwd: Path) -> int:
        """Number of entries on the stash."""
        ...

    @abstractmethod
    def rebase(self, cwd: Path, upstream: str) -> bool:
        """Rebase the current branch onto upstream.

        Returns:
            True on success, False if the rebase stopped on conflicts. In that
            case the rebase is left in progress for the user to resolve.
        """
        ...

    @abstractmethod
    def get_diff(self, cwd: Path, revision_range: str) -> str:
        """Get unified diff text for a revision range with rename detection."""
        ...

    @abstractmethod
    def get_log(self, cwd: Path, revision_range: str) -> str:
        """Get log output for a revision range."""
        ...

    @abstractmethod
    def get_status(self, cwd: Path) -> str:
        """Get working tree status, ignoring untracked files."""
        ...

    @abstractmethod
    def add_remote(self, repo_root: Path, name: str, url: str) -> None:
        """Register a remote."""
        ...

    @abstractmethod
    def fetch(self, repo_root: Path, remote: str) -> None:
        """Fetch all branches of a remote."""
        ...

    @abstractmethod
    def reset(self, repo_root: Path, ref: str, *, mode: ResetMode) -> None:
        """Move the current branch to ref without touching the working tree.

        Args:
            repo_root: Path to the repository root
            ref: Target commit
            mode: "soft" keeps the index, "mixed" refreshes it from ref
        """
        ...

    @abstractmethod
    def exclude_path(self, repo_root: Path, pattern: str) -> None:
        """Append a pattern to the repository's info/exclude file."""
        ...
