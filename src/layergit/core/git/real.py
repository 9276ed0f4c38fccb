"""Production Git implementation using subprocess.

This module provides the real Git implementation that executes actual git
commands via subprocess.
"""

import subprocess
from pathlib import Path

from layergit.core.git.abc import Git, ResetMode
from layergit.core.subprocess import format_command_failure, run_subprocess_with_context

_NOTHING_TO_COMMIT_MARKERS = (
    "nothing to commit",
    "nothing added to commit",
    "no changes added to commit",
)

# ============================================================================
# Production Implementation
# ============================================================================


class RealGit(Git):
    """Production implementation using subprocess.

    All git operations execute actual git commands via subprocess.
    """

    def init_repository(
        self, root: Path, *, initial_branch: str, separate_git_dir: Path | None
    ) -> None:
        """Create a new repository at root."""
        cmd = ["git", "init", "--quiet", f"--initial-branch={initial_branch}"]
        if separate_git_dir is not None:
            separate_git_dir.parent.mkdir(parents=True, exist_ok=True)
            cmd.append(f"--separate-git-dir={separate_git_dir}")
        cmd.append(str(root))
        run_subprocess_with_context(cmd, operation_context="initialize repository", cwd=root)

    def get_repo_root(self, cwd: Path) -> Path | None:
        """Get the working tree root containing cwd."""
        result = subprocess.run(
            ["git", "rev-parse", "--show-toplevel"],
            cwd=cwd,
            capture_output=True,
            text=True,
            check=False,
        )
        if result.returncode != 0:
            return None
        return Path(result.stdout.strip()).resolve()

    def get_git_dir(self, cwd: Path) -> Path | None:
        """Get the absolute git directory."""
        result = subprocess.run(
            ["git", "rev-parse", "--absolute-git-dir"],
            cwd=cwd,
            capture_output=True,
            text=True,
            check=False,
        )
        if result.returncode != 0:
            return None
        return Path(result.stdout.strip())

    def get_current_branch(self, cwd: Path) -> str | None:
        """Get the currently checked-out branch."""
        result = subprocess.run(
            ["git", "symbolic-ref", "--quiet", "--short", "HEAD"],
            cwd=cwd,
            capture_output=True,
            text=True,
            check=False,
        )
        if result.returncode != 0:
            return None
        return result.stdout.strip()

    def list_local_branches(self, repo_root: Path) -> list[str]:
        """List all local branch names in the repository."""
        result = run_subprocess_with_context(
            ["git", "branch", "--format=%(refname:short)"],
            operation_context="list local branches",
            cwd=repo_root,
        )
        return [line.strip() for line in result.stdout.splitlines() if line.strip()]

    def list_remote_branches(self, repo_root: Path) -> list[str]:
        """List all remote branch names in the repository."""
        result = run_subprocess_with_context(
            ["git", "branch", "-r", "--format=%(refname:short)"],
            operation_context="list remote branches",
            cwd=repo_root,
        )
        return [line.strip() for line in result.stdout.splitlines() if line.strip()]

    def checkout_branch(self, cwd: Path, branch: str) -> None:
        """Checkout an existing branch."""
        run_subprocess_with_context(
            ["git", "checkout", "--quiet", branch],
            operation_context=f"checkout branch '{branch}'",
            cwd=cwd,
        )

    def checkout_new_branch(self, cwd: Path, branch: str) -> None:
        """Create a branch at HEAD and check it out."""
        run_subprocess_with_context(
            ["git", "checkout", "--quiet", "-b", branch],
            operation_context=f"create branch '{branch}'",
            cwd=cwd,
        )

    def list_tracked_files(self, repo_root: Path, ref: str) -> list[str]:
        """List every path in the tree of ref."""
        result = run_subprocess_with_context(
            ["git", "ls-tree", "-r", "-z", "--name-only", "--full-tree", ref],
            operation_context=f"list files tracked in '{ref}'",
            cwd=repo_root,
        )
        return [name for name in result.stdout.split("\0") if name]

    def list_index_files(self, repo_root: Path) -> list[str]:
        result = run_subprocess_with_context(
            ["git", "ls-files", "-z", "--full-name", ":/"],
            operation_context="list files in the index",
            cwd=repo_root,
        )
        return [name for name in result.stdout.split("\0") if name]

    def has_uncommitted_changes(self, cwd: Path) -> bool:
        """Check for staged or unstaged changes to tracked files."""
        result = run_subprocess_with_context(
            ["git", "status", "--porcelain", "--untracked-files=no"],
            operation_context="check for uncommitted changes",
            cwd=cwd,
        )
        return bool(result.stdout.strip())

    def add_paths(self, cwd: Path, paths: list[str], *, force: bool) -> None:
        """Stage the given paths."""
        cmd = ["git", "add"]
        if force:
            cmd.append("--force")
        run_subprocess_with_context(
            [*cmd, "--", *paths],
            operation_context="stage files",
            cwd=cwd,
        )

    def stage_tracked_changes(self, cwd: Path, paths: list[str]) -> None:
        """Stage modifications and deletions of already-tracked paths only."""
        # An empty pathspec would mean "everything" to git add --update
        if not paths:
            return
        run_subprocess_with_context(
            ["git", "add", "--update", "--pathspec-from-file=-", "--pathspec-file-nul"],
            operation_context="stage tracked changes",
            cwd=cwd,
            input="\0".join(paths),
        )

    def commit(self, cwd: Path, message: str, *, allow_empty: bool = False) -> bool:
        """Commit the index, reporting False when there was nothing to commit."""
        cmd = ["git", "commit", "-m", message]
        if allow_empty:
            cmd.append("--allow-empty")
        result = run_subprocess_with_context(cmd, operation_context="commit", cwd=cwd, check=False)
        if result.returncode == 0:
            return True

        output = result.stdout + result.stderr
        if any(marker in output for marker in _NOTHING_TO_COMMIT_MARKERS):
            return False

        raise RuntimeError(
            format_command_failure("commit", cmd, result.returncode, result.stdout, result.stderr)
        )

    def stash_push(self, cwd: Path, message: str) -> None:
        """Save uncommitted changes to tracked files onto the stash."""
        run_subprocess_with_context(
            ["git", "stash", "push", "--quiet", "-m", message],
            operation_context="stash uncommitted changes",
            cwd=cwd,
        )

    def stash_pop(self, cwd: Path) -> None:
        """Re-apply and drop the most recent stash entry."""
        run_subprocess_with_context(
            ["git", "stash", "pop", "--quiet"],
            operation_context="restore stashed changes",
            cwd=cwd,
        )

    def count_stashes(self, cwd: Path) -> int:
        """Number of entries on the stash."""
        result = run_subprocess_with_context(
            ["git", "stash", "list"],
            operation_context="list stash entries",
            cwd=cwd,
        )
        return len([line for line in result.stdout.splitlines() if line.strip()])

    def rebase(self, cwd: Path, upstream: str) -> bool:
        """Rebase the current branch onto upstream."""
        cmd = ["git", "rebase", "--quiet", upstream]
        operation_context = f"rebase onto '{upstream}'"
        result = run_subprocess_with_context(cmd, operation_context, cwd=cwd, check=False)
        if result.returncode == 0:
            return True

        git_dir = self.get_git_dir(cwd)
        in_progress = git_dir is not None and (
            (git_dir / "rebase-merge").exists() or (git_dir / "rebase-apply").exists()
        )
        if in_progress:
            return False

        raise RuntimeError(
            format_command_failure(
                operation_context, cmd, result.returncode, result.stdout, result.stderr
            )
        )

    def get_diff(self, cwd: Path, revision_range: str) -> str:
        """Get unified diff text for a revision range with rename detection."""
        result = run_subprocess_with_context(
            [
                "git",
                "-c",
                "core.quotePath=false",
                "diff",
                "--no-color",
                "--no-ext-diff",
                "--find-renames",
                "--src-prefix=a/",
                "--dst-prefix=b/",
                revision_range,
                "--",
            ],
            operation_context=f"diff '{revision_range}'",
            cwd=cwd,
        )
        return result.stdout

    def get_log(self, cwd: Path, revision_range: str) -> str:
        """Get log output for a revision range."""
        result = run_subprocess_with_context(
            ["git", "log", "--no-color", revision_range, "--"],
            operation_context=f"show log for '{revision_range}'",
            cwd=cwd,
        )
        return result.stdout

    def get_status(self, cwd: Path) -> str:
        """Get working tree status, ignoring untracked files."""
        result = run_subprocess_with_context(
            ["git", "status", "--untracked-files=no"],
            operation_context="show status",
            cwd=cwd,
        )
        return result.stdout

    def add_remote(self, repo_root: Path, name: str, url: str) -> None:
        """Register a remote."""
        run_subprocess_with_context(
            ["git", "remote", "add", name, url],
            operation_context=f"add remote '{name}'",
            cwd=repo_root,
        )

    def fetch(self, repo_root: Path, remote: str) -> None:
        """Fetch all branches of a remote."""
        run_subprocess_with_context(
            ["git", "fetch", "--quiet", remote],
            operation_context=f"fetch '{remote}'",
            cwd=repo_root,
        )

    def reset(self, repo_root: Path, ref: str, *, mode: ResetMode) -> None:
        """Move the current branch to ref without touching the working tree."""
        run_subprocess_with_context(
            ["git", "reset", "--quiet", f"--{mode}", ref],
            operation_context=f"reset to '{ref}'",
            cwd=repo_root,
        )

    def exclude_path(self, repo_root: Path, pattern: str) -> None:
        """Append a pattern to the repository's info/exclude file."""
        git_dir = self.get_git_dir(repo_root)
        if git_dir is None:
            raise RuntimeError(f"Failed to locate git directory for {repo_root}")

        exclude_file = git_dir / "info" / "exclude"
        exclude_file.parent.mkdir(parents=True, exist_ok=True)
        existing = exclude_file.read_text(encoding="utf-8") if exclude_file.exists() else ""
        if pattern in existing.splitlines():
            return
        if existing and not existing.endswith("\n"):
            existing += "\n"
        exclude_file.write_text(existing + pattern + "\n", encoding="utf-8")
