"""Repository discovery functionality.

Discovers the working tree root and the branch layout once per invocation so
that every operation works from the same snapshot of state.
"""

from dataclasses import dataclass
from pathlib import Path

from layergit.core.git.abc import Git

BASELINE_BRANCH = "baseline"
# Repositories created by older releases used git's default branch as baseline
LEGACY_BASELINE_BRANCH = "master"
DEFAULT_TOPIC_BRANCH = "work"


@dataclass(frozen=True)
class RepoContext:
    """A layergit-managed working tree as seen at invocation time."""

    root: Path
    baseline_branch: str
    current_branch: str | None

    @property
    def on_baseline(self) -> bool:
        return self.current_branch == self.baseline_branch


@dataclass(frozen=True)
class NoRepoSentinel:
    """Sentinel value indicating execution outside a layergit repository.

    Used when commands run before init/clone, or in a plain git repository
    that has no baseline branch. Commands that require repo context check for
    this sentinel and fail fast.
    """

    message: str = "Not inside a layergit repository"


def detect_baseline_branch(branches: list[str]) -> str | None:
    """Pick the baseline branch name, preferring the current convention.

    Example:
        >>> detect_baseline_branch(["work", "master"])
        'master'
        >>> detect_baseline_branch(["baseline", "master"])
        'baseline'
    """
    for candidate in (BASELINE_BRANCH, LEGACY_BASELINE_BRANCH):
        if candidate in branches:
            return candidate
    return None


def discover_repo_or_sentinel(cwd: Path, git: Git) -> RepoContext | NoRepoSentinel:
    """Find the working tree containing cwd and its baseline branch.

    Args:
        cwd: Current working directory to start search from
        git: Git operations interface

    Returns:
        RepoContext if inside a layergit repository, NoRepoSentinel otherwise
    """
    root = git.get_repo_root(cwd)
    if root is None:
        return NoRepoSentinel(message="Not inside a git repository")

    baseline = detect_baseline_branch(git.list_local_branches(root))
    if baseline is None:
        return NoRepoSentinel(
            message=(
                f"No '{BASELINE_BRANCH}' (or legacy '{LEGACY_BASELINE_BRANCH}') branch in "
                f"{root}; run 'lg init' or 'lg clone' first"
            )
        )

    return RepoContext(
        root=root,
        baseline_branch=baseline,
        current_branch=git.get_current_branch(root),
    )
