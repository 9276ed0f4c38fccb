"""Application context with dependency injection."""

import logging
from dataclasses import dataclass
from pathlib import Path

from layergit.core.config import LgConfig
from layergit.core.git.abc import Git
from layergit.core.git.real import RealGit
from layergit.core.perforce.abc import Perforce
from layergit.core.perforce.dry_run import DryRunPerforce
from layergit.core.perforce.real import RealPerforce
from layergit.core.repo_discovery import NoRepoSentinel, RepoContext, discover_repo_or_sentinel


@dataclass(frozen=True)
class LgContext:
    """Immutable context holding all dependencies for layergit operations.

    Created at CLI entry point and threaded through the application.
    Frozen to prevent accidental modification at runtime; the repository
    state it records is a snapshot taken once per invocation.
    """

    git: Git
    perforce: Perforce
    cwd: Path  # Current working directory at CLI invocation
    config: LgConfig
    repo: RepoContext | NoRepoSentinel
    dry_run: bool


def with_dry_run(ctx: LgContext) -> LgContext:
    """Return a copy of ctx whose Perforce writes are printed instead of executed."""
    if ctx.dry_run:
        return ctx
    return LgContext(
        git=ctx.git,
        perforce=DryRunPerforce(ctx.perforce),
        cwd=ctx.cwd,
        config=ctx.config,
        repo=ctx.repo,
        dry_run=True,
    )


def create_context(*, dry_run: bool) -> LgContext:
    """Create production context with real implementations.

    Called at CLI entry point to create the context for the entire
    command execution.

    Args:
        dry_run: If True, wrap Perforce with the dry-run wrapper that prints
                 intended commands without executing them

    Returns:
        LgContext with real implementations
    """
    # 1. Capture cwd and environment configuration (no deps)
    cwd = Path.cwd()
    config = LgConfig.from_env()
    if config.debug:
        logging.basicConfig(level=logging.DEBUG, format="[DEBUG %(name)s:%(lineno)d] %(message)s")

    # 2. Create integrations
    git: Git = RealGit()
    perforce: Perforce = RealPerforce(config.p4_executable)

    # 3. Discover repo (init and clone run without one)
    repo = discover_repo_or_sentinel(cwd, git)

    # 4. Apply dry-run wrapper if needed
    if dry_run:
        perforce = DryRunPerforce(perforce)

    return LgContext(
        git=git,
        perforce=perforce,
        cwd=cwd,
        config=config,
        repo=repo,
        dry_run=dry_run,
    )
