"""Branch workflow engine.

Keeps the baseline branch (what Perforce has, as last known) and the topic
branches (local work) consistent. Every operation validates its preconditions
before issuing the first mutating git command; once mutation has started,
failures are surfaced with the repository left in git's own recoverable state.

Operations:
- init_store: new store with an empty baseline commit and a topic branch
- import_paths: add files to the baseline, rebase the topic branch onto it
- sync_baseline: fold external edits of already-baselined files into the baseline
- clone_store: bootstrap a store from existing metadata
- list_files / topic_log / working_status: read-only views of the topic branch
"""

import logging
import os
import tomllib
from dataclasses import dataclass
from pathlib import Path, PurePosixPath

from layergit.core.config import MARKER_FILE_NAME, metadata_dir_for, write_marker
from layergit.core.context import LgContext
from layergit.core.diff_translator import FileChange, translate
from layergit.core.errors import (
    LgError,
    PreconditionError,
    RebaseConflictError,
    StashRestoreError,
)
from layergit.core.git.abc import Git
from layergit.core.repo_discovery import (
    BASELINE_BRANCH,
    DEFAULT_TOPIC_BRANCH,
    NoRepoSentinel,
    RepoContext,
    detect_baseline_branch,
)

logger = logging.getLogger(__name__)

MESSAGE_WIDTH = 77
ELLIPSIS = "..."
IMPORT_PREFIX = "import: "
INITIAL_BASELINE_MESSAGE = "Initial baseline"
DEFAULT_SYNC_MESSAGE = "sync: external changes"
CLONE_REMOTE = "origin"


@dataclass(frozen=True)
class ImportResult:
    """Outcome of a successful import."""

    paths: list[str]
    message: str
    committed: bool
    stashed: bool


# ============================================================================
# Precondition helpers
# ============================================================================


def require_repo(ctx: LgContext) -> RepoContext:
    """Return the discovered repository or refuse to continue."""
    if isinstance(ctx.repo, NoRepoSentinel):
        raise PreconditionError(ctx.repo.message)
    return ctx.repo


def require_topic_branch(ctx: LgContext, operation: str) -> tuple[RepoContext, str]:
    """Return the repository and the checked-out topic branch.

    Raises:
        PreconditionError: If HEAD is detached or on the baseline branch
    """
    repo = require_repo(ctx)
    if repo.current_branch is None:
        raise PreconditionError(f"{operation} needs a topic branch checked out (HEAD is detached)")
    if repo.on_baseline:
        raise PreconditionError(
            f"{operation} must be run from a topic branch, not '{repo.baseline_branch}'"
        )
    return repo, repo.current_branch


def _refuse_existing_metadata(root: Path, separate_git_dir: Path | None) -> None:
    for existing in (root / ".git", root / MARKER_FILE_NAME):
        if existing.exists():
            raise PreconditionError(f"{existing} already exists; refusing to overwrite it")
    if separate_git_dir is not None and separate_git_dir.exists():
        raise PreconditionError(f"metadata directory {separate_git_dir} already exists")


# ============================================================================
# init / clone
# ============================================================================


def init_store(
    ctx: LgContext,
    *,
    topic_branch: str = DEFAULT_TOPIC_BRANCH,
    remote_dir: Path | None = None,
) -> Path:
    """Create a new store in the current directory.

    The baseline branch gets one empty commit so that the first import has
    something to rebase the topic branch onto.

    Args:
        ctx: Application context
        topic_branch: Name of the topic branch to create and check out
        remote_dir: Metadata prefix; when set the git directory lives outside
            the working tree and ``.git`` becomes a pointer file

    Returns:
        The git directory that was created
    """
    root = ctx.cwd.resolve()
    separate_git_dir = metadata_dir_for(root, remote_dir) if remote_dir is not None else None
    _refuse_existing_metadata(root, separate_git_dir)
    _check_topic_name(topic_branch)

    logger.debug("Initializing store: root=%s, git_dir=%s", root, separate_git_dir)
    ctx.git.init_repository(root, initial_branch=BASELINE_BRANCH, separate_git_dir=separate_git_dir)
    ctx.git.exclude_path(root, f"/{MARKER_FILE_NAME}")
    ctx.git.commit(root, INITIAL_BASELINE_MESSAGE, allow_empty=True)
    ctx.git.checkout_new_branch(root, topic_branch)

    git_dir = separate_git_dir if separate_git_dir is not None else root / ".git"
    write_marker(root, baseline_branch=BASELINE_BRANCH, git_dir=git_dir)
    return git_dir


def resolve_metadata_source(source: Path) -> Path:
    """Dereference a clone source to the git directory it designates.

    The source may be a git directory, a ``.git`` pointer file
    (``gitdir: <path>``), or a ``.lg`` marker file.

    Raises:
        PreconditionError: If the source or its target does not exist
    """
    if not source.exists():
        raise PreconditionError(f"clone source {source} not found")
    if source.is_dir():
        return source.resolve()

    content = source.read_text(encoding="utf-8")
    target: str | None = None
    if content.startswith("gitdir:"):
        target = content.splitlines()[0][len("gitdir:") :].strip()
    else:
        try:
            target = tomllib.loads(content).get("git_dir")
        except tomllib.TOMLDecodeError as e:
            raise PreconditionError(f"{source} is neither a directory nor a pointer file") from e
    if not target:
        raise PreconditionError(f"{source} does not record a metadata location")

    target_path = Path(target)
    if not target_path.is_absolute():
        target_path = source.parent / target_path
    if not target_path.is_dir():
        raise PreconditionError(f"{source} points at {target_path}, which does not exist")
    return target_path.resolve()


def clone_store(
    ctx: LgContext,
    source: Path,
    *,
    topic_branch: str | None = None,
    remote_dir: Path | None = None,
) -> Path:
    """Bootstrap a store in the current directory from existing metadata.

    The working tree is assumed to already hold the files (typically synced
    from Perforce); only the branch pointer is moved, so local modifications
    survive untouched.

    Returns:
        The git directory that was created
    """
    root = ctx.cwd.resolve()
    source_path = source if source.is_absolute() else ctx.cwd / source
    metadata = resolve_metadata_source(source_path)
    separate_git_dir = metadata_dir_for(root, remote_dir) if remote_dir is not None else None
    _refuse_existing_metadata(root, separate_git_dir)
    if topic_branch is not None:
        _check_topic_name(topic_branch)

    logger.debug("Cloning store: root=%s, source=%s", root, metadata)
    ctx.git.init_repository(root, initial_branch=BASELINE_BRANCH, separate_git_dir=separate_git_dir)
    ctx.git.exclude_path(root, f"/{MARKER_FILE_NAME}")
    ctx.git.add_remote(root, CLONE_REMOTE, str(metadata))
    ctx.git.fetch(root, CLONE_REMOTE)

    remote_prefix = f"{CLONE_REMOTE}/"
    remote_branches = [
        branch.removeprefix(remote_prefix)
        for branch in ctx.git.list_remote_branches(root)
        if branch.startswith(remote_prefix)
    ]
    remote_baseline = detect_baseline_branch(remote_branches)
    if remote_baseline is None:
        raise LgError(f"{metadata} has no baseline branch to clone")

    # The fresh index is empty, so it is refreshed from the baseline tree;
    # the working tree is never touched.
    ctx.git.reset(root, f"{remote_prefix}{remote_baseline}", mode="mixed")
    if topic_branch is not None:
        ctx.git.checkout_new_branch(root, topic_branch)

    git_dir = separate_git_dir if separate_git_dir is not None else root / ".git"
    write_marker(root, baseline_branch=BASELINE_BRANCH, git_dir=git_dir)
    return git_dir


def _check_topic_name(topic_branch: str) -> None:
    if topic_branch in (BASELINE_BRANCH, "HEAD") or not topic_branch.strip():
        raise PreconditionError(f"'{topic_branch}' cannot be used as a topic branch name")


# ============================================================================
# import
# ============================================================================


def build_import_message(paths: list[str], width: int = MESSAGE_WIDTH) -> str:
    """Build the baseline commit message for an import.

    Uses full paths when they fit in width, basenames otherwise, and finally
    truncates with an ellipsis so the message never exceeds width.

    Example:
        >>> build_import_message(["src/a.c", "src/b.c"])
        'import: src/a.c src/b.c'
    """
    full = IMPORT_PREFIX + " ".join(paths)
    if len(full) <= width:
        return full

    short = IMPORT_PREFIX + " ".join(PurePosixPath(path).name for path in paths)
    if len(short) <= width:
        return short

    return short[: width - len(ELLIPSIS)] + ELLIPSIS


def validate_import_paths(
    git: Git, repo: RepoContext, cwd: Path, paths: list[str]
) -> list[str]:
    """Canonicalize import arguments and check every precondition.

    Paths are resolved through symlinks and ``..`` before comparison, and
    the already-baselined check is an exact membership test against the
    baseline tree.

    Returns:
        Paths relative to the repository root, de-duplicated, in argument order

    Raises:
        PreconditionError: On the first missing, outside-root, non-file,
            already baselined or staged-only path
    """
    if not paths:
        raise PreconditionError("nothing to import")

    tracked = set(git.list_tracked_files(repo.root, repo.baseline_branch))
    committed_on_topic = set(git.list_tracked_files(repo.root, "HEAD")) - tracked
    staged_on_topic = set(git.list_index_files(repo.root)) - tracked
    root = repo.root.resolve()
    relative_paths: list[str] = []

    for raw in paths:
        candidate = Path(raw)
        if not candidate.is_absolute():
            candidate = cwd / candidate
        if not os.path.lexists(candidate):
            raise PreconditionError(f"{raw}: no such file")

        real = candidate.resolve()
        if not real.is_relative_to(root):
            raise PreconditionError(f"{raw}: outside repository root {root}")
        if real.is_dir():
            raise PreconditionError(f"{raw}: is a directory; import files one by one")
        if not real.is_file():
            raise PreconditionError(f"{raw}: not a regular file (dangling symlink?)")

        relative = real.relative_to(root).as_posix()
        if relative == MARKER_FILE_NAME:
            raise PreconditionError(f"{raw}: is layergit bookkeeping, not a project file")
        if relative in tracked:
            raise PreconditionError(f"{raw}: already baselined")
        if relative in committed_on_topic:
            raise PreconditionError(
                f"{raw}: committed on the topic branch; remove it from the topic branch first"
            )
        if relative in staged_on_topic:
            raise PreconditionError(
                f"{raw}: staged on the topic branch but not committed; commit or unstage it first"
            )
        if relative not in relative_paths:
            relative_paths.append(relative)

    return relative_paths


def import_paths(ctx: LgContext, paths: list[str]) -> ImportResult:
    """Add files to the baseline branch and rebase the topic branch onto it.

    Steps:
    1. Validate every path (all-or-nothing, before any mutation)
    2. Remember the topic branch
    3. Stash uncommitted edits, if any
    4. Switch to the baseline branch
    5. Force-add the paths and commit ("nothing to commit" is tolerated)
    6. Switch back to the topic branch
    7. Rebase it onto the baseline
    8. Restore the stash, if one was taken

    A failure in steps 4 to 6 still returns to the topic branch and restores
    the stash before the error propagates.

    Raises:
        PreconditionError: If validation fails (nothing was changed)
        RebaseConflictError: If step 7 stops on conflicts
        StashRestoreError: If step 8 fails
    """
    repo, topic = require_topic_branch(ctx, "import")
    relative_paths = validate_import_paths(ctx.git, repo, ctx.cwd, paths)
    message = build_import_message(relative_paths)
    root = repo.root
    baseline = repo.baseline_branch
    logger.debug("Importing %s into %s from %s", relative_paths, baseline, topic)

    stashed = ctx.git.has_uncommitted_changes(root)
    if stashed:
        ctx.git.stash_push(root, f"lg import: local edits on {topic}")

    try:
        committed = _commit_on_baseline(ctx.git, root, baseline, topic, relative_paths, message)
    except RuntimeError as e:
        if stashed:
            restore_stash(ctx.git, root, after=e)
        raise

    if not committed:
        logger.info("Nothing to commit on %s for %s", baseline, relative_paths)

    if not ctx.git.rebase(root, baseline):
        raise RebaseConflictError(topic, baseline, stashed=stashed)

    if stashed:
        restore_stash(ctx.git, root)

    return ImportResult(
        paths=relative_paths, message=message, committed=committed, stashed=stashed
    )


def _commit_on_baseline(
    git: Git, root: Path, baseline: str, topic: str, paths: list[str], message: str
) -> bool:
    git.checkout_branch(root, baseline)
    try:
        git.add_paths(root, paths, force=True)
        return git.commit(root, message)
    finally:
        git.checkout_branch(root, topic)


def restore_stash(git: Git, root: Path, *, after: Exception | None = None) -> None:
    """Pop the stash taken by this operation.

    Args:
        after: The failure that interrupted the operation, if any. A failed
            restore is chained to it instead of to the pop error.

    Raises:
        StashRestoreError: If git cannot re-apply it; the entry stays on the stash
    """
    try:
        git.stash_pop(root)
    except RuntimeError as e:
        raise StashRestoreError(
            "could not restore your uncommitted edits; they are still on the stash. "
            "Run 'git stash pop' and repair the working tree manually"
        ) from (after if after is not None else e)


# ============================================================================
# sync
# ============================================================================


def sync_baseline(ctx: LgContext, message: str | None = None) -> bool:
    """Commit external changes to already-baselined files into the baseline.

    Files Perforce added that were never imported stay untracked.

    Returns:
        True if a commit was created, False if the baseline was already current
    """
    repo = require_repo(ctx)
    if not repo.on_baseline:
        raise PreconditionError(
            f"sync must be run on the '{repo.baseline_branch}' branch "
            f"(currently on '{repo.current_branch}')"
        )

    tracked = [
        path
        for path in ctx.git.list_tracked_files(repo.root, repo.baseline_branch)
        if path != MARKER_FILE_NAME
    ]
    logger.debug("Syncing %d tracked files into %s", len(tracked), repo.baseline_branch)
    ctx.git.stage_tracked_changes(repo.root, tracked)
    return ctx.git.commit(repo.root, message or DEFAULT_SYNC_MESSAGE)


# ============================================================================
# Read-only views
# ============================================================================


def list_files(ctx: LgContext, revision_range: str | None = None) -> list[FileChange]:
    """Changes unique to the topic branch, one record per touched path."""
    repo, _ = require_topic_branch(ctx, "files")
    revision_range = revision_range or f"{repo.baseline_branch}...HEAD"
    return translate(ctx.git.get_diff(repo.root, revision_range), "status")


def topic_log(ctx: LgContext, revision_range: str | None = None) -> str:
    """Log of the commits not reachable from the baseline branch."""
    repo, _ = require_topic_branch(ctx, "log")
    revision_range = revision_range or f"{repo.baseline_branch}..HEAD"
    return ctx.git.get_log(repo.root, revision_range)


def working_status(ctx: LgContext) -> str:
    """Working tree status with never-imported files hidden."""
    repo = require_repo(ctx)
    return ctx.git.get_status(repo.root)
