"""Tests for importing files into the baseline branch."""

from pathlib import Path

import pytest

from layergit.core.errors import PreconditionError, RebaseConflictError, StashRestoreError
from layergit.core.repo_discovery import RepoContext
from layergit.core.workflow import import_paths, validate_import_paths
from tests.fakes.context import create_test_context, topic_repo
from tests.fakes.git import FakeGit


def _store(tmp_path: Path, *names: str) -> Path:
    root = tmp_path / "store"
    root.mkdir()
    for name in names:
        file_path = root / name
        file_path.parent.mkdir(parents=True, exist_ok=True)
        file_path.write_text(f"{name}\n", encoding="utf-8")
    return root.resolve()


def test_import_runs_the_branch_dance_in_order(tmp_path: Path) -> None:
    root = _store(tmp_path, "a.txt", "lib/b.txt")
    git = FakeGit(repo_root=root, current_branch="work", local_branches=["baseline", "work"])
    ctx = create_test_context(git=git, cwd=root, repo=topic_repo(root))

    result = import_paths(ctx, ["a.txt", "lib/b.txt"])

    assert result.paths == ["a.txt", "lib/b.txt"]
    assert result.message == "import: a.txt lib/b.txt"
    assert result.committed is True
    assert result.stashed is False
    assert git.mutating_operations == [
        ("checkout", "baseline"),
        ("add", "a.txt", "lib/b.txt"),
        ("commit", "import: a.txt lib/b.txt"),
        ("checkout", "work"),
        ("rebase", "baseline"),
    ]
    assert git.commits == [("import: a.txt lib/b.txt", "baseline", False)]
    assert git.current_branch == "work"


def test_import_stashes_and_restores_uncommitted_edits(tmp_path: Path) -> None:
    root = _store(tmp_path, "new.txt")
    git = FakeGit(repo_root=root, current_branch="work", uncommitted_changes=True)
    ctx = create_test_context(git=git, cwd=root, repo=topic_repo(root))

    result = import_paths(ctx, ["new.txt"])

    assert result.stashed is True
    ops = git.mutating_operations
    assert ops[0] == ("stash-push",)
    assert ops[-1] == ("stash-pop",)
    assert ops.index(("rebase", "baseline")) < ops.index(("stash-pop",))
    assert git.count_stashes(root) == 0


def test_import_resolves_paths_relative_to_cwd(tmp_path: Path) -> None:
    root = _store(tmp_path, "lib/deep/c.txt")
    git = FakeGit(repo_root=root, current_branch="work")
    ctx = create_test_context(git=git, cwd=root / "lib", repo=topic_repo(root))

    result = import_paths(ctx, ["deep/c.txt", "./deep/../deep/c.txt"])

    assert result.paths == ["lib/deep/c.txt"]


def test_nothing_to_commit_is_tolerated(tmp_path: Path) -> None:
    root = _store(tmp_path, "a.txt")
    git = FakeGit(repo_root=root, current_branch="work", commit_succeeds=False)
    ctx = create_test_context(git=git, cwd=root, repo=topic_repo(root))

    result = import_paths(ctx, ["a.txt"])

    assert result.committed is False
    assert ("rebase", "baseline") in git.mutating_operations


def test_missing_file_is_refused_without_mutation(tmp_path: Path) -> None:
    root = _store(tmp_path, "a.txt")
    git = FakeGit(repo_root=root, current_branch="work")
    ctx = create_test_context(git=git, cwd=root, repo=topic_repo(root))

    with pytest.raises(PreconditionError, match="missing.txt: no such file"):
        import_paths(ctx, ["a.txt", "missing.txt"])

    assert git.mutating_operations == []
    assert git.current_branch == "work"


def test_path_outside_root_is_refused(tmp_path: Path) -> None:
    root = _store(tmp_path, "a.txt")
    (tmp_path / "elsewhere.txt").write_text("x\n", encoding="utf-8")
    git = FakeGit(repo_root=root, current_branch="work")
    ctx = create_test_context(git=git, cwd=root, repo=topic_repo(root))

    with pytest.raises(PreconditionError, match="outside repository root"):
        import_paths(ctx, ["../elsewhere.txt"])

    assert git.mutating_operations == []


def test_symlink_escaping_root_is_refused(tmp_path: Path) -> None:
    root = _store(tmp_path)
    target = tmp_path / "secret.txt"
    target.write_text("x\n", encoding="utf-8")
    (root / "link.txt").symlink_to(target)
    git = FakeGit(repo_root=root, current_branch="work")
    ctx = create_test_context(git=git, cwd=root, repo=topic_repo(root))

    with pytest.raises(PreconditionError, match="outside repository root"):
        import_paths(ctx, ["link.txt"])


def test_directory_is_refused(tmp_path: Path) -> None:
    root = _store(tmp_path, "lib/b.txt")
    git = FakeGit(repo_root=root, current_branch="work")
    ctx = create_test_context(git=git, cwd=root, repo=topic_repo(root))

    with pytest.raises(PreconditionError, match="is a directory"):
        import_paths(ctx, ["lib"])


@pytest.mark.parametrize("spelling", ["a.txt", "./a.txt", "lib/../a.txt"])
def test_already_baselined_file_is_refused(tmp_path: Path, spelling: str) -> None:
    root = _store(tmp_path, "a.txt", "lib/x.txt", "b.txt")
    git = FakeGit(
        repo_root=root,
        current_branch="work",
        tracked_files={"baseline": ["a.txt"], "work": ["a.txt"]},
    )
    ctx = create_test_context(git=git, cwd=root, repo=topic_repo(root))

    with pytest.raises(PreconditionError, match="already baselined"):
        import_paths(ctx, ["b.txt", spelling])

    assert git.mutating_operations == []


def test_membership_is_exact_not_substring(tmp_path: Path) -> None:
    root = _store(tmp_path, "a.txt", "data.txt")
    git = FakeGit(repo_root=root, current_branch="work", tracked_files={"baseline": ["data.txt"]})
    repo = topic_repo(root)

    assert validate_import_paths(git, repo, root, ["a.txt"]) == ["a.txt"]


def test_marker_file_is_refused(tmp_path: Path) -> None:
    root = _store(tmp_path, ".lg")
    git = FakeGit(repo_root=root, current_branch="work")
    ctx = create_test_context(git=git, cwd=root, repo=topic_repo(root))

    with pytest.raises(PreconditionError, match="bookkeeping"):
        import_paths(ctx, [".lg"])


def test_file_committed_on_topic_branch_is_refused(tmp_path: Path) -> None:
    root = _store(tmp_path, "mine.txt")
    git = FakeGit(
        repo_root=root,
        current_branch="work",
        tracked_files={"baseline": [], "work": ["mine.txt"]},
    )
    ctx = create_test_context(git=git, cwd=root, repo=topic_repo(root))

    with pytest.raises(PreconditionError, match="committed on the topic branch"):
        import_paths(ctx, ["mine.txt"])


def test_no_arguments_is_refused(tmp_path: Path) -> None:
    root = _store(tmp_path)
    ctx = create_test_context(git=FakeGit(repo_root=root), cwd=root, repo=topic_repo(root))

    with pytest.raises(PreconditionError, match="nothing to import"):
        import_paths(ctx, [])


def test_import_from_baseline_branch_is_refused(tmp_path: Path) -> None:
    root = _store(tmp_path, "a.txt")
    git = FakeGit(repo_root=root, current_branch="baseline")
    repo = RepoContext(root=root, baseline_branch="baseline", current_branch="baseline")
    ctx = create_test_context(git=git, cwd=root, repo=repo)

    with pytest.raises(PreconditionError, match="topic branch"):
        import_paths(ctx, ["a.txt"])

    assert git.mutating_operations == []


def test_import_outside_repository_is_refused() -> None:
    ctx = create_test_context()

    with pytest.raises(PreconditionError, match="Not inside"):
        import_paths(ctx, ["a.txt"])


def test_rebase_conflict_leaves_stash_in_place(tmp_path: Path) -> None:
    root = _store(tmp_path, "a.txt")
    git = FakeGit(
        repo_root=root,
        current_branch="work",
        uncommitted_changes=True,
        rebase_succeeds=False,
    )
    ctx = create_test_context(git=git, cwd=root, repo=topic_repo(root))

    with pytest.raises(RebaseConflictError, match="git stash pop") as exc_info:
        import_paths(ctx, ["a.txt"])

    assert exc_info.value.stashed is True
    assert ("stash-pop",) not in git.mutating_operations
    assert git.count_stashes(root) == 1


def test_rebase_conflict_without_stash_does_not_mention_it(tmp_path: Path) -> None:
    root = _store(tmp_path, "a.txt")
    git = FakeGit(repo_root=root, current_branch="work", rebase_succeeds=False)
    ctx = create_test_context(git=git, cwd=root, repo=topic_repo(root))

    with pytest.raises(RebaseConflictError) as exc_info:
        import_paths(ctx, ["a.txt"])

    assert "stash" not in str(exc_info.value)
    assert "git rebase --continue" in str(exc_info.value)


def test_stash_restore_failure_is_reported(tmp_path: Path) -> None:
    root = _store(tmp_path, "a.txt")
    git = FakeGit(
        repo_root=root,
        current_branch="work",
        uncommitted_changes=True,
        stash_pop_succeeds=False,
    )
    ctx = create_test_context(git=git, cwd=root, repo=topic_repo(root))

    with pytest.raises(StashRestoreError, match="still on the stash"):
        import_paths(ctx, ["a.txt"])

    assert git.count_stashes(root) == 1


def test_failed_add_returns_to_topic_branch(tmp_path: Path) -> None:
    root = _store(tmp_path, "a.txt")
    git = FakeGit(repo_root=root, current_branch="work", add_error="Failed to stage files")
    ctx = create_test_context(git=git, cwd=root, repo=topic_repo(root))

    with pytest.raises(RuntimeError, match="Failed to stage files"):
        import_paths(ctx, ["a.txt"])

    assert git.current_branch == "work"
    assert ("rebase", "baseline") not in git.mutating_operations


def test_failed_add_restores_stashed_edits(tmp_path: Path) -> None:
    root = _store(tmp_path, "a.txt")
    git = FakeGit(
        repo_root=root,
        current_branch="work",
        uncommitted_changes=True,
        add_error="Failed to stage files",
    )
    ctx = create_test_context(git=git, cwd=root, repo=topic_repo(root))

    with pytest.raises(RuntimeError, match="Failed to stage files"):
        import_paths(ctx, ["a.txt"])

    ops = git.mutating_operations
    assert ops[0] == ("stash-push",)
    assert ops[-2:] == [("checkout", "work"), ("stash-pop",)]
    assert git.count_stashes(root) == 0
    assert git.has_uncommitted_changes(root)


def test_failed_add_with_failed_restore_keeps_both_errors(tmp_path: Path) -> None:
    root = _store(tmp_path, "a.txt")
    git = FakeGit(
        repo_root=root,
        current_branch="work",
        uncommitted_changes=True,
        stash_pop_succeeds=False,
        add_error="Failed to stage files",
    )
    ctx = create_test_context(git=git, cwd=root, repo=topic_repo(root))

    with pytest.raises(StashRestoreError, match="still on the stash") as exc_info:
        import_paths(ctx, ["a.txt"])

    assert isinstance(exc_info.value.__cause__, RuntimeError)
    assert "Failed to stage files" in str(exc_info.value.__cause__)
    assert git.current_branch == "work"
    assert git.count_stashes(root) == 1


def test_dangling_symlink_is_refused(tmp_path: Path) -> None:
    root = _store(tmp_path)
    (root / "gone.txt").symlink_to(root / "missing.txt")
    git = FakeGit(repo_root=root, current_branch="work")
    ctx = create_test_context(git=git, cwd=root, repo=topic_repo(root))

    with pytest.raises(PreconditionError, match="not a regular file"):
        import_paths(ctx, ["gone.txt"])

    assert git.mutating_operations == []


def test_file_staged_but_not_committed_is_refused(tmp_path: Path) -> None:
    root = _store(tmp_path, "a.txt", "staged.txt")
    git = FakeGit(
        repo_root=root,
        current_branch="work",
        tracked_files={"baseline": ["a.txt"], "work": ["a.txt"]},
        index_files=["a.txt", "staged.txt"],
        uncommitted_changes=True,
    )
    ctx = create_test_context(git=git, cwd=root, repo=topic_repo(root))

    with pytest.raises(PreconditionError, match="staged on the topic branch"):
        import_paths(ctx, ["staged.txt"])

    assert git.mutating_operations == []
