"""Tests for export and the read-only commands (files, log, status)."""

from pathlib import Path

from click.testing import CliRunner

from layergit.cli.cli import cli
from layergit.core.repo_discovery import RepoContext
from tests.fakes.context import create_test_context, topic_repo
from tests.fakes.git import FakeGit
from tests.fakes.perforce import FakePerforce

ROOT = Path("/repo")

TOPIC_DIFF = """\
diff --git a/a.txt b/a.txt
index 3b18e51..8d6d6b1 100644
--- a/a.txt
+++ b/a.txt
@@ -1 +1 @@
-hello
+hello world
diff --git a/d b/x
similarity index 100%
rename from d
rename to x
diff --git a/icons/logo@2x.png b/icons/logo@2x.png
new file mode 100644
index 0000000..1111111
Binary files /dev/null and b/icons/logo@2x.png differ
"""


def _topic_git() -> FakeGit:
    return FakeGit(
        repo_root=ROOT,
        current_branch="work",
        diffs={"baseline..HEAD": TOPIC_DIFF, "baseline...HEAD": TOPIC_DIFF},
    )


def test_export_dry_run_prints_commands_only() -> None:
    p4 = FakePerforce(available=False)
    ctx = create_test_context(git=_topic_git(), perforce=p4, cwd=ROOT, repo=topic_repo(ROOT))

    result = CliRunner().invoke(cli, ["export", "--dry-run"], obj=ctx)

    assert result.exit_code == 0, result.output
    assert result.stdout == "edit a.txt\nedit d\nmove d x\nadd icons/logo%402x.png\n"
    assert p4.commands == []


def test_export_opens_files_in_perforce() -> None:
    p4 = FakePerforce()
    ctx = create_test_context(git=_topic_git(), perforce=p4, cwd=ROOT, repo=topic_repo(ROOT))

    result = CliRunner().invoke(cli, ["export"], obj=ctx)

    assert result.exit_code == 0, result.output
    assert p4.commands == ["edit a.txt", "edit d", "move d x", "add icons/logo%402x.png"]
    assert "Opened 4 file operation(s) in Perforce" in result.stderr


def test_export_reports_every_failure() -> None:
    p4 = FakePerforce(failing_commands={"edit a.txt", "move d x"})
    ctx = create_test_context(git=_topic_git(), perforce=p4, cwd=ROOT, repo=topic_repo(ROOT))

    result = CliRunner().invoke(cli, ["export"], obj=ctx)

    assert result.exit_code == 1
    assert len(p4.commands) == 4
    assert "Export incomplete" in result.stderr
    assert "lg: 2 p4 command(s) failed: edit a.txt; move d x" in result.stderr


def test_export_without_p4_fails_before_any_command() -> None:
    p4 = FakePerforce(available=False)
    ctx = create_test_context(git=_topic_git(), perforce=p4, cwd=ROOT, repo=topic_repo(ROOT))

    result = CliRunner().invoke(cli, ["export"], obj=ctx)

    assert result.exit_code == 1
    assert "lg: 'p4' not found on PATH" in result.stderr
    assert p4.commands == []


def test_export_with_nothing_to_do() -> None:
    git = FakeGit(repo_root=ROOT, current_branch="work")
    ctx = create_test_context(git=git, cwd=ROOT, repo=topic_repo(ROOT))

    result = CliRunner().invoke(cli, ["export"], obj=ctx)

    assert result.exit_code == 0, result.output
    assert "Opened 0 file operation(s)" in result.stderr


def test_export_garbled_diff_fails_loudly() -> None:
    git = FakeGit(repo_root=ROOT, current_branch="work", diffs={"baseline..HEAD": "nonsense\n"})
    p4 = FakePerforce()
    ctx = create_test_context(git=git, perforce=p4, cwd=ROOT, repo=topic_repo(ROOT))

    result = CliRunner().invoke(cli, ["export"], obj=ctx)

    assert result.exit_code == 1
    assert "lg: line 1: expected a 'diff --git' header" in result.stderr
    assert p4.commands == []


def test_files_lists_one_line_per_path() -> None:
    ctx = create_test_context(git=_topic_git(), cwd=ROOT, repo=topic_repo(ROOT))

    result = CliRunner().invoke(cli, ["files"], obj=ctx)

    assert result.exit_code == 0, result.output
    assert result.stdout == "edit a.txt\nedit x\nadd icons/logo@2x.png\n"


def test_files_on_baseline_fails() -> None:
    repo = RepoContext(root=ROOT, baseline_branch="baseline", current_branch="baseline")
    ctx = create_test_context(git=_topic_git(), cwd=ROOT, repo=repo)

    result = CliRunner().invoke(cli, ["files"], obj=ctx)

    assert result.exit_code == 1
    assert "lg: files must be run from a topic branch" in result.stderr


def test_log_passes_range_through() -> None:
    git = FakeGit(
        repo_root=ROOT,
        current_branch="work",
        logs={"HEAD~1..HEAD": "commit 123\n"},
    )
    ctx = create_test_context(git=git, cwd=ROOT, repo=topic_repo(ROOT))

    result = CliRunner().invoke(cli, ["log", "HEAD~1..HEAD"], obj=ctx)

    assert result.exit_code == 0, result.output
    assert result.stdout == "commit 123\n"


def test_status_output_is_unchanged() -> None:
    git = FakeGit(repo_root=ROOT, status_output="On branch work\n")
    ctx = create_test_context(git=git, cwd=ROOT, repo=topic_repo(ROOT))

    result = CliRunner().invoke(cli, ["status"], obj=ctx)

    assert result.exit_code == 0, result.output
    assert result.stdout == "On branch work\n"


def test_version_option() -> None:
    result = CliRunner().invoke(cli, ["--version"], obj=create_test_context())

    assert result.exit_code == 0
    assert "version" in result.output
