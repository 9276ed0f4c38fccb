"""Init command - create the baseline and topic branches."""

from pathlib import Path

import click

from layergit.cli.ensure import Ensure
from layergit.cli.output import user_output
from layergit.core.context import LgContext
from layergit.core.repo_discovery import BASELINE_BRANCH, DEFAULT_TOPIC_BRANCH
from layergit.core.workflow import init_store


@click.command("init")
@click.option(
    "-n",
    "--name",
    "topic_branch",
    default=DEFAULT_TOPIC_BRANCH,
    show_default=True,
    help="Name of the topic branch to create.",
)
@click.option(
    "--remote-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Keep git metadata under this directory instead of in the working tree.",
)
@click.pass_obj
def init_cmd(ctx: LgContext, topic_branch: str, remote_dir: Path | None) -> None:
    """Start tracking the current Perforce workspace directory."""
    if remote_dir is None:
        remote_dir = ctx.config.remote_dir

    with Ensure.reported_errors():
        git_dir = init_store(ctx, topic_branch=topic_branch, remote_dir=remote_dir)

    user_output(f"Initialized '{BASELINE_BRANCH}' in {git_dir}")
    user_output(f"On topic branch '{topic_branch}'; run 'lg import <file>...' to baseline files")
