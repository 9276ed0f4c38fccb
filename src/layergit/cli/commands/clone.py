"""Clone command - bootstrap from an existing store's metadata."""

from pathlib import Path

import click

from layergit.cli.ensure import Ensure
from layergit.cli.output import user_output
from layergit.core.context import LgContext
from layergit.core.workflow import clone_store


@click.command("clone")
@click.option(
    "-n",
    "--name",
    "topic_branch",
    default=None,
    help="Create and check out this topic branch after cloning.",
)
@click.option(
    "--remote-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Keep git metadata under this directory instead of in the working tree.",
)
@click.argument("source", type=click.Path(path_type=Path))
@click.pass_obj
def clone_cmd(
    ctx: LgContext, topic_branch: str | None, remote_dir: Path | None, source: Path
) -> None:
    """Track the current workspace using the baseline recorded at SOURCE.

    SOURCE is a git directory, or a pointer file left by 'lg init --remote-dir'.
    Files in the working tree are not modified.
    """
    if remote_dir is None:
        remote_dir = ctx.config.remote_dir

    with Ensure.reported_errors():
        git_dir = clone_store(ctx, source, topic_branch=topic_branch, remote_dir=remote_dir)

    user_output(f"Cloned baseline into {git_dir}")
    if topic_branch is not None:
        user_output(f"On topic branch '{topic_branch}'")
