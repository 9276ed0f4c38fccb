"""Files command - list files changed on the topic branch."""

import click

from layergit.cli.ensure import Ensure
from layergit.cli.output import machine_output
from layergit.core.context import LgContext
from layergit.core.workflow import list_files


@click.command("files")
@click.argument("revision_range", required=False)
@click.pass_obj
def files_cmd(ctx: LgContext, revision_range: str | None) -> None:
    """List files changed on the topic branch as '<add|edit|delete> <path>'.

    REVISION_RANGE defaults to 'baseline...HEAD'.
    """
    with Ensure.reported_errors():
        changes = list_files(ctx, revision_range)

    for change in changes:
        machine_output(change.describe())
