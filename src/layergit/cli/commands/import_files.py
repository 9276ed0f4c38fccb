"""Import command - move files into the baseline and rebase the topic branch."""

import click

from layergit.cli.ensure import Ensure
from layergit.cli.output import user_output
from layergit.core.context import LgContext
from layergit.core.workflow import import_paths


@click.command("import")
@click.argument("paths", nargs=-1, required=True)
@click.pass_obj
def import_cmd(ctx: LgContext, paths: tuple[str, ...]) -> None:
    """Add PATHS to the baseline branch and rebase the current topic branch."""
    with Ensure.reported_errors():
        result = import_paths(ctx, list(paths))

    if result.committed:
        user_output(f"Baselined: {result.message}")
    else:
        user_output("Nothing new to baseline")
    if result.stashed:
        user_output("Restored uncommitted edits")
