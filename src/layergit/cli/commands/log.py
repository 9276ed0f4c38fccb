"""Log command - show commits unique to the topic branch."""

import click

from layergit.cli.ensure import Ensure
from layergit.cli.output import machine_output
from layergit.core.context import LgContext
from layergit.core.workflow import topic_log


@click.command("log")
@click.argument("revision_range", required=False)
@click.pass_obj
def log_cmd(ctx: LgContext, revision_range: str | None) -> None:
    """Show topic branch commits. REVISION_RANGE defaults to 'baseline..HEAD'."""
    with Ensure.reported_errors():
        output = topic_log(ctx, revision_range)

    machine_output(output, nl=False)
