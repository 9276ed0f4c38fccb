"""Status command - working tree status without never-imported files."""

import click

from layergit.cli.ensure import Ensure
from layergit.cli.output import machine_output
from layergit.core.context import LgContext
from layergit.core.workflow import working_status


@click.command("status")
@click.pass_obj
def status_cmd(ctx: LgContext) -> None:
    """Show working tree status, hiding files that were never imported."""
    with Ensure.reported_errors():
        output = working_status(ctx)

    machine_output(output, nl=False)
