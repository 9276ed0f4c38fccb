"""Export command - open topic branch changes in a Perforce changelist."""

import click

from layergit.cli.ensure import Ensure
from layergit.cli.output import print_export_summary, user_output
from layergit.core.context import LgContext, with_dry_run
from layergit.core.export import check_environment, export_commands, run_export


@click.command("export")
@click.option(
    "--dry-run",
    is_flag=True,
    # dry_run=False: Open files in Perforce by default
    default=False,
    help="Print the p4 commands instead of running them.",
)
@click.pass_obj
def export_cmd(ctx: LgContext, dry_run: bool) -> None:
    """Reflect baseline..HEAD into the Perforce default changelist.

    Every command is attempted even if an earlier one fails; failures are
    listed at the end and the exit code is non-zero.
    """
    if dry_run:
        ctx = with_dry_run(ctx)

    with Ensure.reported_errors():
        commands = export_commands(ctx)
        if not ctx.dry_run:
            check_environment(ctx)
        result = run_export(ctx, commands)

    if result.success:
        if not ctx.dry_run:
            user_output(f"Opened {len(commands)} file operation(s) in Perforce")
        return

    failed = [(command.display(), outcome.output) for command, outcome in result.failures]
    print_export_summary(len(commands), failed)
    Ensure.fail(f"{len(failed)} p4 command(s) failed: " + "; ".join(c for c, _ in failed))
