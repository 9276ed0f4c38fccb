"""Sync command - fold external Perforce changes into the baseline."""

import click

from layergit.cli.ensure import Ensure
from layergit.cli.output import user_output
from layergit.core.context import LgContext
from layergit.core.workflow import sync_baseline


@click.command("sync")
@click.argument("message", required=False)
@click.pass_obj
def sync_cmd(ctx: LgContext, message: str | None) -> None:
    """Commit changes to baselined files made outside git (e.g. by p4 sync).

    Must be run on the baseline branch. Files that were never imported are
    left alone. Topic branches are not rebased automatically.
    """
    with Ensure.reported_errors():
        committed = sync_baseline(ctx, message)

    if committed:
        user_output("Baseline updated; rebase your topic branches onto it")
    else:
        user_output("Baseline already up to date")
