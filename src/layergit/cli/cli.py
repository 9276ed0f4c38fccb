import click

from layergit.cli.commands.clone import clone_cmd
from layergit.cli.commands.export import export_cmd
from layergit.cli.commands.files import files_cmd
from layergit.cli.commands.import_files import import_cmd
from layergit.cli.commands.init import init_cmd
from layergit.cli.commands.log import log_cmd
from layergit.cli.commands.status import status_cmd
from layergit.cli.commands.sync import sync_cmd
from layergit.core.context import create_context

CONTEXT_SETTINGS = dict(help_option_names=["-h", "--help"])


@click.group(context_settings=CONTEXT_SETTINGS)
@click.version_option(package_name="layergit")
@click.pass_context
def cli(ctx: click.Context) -> None:
    """Keep a private git history on top of a Perforce workspace."""
    # Only create context if not already provided (e.g., by tests)
    if ctx.obj is None:
        ctx.obj = create_context(dry_run=False)


cli.add_command(init_cmd)
cli.add_command(import_cmd)
cli.add_command(sync_cmd)
cli.add_command(clone_cmd)
cli.add_command(files_cmd)
cli.add_command(log_cmd)
cli.add_command(status_cmd)
cli.add_command(export_cmd)


def main() -> None:
    """CLI entry point used by the `lg` console script."""
    cli()
