import logging
from pathlib import Path

import click

from jjstack.cli.commands.merge_cmd import merge_cmd
from jjstack.cli.commands.submit_cmd import submit_cmd
from jjstack.cli.commands.sync_cmd import sync_cmd
from jjstack.cli.commands.track_cmd import track_cmd, untrack_cmd
from jjstack.cli.ensure import exit_on_error
from jjstack.core.context import create_context

CONTEXT_SETTINGS = dict(help_option_names=["-h", "--help"])  # terse help flags


@click.group(context_settings=CONTEXT_SETTINGS)
@click.version_option(package_name="jjstack")
@click.option("--debug", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx: click.Context, debug: bool) -> None:
    """Submit and merge stacks of jj bookmarks as GitHub or GitLab pull requests."""
    if debug:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s - %(levelname)s - %(message)s")

    # Only create context if not already provided (e.g., by tests)
    if ctx.obj is None:
        with exit_on_error():
            ctx.obj = create_context(Path.cwd())


cli.add_command(submit_cmd)
cli.add_command(sync_cmd)
cli.add_command(merge_cmd)
cli.add_command(track_cmd)
cli.add_command(untrack_cmd)


def main() -> None:
    """CLI entry point used by the `jjstack` console script."""
    cli()
