"""Fetch and bring the PRs of tracked bookmarks up to date."""

import click

from jjstack.cli.core import resolve_trunk, submit_stack, warn_excluded
from jjstack.cli.ensure import Ensure, exit_on_error
from jjstack.core.context import StackContext
from jjstack.output.output import user_output
from jjstack.submit.pipeline import SubmitOptions, read_stack


@click.command("sync")
@click.option(
    "--all",
    "all_bookmarks",
    is_flag=True,
    help="Sync every bookmark in the stack, not only tracked ones.",
)
@click.option("--dry-run", is_flag=True, help="Show what would be done without doing it.")
@click.option("--confirm", is_flag=True, help="Ask before pushing or changing PRs.")
@click.option("--remote", help="Git remote to sync with (default: config, then origin).")
@click.pass_obj
def sync_cmd(
    ctx: StackContext,
    *,
    all_bookmarks: bool,
    dry_run: bool,
    confirm: bool,
    remote: str | None,
) -> None:
    """Fetch, then re-submit the tracked bookmarks of the stack.

    Pushes bookmarks that moved, opens missing PRs and retargets PRs whose
    base changed, for example after a PR lower in the stack was merged.
    """
    repo = Ensure.repo(ctx)
    config = repo.config
    with exit_on_error():
        connected = ctx.connect_platform(remote or config.remote)
        trunk = resolve_trunk(ctx, repo)

        if not dry_run:
            user_output(f"Fetching from {connected.remote}...")
            ctx.jj.git_fetch(connected.remote)

        graph, analysis = read_stack(ctx.jj, remote=connected.remote, target=None)
        warn_excluded(graph)
        if not all_bookmarks:
            tracked = set(repo.state_store.load().tracked_names)
            analysis = analysis.restricted_to(tracked)
            if not analysis.segments:
                user_output(
                    "No tracked bookmarks in the stack. "
                    "Run 'jjstack submit' or 'jjstack track' first, or pass --all."
                )
                return

        options = SubmitOptions(
            draft=config.draft,
            stack_comments=config.stack_comments,
            gather_workers=config.gather_workers,
        )
        submit_stack(
            ctx,
            repo,
            connected,
            analysis,
            trunk=trunk,
            options=options,
            dry_run=dry_run,
            confirm=confirm,
        )
