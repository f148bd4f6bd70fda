"""Submit the stack as a chain of GitHub PRs or GitLab MRs."""

import click

from jjstack.cli.core import resolve_trunk, submit_stack, warn_excluded
from jjstack.cli.ensure import Ensure, exit_on_error
from jjstack.core.context import StackContext
from jjstack.submit.pipeline import SubmitOptions, read_stack


@click.command("submit")
@click.argument("bookmark", required=False)
@click.option("--dry-run", is_flag=True, help="Show what would be done without doing it.")
@click.option("--confirm", is_flag=True, help="Ask before pushing or changing PRs.")
@click.option("--draft", is_flag=True, help="Create new PRs as drafts.")
@click.option("--no-comments", is_flag=True, help="Do not post or update stack comments.")
@click.option("--remote", help="Git remote to push to (default: config, then origin).")
@click.pass_obj
def submit_cmd(
    ctx: StackContext,
    *,
    bookmark: str | None,
    dry_run: bool,
    confirm: bool,
    draft: bool,
    no_comments: bool,
    remote: str | None,
) -> None:
    """Push every bookmark up to BOOKMARK and open or retarget its PR.

    Each PR targets the bookmark below it; the bottom PR targets trunk.
    Without BOOKMARK, the stack ends at the bookmark closest to the
    working copy. Submitted bookmarks become tracked.
    """
    repo = Ensure.repo(ctx)
    config = repo.config
    with exit_on_error():
        connected = ctx.connect_platform(remote or config.remote)
        trunk = resolve_trunk(ctx, repo)
        graph, analysis = read_stack(ctx.jj, remote=connected.remote, target=bookmark)
        warn_excluded(graph)
        options = SubmitOptions(
            draft=draft or config.draft,
            stack_comments=config.stack_comments and not no_comments,
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
