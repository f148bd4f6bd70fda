"""Manage which bookmarks `sync` and `merge` act on."""

import click

from jjstack.cli.ensure import Ensure, exit_on_error
from jjstack.core.context import StackContext
from jjstack.core.errors import BookmarkNotFoundError, UserInputError
from jjstack.gateway.platform.detection import DEFAULT_REMOTE
from jjstack.output.output import user_output
from jjstack.submit.pipeline import read_change_graph
from jjstack.tracking.types import TrackedBookmark, utc_now


@click.command("track")
@click.argument("bookmarks", nargs=-1, required=True)
@click.pass_obj
def track_cmd(ctx: StackContext, *, bookmarks: tuple[str, ...]) -> None:
    """Start tracking BOOKMARKS in the current stack."""
    repo = Ensure.repo(ctx)
    with exit_on_error():
        remote = repo.config.remote
        graph = read_change_graph(ctx.jj, remote=remote or DEFAULT_REMOTE)
        state = repo.state_store.load()

        added: list[str] = []
        for name in bookmarks:
            bookmark = graph.bookmarks.get(name)
            if bookmark is None:
                raise BookmarkNotFoundError(name)
            if state.is_tracked(name):
                user_output(f"{name} is already tracked")
                continue
            state = state.with_tracked(
                TrackedBookmark(
                    name=name,
                    change_id=bookmark.change_id,
                    remote=remote,
                    tracked_at=utc_now(),
                )
            )
            added.append(name)

        if added:
            repo.state_store.save(state)
            user_output(click.style("✓ ", fg="green") + "Tracking " + ", ".join(added))


@click.command("untrack")
@click.argument("bookmarks", nargs=-1, required=True)
@click.pass_obj
def untrack_cmd(ctx: StackContext, *, bookmarks: tuple[str, ...]) -> None:
    """Stop tracking BOOKMARKS and forget their cached PRs.

    Nothing changes on the remote.
    """
    repo = Ensure.repo(ctx)
    with exit_on_error():
        state = repo.state_store.load()
        for name in bookmarks:
            if not state.is_tracked(name):
                msg = f"Bookmark '{name}' is not tracked"
                raise UserInputError(msg)

        for name in bookmarks:
            state = state.without_bookmark(name)
        repo.state_store.save(state)
        user_output(click.style("✓ ", fg="green") + "Untracked " + ", ".join(bookmarks))
