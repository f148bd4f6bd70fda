"""Merge ready PRs from the bottom of the stack."""

import click

from jjstack.cli.core import confirm_or_abort, resolve_trunk, show_stack, warn_excluded
from jjstack.cli.ensure import Ensure, exit_on_error, fail
from jjstack.core.context import ConnectedPlatform, RepoContext, StackContext
from jjstack.core.errors import BookmarkNotFoundError, JjStackError, UserInputError
from jjstack.gateway.platform.types import MERGE_METHODS, MergeMethod
from jjstack.merge.execute import MergeExecutionResult, execute_merge
from jjstack.merge.gather import gather_merge_info
from jjstack.merge.plan import MergePlan, MergePlanOptions, create_merge_plan, describe_merge_step
from jjstack.merge.post_merge import PostMergeResult, post_merge_sync
from jjstack.output.output import user_output
from jjstack.output.render import render_events
from jjstack.submit.pipeline import SubmitOptions, read_stack


@click.command("merge")
@click.argument("bookmark", required=False)
@click.option("--dry-run", is_flag=True, help="Show the merge plan without merging.")
@click.option("--confirm", is_flag=True, help="Ask before merging.")
@click.option(
    "--method",
    type=click.Choice(MERGE_METHODS),
    help="Merge method (default: config, then squash).",
)
@click.option("--remote", help="Git remote to use (default: config, then origin).")
@click.pass_obj
def merge_cmd(
    ctx: StackContext,
    *,
    bookmark: str | None,
    dry_run: bool,
    confirm: bool,
    method: MergeMethod | None,
    remote: str | None,
) -> None:
    """Merge ready PRs of tracked bookmarks, bottom first.

    Merging stops at the first PR that is not ready, or after BOOKMARK when
    given. Each PR after the first is retargeted to trunk before it is
    merged. Afterwards the merged bookmarks are deleted locally and the rest
    of the stack is rebased onto trunk and re-submitted.
    """
    repo = Ensure.repo(ctx)
    config = repo.config
    with exit_on_error():
        connected = ctx.connect_platform(remote or config.remote)
        trunk = resolve_trunk(ctx, repo)
        graph, analysis = read_stack(ctx.jj, remote=connected.remote, target=None)
        warn_excluded(graph)
        if bookmark is not None and bookmark not in analysis.bookmark_names:
            raise BookmarkNotFoundError(bookmark)

        state = repo.state_store.load()
        if bookmark is not None and not state.is_tracked(bookmark):
            msg = f"Bookmark '{bookmark}' is not tracked. Run 'jjstack submit {bookmark}' first."
            raise UserInputError(msg)
        analysis = analysis.restricted_to(set(state.tracked_names))
        if not analysis.segments:
            msg = "No tracked bookmarks in the stack. Run 'jjstack submit' first."
            raise UserInputError(msg)
        show_stack(analysis, trunk)

        info = gather_merge_info(
            connected.platform, analysis.bookmark_names, max_workers=config.gather_workers
        )
        plan = create_merge_plan(
            analysis,
            info,
            MergePlanOptions(method=method or config.merge_method, target_bookmark=bookmark),
            trunk,
        )

    for step in plan.steps:
        user_output(f"  - {describe_merge_step(step)}")
    if plan.is_empty:
        user_output("Nothing to merge.")
        return
    if dry_run:
        user_output("Dry run: no changes made.")
        return
    if confirm:
        confirm_or_abort(f"Merge {plan.merge_count} PR(s)?")

    result = render_events(
        execute_merge(
            plan,
            platform=connected.platform,
            state_store=repo.state_store,
            state=state,
        )
    )

    post: PostMergeResult | None = None
    post_error: str | None = None
    if result.has_merges and result.state_error is None:
        try:
            post = _run_post_merge(ctx, repo, connected, plan, result)
        except JjStackError as e:
            post_error = str(e)

    _report(result, post)
    if result.state_error is not None:
        fail(
            f"Could not save stack state: {result.state_error}. "
            "Fix the state file, then run 'jjstack sync'."
        )
    if post_error is not None:
        fail(f"Post-merge sync failed: {post_error}")
    if not result.is_success:
        message = f"Failed to merge {result.failed_bookmark}: {result.error_message}"
        if result.was_uncertain:
            message += " (merge status was uncertain)"
        fail(message)


def _run_post_merge(
    ctx: StackContext,
    repo: RepoContext,
    connected: ConnectedPlatform,
    plan: MergePlan,
    result: MergeExecutionResult,
) -> PostMergeResult:
    options = SubmitOptions(
        draft=repo.config.draft,
        stack_comments=repo.config.stack_comments,
        gather_workers=repo.config.gather_workers,
    )
    return render_events(
        post_merge_sync(
            plan,
            result,
            jj=ctx.jj,
            platform=connected.platform,
            state_store=repo.state_store,
            remote=connected.remote,
            options=options,
        )
    )


def _report(result: MergeExecutionResult, post: PostMergeResult | None) -> None:
    if result.has_merges:
        merged = ", ".join(result.merged_bookmarks)
        user_output(click.style("✓ ", fg="green") + f"Merged: {merged}")
    if result.skipped_bookmark is not None:
        user_output(f"Stopped at {result.skipped_bookmark}: its PR is not ready to merge.")
    if post is not None and post.soft_failure is not None:
        user_output(click.style("Warning: ", fg="yellow") + post.soft_failure.message)
        user_output(f"  {post.soft_failure.recommendation}")
