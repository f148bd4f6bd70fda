"""Submission pipeline: gather -> plan -> execute -> track -> stack comments.

Shared by `submit`, `sync` and the re-submission that follows a merge.
"""

from collections.abc import Generator
from dataclasses import dataclass, replace

from jjstack.gateway.jj.abc import Jj
from jjstack.gateway.platform.abc import Platform
from jjstack.gateway.platform.types import PullRequest
from jjstack.output.events import CompletionEvent, ProgressEvent
from jjstack.output.render import forward_progress
from jjstack.stack.analysis import analyze_stack
from jjstack.stack.graph import build_change_graph
from jjstack.stack.types import ChangeGraph, StackAnalysis
from jjstack.submit.execute import SubmissionResult, execute_submission
from jjstack.submit.gather import gather_existing_prs
from jjstack.submit.plan import SubmissionPlan, create_submission_plan
from jjstack.submit.stack_comment import build_stack_comment_data, update_stack_comments
from jjstack.tracking.abc import StateStore
from jjstack.tracking.types import CachedPr, StackState, TrackedBookmark, utc_now


@dataclass(frozen=True)
class SubmitOptions:
    draft: bool
    stack_comments: bool
    gather_workers: int


def read_change_graph(jj: Jj, *, remote: str) -> ChangeGraph:
    """Read `trunk()..@` from jj and build the change graph."""
    return build_change_graph(jj.read_log(), remote=remote)


def read_stack(jj: Jj, *, remote: str, target: str | None) -> tuple[ChangeGraph, StackAnalysis]:
    """Read the change graph and analyze it up to `target`.

    Raises:
        StackNotFoundError: If there are no bookmarks above trunk
        BookmarkNotFoundError: If target is not in the stack
    """
    graph = read_change_graph(jj, remote=remote)
    return graph, analyze_stack(graph, target)


def prepare_submission(
    platform: Platform,
    analysis: StackAnalysis,
    *,
    remote: str,
    trunk_branch: str,
    options: SubmitOptions,
) -> SubmissionPlan:
    """Gather the existing PRs of the stack and plan its submission.

    Raises:
        PlatformError: If a PR lookup fails
    """
    existing = gather_existing_prs(
        platform, analysis.bookmark_names, max_workers=options.gather_workers
    )
    return create_submission_plan(
        analysis,
        existing,
        remote=remote,
        trunk_branch=trunk_branch,
        draft=options.draft,
    )


def run_submission(
    plan: SubmissionPlan,
    *,
    jj: Jj,
    platform: Platform,
    state_store: StateStore,
    options: SubmitOptions,
    dry_run: bool,
) -> Generator[ProgressEvent | CompletionEvent[SubmissionResult], None, None]:
    """Execute a submission plan, then track the stack and post stack comments.

    Tracking and comments only happen after a fully successful, non-dry run.
    """
    result = yield from forward_progress(
        execute_submission(
            plan,
            jj=jj,
            platform=platform,
            state_store=state_store,
            state=state_store.load(),
            dry_run=dry_run,
        )
    )
    if result.dry_run or not result.success:
        yield CompletionEvent(result)
        return

    state = record_submitted_stack(result.state, plan.analysis, result.prs, remote=plan.remote)
    if state != result.state:
        state_store.save(state)
        result = replace(result, state=state)

    if options.stack_comments and result.prs:
        data = build_stack_comment_data(plan.analysis, result.prs, plan.trunk_branch)
        yield from forward_progress(update_stack_comments(platform, data))

    yield CompletionEvent(result)


def record_submitted_stack(
    state: StackState,
    analysis: StackAnalysis,
    prs: dict[str, PullRequest],
    *,
    remote: str,
) -> StackState:
    """Track every submitted bookmark and cache its PR.

    Entries that already match are left untouched so an unchanged stack
    produces an equal state.
    """
    for segment in analysis.segments:
        if not state.is_tracked(segment.name):
            state = state.with_tracked(
                TrackedBookmark(
                    name=segment.name,
                    change_id=segment.bookmark.change_id,
                    remote=remote,
                    tracked_at=utc_now(),
                )
            )
        pr = prs.get(segment.name)
        if pr is None:
            continue
        cached = state.cached_pr(segment.name)
        if cached is None or cached.number != pr.number or cached.base != pr.base_ref:
            state = state.with_cached_pr(
                CachedPr(
                    bookmark=segment.name,
                    number=pr.number,
                    url=pr.url,
                    base=pr.base_ref,
                    updated_at=utc_now(),
                )
            )
    return state
