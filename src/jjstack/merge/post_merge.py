"""Post-merge sync: bring the local stack up to date after merges landed.

Runs only when at least one PR merged. Fetches trunk, deletes the merged
local bookmarks, rebases what is left of the stack onto trunk and
re-submits its tracked segments so their PRs target the right bases.
"""

import logging
from collections.abc import Generator
from dataclasses import dataclass

from jjstack.core.errors import PlatformError, SoftFailure, VcsError
from jjstack.gateway.jj.abc import Jj
from jjstack.gateway.platform.abc import Platform
from jjstack.merge.execute import MergeExecutionResult
from jjstack.merge.plan import MergePlan
from jjstack.output.events import CompletionEvent, ProgressEvent
from jjstack.output.render import forward_progress
from jjstack.stack.analysis import analyze_stack
from jjstack.submit.execute import SubmissionResult
from jjstack.submit.pipeline import (
    SubmitOptions,
    prepare_submission,
    read_change_graph,
    run_submission,
)
from jjstack.tracking.abc import StateStore

logger = logging.getLogger(__name__)

RESUBMIT_RECOMMENDATION = "Run 'jjstack sync' to finish updating the remaining PRs."


@dataclass(frozen=True)
class PostMergeResult:
    """What post-merge sync did.

    Attributes:
        deleted_bookmarks: Merged bookmarks deleted locally
        failed_deletions: Merged bookmarks whose local deletion failed
        rebased: Bookmark rebased onto trunk, if any
        resubmission: Result of re-submitting the remaining stack, if run
        soft_failure: Set when re-submission did not complete
    """

    deleted_bookmarks: tuple[str, ...]
    failed_deletions: tuple[str, ...]
    rebased: str | None
    resubmission: SubmissionResult | None
    soft_failure: SoftFailure | None


def post_merge_sync(
    plan: MergePlan,
    merge_result: MergeExecutionResult,
    *,
    jj: Jj,
    platform: Platform,
    state_store: StateStore,
    remote: str,
    options: SubmitOptions,
) -> Generator[ProgressEvent | CompletionEvent[PostMergeResult], None, None]:
    """Fetch, clean up, rebase and re-submit after a merge run.

    Raises:
        VcsError: If fetching fails
        RebaseError: If rebasing the remaining stack fails; the merges stand
    """
    if not merge_result.has_merges:
        yield CompletionEvent(
            PostMergeResult(
                deleted_bookmarks=(),
                failed_deletions=(),
                rebased=None,
                resubmission=None,
                soft_failure=None,
            )
        )
        return

    yield ProgressEvent(f"Fetching from {remote}...")
    jj.git_fetch(remote)

    deleted: list[str] = []
    failed_deletions: list[str] = []
    for bookmark in merge_result.merged_bookmarks:
        try:
            jj.delete_bookmark(bookmark)
        except VcsError as e:
            logger.warning("could not delete merged bookmark %s: %s", bookmark, e)
            failed_deletions.append(bookmark)
            yield ProgressEvent(f"Could not delete local bookmark {bookmark}: {e}", style="warning")
            continue
        deleted.append(bookmark)
    if deleted:
        yield ProgressEvent(f"Deleted local bookmarks: {', '.join(deleted)}")

    target = plan.rebase_target
    if target is None:
        yield CompletionEvent(
            PostMergeResult(
                deleted_bookmarks=tuple(deleted),
                failed_deletions=tuple(failed_deletions),
                rebased=None,
                resubmission=None,
                soft_failure=None,
            )
        )
        return

    yield ProgressEvent(f"Rebasing {target} onto {plan.trunk_branch}...")
    jj.rebase_bookmark_onto_trunk(target)
    yield ProgressEvent(f"Rebased {target} onto {plan.trunk_branch}", style="success")

    resubmission, soft_failure = yield from _resubmit_tracked(
        jj=jj,
        platform=platform,
        state_store=state_store,
        remote=remote,
        trunk_branch=plan.trunk_branch,
        options=options,
    )

    yield CompletionEvent(
        PostMergeResult(
            deleted_bookmarks=tuple(deleted),
            failed_deletions=tuple(failed_deletions),
            rebased=target,
            resubmission=resubmission,
            soft_failure=soft_failure,
        )
    )


def _resubmit_tracked(
    *,
    jj: Jj,
    platform: Platform,
    state_store: StateStore,
    remote: str,
    trunk_branch: str,
    options: SubmitOptions,
) -> Generator[ProgressEvent, None, tuple[SubmissionResult | None, SoftFailure | None]]:
    """Re-submit the tracked segments left after the merge.

    Any failure here is returned as a SoftFailure instead of raised.
    """
    try:
        graph = read_change_graph(jj, remote=remote)
    except VcsError as e:
        message = f"Failed to read the remaining stack: {e}"
        return None, SoftFailure(message, RESUBMIT_RECOMMENDATION)
    if graph.is_empty:
        return None, None

    tracked = set(state_store.load().tracked_names)
    analysis = analyze_stack(graph, None).restricted_to(tracked)
    if not analysis.segments:
        return None, None

    yield ProgressEvent("Updating remaining PRs...")
    try:
        submission_plan = prepare_submission(
            platform,
            analysis,
            remote=remote,
            trunk_branch=trunk_branch,
            options=options,
        )
        result = yield from forward_progress(
            run_submission(
                submission_plan,
                jj=jj,
                platform=platform,
                state_store=state_store,
                options=options,
                dry_run=False,
            )
        )
    except (PlatformError, VcsError) as e:
        return None, SoftFailure(f"Failed to update remaining PRs: {e}", RESUBMIT_RECOMMENDATION)

    if not result.success:
        message = f"Failed to update remaining PRs: {result.error}"
        return result, SoftFailure(message, RESUBMIT_RECOMMENDATION)
    return result, None
