"""Merge execution.

Runs planned merge steps strictly in order. A merged PR cannot be
un-merged, so the state store is updated after every successful merge.
The run stops at the first failed step, at a skip, or when the state
cannot be saved.
"""

import logging
from collections.abc import Generator
from dataclasses import dataclass, replace

from jjstack.core.errors import PlatformError, StateFileError
from jjstack.gateway.platform.abc import Platform
from jjstack.merge.plan import (
    MergePlan,
    MergeStep,
    RetargetBaseStep,
    SkipStep,
    Uncertain,
    describe_merge_step,
)
from jjstack.output.events import CompletionEvent, ProgressEvent
from jjstack.tracking.abc import StateStore
from jjstack.tracking.types import StackState, utc_now

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MergeExecutionResult:
    """Outcome of a merge run.

    Attributes:
        merged_bookmarks: Bookmarks whose PR merged, in order
        failed_bookmark: Bookmark whose merge or retarget failed
        error_message: Message of that failure
        was_uncertain: True if the failed merge was planned as Uncertain
        skipped_bookmark: Bookmark the run stopped at because it was blocked
        state: Stack state after the run (already saved unless state_error)
        state_error: Why saving the state failed; the run stopped there
    """

    merged_bookmarks: tuple[str, ...]
    failed_bookmark: str | None
    error_message: str | None
    was_uncertain: bool
    skipped_bookmark: str | None
    state: StackState
    state_error: str | None = None

    @property
    def is_success(self) -> bool:
        return self.failed_bookmark is None and self.state_error is None

    @property
    def has_merges(self) -> bool:
        """True if at least one PR merged, i.e. trunk moved."""
        return bool(self.merged_bookmarks)


def execute_merge(
    plan: MergePlan,
    *,
    platform: Platform,
    state_store: StateStore,
    state: StackState,
) -> Generator[ProgressEvent | CompletionEvent[MergeExecutionResult], None, None]:
    """Execute a merge plan, yielding progress and a final result.

    Merge: on success the bookmark is dropped from tracking and the PR
    cache and the state is saved at once. A refused or failed merge stops
    the run. A merge planned as Uncertain is attempted once, never retried.

    RetargetBase: any failure stops the run, since merging next would land
    the PR on a dead branch.

    Skip: reported, then the run stops.
    """
    merged: list[str] = []

    def result(
        *,
        failed: str | None = None,
        error: str | None = None,
        was_uncertain: bool = False,
        skipped: str | None = None,
        state_error: str | None = None,
    ) -> CompletionEvent[MergeExecutionResult]:
        return CompletionEvent(
            MergeExecutionResult(
                merged_bookmarks=tuple(merged),
                failed_bookmark=failed,
                error_message=error,
                was_uncertain=was_uncertain,
                skipped_bookmark=skipped,
                state=state,
                state_error=state_error,
            )
        )

    for step in plan.steps:
        match step:
            case MergeStep():
                yield ProgressEvent(describe_merge_step(step) + "...")
                uncertain = isinstance(step.confidence, Uncertain)
                try:
                    outcome = platform.merge_pr(step.pr_number, step.method)
                except PlatformError as e:
                    logger.debug("merge of PR #%d failed", step.pr_number, exc_info=True)
                    yield ProgressEvent(
                        f"Failed to merge PR #{step.pr_number}: {e}", style="error"
                    )
                    yield result(failed=step.bookmark, error=str(e), was_uncertain=uncertain)
                    return

                if not outcome.merged:
                    message = outcome.message or "merge was not performed"
                    yield ProgressEvent(
                        f"PR #{step.pr_number} was not merged: {message}", style="error"
                    )
                    yield result(failed=step.bookmark, error=message, was_uncertain=uncertain)
                    return

                merged.append(step.bookmark)
                yield ProgressEvent(
                    f"Merged PR #{step.pr_number} ({outcome.sha or 'no sha'})", style="success"
                )
                state = state.without_bookmark(step.bookmark)
                try:
                    state_store.save(state)
                except StateFileError as e:
                    yield ProgressEvent(f"Could not save stack state: {e}", style="error")
                    yield result(state_error=str(e))
                    return

            case RetargetBaseStep():
                yield ProgressEvent(describe_merge_step(step) + "...")
                try:
                    platform.update_pr_base(step.pr_number, step.new_base)
                except PlatformError as e:
                    logger.debug("retarget of PR #%d failed", step.pr_number, exc_info=True)
                    yield ProgressEvent(
                        f"Failed to retarget PR #{step.pr_number}: {e}", style="error"
                    )
                    yield result(failed=step.bookmark, error=str(e))
                    return
                cached = state.cached_pr(step.bookmark)
                if cached is not None:
                    state = state.with_cached_pr(
                        replace(cached, base=step.new_base, updated_at=utc_now())
                    )
                    try:
                        state_store.save(state)
                    except StateFileError as e:
                        yield ProgressEvent(f"Could not save stack state: {e}", style="error")
                        yield result(state_error=str(e))
                        return

            case SkipStep():
                yield ProgressEvent(describe_merge_step(step), style="warning")
                yield result(skipped=step.bookmark)
                return

    yield result()
