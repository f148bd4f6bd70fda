"""Submission execution.

Runs planned submission steps strictly in order against the jj and platform
gateways. Each successful PR mutation is saved to the state store before
the next step runs, so an interrupted run leaves an accurate record.
"""

import logging
from collections.abc import Generator
from dataclasses import dataclass, field, replace

from jjstack.core.errors import PlatformError, VcsError
from jjstack.gateway.jj.abc import Jj
from jjstack.gateway.platform.abc import Platform
from jjstack.gateway.platform.types import PullRequest
from jjstack.output.events import CompletionEvent, ProgressEvent
from jjstack.submit.plan import (
    CreatePrStep,
    PushStep,
    RetargetStep,
    SubmissionPlan,
    SubmissionStep,
    describe_submission_step,
)
from jjstack.tracking.abc import StateStore
from jjstack.tracking.types import CachedPr, StackState, utc_now

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SubmissionResult:
    """Outcome of a submission run.

    Attributes:
        pushed: Bookmarks pushed, in order
        created: Bookmarks whose PR was created, in order
        retargeted: Bookmarks whose PR base was updated, in order
        prs: Every PR known for the stack after the run, by bookmark
        state: Stack state after the run (already saved)
        failed_step: The step that failed, if any
        error: Error message of the failed step
        dry_run: True if nothing was executed
    """

    pushed: tuple[str, ...]
    created: tuple[str, ...]
    retargeted: tuple[str, ...]
    prs: dict[str, PullRequest]
    state: StackState
    failed_step: SubmissionStep | None = None
    error: str | None = None
    dry_run: bool = field(default=False)

    @property
    def success(self) -> bool:
        return self.failed_step is None


def execute_submission(
    plan: SubmissionPlan,
    *,
    jj: Jj,
    platform: Platform,
    state_store: StateStore,
    state: StackState,
    dry_run: bool,
) -> Generator[ProgressEvent | CompletionEvent[SubmissionResult], None, None]:
    """Execute a submission plan, yielding progress and a final result.

    The first failing step stops the run; the result records what was done
    before it.
    """
    prs = dict(plan.existing_prs)

    if dry_run:
        for step in plan.steps:
            description = describe_submission_step(step, plan.remote)
            yield ProgressEvent(f"Would {_lowercase_first(description)}")
        yield CompletionEvent(
            SubmissionResult(
                pushed=(),
                created=(),
                retargeted=(),
                prs=prs,
                state=state,
                dry_run=True,
            )
        )
        return

    pushed: list[str] = []
    created: list[str] = []
    retargeted: list[str] = []

    for step in plan.steps:
        yield ProgressEvent(describe_submission_step(step, plan.remote) + "...")
        try:
            match step:
                case PushStep(bookmark=bookmark):
                    jj.git_push(bookmark, plan.remote)
                    pushed.append(bookmark)
                    yield ProgressEvent(f"Pushed {bookmark}", style="success")

                case CreatePrStep():
                    pr = platform.create_pr(
                        step.bookmark,
                        step.base,
                        step.title,
                        step.body,
                        draft=step.draft,
                    )
                    prs[step.bookmark] = pr
                    state = _record_pr(state, pr, step.bookmark)
                    state_store.save(state)
                    created.append(step.bookmark)
                    yield ProgressEvent(f"Created PR #{pr.number}: {pr.url}", style="success")

                case RetargetStep():
                    platform.update_pr_base(step.pr_number, step.new_base)
                    existing = prs.get(step.bookmark)
                    if existing is not None:
                        updated = replace(existing, base_ref=step.new_base)
                        prs[step.bookmark] = updated
                        state = _record_pr(state, updated, step.bookmark)
                        state_store.save(state)
                    retargeted.append(step.bookmark)
                    yield ProgressEvent(
                        f"Retargeted PR #{step.pr_number} to {step.new_base}", style="success"
                    )
        except (PlatformError, VcsError) as e:
            logger.debug("submission step failed: %s", step, exc_info=True)
            yield ProgressEvent(f"Failed: {e}", style="error")
            yield CompletionEvent(
                SubmissionResult(
                    pushed=tuple(pushed),
                    created=tuple(created),
                    retargeted=tuple(retargeted),
                    prs=prs,
                    state=state,
                    failed_step=step,
                    error=str(e),
                )
            )
            return

    yield CompletionEvent(
        SubmissionResult(
            pushed=tuple(pushed),
            created=tuple(created),
            retargeted=tuple(retargeted),
            prs=prs,
            state=state,
        )
    )


def _record_pr(state: StackState, pr: PullRequest, bookmark: str) -> StackState:
    return state.with_cached_pr(
        CachedPr(
            bookmark=bookmark,
            number=pr.number,
            url=pr.url,
            base=pr.base_ref,
            updated_at=utc_now(),
        )
    )


def _lowercase_first(text: str) -> str:
    return text[:1].lower() + text[1:]
