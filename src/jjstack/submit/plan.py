"""Submission planning.

Turns a stack analysis plus the PRs found for it into the ordered steps
that bring the remote in line with the local stack. Pure: the existing PRs
are gathered beforehand.
"""

from collections.abc import Mapping
from dataclasses import dataclass

from jjstack.gateway.platform.types import PullRequest
from jjstack.stack.analysis import get_base_branch
from jjstack.stack.content import pr_body, pr_title
from jjstack.stack.types import StackAnalysis


@dataclass(frozen=True)
class PushStep:
    """Push a bookmark to the remote."""

    bookmark: str


@dataclass(frozen=True)
class CreatePrStep:
    """Open a PR for a bookmark. The body is only ever set here."""

    bookmark: str
    base: str
    title: str
    body: str | None
    draft: bool


@dataclass(frozen=True)
class RetargetStep:
    """Point an existing PR at a new base branch."""

    bookmark: str
    pr_number: int
    old_base: str
    new_base: str


SubmissionStep = PushStep | CreatePrStep | RetargetStep


@dataclass(frozen=True)
class SubmissionPlan:
    """Ordered submission steps, bottom of the stack first."""

    steps: tuple[SubmissionStep, ...]
    existing_prs: dict[str, PullRequest]
    analysis: StackAnalysis
    remote: str
    trunk_branch: str

    @property
    def has_actionable(self) -> bool:
        return bool(self.steps)

    @property
    def push_count(self) -> int:
        return sum(1 for step in self.steps if isinstance(step, PushStep))

    @property
    def create_count(self) -> int:
        return sum(1 for step in self.steps if isinstance(step, CreatePrStep))

    @property
    def retarget_count(self) -> int:
        return sum(1 for step in self.steps if isinstance(step, RetargetStep))


def create_submission_plan(
    analysis: StackAnalysis,
    existing_prs: Mapping[str, PullRequest],
    *,
    remote: str,
    trunk_branch: str,
    draft: bool,
) -> SubmissionPlan:
    """Plan the steps that submit every segment of the analysis.

    For each segment, trunk to leaf: push it when the remote copy is not in
    sync, create a PR when none exists (base = previous bookmark or trunk),
    or retarget the existing PR when its base differs from the expected one.
    Existing PR bodies are never rewritten.
    """
    steps: list[SubmissionStep] = []
    for segment in analysis.segments:
        name = segment.name
        expected_base = get_base_branch(name, analysis.segments, trunk_branch)

        if not segment.bookmark.is_synced:
            steps.append(PushStep(bookmark=name))

        existing = existing_prs.get(name)
        if existing is None:
            steps.append(
                CreatePrStep(
                    bookmark=name,
                    base=expected_base,
                    title=pr_title(segment),
                    body=pr_body(segment),
                    draft=draft,
                )
            )
        elif existing.base_ref != expected_base:
            steps.append(
                RetargetStep(
                    bookmark=name,
                    pr_number=existing.number,
                    old_base=existing.base_ref,
                    new_base=expected_base,
                )
            )

    return SubmissionPlan(
        steps=tuple(steps),
        existing_prs=dict(existing_prs),
        analysis=analysis,
        remote=remote,
        trunk_branch=trunk_branch,
    )


def describe_submission_step(step: SubmissionStep, remote: str) -> str:
    """One-line, human-readable description of a step."""
    match step:
        case PushStep(bookmark=bookmark):
            return f"Push {bookmark} to {remote}"
        case CreatePrStep(bookmark=bookmark, base=base, title=title, draft=draft):
            kind = "draft PR" if draft else "PR"
            return f"Create {kind} for {bookmark} (base: {base}): {title}"
        case RetargetStep(bookmark=bookmark, pr_number=number, old_base=old, new_base=new):
            return f"Retarget PR #{number} ({bookmark}): {old} -> {new}"
