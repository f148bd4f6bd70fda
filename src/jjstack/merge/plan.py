"""Merge planning.

Pure: takes a stack analysis and the PR info gathered for it and decides,
trunk to leaf, which PRs to merge, which to retarget first, and where to
stop. The platform merges a PR into its current base, so every merge after
the first is preceded by retargeting that PR to trunk.
"""

from collections.abc import Mapping
from dataclasses import dataclass

from jjstack.gateway.platform.types import MergeMethod
from jjstack.merge.gather import PrMergeInfo
from jjstack.stack.types import StackAnalysis


@dataclass(frozen=True)
class Certain:
    """All merge conditions were verified."""


@dataclass(frozen=True)
class Uncertain:
    """Some merge condition is still unknown; the merge may fail."""

    reason: str


MergeConfidence = Certain | Uncertain


@dataclass(frozen=True)
class MergeStep:
    bookmark: str
    pr_number: int
    pr_title: str
    method: MergeMethod
    confidence: MergeConfidence


@dataclass(frozen=True)
class RetargetBaseStep:
    """Point a PR at trunk before it is merged."""

    bookmark: str
    pr_number: int
    old_base: str
    new_base: str


@dataclass(frozen=True)
class SkipStep:
    """A PR that cannot be merged; planning stops here."""

    bookmark: str
    pr_number: int
    reasons: tuple[str, ...]


MergePlanStep = MergeStep | RetargetBaseStep | SkipStep


@dataclass(frozen=True)
class MergePlanOptions:
    """Options for merge planning.

    Attributes:
        method: Merge method for every merge step
        target_bookmark: Upper bound; segments above it are not merged. None
            merges every consecutive ready PR from the bottom.
    """

    method: MergeMethod
    target_bookmark: str | None = None


@dataclass(frozen=True)
class MergePlan:
    """Ordered merge steps plus what the caller needs afterwards.

    Attributes:
        steps: Steps ordered trunk to leaf
        bookmarks_to_clear: Bookmarks with a merge step
        rebase_target: First bookmark not processed, to rebase onto trunk
            once merges land
        has_actionable: True if any merge step exists
        trunk_branch: Trunk branch that retargets point at
    """

    steps: tuple[MergePlanStep, ...]
    bookmarks_to_clear: tuple[str, ...]
    rebase_target: str | None
    has_actionable: bool
    trunk_branch: str

    @property
    def is_empty(self) -> bool:
        return not self.has_actionable

    @property
    def merge_count(self) -> int:
        return sum(1 for step in self.steps if isinstance(step, MergeStep))


def create_merge_plan(
    analysis: StackAnalysis,
    pr_info: Mapping[str, PrMergeInfo],
    options: MergePlanOptions,
    trunk_branch: str,
) -> MergePlan:
    """Plan merges from the bottom of the stack up.

    - Segments without PR info are ignored.
    - A blocked PR gets a SkipStep with its blocking reasons; nothing above
      it is planned and it becomes the rebase target.
    - A ready PR gets a MergeStep, Uncertain when its mergeability is still
      unknown. Every merge after the first is preceded by a RetargetBaseStep
      unless the PR already targets trunk.
    - Segments above options.target_bookmark are not planned; the first of
      them becomes the rebase target.
    """
    steps: list[MergePlanStep] = []
    bookmarks_to_clear: list[str] = []
    rebase_target: str | None = None
    passed_target = False

    for segment in analysis.segments:
        name = segment.name

        if passed_target:
            rebase_target = name
            break
        if options.target_bookmark is not None and name == options.target_bookmark:
            passed_target = True

        info = pr_info.get(name)
        if info is None:
            continue

        readiness = info.readiness
        if readiness.is_blocked:
            steps.append(
                SkipStep(
                    bookmark=name,
                    pr_number=info.details.number,
                    reasons=readiness.blocking_reasons,
                )
            )
            rebase_target = name
            break

        if bookmarks_to_clear and info.details.base_ref != trunk_branch:
            steps.append(
                RetargetBaseStep(
                    bookmark=name,
                    pr_number=info.details.number,
                    old_base=info.details.base_ref,
                    new_base=trunk_branch,
                )
            )

        uncertainty = readiness.uncertainty
        confidence: MergeConfidence = Certain() if uncertainty is None else Uncertain(uncertainty)
        steps.append(
            MergeStep(
                bookmark=name,
                pr_number=info.details.number,
                pr_title=info.details.title,
                method=options.method,
                confidence=confidence,
            )
        )
        bookmarks_to_clear.append(name)

    return MergePlan(
        steps=tuple(steps),
        bookmarks_to_clear=tuple(bookmarks_to_clear),
        rebase_target=rebase_target,
        has_actionable=bool(bookmarks_to_clear),
        trunk_branch=trunk_branch,
    )


def describe_merge_step(step: MergePlanStep) -> str:
    """One-line, human-readable description of a step."""
    match step:
        case MergeStep(pr_number=number, pr_title=title, confidence=Uncertain()):
            return f"Merge PR #{number} (uncertain): {title}"
        case MergeStep(pr_number=number, pr_title=title):
            return f"Merge PR #{number}: {title}"
        case RetargetBaseStep(pr_number=number, bookmark=bookmark, old_base=old, new_base=new):
            return f"Retarget PR #{number} ({bookmark}): {old} -> {new}"
        case SkipStep(pr_number=number, bookmark=bookmark, reasons=reasons):
            suffix = f": {', '.join(reasons)}" if reasons else ""
            return f"Skip PR #{number} ({bookmark}){suffix}"
