"""Merge readiness evaluation.

Turns one PR's details plus the approval and CI signals into a
MergeReadiness judgment. Pure: the signals are fetched by the caller.
"""

from jjstack.gateway.platform.types import MergeReadiness, PullRequestDetails

REASON_DRAFT = "PR is a draft"
REASON_NOT_APPROVED = "Not approved"
REASON_CI_FAILING = "CI not passing"
REASON_CONFLICTS = "Has merge conflicts"
REASON_MERGEABLE_UNKNOWN = "Merge status unknown (still computing)"


def evaluate_readiness(
    details: PullRequestDetails,
    *,
    is_approved: bool,
    ci_passed: bool,
) -> MergeReadiness:
    """Judge whether a PR can be merged.

    Blocking reasons are only recorded for definitive negatives. Unknown
    mergeability is an uncertainty, never a blocker.
    """
    blocking_reasons: list[str] = []
    if details.is_draft:
        blocking_reasons.append(REASON_DRAFT)
    if not is_approved:
        blocking_reasons.append(REASON_NOT_APPROVED)
    if not ci_passed:
        blocking_reasons.append(REASON_CI_FAILING)
    if details.mergeable == "CONFLICTING":
        blocking_reasons.append(REASON_CONFLICTS)

    uncertainties: tuple[str, ...] = ()
    if details.mergeable == "UNKNOWN":
        uncertainties = (REASON_MERGEABLE_UNKNOWN,)

    return MergeReadiness(
        is_approved=is_approved,
        ci_passed=ci_passed,
        mergeable=details.mergeable,
        is_draft=details.is_draft,
        blocking_reasons=tuple(blocking_reasons),
        uncertainties=uncertainties,
    )
