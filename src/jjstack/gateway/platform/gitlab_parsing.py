"""Parsing utilities for GitLab REST API JSON returned by `glab api`."""

import json
from typing import Any

from jjstack.gateway.platform.parsing import iter_json_pages
from jjstack.gateway.platform.types import (
    Mergeable,
    MergeResult,
    PrComment,
    PRState,
    PullRequest,
    PullRequestDetails,
)

# Pipeline statuses that do not hold back a merge
PASSING_PIPELINE_STATUSES = frozenset({"success", "skipped"})


def mr_from_json(mr: dict[str, Any]) -> PullRequest:
    return PullRequest(
        number=mr["iid"],
        url=mr["web_url"],
        base_ref=mr["target_branch"],
        head_ref=mr["source_branch"],
        title=mr.get("title") or "",
        is_draft=_is_draft(mr),
    )


def parse_mr_list(json_str: str) -> list[PullRequest]:
    """Parse a `merge_requests` listing into PullRequest values."""
    return [mr_from_json(mr) for mr in json.loads(json_str)]


def mr_details_from_json(mr: dict[str, Any]) -> PullRequestDetails:
    """Build PullRequestDetails from a single merge request.

    An empty description is reported as None.
    """
    return PullRequestDetails(
        number=mr["iid"],
        title=mr.get("title") or "",
        body=mr.get("description") or None,
        state=_parse_state(mr.get("state")),
        is_draft=_is_draft(mr),
        mergeable=parse_merge_status(mr.get("merge_status")),
        head_ref=mr["source_branch"],
        base_ref=mr["target_branch"],
        url=mr.get("web_url") or "",
    )


def _is_draft(mr: dict[str, Any]) -> bool:
    # older GitLab versions only report work_in_progress
    return bool(mr.get("draft", mr.get("work_in_progress", False)))


def _parse_state(value: str | None) -> PRState:
    if value == "opened":
        return "OPEN"
    if value == "merged":
        return "MERGED"
    return "CLOSED"


def parse_merge_status(value: str | None) -> Mergeable:
    """Map GitLab's `merge_status` onto the tri-state conflict check.

    "unchecked", "checking" and the "*_recheck" states mean GitLab has not
    finished computing the result.
    """
    if value == "can_be_merged":
        return "MERGEABLE"
    if value == "cannot_be_merged":
        return "CONFLICTING"
    return "UNKNOWN"


def is_approved_from_json(approvals: dict[str, Any]) -> bool:
    """Read the `approved` flag of a merge request's approvals state."""
    return bool(approvals.get("approved", False))


def ci_passed_from_pipelines(pipelines: list[dict[str, Any]]) -> bool:
    """True if there is no pipeline or the most recent one passed.

    GitLab lists merge request pipelines newest first.
    """
    if not pipelines:
        return True
    return pipelines[0].get("status") in PASSING_PIPELINE_STATUSES


def parse_mr_notes(json_str: str) -> list[PrComment]:
    """Parse user comments from paginated `.../notes` output; system notes are dropped."""
    return [
        PrComment(id=note["id"], body=note.get("body") or "")
        for page in iter_json_pages(json_str)
        for note in page
        if not note.get("system", False)
    ]


def merge_result_from_json(mr: dict[str, Any]) -> MergeResult:
    """Interpret the merge request returned by the merge endpoint."""
    state = mr.get("state")
    if state != "merged":
        return MergeResult(
            merged=False,
            sha=None,
            message=f"MR !{mr.get('iid')} is {state or 'unknown'} after merge request",
        )
    sha = mr.get("squash_commit_sha") or mr.get("merge_commit_sha") or mr.get("sha")
    return MergeResult(merged=True, sha=sha, message=None)
