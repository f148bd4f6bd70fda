"""Parsing utilities for `gh` CLI JSON output."""

import json
from collections.abc import Iterator
from typing import Any

from jjstack.gateway.platform.types import (
    Mergeable,
    PrComment,
    PRState,
    PullRequest,
    PullRequestDetails,
)

# Fields requested from `gh pr list` / `gh pr create` lookups
PR_LIST_FIELDS = "number,url,baseRefName,headRefName,title,isDraft"

# Fields requested from `gh pr view` for details and readiness
PR_VIEW_FIELDS = (
    "number,title,body,state,isDraft,mergeable,headRefName,baseRefName,url,"
    "reviews,statusCheckRollup"
)

PASSING_CHECK_CONCLUSIONS = frozenset({"SUCCESS", "SKIPPED", "NEUTRAL"})


def parse_pr_list(json_str: str) -> list[PullRequest]:
    """Parse `gh pr list --json` output into PullRequest values."""
    return [_pull_request_from_json(pr) for pr in json.loads(json_str)]


def _pull_request_from_json(pr: dict[str, Any]) -> PullRequest:
    return PullRequest(
        number=pr["number"],
        url=pr["url"],
        base_ref=pr["baseRefName"],
        head_ref=pr["headRefName"],
        title=pr.get("title") or "",
        is_draft=bool(pr.get("isDraft", False)),
    )


def pr_details_from_json(pr: dict[str, Any]) -> PullRequestDetails:
    """Build PullRequestDetails from `gh pr view --json` data.

    An empty body is reported as None.
    """
    return PullRequestDetails(
        number=pr["number"],
        title=pr.get("title") or "",
        body=pr.get("body") or None,
        state=_parse_state(pr.get("state")),
        is_draft=bool(pr.get("isDraft", False)),
        mergeable=_parse_mergeable(pr.get("mergeable")),
        head_ref=pr["headRefName"],
        base_ref=pr["baseRefName"],
        url=pr.get("url") or "",
    )


def _parse_state(value: str | None) -> PRState:
    if value == "OPEN":
        return "OPEN"
    if value == "MERGED":
        return "MERGED"
    return "CLOSED"


def _parse_mergeable(value: str | None) -> Mergeable:
    if value == "MERGEABLE":
        return "MERGEABLE"
    if value == "CONFLICTING":
        return "CONFLICTING"
    return "UNKNOWN"


def is_approved_from_json(pr: dict[str, Any]) -> bool:
    """True if at least one review on the PR is an approval."""
    return any(review.get("state") == "APPROVED" for review in pr.get("reviews") or [])


def ci_passed_from_json(pr: dict[str, Any]) -> bool:
    """Determine whether CI passed from statusCheckRollup data.

    Returns:
        True if no checks are configured or every check completed with a
        passing conclusion. False if any check failed or is still running.
    """
    for check in pr.get("statusCheckRollup") or []:
        # Commit statuses carry `state`; check runs carry `status`/`conclusion`
        if "state" in check:
            if check["state"] != "SUCCESS":
                return False
            continue
        if check.get("status") != "COMPLETED":
            return False
        if check.get("conclusion") not in PASSING_CHECK_CONCLUSIONS:
            return False
    return True


def iter_json_pages(json_str: str) -> Iterator[Any]:
    """Decode concatenated JSON documents one after another.

    `gh api --paginate` and `glab api --paginate` print one JSON array per
    page with nothing but whitespace between them.
    """
    decoder = json.JSONDecoder()
    text = json_str.strip()
    index = 0
    while index < len(text):
        page, index = decoder.raw_decode(text, index)
        yield page
        while index < len(text) and text[index].isspace():
            index += 1


def parse_pr_comments(json_str: str) -> list[PrComment]:
    """Parse issue comments from `gh api --paginate .../comments` output."""
    return [
        PrComment(id=c["id"], body=c.get("body") or "")
        for page in iter_json_pages(json_str)
        for c in page
    ]


def parse_pr_number_from_url(url: str) -> int:
    """Extract the PR number from a URL like https://github.com/o/r/pull/123."""
    last_line = url.strip().splitlines()[-1]
    return int(last_line.rstrip("/").split("/")[-1])
