"""Tests for gh CLI JSON parsing."""

import json

from jjstack.gateway.platform.parsing import (
    ci_passed_from_json,
    is_approved_from_json,
    parse_pr_comments,
    parse_pr_list,
    parse_pr_number_from_url,
    pr_details_from_json,
)
from jjstack.gateway.platform.types import PrComment, PullRequest


def _view(**overrides) -> dict:
    data = {
        "number": 12,
        "title": "Add widgets",
        "body": "",
        "state": "OPEN",
        "isDraft": False,
        "mergeable": "MERGEABLE",
        "headRefName": "widgets",
        "baseRefName": "main",
        "url": "https://github.com/owner/repo/pull/12",
        "reviews": [],
        "statusCheckRollup": [],
    }
    data.update(overrides)
    return data


def test_parse_pr_list() -> None:
    stdout = json.dumps(
        [
            {
                "number": 3,
                "url": "https://github.com/owner/repo/pull/3",
                "baseRefName": "main",
                "headRefName": "a",
                "title": "A",
                "isDraft": True,
            }
        ]
    )

    assert parse_pr_list(stdout) == [
        PullRequest(
            number=3,
            url="https://github.com/owner/repo/pull/3",
            base_ref="main",
            head_ref="a",
            title="A",
            is_draft=True,
        )
    ]


def test_details_normalize_body_state_and_mergeable() -> None:
    details = pr_details_from_json(_view(state="WEIRD", mergeable=None))

    assert details.body is None
    assert details.state == "CLOSED"
    assert details.mergeable == "UNKNOWN"


def test_any_approval_counts() -> None:
    reviews = [{"state": "CHANGES_REQUESTED"}, {"state": "APPROVED"}]

    assert is_approved_from_json(_view(reviews=reviews))
    assert not is_approved_from_json(_view(reviews=[{"state": "COMMENTED"}]))
    assert not is_approved_from_json(_view(reviews=None))


def test_ci_passes_without_checks() -> None:
    assert ci_passed_from_json(_view())
    assert ci_passed_from_json(_view(statusCheckRollup=None))


def test_ci_accepts_skipped_and_neutral_check_runs() -> None:
    checks = [
        {"status": "COMPLETED", "conclusion": "SUCCESS"},
        {"status": "COMPLETED", "conclusion": "SKIPPED"},
        {"status": "COMPLETED", "conclusion": "NEUTRAL"},
        {"state": "SUCCESS"},
    ]

    assert ci_passed_from_json(_view(statusCheckRollup=checks))


def test_ci_fails_on_pending_or_failed_checks() -> None:
    assert not ci_passed_from_json(_view(statusCheckRollup=[{"status": "IN_PROGRESS"}]))
    failed = [{"status": "COMPLETED", "conclusion": "FAILURE"}]
    assert not ci_passed_from_json(_view(statusCheckRollup=failed))
    assert not ci_passed_from_json(_view(statusCheckRollup=[{"state": "PENDING"}]))


def test_comments_from_concatenated_pages() -> None:
    stdout = '[{"id": 1, "body": "a"}]\n[{"id": 2, "body": null}]'

    assert parse_pr_comments(stdout) == [PrComment(id=1, body="a"), PrComment(id=2, body="")]


def test_comments_empty_output() -> None:
    assert parse_pr_comments("") == []
    assert parse_pr_comments("[]") == []


def test_pr_number_from_create_output() -> None:
    stdout = "Warning: 1 uncommitted change\nhttps://github.com/owner/repo/pull/42\n"

    assert parse_pr_number_from_url(stdout) == 42
