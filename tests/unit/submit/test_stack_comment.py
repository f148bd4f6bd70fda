"""Tests for stack overview comments."""

from jjstack.gateway.platform.fake import FakePlatform
from jjstack.gateway.platform.types import PrComment
from jjstack.output.render import collect_result
from jjstack.submit.stack_comment import (
    STACK_COMMENT_FOOTER,
    StackCommentData,
    StackCommentItem,
    build_stack_comment_data,
    find_stack_comment,
    format_stack_comment,
    parse_stack_comment_data,
    update_stack_comments,
)
from tests.test_utils.builders import analysis_for, pull_request


def _data() -> StackCommentData:
    prs = {
        "a": pull_request(1, "a", "main"),
        "b": pull_request(2, "b", "a"),
        "c": pull_request(3, "c", "b"),
    }
    return build_stack_comment_data(analysis_for("a", "b", "c"), prs, "main")


def test_build_data_keeps_stack_order_and_skips_missing_prs() -> None:
    data = build_stack_comment_data(
        analysis_for("a", "b"), {"b": pull_request(2, "b", "a")}, "main"
    )

    assert data.base_branch == "main"
    assert data.items == (
        StackCommentItem(
            bookmark="b",
            pr_number=2,
            url="https://github.com/owner/repo/pull/2",
            title="b title",
        ),
    )


def test_format_lists_leaf_first_and_marks_current_pr() -> None:
    body = format_stack_comment(_data(), current_index=1)

    lines = body.splitlines()
    assert lines[2:6] == ["* #3", "* **#2** 👈", "* #1", "* `main`"]
    assert lines[-1] == STACK_COMMENT_FOOTER


def test_formatted_comment_round_trips_its_data() -> None:
    data = _data()

    assert parse_stack_comment_data(format_stack_comment(data, 0)) == data


def test_marker_escapes_closing_sequence_in_titles() -> None:
    item = StackCommentItem(bookmark="a", pr_number=1, url="u", title="x --> y")
    data = StackCommentData(version=1, base_branch="main", items=(item,))

    body = format_stack_comment(data, 0)

    assert body.splitlines()[0].count("-->") == 1
    parsed = parse_stack_comment_data(body)
    assert parsed is not None
    assert parsed.items[0].title == "x --> y"


def test_parse_ignores_comments_without_valid_marker() -> None:
    assert parse_stack_comment_data("just a review comment") is None
    assert parse_stack_comment_data("<!-- jjstack-stack: {not json} -->") is None


def test_find_stack_comment() -> None:
    comments = [PrComment(id=1, body="lgtm"), PrComment(id=2, body="<!-- jjstack-stack: {} -->")]

    found = find_stack_comment(comments)

    assert found is not None
    assert found.id == 2


def test_update_creates_then_updates_then_leaves_unchanged() -> None:
    data = _data()
    current = format_stack_comment(data, 1)
    platform = FakePlatform(
        comments={
            2: [PrComment(id=10, body=current)],
            3: [PrComment(id=11, body="<!-- jjstack-stack: {} -->\nold")],
        }
    )

    _, summary = collect_result(update_stack_comments(platform, data))

    assert (summary.created, summary.updated, summary.unchanged, summary.failed) == (1, 1, 1, 0)
    assert [number for number, _ in platform.created_comments] == [1]
    assert [(number, comment_id) for number, comment_id, _ in platform.updated_comments] == [
        (3, 11)
    ]


def test_update_skips_comment_whose_data_matches_despite_edited_text() -> None:
    data = _data()
    edited = format_stack_comment(data, 0) + "\n\nEdited by hand."
    platform = FakePlatform(comments={1: [PrComment(id=10, body=edited)]})

    _, summary = collect_result(update_stack_comments(platform, data))

    assert summary.unchanged == 1
    assert all(number != 1 for number, _ in platform.created_comments)
    assert platform.updated_comments == []


def test_update_rewrites_comment_for_changed_stack() -> None:
    old = build_stack_comment_data(
        analysis_for("a", "b"),
        {"a": pull_request(1, "a", "main"), "b": pull_request(2, "b", "a")},
        "main",
    )
    platform = FakePlatform(comments={1: [PrComment(id=10, body=format_stack_comment(old, 0))]})

    collect_result(update_stack_comments(platform, _data()))

    assert [(number, comment_id) for number, comment_id, _ in platform.updated_comments] == [
        (1, 10)
    ]
