"""Tests for PR title and body extraction."""

from jjstack.stack.content import commit_body, pr_body, pr_title
from jjstack.stack.types import Bookmark, Segment
from tests.test_utils.builders import log_entry


def _segment(*descriptions: str) -> Segment:
    """Segment whose changes carry the given descriptions, newest first."""
    changes = tuple(
        log_entry(f"c{i}", description=description) for i, description in enumerate(descriptions)
    )
    bookmark = Bookmark(
        name="feature", commit_id="c0", change_id="k0", has_remote=False, is_synced=False
    )
    return Segment(bookmark=bookmark, changes=changes)


def test_body_joins_commit_bodies_root_to_tip() -> None:
    segment = _segment("C\n\nbody C", "B", "A\n\nbody A")

    assert pr_body(segment) == "body A\n\nbody C"


def test_body_is_none_when_no_commit_has_body() -> None:
    segment = _segment("C", "B\n\n   ", "A")

    assert pr_body(segment) is None


def test_title_is_summary_of_oldest_commit() -> None:
    segment = _segment("Newest change", "Oldest change\n\nDetails")

    assert pr_title(segment) == "Oldest change"


def test_title_falls_back_to_bookmark_name() -> None:
    assert pr_title(_segment("")) == "feature"


def test_commit_body_handles_crlf() -> None:
    entry = log_entry("c0", description="Title\r\n\r\nLine one\r\nLine two\r\n")

    assert commit_body(entry) == "Line one\nLine two"


def test_commit_body_requires_blank_line() -> None:
    assert commit_body(log_entry("c0", description="Title\nnot a body")) == ""
