"""Tests for the merge command."""

from click.testing import CliRunner

from jjstack.cli.cli import cli
from jjstack.core.context import context_for_test
from jjstack.tracking.fake import FakeStateStore
from tests.test_utils.builders import (
    fake_jj_with_stack,
    linear_stack,
    merge_info,
    platform_with,
    tracked_state,
)


def test_merge_whole_ready_stack() -> None:
    jj = fake_jj_with_stack("a", "b", pushed=True)
    platform = platform_with(merge_info(1, "a", "main"), merge_info(2, "b", "a"))
    store = FakeStateStore(state=tracked_state("a", "b"))
    ctx = context_for_test(jj=jj, platform=platform, state_store=store)

    result = CliRunner().invoke(cli, ["merge"], obj=ctx)

    assert result.exit_code == 0, result.output
    assert platform.merge_calls == [(1, "squash"), (2, "squash")]
    assert platform.updated_pr_bases == [(2, "main")]
    assert "Merged: a, b" in result.output
    assert jj.fetched == ["origin"]
    assert jj.deleted_bookmarks == ["a", "b"]
    assert jj.rebased == []
    assert store.state.tracked_names == []


def test_merge_stops_at_blocked_pr_and_rebases_rest() -> None:
    jj = fake_jj_with_stack(
        "a", "b", pushed=True, rebased_log_entries=linear_stack("b", pushed=True)
    )
    platform = platform_with(
        merge_info(1, "a", "main"),
        merge_info(2, "b", "a", approved=False),
    )
    store = FakeStateStore(state=tracked_state("a", "b"))
    ctx = context_for_test(jj=jj, platform=platform, state_store=store)

    result = CliRunner().invoke(cli, ["merge"], obj=ctx)

    assert result.exit_code == 0, result.output
    assert platform.merge_calls == [(1, "squash")]
    assert "Merged: a" in result.output
    assert "Stopped at b" in result.output
    assert jj.deleted_bookmarks == ["a"]
    assert jj.rebased == ["b"]
    assert (2, "main") in platform.updated_pr_bases
    assert store.state.tracked_names == ["b"]


def test_merge_up_to_target_bookmark() -> None:
    jj = fake_jj_with_stack("a", "b", pushed=True)
    platform = platform_with(merge_info(1, "a", "main"), merge_info(2, "b", "a"))
    store = FakeStateStore(state=tracked_state("a", "b"))
    ctx = context_for_test(jj=jj, platform=platform, state_store=store)

    result = CliRunner().invoke(cli, ["merge", "a", "--method", "rebase"], obj=ctx)

    assert result.exit_code == 0, result.output
    assert platform.merge_calls == [(1, "rebase")]
    assert jj.rebased == ["b"]


def test_merge_dry_run_shows_plan_only() -> None:
    jj = fake_jj_with_stack("a", "b", pushed=True)
    platform = platform_with(merge_info(1, "a", "main"), merge_info(2, "b", "a"))
    store = FakeStateStore(state=tracked_state("a", "b"))
    ctx = context_for_test(jj=jj, platform=platform, state_store=store)

    result = CliRunner().invoke(cli, ["merge", "--dry-run"], obj=ctx)

    assert result.exit_code == 0, result.output
    assert "Dry run: no changes made." in result.output
    assert platform.mutation_count == 0
    assert jj.fetched == []
    assert store.saved_states == []


def test_merge_nothing_ready() -> None:
    jj = fake_jj_with_stack("a", pushed=True)
    platform = platform_with(merge_info(1, "a", "main", ci_passed=False))
    store = FakeStateStore(state=tracked_state("a"))
    ctx = context_for_test(jj=jj, platform=platform, state_store=store)

    result = CliRunner().invoke(cli, ["merge"], obj=ctx)

    assert result.exit_code == 0, result.output
    assert "Nothing to merge." in result.output
    assert platform.merge_calls == []


def test_merge_failure_exits_with_error() -> None:
    jj = fake_jj_with_stack("a", "b", pushed=True)
    platform = platform_with(
        merge_info(1, "a", "main"), merge_info(2, "b", "a"), merge_errors={1: "boom"}
    )
    store = FakeStateStore(state=tracked_state("a", "b"))
    ctx = context_for_test(jj=jj, platform=platform, state_store=store)

    result = CliRunner().invoke(cli, ["merge"], obj=ctx)

    assert result.exit_code == 1
    assert "Failed to merge a: boom" in result.output
    assert jj.fetched == []
    assert jj.deleted_bookmarks == []


def test_merge_failure_after_partial_success_reports_both() -> None:
    jj = fake_jj_with_stack("a", "b", pushed=True)
    platform = platform_with(
        merge_info(1, "a", "main"), merge_info(2, "b", "a"), merge_errors={2: "conflict"}
    )
    store = FakeStateStore(state=tracked_state("a", "b"))
    ctx = context_for_test(jj=jj, platform=platform, state_store=store)

    result = CliRunner().invoke(cli, ["merge"], obj=ctx)

    assert result.exit_code == 1
    assert "Merged: a" in result.output
    assert "Failed to merge b: conflict" in result.output
    assert jj.deleted_bookmarks == ["a"]


def test_uncertain_merge_failure_is_labelled() -> None:
    jj = fake_jj_with_stack("a", pushed=True)
    platform = platform_with(
        merge_info(1, "a", "main", mergeable="UNKNOWN"), merge_errors={1: "not mergeable"}
    )
    store = FakeStateStore(state=tracked_state("a"))
    ctx = context_for_test(jj=jj, platform=platform, state_store=store)

    result = CliRunner().invoke(cli, ["merge"], obj=ctx)

    assert result.exit_code == 1
    assert "(merge status was uncertain)" in result.output
    assert platform.merge_calls == [(1, "squash")]


def test_merge_untracked_bookmark() -> None:
    jj = fake_jj_with_stack("a", "b", pushed=True)
    store = FakeStateStore(state=tracked_state("a"))
    ctx = context_for_test(jj=jj, state_store=store)

    result = CliRunner().invoke(cli, ["merge", "b"], obj=ctx)

    assert result.exit_code == 1
    assert "Bookmark 'b' is not tracked" in result.output


def test_merge_without_tracked_bookmarks() -> None:
    ctx = context_for_test(jj=fake_jj_with_stack("a", pushed=True))

    result = CliRunner().invoke(cli, ["merge"], obj=ctx)

    assert result.exit_code == 1
    assert "No tracked bookmarks in the stack" in result.output


def test_merge_rebase_failure_is_fatal_after_merging() -> None:
    jj = fake_jj_with_stack("a", "b", pushed=True, rebase_error="conflict in b")
    platform = platform_with(
        merge_info(1, "a", "main"),
        merge_info(2, "b", "a", is_draft=True),
    )
    store = FakeStateStore(state=tracked_state("a", "b"))
    ctx = context_for_test(jj=jj, platform=platform, state_store=store)

    result = CliRunner().invoke(cli, ["merge"], obj=ctx)

    assert result.exit_code == 1
    assert "Merged: a" in result.output
    assert "Post-merge sync failed" in result.output


def test_merge_reports_merged_pr_when_state_cannot_be_saved() -> None:
    jj = fake_jj_with_stack("a", pushed=True)
    platform = platform_with(merge_info(1, "a", "main"))
    store = FakeStateStore(state=tracked_state("a"), save_error="disk full")
    ctx = context_for_test(jj=jj, platform=platform, state_store=store)

    result = CliRunner().invoke(cli, ["merge"], obj=ctx)

    assert result.exit_code == 1
    assert platform.merge_calls == [(1, "squash")]
    assert "Merged: a" in result.output
    assert "Error:" in result.output
    assert "disk full" in result.output
    assert jj.fetched == []
