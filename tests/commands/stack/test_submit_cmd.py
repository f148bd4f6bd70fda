"""Tests for the submit command."""

from click.testing import CliRunner

from jjstack.cli.cli import cli
from jjstack.core.context import context_for_test
from jjstack.gateway.jj.fake import FakeJj
from jjstack.gateway.platform.fake import FakePlatform
from jjstack.gateway.platform.types import GitRemote
from jjstack.tracking.fake import FakeStateStore
from tests.test_utils.builders import fake_jj_with_stack, pull_request


def test_submit_pushes_creates_prs_and_tracks_stack() -> None:
    jj = fake_jj_with_stack("a", "b")
    platform = FakePlatform(next_pr_number=10)
    store = FakeStateStore()
    ctx = context_for_test(jj=jj, platform=platform, state_store=store)

    result = CliRunner().invoke(cli, ["submit"], obj=ctx)

    assert result.exit_code == 0, result.output
    assert jj.pushed == [("a", "origin"), ("b", "origin")]
    assert [(head, base) for head, base, *_ in platform.created_prs] == [
        ("a", "main"),
        ("b", "a"),
    ]
    assert store.state.tracked_names == ["a", "b"]
    assert "Stack: main <- a <- b" in result.output
    assert "a\thttps://github.com/owner/repo/pull/10" in result.output
    assert "b\thttps://github.com/owner/repo/pull/11" in result.output


def test_submit_posts_stack_comments_by_default() -> None:
    platform = FakePlatform()
    ctx = context_for_test(jj=fake_jj_with_stack("a", "b"), platform=platform)

    result = CliRunner().invoke(cli, ["submit"], obj=ctx)

    assert result.exit_code == 0, result.output
    assert [number for number, _ in platform.created_comments] == [100, 101]


def test_submit_no_comments_flag() -> None:
    platform = FakePlatform()
    ctx = context_for_test(jj=fake_jj_with_stack("a"), platform=platform)

    result = CliRunner().invoke(cli, ["submit", "--no-comments"], obj=ctx)

    assert result.exit_code == 0, result.output
    assert platform.created_comments == []


def test_submit_draft_flag() -> None:
    platform = FakePlatform()
    ctx = context_for_test(jj=fake_jj_with_stack("a"), platform=platform)

    result = CliRunner().invoke(cli, ["submit", "--draft"], obj=ctx)

    assert result.exit_code == 0, result.output
    assert platform.created_prs[0][4] is True


def test_submit_target_bookmark_limits_stack() -> None:
    jj = fake_jj_with_stack("a", "b", "c")
    platform = FakePlatform()
    ctx = context_for_test(jj=jj, platform=platform)

    result = CliRunner().invoke(cli, ["submit", "b"], obj=ctx)

    assert result.exit_code == 0, result.output
    assert jj.pushed == [("a", "origin"), ("b", "origin")]
    assert [head for head, *_ in platform.created_prs] == ["a", "b"]


def test_submit_dry_run_makes_no_changes() -> None:
    jj = fake_jj_with_stack("a", "b")
    platform = FakePlatform()
    store = FakeStateStore()
    ctx = context_for_test(jj=jj, platform=platform, state_store=store)

    result = CliRunner().invoke(cli, ["submit", "--dry-run"], obj=ctx)

    assert result.exit_code == 0, result.output
    assert "Dry run: no changes made." in result.output
    assert jj.pushed == []
    assert platform.mutation_count == 0
    assert store.saved_states == []


def test_submit_up_to_date_stack() -> None:
    jj = fake_jj_with_stack("a", pushed=True)
    platform = FakePlatform(prs={"a": pull_request(1, "a", "main")})
    ctx = context_for_test(jj=jj, platform=platform)

    result = CliRunner().invoke(cli, ["submit", "--no-comments"], obj=ctx)

    assert result.exit_code == 0, result.output
    assert "All bookmarks are pushed and their PRs are up to date." in result.output
    assert jj.pushed == []
    assert platform.created_prs == []


def test_submit_retargets_existing_pr_with_wrong_base() -> None:
    jj = fake_jj_with_stack("a", "b", pushed=True)
    platform = FakePlatform(
        prs={"a": pull_request(1, "a", "main"), "b": pull_request(2, "b", "main")}
    )
    ctx = context_for_test(jj=jj, platform=platform)

    result = CliRunner().invoke(cli, ["submit", "--no-comments"], obj=ctx)

    assert result.exit_code == 0, result.output
    assert platform.updated_pr_bases == [(2, "a")]


def test_submit_confirm_declined_aborts() -> None:
    jj = fake_jj_with_stack("a")
    platform = FakePlatform()
    ctx = context_for_test(jj=jj, platform=platform)

    result = CliRunner().invoke(cli, ["submit", "--confirm"], obj=ctx, input="n\n")

    assert result.exit_code == 0
    assert "Aborted." in result.output
    assert jj.pushed == []
    assert platform.mutation_count == 0


def test_submit_push_failure_exits_with_error() -> None:
    jj = fake_jj_with_stack("a", "b", push_errors={"b": "rejected"})
    platform = FakePlatform()
    ctx = context_for_test(jj=jj, platform=platform)

    result = CliRunner().invoke(cli, ["submit"], obj=ctx)

    assert result.exit_code == 1
    assert "Error:" in result.output
    assert "rejected" in result.output
    assert jj.pushed == [("a", "origin")]


def test_submit_unknown_bookmark() -> None:
    ctx = context_for_test(jj=fake_jj_with_stack("a"))

    result = CliRunner().invoke(cli, ["submit", "nope"], obj=ctx)

    assert result.exit_code == 1
    assert "nope" in result.output


def test_submit_outside_repository() -> None:
    ctx = context_for_test(in_repo=False)

    result = CliRunner().invoke(cli, ["submit"], obj=ctx)

    assert result.exit_code == 1
    assert "Not in a jj repository" in result.output


def test_submit_rejects_unsupported_remote() -> None:
    jj = FakeJj(remotes=[GitRemote(name="origin", url="git@bitbucket.org:owner/repo.git")])
    ctx = context_for_test(jj=jj)

    result = CliRunner().invoke(cli, ["submit"], obj=ctx)

    assert result.exit_code == 1
    assert "Error:" in result.output
