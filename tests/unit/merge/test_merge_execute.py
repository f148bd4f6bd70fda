"""Tests for merge execution against fakes."""

from datetime import UTC, datetime

from jjstack.gateway.platform.fake import FakePlatform
from jjstack.gateway.platform.types import MergeResult
from jjstack.merge.execute import MergeExecutionResult, execute_merge
from jjstack.merge.plan import MergePlan, MergePlanOptions, create_merge_plan
from jjstack.output.render import collect_result
from jjstack.tracking.fake import FakeStateStore
from jjstack.tracking.types import CachedPr, StackState, TrackedBookmark
from tests.test_utils.builders import analysis_for, merge_info

WHEN = datetime(2024, 1, 1, tzinfo=UTC)


def _state(*names: str) -> StackState:
    state = StackState()
    bases = ("main", *names)
    for number, name in enumerate(names, start=1):
        state = state.with_tracked(
            TrackedBookmark(name=name, change_id=f"k-{name}", remote="origin", tracked_at=WHEN)
        )
        state = state.with_cached_pr(
            CachedPr(
                bookmark=name, number=number, url="u", base=bases[number - 1], updated_at=WHEN
            )
        )
    return state


def _plan(**overrides) -> MergePlan:
    info = {
        "a": merge_info(1, "a", "main"),
        "b": merge_info(2, "b", "a"),
        "c": merge_info(3, "c", "b"),
    }
    info.update(overrides)
    return create_merge_plan(
        analysis_for("a", "b", "c"), info, MergePlanOptions(method="squash"), "main"
    )


def _run(
    plan: MergePlan, platform: FakePlatform, store: FakeStateStore
) -> MergeExecutionResult:
    _, result = collect_result(
        execute_merge(plan, platform=platform, state_store=store, state=store.load())
    )
    return result


def test_merges_in_order_with_retargets_and_clears_state() -> None:
    platform = FakePlatform()
    store = FakeStateStore(state=_state("a", "b", "c"))

    result = _run(_plan(), platform, store)

    assert result.is_success
    assert result.merged_bookmarks == ("a", "b", "c")
    assert platform.merge_calls == [(1, "squash"), (2, "squash"), (3, "squash")]
    assert platform.updated_pr_bases == [(2, "main"), (3, "main")]
    assert store.state.tracked == ()
    assert store.state.prs == ()


def test_state_is_saved_after_each_merge() -> None:
    store = FakeStateStore(state=_state("a", "b", "c"))

    _run(_plan(), FakePlatform(), store)

    merged_saves = [s.tracked_names for s in store.saved_states]
    assert ["b", "c"] in merged_saves
    assert ["c"] in merged_saves


def test_merge_error_stops_run() -> None:
    platform = FakePlatform(merge_errors={2: "Base branch was modified"})
    store = FakeStateStore(state=_state("a", "b", "c"))

    result = _run(_plan(), platform, store)

    assert result.merged_bookmarks == ("a",)
    assert result.failed_bookmark == "b"
    assert result.error_message == "Base branch was modified"
    assert result.has_merges
    assert not result.is_success
    assert [number for number, _ in platform.merge_calls] == [1, 2]
    assert store.state.tracked_names == ["b", "c"]


def test_refused_merge_stops_run() -> None:
    platform = FakePlatform(merge_results={1: MergeResult(merged=False, sha=None, message=None)})

    result = _run(_plan(), platform, FakeStateStore(state=_state("a", "b", "c")))

    assert result.failed_bookmark == "a"
    assert result.error_message == "merge was not performed"
    assert not result.has_merges


def test_uncertain_merge_failure_is_flagged_and_not_retried() -> None:
    platform = FakePlatform(merge_errors={1: "not mergeable"})
    plan = _plan(a=merge_info(1, "a", "main", mergeable="UNKNOWN"))

    result = _run(plan, platform, FakeStateStore(state=_state("a", "b", "c")))

    assert result.was_uncertain
    assert platform.merge_calls == [(1, "squash")]


def test_retarget_failure_is_fatal() -> None:
    platform = FakePlatform(update_base_errors={2: "forbidden"})

    result = _run(_plan(), platform, FakeStateStore(state=_state("a", "b", "c")))

    assert result.merged_bookmarks == ("a",)
    assert result.failed_bookmark == "b"
    assert result.error_message == "forbidden"
    assert [number for number, _ in platform.merge_calls] == [1]


def test_retarget_updates_cached_base() -> None:
    store = FakeStateStore(state=_state("a", "b", "c"))
    platform = FakePlatform(merge_errors={2: "boom"})

    _run(_plan(), platform, store)

    cached = store.state.cached_pr("b")
    assert cached is not None
    assert cached.base == "main"


def test_skip_stops_run() -> None:
    platform = FakePlatform()

    result = _run(
        _plan(b=merge_info(2, "b", "a", approved=False)),
        platform,
        FakeStateStore(state=_state("a", "b", "c")),
    )

    assert result.is_success
    assert result.merged_bookmarks == ("a",)
    assert result.skipped_bookmark == "b"
    assert platform.updated_pr_bases == []


def test_state_save_failure_keeps_merged_bookmark_and_stops() -> None:
    platform = FakePlatform()
    store = FakeStateStore(state=_state("a", "b", "c"), save_error="disk full")

    result = _run(_plan(), platform, store)

    assert result.merged_bookmarks == ("a",)
    assert result.failed_bookmark is None
    assert result.state_error == "disk full"
    assert not result.is_success
    assert [number for number, _ in platform.merge_calls] == [1]
