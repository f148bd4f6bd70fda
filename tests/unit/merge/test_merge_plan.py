"""Tests for merge planning."""

from jjstack.merge.plan import (
    Certain,
    MergePlanOptions,
    MergeStep,
    RetargetBaseStep,
    SkipStep,
    Uncertain,
    create_merge_plan,
    describe_merge_step,
)
from jjstack.merge.readiness import REASON_MERGEABLE_UNKNOWN, REASON_NOT_APPROVED
from tests.test_utils.builders import analysis_for, merge_info

SQUASH = MergePlanOptions(method="squash")


def _merge(number: int, head: str, confidence=None) -> MergeStep:
    return MergeStep(
        bookmark=head,
        pr_number=number,
        pr_title=f"{head} title",
        method="squash",
        confidence=confidence if confidence is not None else Certain(),
    )


def test_consecutive_ready_prs_are_retargeted_then_merged() -> None:
    info = {
        "feat-a": merge_info(1, "feat-a", "main"),
        "feat-b": merge_info(2, "feat-b", "feat-a"),
        "feat-c": merge_info(3, "feat-c", "feat-b"),
    }

    plan = create_merge_plan(analysis_for("feat-a", "feat-b", "feat-c"), info, SQUASH, "main")

    assert plan.steps == (
        _merge(1, "feat-a"),
        RetargetBaseStep(bookmark="feat-b", pr_number=2, old_base="feat-a", new_base="main"),
        _merge(2, "feat-b"),
        RetargetBaseStep(bookmark="feat-c", pr_number=3, old_base="feat-b", new_base="main"),
        _merge(3, "feat-c"),
    )
    assert plan.bookmarks_to_clear == ("feat-a", "feat-b", "feat-c")
    assert plan.rebase_target is None
    assert plan.merge_count == 3


def test_blocked_pr_becomes_skip_and_ends_plan() -> None:
    info = {
        "a": merge_info(1, "a", "main"),
        "b": merge_info(2, "b", "a", approved=False),
        "c": merge_info(3, "c", "b"),
    }

    plan = create_merge_plan(analysis_for("a", "b", "c"), info, SQUASH, "main")

    assert plan.steps == (
        _merge(1, "a"),
        SkipStep(bookmark="b", pr_number=2, reasons=(REASON_NOT_APPROVED,)),
    )
    assert plan.rebase_target == "b"
    assert plan.bookmarks_to_clear == ("a",)


def test_unknown_mergeable_gives_uncertain_merge() -> None:
    info = {"a": merge_info(1, "a", "main", mergeable="UNKNOWN")}

    plan = create_merge_plan(analysis_for("a"), info, SQUASH, "main")

    assert plan.steps == (_merge(1, "a", Uncertain(REASON_MERGEABLE_UNKNOWN)),)
    assert plan.has_actionable


def test_blocker_takes_precedence_over_uncertainty() -> None:
    info = {"a": merge_info(1, "a", "main", approved=False, mergeable="UNKNOWN")}

    plan = create_merge_plan(analysis_for("a"), info, SQUASH, "main")

    assert plan.steps == (SkipStep(bookmark="a", pr_number=1, reasons=(REASON_NOT_APPROVED,)),)
    assert not plan.has_actionable
    assert plan.is_empty


def test_n_ready_prs_get_n_minus_one_retargets_each_before_its_merge() -> None:
    names = ["s1", "s2", "s3", "s4", "s5"]
    info = {
        name: merge_info(i + 1, name, names[i - 1] if i else "main")
        for i, name in enumerate(names)
    }
    info["s5"] = merge_info(5, "s5", "s4", ci_passed=False)

    plan = create_merge_plan(analysis_for(*names), info, SQUASH, "main")

    retargets = [i for i, step in enumerate(plan.steps) if isinstance(step, RetargetBaseStep)]
    assert len(retargets) == 3
    for index in retargets:
        following = plan.steps[index + 1]
        assert isinstance(following, MergeStep)
        assert following.bookmark == plan.steps[index].bookmark
    assert isinstance(plan.steps[-1], SkipStep)
    assert plan.steps[-1].bookmark == "s5"


def test_no_retarget_when_base_already_trunk() -> None:
    info = {"a": merge_info(1, "a", "main"), "b": merge_info(2, "b", "main")}

    plan = create_merge_plan(analysis_for("a", "b"), info, SQUASH, "main")

    assert plan.steps == (_merge(1, "a"), _merge(2, "b"))


def test_target_bookmark_is_upper_bound() -> None:
    info = {
        "a": merge_info(1, "a", "main"),
        "b": merge_info(2, "b", "a"),
        "c": merge_info(3, "c", "b"),
    }

    plan = create_merge_plan(
        analysis_for("a", "b", "c"),
        info,
        MergePlanOptions(method="squash", target_bookmark="b"),
        "main",
    )

    assert plan.bookmarks_to_clear == ("a", "b")
    assert plan.rebase_target == "c"


def test_target_does_not_skip_blockers_below_it() -> None:
    info = {"a": merge_info(1, "a", "main", ci_passed=False), "b": merge_info(2, "b", "a")}

    plan = create_merge_plan(
        analysis_for("a", "b"),
        info,
        MergePlanOptions(method="squash", target_bookmark="b"),
        "main",
    )

    assert plan.bookmarks_to_clear == ()
    assert plan.rebase_target == "a"


def test_segments_without_pr_are_ignored() -> None:
    info = {"b": merge_info(2, "b", "main")}

    plan = create_merge_plan(analysis_for("a", "b"), info, SQUASH, "main")

    assert plan.steps == (_merge(2, "b"),)


def test_method_is_applied_to_every_merge() -> None:
    info = {"a": merge_info(1, "a", "main")}

    plan = create_merge_plan(analysis_for("a"), info, MergePlanOptions(method="rebase"), "main")

    step = plan.steps[0]
    assert isinstance(step, MergeStep)
    assert step.method == "rebase"


def test_describe_merge_steps() -> None:
    assert describe_merge_step(_merge(1, "a")) == "Merge PR #1: a title"
    uncertain = _merge(1, "a", Uncertain("unknown"))
    assert describe_merge_step(uncertain) == "Merge PR #1 (uncertain): a title"
    skip = SkipStep(bookmark="b", pr_number=2, reasons=("Not approved", "CI not passing"))
    assert describe_merge_step(skip) == "Skip PR #2 (b): Not approved, CI not passing"
