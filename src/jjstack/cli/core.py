"""Helpers shared by the stack commands."""

import click

from jjstack.cli.ensure import fail
from jjstack.core.context import ConnectedPlatform, RepoContext, StackContext
from jjstack.output.output import machine_output, user_output
from jjstack.output.render import render_events
from jjstack.stack.types import ChangeGraph, StackAnalysis
from jjstack.submit.execute import SubmissionResult
from jjstack.submit.pipeline import SubmitOptions, prepare_submission, run_submission
from jjstack.submit.plan import describe_submission_step


def resolve_trunk(ctx: StackContext, repo: RepoContext) -> str:
    """Trunk branch from config, falling back to jj's trunk() bookmark."""
    if repo.config.trunk is not None:
        return repo.config.trunk
    return ctx.jj.default_branch()


def warn_excluded(graph: ChangeGraph) -> None:
    if graph.excluded_bookmark_count > 0:
        user_output(
            click.style("Warning: ", fg="yellow")
            + f"{graph.excluded_bookmark_count} bookmark(s) at or above a merge commit were ignored"
        )


def show_stack(analysis: StackAnalysis, trunk: str) -> None:
    user_output(f"Stack: {trunk} <- " + " <- ".join(analysis.bookmark_names))


def confirm_or_abort(prompt: str) -> None:
    """Ask for confirmation; exit quietly if the user declines."""
    if not click.confirm(prompt, default=True, err=True):
        user_output("Aborted.")
        raise SystemExit(0)


def submit_stack(
    ctx: StackContext,
    repo: RepoContext,
    connected: ConnectedPlatform,
    analysis: StackAnalysis,
    *,
    trunk: str,
    options: SubmitOptions,
    dry_run: bool,
    confirm: bool,
) -> SubmissionResult:
    """Plan, optionally confirm, and run a submission; exit 1 if it fails."""
    show_stack(analysis, trunk)
    plan = prepare_submission(
        connected.platform,
        analysis,
        remote=connected.remote,
        trunk_branch=trunk,
        options=options,
    )

    if not plan.has_actionable:
        user_output("All bookmarks are pushed and their PRs are up to date.")
    elif confirm and not dry_run:
        for step in plan.steps:
            user_output(f"  - {describe_submission_step(step, plan.remote)}")
        confirm_or_abort("Proceed?")

    result = render_events(
        run_submission(
            plan,
            jj=ctx.jj,
            platform=connected.platform,
            state_store=repo.state_store,
            options=options,
            dry_run=dry_run,
        )
    )

    if result.dry_run:
        user_output("Dry run: no changes made.")
        return result
    if result.failed_step is not None:
        step = describe_submission_step(result.failed_step, plan.remote)
        fail(f"{step} failed: {result.error}")

    user_output(
        click.style("✓ ", fg="green")
        + f"Pushed {len(result.pushed)}, created {len(result.created)}, "
        + f"retargeted {len(result.retargeted)}"
    )
    for name in analysis.bookmark_names:
        pr = result.prs.get(name)
        if pr is not None:
            machine_output(f"{name}\t{pr.url}")
    return result
