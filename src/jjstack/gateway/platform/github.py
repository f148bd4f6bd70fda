"""Production implementation of PR platform operations using the gh CLI."""

import json
import logging
from pathlib import Path

from jjstack.core.errors import PlatformError
from jjstack.gateway.platform.abc import Platform
from jjstack.gateway.platform.parsing import (
    PR_LIST_FIELDS,
    PR_VIEW_FIELDS,
    ci_passed_from_json,
    is_approved_from_json,
    parse_pr_comments,
    parse_pr_list,
    parse_pr_number_from_url,
    pr_details_from_json,
)
from jjstack.gateway.platform.types import (
    MergeMethod,
    MergeReadiness,
    MergeResult,
    PrComment,
    PullRequest,
    PullRequestDetails,
    RepoId,
)
from jjstack.merge.readiness import evaluate_readiness
from jjstack.subprocess_utils import run_subprocess_with_context

logger = logging.getLogger(__name__)


class RealGitHubPlatform(Platform):
    """Production implementation using gh CLI.

    Every call is pinned to one repository with `--repo`, so the result does
    not depend on gh's own remote detection. Failed gh commands raise
    PlatformError.
    """

    def __init__(self, repo_id: RepoId, cwd: Path) -> None:
        self._repo_id = repo_id
        self._cwd = cwd

    @property
    def _repo_arg(self) -> str:
        if self._repo_id.host == "github.com":
            return self._repo_id.path
        return f"{self._repo_id.host}/{self._repo_id.path}"

    @property
    def _api_prefix(self) -> str:
        return f"repos/{self._repo_id.owner}/{self._repo_id.repo}"

    def _api_cmd(self, *args: str) -> list[str]:
        cmd = ["gh", "api", *args]
        if self._repo_id.host != "github.com":
            cmd.extend(["--hostname", self._repo_id.host])
        return cmd

    def _run(self, cmd: list[str], operation_context: str) -> str:
        try:
            result = run_subprocess_with_context(
                cmd,
                operation_context=operation_context,
                cwd=self._cwd,
            )
        except FileNotFoundError as e:
            msg = "gh CLI not found; install it from https://cli.github.com"
            raise PlatformError(msg) from e
        except RuntimeError as e:
            raise PlatformError(str(e)) from e
        return result.stdout

    # --- Queries ---

    def find_existing_pr(self, head_branch: str) -> PullRequest | None:
        stdout = self._run(
            [
                "gh",
                "pr",
                "list",
                "--repo",
                self._repo_arg,
                "--head",
                head_branch,
                "--state",
                "open",
                "--json",
                PR_LIST_FIELDS,
                "--limit",
                "1",
            ],
            f"look up PR for branch '{head_branch}'",
        )
        prs = parse_pr_list(stdout)
        if not prs:
            logger.debug("no open PR for %s", head_branch)
            return None
        return prs[0]

    def _view_pr(self, pr_number: int) -> dict:
        stdout = self._run(
            [
                "gh",
                "pr",
                "view",
                str(pr_number),
                "--repo",
                self._repo_arg,
                "--json",
                PR_VIEW_FIELDS,
            ],
            f"get details of PR #{pr_number}",
        )
        return json.loads(stdout)

    def get_pr_details(self, pr_number: int) -> PullRequestDetails:
        return pr_details_from_json(self._view_pr(pr_number))

    def check_merge_readiness(self, pr_number: int) -> MergeReadiness:
        """Check readiness from a single `gh pr view` call.

        Approval means at least one APPROVED review. CI passes when no checks
        are configured or all of them succeeded.
        """
        data = self._view_pr(pr_number)
        readiness = evaluate_readiness(
            pr_details_from_json(data),
            is_approved=is_approved_from_json(data),
            ci_passed=ci_passed_from_json(data),
        )
        logger.debug(
            "PR #%d readiness: blocked=%s reasons=%s",
            pr_number,
            readiness.is_blocked,
            readiness.blocking_reasons,
        )
        return readiness

    def list_pr_comments(self, pr_number: int) -> list[PrComment]:
        stdout = self._run(
            self._api_cmd(f"{self._api_prefix}/issues/{pr_number}/comments", "--paginate"),
            f"list comments of PR #{pr_number}",
        )
        return parse_pr_comments(stdout)

    # --- Mutations ---

    def create_pr(
        self,
        head: str,
        base: str,
        title: str,
        body: str | None,
        *,
        draft: bool,
    ) -> PullRequest:
        cmd = [
            "gh",
            "pr",
            "create",
            "--repo",
            self._repo_arg,
            "--head",
            head,
            "--base",
            base,
            "--title",
            title,
            "--body",
            body or "",
        ]
        if draft:
            cmd.append("--draft")

        # gh prints the new PR's URL as the last line of stdout
        stdout = self._run(cmd, f"create pull request for branch '{head}'")
        url = stdout.strip().splitlines()[-1]
        return PullRequest(
            number=parse_pr_number_from_url(url),
            url=url,
            base_ref=base,
            head_ref=head,
            title=title,
            is_draft=draft,
        )

    def update_pr_base(self, pr_number: int, new_base: str) -> None:
        self._run(
            ["gh", "pr", "edit", str(pr_number), "--repo", self._repo_arg, "--base", new_base],
            f"update base of PR #{pr_number} to '{new_base}'",
        )

    def merge_pr(self, pr_number: int, method: MergeMethod) -> MergeResult:
        """Merge a PR, then confirm the merge by reading its state back.

        Squash merges use "<title> (#<number>)" as the commit subject and the
        PR body as the commit body. Once `gh pr merge` has succeeded the PR
        counts as merged, even if the confirming read fails.
        """
        cmd = ["gh", "pr", "merge", str(pr_number), "--repo", self._repo_arg, f"--{method}"]
        if method == "squash":
            details = self.get_pr_details(pr_number)
            cmd.extend(["--subject", f"{details.title} (#{pr_number})"])
            cmd.extend(["--body", details.body or ""])

        self._run(cmd, f"merge PR #{pr_number}")

        try:
            stdout = self._run(
                [
                    "gh",
                    "pr",
                    "view",
                    str(pr_number),
                    "--repo",
                    self._repo_arg,
                    "--json",
                    "state,mergeCommit",
                ],
                f"confirm merge of PR #{pr_number}",
            )
        except PlatformError as e:
            logger.warning("merged PR #%d but could not confirm its state: %s", pr_number, e)
            return MergeResult(
                merged=True,
                sha=None,
                message=f"Merged, but could not confirm the merge: {e}",
            )
        data = json.loads(stdout)
        if data.get("state") != "MERGED":
            return MergeResult(
                merged=False,
                sha=None,
                message=f"PR #{pr_number} is {data.get('state', 'UNKNOWN')} after merge request",
            )
        merge_commit = data.get("mergeCommit") or {}
        return MergeResult(merged=True, sha=merge_commit.get("oid"), message=None)

    def create_pr_comment(self, pr_number: int, body: str) -> None:
        self._run(
            ["gh", "pr", "comment", str(pr_number), "--repo", self._repo_arg, "--body", body],
            f"comment on PR #{pr_number}",
        )

    def update_pr_comment(self, pr_number: int, comment_id: int, body: str) -> None:
        self._run(
            self._api_cmd(
                f"{self._api_prefix}/issues/comments/{comment_id}",
                "--method",
                "PATCH",
                "--raw-field",
                f"body={body}",
            ),
            f"update comment {comment_id} on PR #{pr_number}",
        )
