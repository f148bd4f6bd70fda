"""Production implementation of PR platform operations for GitLab using the glab CLI.

GitLab calls pull requests merge requests and numbers them per project
(`iid`). jjstack stores that iid wherever it stores a PR number.
"""

import json
import logging
from pathlib import Path
from typing import Any
from urllib.parse import quote, urlencode

from jjstack.core.errors import PlatformError
from jjstack.gateway.platform.abc import Platform
from jjstack.gateway.platform.gitlab_parsing import (
    ci_passed_from_pipelines,
    is_approved_from_json,
    merge_result_from_json,
    mr_details_from_json,
    mr_from_json,
    parse_mr_list,
    parse_mr_notes,
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

DRAFT_TITLE_PREFIX = "Draft: "


class RealGitLabPlatform(Platform):
    """Production implementation using `glab api` against the REST API.

    Every call names the project explicitly and passes `--hostname`, so the
    result does not depend on glab's own remote detection. Failed glab
    commands raise PlatformError.
    """

    def __init__(self, repo_id: RepoId, cwd: Path) -> None:
        self._repo_id = repo_id
        self._cwd = cwd

    @property
    def _project_prefix(self) -> str:
        return f"projects/{quote(self._repo_id.path, safe='')}"

    def _mr_endpoint(self, mr_iid: int, *suffix: str) -> str:
        return "/".join([self._project_prefix, "merge_requests", str(mr_iid), *suffix])

    def _api(
        self,
        endpoint: str,
        operation_context: str,
        *,
        method: str = "GET",
        fields: dict[str, str] | None = None,
        paginate: bool = False,
    ) -> str:
        cmd = ["glab", "api", endpoint, "--hostname", self._repo_id.host]
        if method != "GET":
            cmd.extend(["--method", method])
        for key, value in (fields or {}).items():
            cmd.extend(["--raw-field", f"{key}={value}"])
        if paginate:
            cmd.append("--paginate")

        try:
            result = run_subprocess_with_context(
                cmd,
                operation_context=operation_context,
                cwd=self._cwd,
            )
        except FileNotFoundError as e:
            msg = "glab CLI not found; install it from https://gitlab.com/gitlab-org/cli"
            raise PlatformError(msg) from e
        except RuntimeError as e:
            raise PlatformError(str(e)) from e
        return result.stdout

    def _api_json(self, endpoint: str, operation_context: str, **kwargs: Any) -> Any:
        return json.loads(self._api(endpoint, operation_context, **kwargs))

    # --- Queries ---

    def find_existing_pr(self, head_branch: str) -> PullRequest | None:
        query = urlencode({"source_branch": head_branch, "state": "opened"})
        stdout = self._api(
            f"{self._project_prefix}/merge_requests?{query}",
            f"look up MR for branch '{head_branch}'",
        )
        mrs = parse_mr_list(stdout)
        if not mrs:
            logger.debug("no open MR for %s", head_branch)
            return None
        return mrs[0]

    def get_pr_details(self, pr_number: int) -> PullRequestDetails:
        return mr_details_from_json(
            self._api_json(self._mr_endpoint(pr_number), f"get details of MR !{pr_number}")
        )

    def check_merge_readiness(self, pr_number: int) -> MergeReadiness:
        """Check readiness from the MR, its approvals and its pipelines.

        Approval follows the project's approval rules. CI passes when the MR
        has no pipeline or its newest pipeline passed.
        """
        details = self.get_pr_details(pr_number)
        approvals = self._api_json(
            self._mr_endpoint(pr_number, "approvals"), f"get approvals of MR !{pr_number}"
        )
        pipelines = self._api_json(
            self._mr_endpoint(pr_number, "pipelines"), f"get pipelines of MR !{pr_number}"
        )
        readiness = evaluate_readiness(
            details,
            is_approved=is_approved_from_json(approvals),
            ci_passed=ci_passed_from_pipelines(pipelines),
        )
        logger.debug(
            "MR !%d readiness: blocked=%s reasons=%s",
            pr_number,
            readiness.is_blocked,
            readiness.blocking_reasons,
        )
        return readiness

    def list_pr_comments(self, pr_number: int) -> list[PrComment]:
        stdout = self._api(
            self._mr_endpoint(pr_number, "notes"),
            f"list comments of MR !{pr_number}",
            paginate=True,
        )
        return parse_mr_notes(stdout)

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
        """Open a merge request; drafts are marked with GitLab's "Draft: " title prefix."""
        fields = {
            "source_branch": head,
            "target_branch": base,
            "title": f"{DRAFT_TITLE_PREFIX}{title}" if draft else title,
        }
        if body:
            fields["description"] = body
        data = self._api_json(
            f"{self._project_prefix}/merge_requests",
            f"create merge request for branch '{head}'",
            method="POST",
            fields=fields,
        )
        return mr_from_json(data)

    def update_pr_base(self, pr_number: int, new_base: str) -> None:
        self._api(
            self._mr_endpoint(pr_number),
            f"update target of MR !{pr_number} to '{new_base}'",
            method="PUT",
            fields={"target_branch": new_base},
        )

    def merge_pr(self, pr_number: int, method: MergeMethod) -> MergeResult:
        """Merge an MR through the merge endpoint and report its returned state.

        Squash merges use "<title> (!<iid>)" plus the MR description as the
        commit message. GitLab has no per-request rebase merge: a rebase
        request merges with the project's configured merge method.
        """
        fields: dict[str, str] = {}
        if method == "squash":
            details = self.get_pr_details(pr_number)
            message = f"{details.title} (!{pr_number})"
            if details.body:
                message += f"\n\n{details.body}"
            fields = {"squash": "true", "squash_commit_message": message}
        elif method == "rebase":
            logger.debug("MR !%d: rebase merges follow the project merge method", pr_number)

        data = self._api_json(
            self._mr_endpoint(pr_number, "merge"),
            f"merge MR !{pr_number}",
            method="PUT",
            fields=fields,
        )
        return merge_result_from_json(data)

    def create_pr_comment(self, pr_number: int, body: str) -> None:
        self._api(
            self._mr_endpoint(pr_number, "notes"),
            f"comment on MR !{pr_number}",
            method="POST",
            fields={"body": body},
        )

    def update_pr_comment(self, pr_number: int, comment_id: int, body: str) -> None:
        self._api(
            self._mr_endpoint(pr_number, "notes", str(comment_id)),
            f"update comment {comment_id} on MR !{pr_number}",
            method="PUT",
            fields={"body": body},
        )
