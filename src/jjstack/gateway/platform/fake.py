"""Fake PR platform for testing."""

from dataclasses import replace

from jjstack.core.errors import PlatformError
from jjstack.gateway.platform.abc import Platform
from jjstack.gateway.platform.types import (
    MergeMethod,
    MergeReadiness,
    MergeResult,
    PrComment,
    PullRequest,
    PullRequestDetails,
)


class FakePlatform(Platform):
    """In-memory fake implementation of PR platform operations.

    This class has NO public setup methods. All state is provided via constructor
    using keyword arguments with sensible defaults. Mutations are tracked for
    test assertions via read-only properties.
    """

    def __init__(
        self,
        *,
        prs: dict[str, PullRequest] | None = None,
        pr_details: dict[int, PullRequestDetails] | None = None,
        readiness: dict[int, MergeReadiness] | None = None,
        merge_results: dict[int, MergeResult] | None = None,
        comments: dict[int, list[PrComment]] | None = None,
        find_pr_error: str | None = None,
        create_pr_errors: dict[str, str] | None = None,
        update_base_errors: dict[int, str] | None = None,
        merge_errors: dict[int, str] | None = None,
        next_pr_number: int = 100,
    ) -> None:
        """Create FakePlatform with pre-configured state.

        Args:
            prs: Mapping of head branch -> open PullRequest
            pr_details: Mapping of pr_number -> PullRequestDetails
            readiness: Mapping of pr_number -> MergeReadiness
            merge_results: Mapping of pr_number -> MergeResult (default: merged)
            comments: Mapping of pr_number -> existing comments
            find_pr_error: If set, find_existing_pr() raises PlatformError with it
            create_pr_errors: Mapping of head branch -> error message for create_pr()
            update_base_errors: Mapping of pr_number -> error message for update_pr_base()
            merge_errors: Mapping of pr_number -> error message raised by merge_pr()
            next_pr_number: Number assigned to the first created PR
        """
        self._prs = dict(prs or {})
        self._pr_details = dict(pr_details or {})
        self._readiness = readiness or {}
        self._merge_results = merge_results or {}
        self._comments = {number: list(items) for number, items in (comments or {}).items()}
        self._find_pr_error = find_pr_error
        self._create_pr_errors = create_pr_errors or {}
        self._update_base_errors = update_base_errors or {}
        self._merge_errors = merge_errors or {}
        self._next_pr_number = next_pr_number
        self._next_comment_id = 1000

        # Mutation tracking
        self._find_pr_calls: list[str] = []
        self._created_prs: list[tuple[str, str, str, str | None, bool]] = []
        self._updated_pr_bases: list[tuple[int, str]] = []
        self._merge_calls: list[tuple[int, MergeMethod]] = []
        self._merged_prs: list[int] = []
        self._pr_details_calls: list[int] = []
        self._readiness_calls: list[int] = []
        self._created_comments: list[tuple[int, str]] = []
        self._updated_comments: list[tuple[int, int, str]] = []

    # --- Queries ---

    def find_existing_pr(self, head_branch: str) -> PullRequest | None:
        self._find_pr_calls.append(head_branch)
        if self._find_pr_error is not None:
            raise PlatformError(self._find_pr_error)
        return self._prs.get(head_branch)

    def get_pr_details(self, pr_number: int) -> PullRequestDetails:
        self._pr_details_calls.append(pr_number)
        details = self._pr_details.get(pr_number)
        if details is None:
            raise PlatformError(f"PR #{pr_number} not found")
        return details

    def check_merge_readiness(self, pr_number: int) -> MergeReadiness:
        self._readiness_calls.append(pr_number)
        readiness = self._readiness.get(pr_number)
        if readiness is None:
            raise PlatformError(f"No readiness data for PR #{pr_number}")
        return readiness

    def list_pr_comments(self, pr_number: int) -> list[PrComment]:
        return list(self._comments.get(pr_number, []))

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
        """Record PR creation and return a PR with the next fake number."""
        if head in self._create_pr_errors:
            raise PlatformError(self._create_pr_errors[head])

        self._created_prs.append((head, base, title, body, draft))
        number = self._next_pr_number
        self._next_pr_number += 1

        pr = PullRequest(
            number=number,
            url=f"https://github.com/owner/repo/pull/{number}",
            base_ref=base,
            head_ref=head,
            title=title,
            is_draft=draft,
        )
        self._prs[head] = pr
        self._pr_details[number] = PullRequestDetails(
            number=number,
            title=title,
            body=body,
            state="OPEN",
            is_draft=draft,
            mergeable="UNKNOWN",
            head_ref=head,
            base_ref=base,
            url=pr.url,
        )
        return pr

    def update_pr_base(self, pr_number: int, new_base: str) -> None:
        """Record base update and apply it to stored PR state."""
        if pr_number in self._update_base_errors:
            raise PlatformError(self._update_base_errors[pr_number])

        self._updated_pr_bases.append((pr_number, new_base))
        for head, pr in self._prs.items():
            if pr.number == pr_number:
                self._prs[head] = replace(pr, base_ref=new_base)
        details = self._pr_details.get(pr_number)
        if details is not None:
            self._pr_details[pr_number] = replace(details, base_ref=new_base)

    def merge_pr(self, pr_number: int, method: MergeMethod) -> MergeResult:
        """Record merge attempt; succeeds unless configured otherwise."""
        self._merge_calls.append((pr_number, method))
        if pr_number in self._merge_errors:
            raise PlatformError(self._merge_errors[pr_number])

        result = self._merge_results.get(
            pr_number, MergeResult(merged=True, sha=f"sha-{pr_number}", message=None)
        )
        if result.merged:
            self._merged_prs.append(pr_number)
        return result

    def create_pr_comment(self, pr_number: int, body: str) -> None:
        self._created_comments.append((pr_number, body))
        comment = PrComment(id=self._next_comment_id, body=body)
        self._next_comment_id += 1
        self._comments.setdefault(pr_number, []).append(comment)

    def update_pr_comment(self, pr_number: int, comment_id: int, body: str) -> None:
        self._updated_comments.append((pr_number, comment_id, body))
        self._comments[pr_number] = [
            PrComment(id=c.id, body=body) if c.id == comment_id else c
            for c in self._comments.get(pr_number, [])
        ]

    # --- Mutation tracking ---

    @property
    def find_pr_calls(self) -> list[str]:
        """Head branches passed to find_existing_pr(), in call order."""
        return list(self._find_pr_calls)

    @property
    def created_prs(self) -> list[tuple[str, str, str, str | None, bool]]:
        """(head, base, title, body, draft) for each created PR."""
        return list(self._created_prs)

    @property
    def updated_pr_bases(self) -> list[tuple[int, str]]:
        return list(self._updated_pr_bases)

    @property
    def merge_calls(self) -> list[tuple[int, MergeMethod]]:
        """(pr_number, method) for every merge attempt, successful or not."""
        return list(self._merge_calls)

    @property
    def merged_prs(self) -> list[int]:
        return list(self._merged_prs)

    @property
    def pr_details_calls(self) -> list[int]:
        return list(self._pr_details_calls)

    @property
    def readiness_calls(self) -> list[int]:
        return list(self._readiness_calls)

    @property
    def created_comments(self) -> list[tuple[int, str]]:
        return list(self._created_comments)

    @property
    def updated_comments(self) -> list[tuple[int, int, str]]:
        return list(self._updated_comments)

    @property
    def mutation_count(self) -> int:
        """Total number of mutating calls, used to assert dry runs."""
        return (
            len(self._created_prs)
            + len(self._updated_pr_bases)
            + len(self._merge_calls)
            + len(self._created_comments)
            + len(self._updated_comments)
        )
