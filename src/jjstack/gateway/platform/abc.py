"""Abstract base class for PR platform operations."""

from abc import ABC, abstractmethod

from jjstack.gateway.platform.types import (
    MergeMethod,
    MergeReadiness,
    MergeResult,
    PrComment,
    PullRequest,
    PullRequestDetails,
)


class Platform(ABC):
    """Abstract interface for pull request operations.

    All implementations (real and fake) must implement this interface.
    Failed remote calls raise PlatformError.
    """

    # --- Queries ---

    @abstractmethod
    def find_existing_pr(self, head_branch: str) -> PullRequest | None:
        """Find the open PR whose head is the given branch.

        Returns:
            The PR, or None if there is no open PR for the branch
        """
        ...

    @abstractmethod
    def get_pr_details(self, pr_number: int) -> PullRequestDetails:
        """Get full PR details including body, state and mergeability."""
        ...

    @abstractmethod
    def check_merge_readiness(self, pr_number: int) -> MergeReadiness:
        """Check approval, CI and conflict status of a PR."""
        ...

    @abstractmethod
    def list_pr_comments(self, pr_number: int) -> list[PrComment]:
        """List the comments on a PR, oldest first."""
        ...

    # --- Mutations ---

    @abstractmethod
    def create_pr(
        self,
        head: str,
        base: str,
        title: str,
        body: str | None,
        *,
        draft: bool,
    ) -> PullRequest:
        """Create a pull request.

        Args:
            head: Source branch for the PR
            base: Target base branch
            title: PR title
            body: PR body (markdown), or None for an empty body
            draft: If True, create as draft PR

        Returns:
            The created PR
        """
        ...

    @abstractmethod
    def update_pr_base(self, pr_number: int, new_base: str) -> None:
        """Change the base branch of an existing PR."""
        ...

    @abstractmethod
    def merge_pr(self, pr_number: int, method: MergeMethod) -> MergeResult:
        """Merge a PR into its current base branch.

        The platform merges into the PR's configured base, not into trunk.

        Returns:
            MergeResult; merged=False with a message when the platform refused
        """
        ...

    @abstractmethod
    def create_pr_comment(self, pr_number: int, body: str) -> None:
        """Add a comment to a PR."""
        ...

    @abstractmethod
    def update_pr_comment(self, pr_number: int, comment_id: int, body: str) -> None:
        """Replace the body of an existing PR comment."""
        ...
