"""Type definitions for PR platform operations."""

from dataclasses import dataclass, field
from typing import Literal

PRState = Literal["OPEN", "CLOSED", "MERGED"]

# Tri-state conflict check: known-mergeable, known-conflicting, not yet computed
Mergeable = Literal["MERGEABLE", "CONFLICTING", "UNKNOWN"]

MergeMethod = Literal["squash", "merge", "rebase"]

MERGE_METHODS: tuple[MergeMethod, ...] = ("squash", "merge", "rebase")

PlatformKind = Literal["github", "gitlab"]


@dataclass(frozen=True)
class PullRequest:
    """A pull request as returned by lookups and mutations."""

    number: int
    url: str
    base_ref: str
    head_ref: str
    title: str
    is_draft: bool


@dataclass(frozen=True)
class PullRequestDetails:
    """Full PR state needed for merge planning."""

    number: int
    title: str
    body: str | None
    state: PRState
    is_draft: bool
    mergeable: Mergeable
    head_ref: str
    base_ref: str
    url: str


@dataclass(frozen=True)
class MergeReadiness:
    """Whether a PR can be merged, and why not.

    Attributes:
        is_approved: True if reviewers approved the PR
        ci_passed: True if CI checks passed (or none are configured)
        mergeable: Conflict-check result copied from the PR details
        is_draft: True if the PR is a draft
        blocking_reasons: Definitive blockers (not approved, CI failed, draft,
            known conflicts)
        uncertainties: Reasons the outcome is unknown (mergeability still
            being computed)
    """

    is_approved: bool
    ci_passed: bool
    mergeable: Mergeable
    is_draft: bool
    blocking_reasons: tuple[str, ...] = field(default=())
    uncertainties: tuple[str, ...] = field(default=())

    @property
    def is_blocked(self) -> bool:
        """True if the PR definitely cannot be merged.

        Unknown mergeability does not block.
        """
        return (
            not self.is_approved
            or not self.ci_passed
            or self.is_draft
            or self.mergeable == "CONFLICTING"
        )

    @property
    def uncertainty(self) -> str | None:
        """First uncertainty reason, or None when certain or blocked."""
        if self.is_blocked or not self.uncertainties:
            return None
        return self.uncertainties[0]


@dataclass(frozen=True)
class MergeResult:
    """Outcome of a merge request."""

    merged: bool
    sha: str | None
    message: str | None


@dataclass(frozen=True)
class PrComment:
    """A comment on a pull request."""

    id: int
    body: str


@dataclass(frozen=True)
class GitRemote:
    """A git remote configured in the jj repo."""

    name: str
    url: str


@dataclass(frozen=True)
class RepoId:
    """A repository on a hosted PR platform.

    Attributes:
        owner: User or organization; on GitLab the full group path, which may
            contain slashes for subgroups
        repo: Repository (project) name
        host: Hostname serving the repository
        platform: Which platform API the host speaks
    """

    owner: str
    repo: str
    host: str = "github.com"
    platform: PlatformKind = "github"

    @property
    def path(self) -> str:
        return f"{self.owner}/{self.repo}"
