"""Abstract base class for jj operations.

Reads (log, remotes, trunk name) feed graph building; the mutations are
the narrow set the executors and post-merge sync need.
"""

from abc import ABC, abstractmethod
from pathlib import Path

from jjstack.gateway.platform.types import GitRemote
from jjstack.stack.types import LogEntry

# Revset covering the stack from trunk to the working copy
STACK_REVSET = "trunk()..@"


class Jj(ABC):
    """Abstract interface for jj operations.

    All implementations (real and fake) must implement this interface.
    Failed commands raise VcsError; a failed rebase raises RebaseError.
    """

    # ============================================================================
    # Query Operations
    # ============================================================================

    @abstractmethod
    def workspace_root(self) -> Path:
        """Root directory of the current jj workspace."""
        ...

    @abstractmethod
    def read_log(self, revset: str = STACK_REVSET) -> list[LogEntry]:
        """Read the commits in a revset, newest first."""
        ...

    @abstractmethod
    def default_branch(self) -> str:
        """Name of the trunk branch (the bookmark that `trunk()` resolves to)."""
        ...

    @abstractmethod
    def git_remotes(self) -> list[GitRemote]:
        """Git remotes configured for the repository."""
        ...

    # ============================================================================
    # Mutation Operations
    # ============================================================================

    @abstractmethod
    def git_fetch(self, remote: str) -> None:
        """Fetch all bookmarks from a remote."""
        ...

    @abstractmethod
    def git_push(self, bookmark: str, remote: str) -> None:
        """Push one bookmark to a remote, creating it there if needed."""
        ...

    @abstractmethod
    def rebase_bookmark_onto_trunk(self, bookmark: str) -> None:
        """Rebase a bookmark and its descendants onto trunk.

        Raises:
            RebaseError: If the rebase fails
        """
        ...

    @abstractmethod
    def delete_bookmark(self, bookmark: str) -> None:
        """Delete a local bookmark."""
        ...
