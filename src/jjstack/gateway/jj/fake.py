"""Fake implementation of jj operations for testing."""

from dataclasses import replace
from pathlib import Path

from jjstack.core.errors import RebaseError, VcsError
from jjstack.gateway.jj.abc import STACK_REVSET, Jj
from jjstack.gateway.platform.types import GitRemote
from jjstack.stack.types import LogEntry


class FakeJj(Jj):
    """In-memory fake implementation of jj operations.

    This fake accepts pre-configured state in its constructor and tracks
    mutations for test assertions.

    Constructor Injection:
    ---------------------
    - log_entries: Entries returned by read_log(), newest first
    - rebased_log_entries: Entries that replace log_entries after a successful
      rebase_bookmark_onto_trunk()
    - remotes / trunk / root: Query results
    - *_error(s): Messages raised as VcsError (RebaseError for rebase)

    Mutation Tracking:
    -----------------
    - pushed: (bookmark, remote) per git_push()
    - fetched: remote per git_fetch()
    - rebased: bookmark per rebase_bookmark_onto_trunk()
    - deleted_bookmarks: bookmark per delete_bookmark()
    """

    def __init__(
        self,
        *,
        log_entries: list[LogEntry] | None = None,
        rebased_log_entries: list[LogEntry] | None = None,
        remotes: list[GitRemote] | None = None,
        trunk: str = "main",
        root: Path | None = None,
        fetch_error: str | None = None,
        push_errors: dict[str, str] | None = None,
        rebase_error: str | None = None,
        delete_errors: dict[str, str] | None = None,
    ) -> None:
        self._log_entries = list(log_entries or [])
        self._rebased_log_entries = rebased_log_entries
        self._remotes = (
            remotes
            if remotes is not None
            else [GitRemote(name="origin", url="git@github.com:owner/repo.git")]
        )
        self._trunk = trunk
        self._root = root if root is not None else Path("/fake/repo")
        self._fetch_error = fetch_error
        self._push_errors = push_errors or {}
        self._rebase_error = rebase_error
        self._delete_errors = delete_errors or {}

        # Mutation tracking
        self._pushed: list[tuple[str, str]] = []
        self._fetched: list[str] = []
        self._rebased: list[str] = []
        self._deleted_bookmarks: list[str] = []
        self._log_reads: list[str] = []

    # ============================================================================
    # Query Operations
    # ============================================================================

    def workspace_root(self) -> Path:
        return self._root

    def read_log(self, revset: str = STACK_REVSET) -> list[LogEntry]:
        self._log_reads.append(revset)
        return list(self._log_entries)

    def default_branch(self) -> str:
        return self._trunk

    def git_remotes(self) -> list[GitRemote]:
        return list(self._remotes)

    # ============================================================================
    # Mutation Operations
    # ============================================================================

    def git_fetch(self, remote: str) -> None:
        if self._fetch_error is not None:
            raise VcsError(self._fetch_error)
        self._fetched.append(remote)

    def git_push(self, bookmark: str, remote: str) -> None:
        """Record the push and mark the bookmark as synced with the remote."""
        if bookmark in self._push_errors:
            raise VcsError(self._push_errors[bookmark])
        self._pushed.append((bookmark, remote))

        remote_ref = f"{bookmark}@{remote}"
        updated: list[LogEntry] = []
        for entry in self._log_entries:
            remote_bookmarks = tuple(r for r in entry.remote_bookmarks if r != remote_ref)
            if bookmark in entry.local_bookmarks:
                remote_bookmarks = (*remote_bookmarks, remote_ref)
            updated.append(replace(entry, remote_bookmarks=remote_bookmarks))
        self._log_entries = updated

    def rebase_bookmark_onto_trunk(self, bookmark: str) -> None:
        if self._rebase_error is not None:
            raise RebaseError(self._rebase_error)
        self._rebased.append(bookmark)
        if self._rebased_log_entries is not None:
            self._log_entries = list(self._rebased_log_entries)

    def delete_bookmark(self, bookmark: str) -> None:
        """Record the deletion and drop the bookmark from the log."""
        if bookmark in self._delete_errors:
            raise VcsError(self._delete_errors[bookmark])
        self._deleted_bookmarks.append(bookmark)
        self._log_entries = [
            replace(
                entry,
                local_bookmarks=tuple(b for b in entry.local_bookmarks if b != bookmark),
            )
            for entry in self._log_entries
        ]

    # ============================================================================
    # Mutation Tracking
    # ============================================================================

    @property
    def pushed(self) -> list[tuple[str, str]]:
        return list(self._pushed)

    @property
    def fetched(self) -> list[str]:
        return list(self._fetched)

    @property
    def rebased(self) -> list[str]:
        return list(self._rebased)

    @property
    def deleted_bookmarks(self) -> list[str]:
        return list(self._deleted_bookmarks)

    @property
    def log_reads(self) -> list[str]:
        """Revsets passed to read_log(), in call order."""
        return list(self._log_reads)
