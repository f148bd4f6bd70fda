"""Exception taxonomy for jjstack operations.

Pure components (analysis, content extraction, planning) only raise
UserInputError and NotFoundError. Gateways convert failed subprocess calls
into PlatformError or VcsError. CLI commands turn any JjStackError into a
one-line error message and exit code 1.
"""

from dataclasses import dataclass


class JjStackError(Exception):
    """Base class for all expected jjstack failures."""


class UserInputError(JjStackError):
    """Invalid arguments, flags, or configuration values."""


class NotFoundError(JjStackError):
    """A requested bookmark, stack, remote, or PR does not exist."""


class BookmarkNotFoundError(NotFoundError):
    """A bookmark is missing from the stack between trunk and the working copy."""

    def __init__(self, bookmark: str) -> None:
        self.bookmark = bookmark
        super().__init__(f"Bookmark '{bookmark}' not found between trunk and the working copy")


class StackNotFoundError(NotFoundError):
    """There are no bookmarks between trunk and the working copy."""

    def __init__(self) -> None:
        super().__init__("No bookmarked changes found between trunk and the working copy")


class RemoteNotFoundError(NotFoundError):
    """A git remote could not be found."""

    def __init__(self, remote: str | None) -> None:
        self.remote = remote
        if remote is None:
            msg = "No git remotes configured"
        else:
            msg = f"Remote '{remote}' not found"
        super().__init__(msg)


class UnsupportedRemoteError(UserInputError):
    """The remote URL does not point at a supported platform."""

    def __init__(self, url: str) -> None:
        self.url = url
        super().__init__(f"Unsupported remote URL (only GitHub and GitLab are supported): {url}")


class PlatformError(JjStackError):
    """A call to the PR platform failed (network, auth, rate limit, conflict)."""


class VcsError(JjStackError):
    """A jj command failed."""


class RebaseError(VcsError):
    """Rebasing the remaining stack onto trunk failed."""


class StateFileError(JjStackError):
    """The local state or config file could not be read or written."""


@dataclass(frozen=True)
class SoftFailure:
    """A failure that does not invalidate earlier successful steps.

    Produced when re-submitting the remaining stack after a successful merge
    does not complete. The merges stay reported as merged.
    """

    message: str
    recommendation: str
