"""Remote selection and platform detection from remote URLs."""

import re
from collections.abc import Sequence

from jjstack.core.errors import RemoteNotFoundError, UnsupportedRemoteError
from jjstack.gateway.platform.types import GitRemote, PlatformKind, RepoId

DEFAULT_REMOTE = "origin"

# git@github.com:owner/repo.git, ssh://git@gitlab.example.com:2222/group/repo
_SSH_PATTERN = re.compile(r"^(?:ssh://)?[\w.-]+@(?P<host>[\w.-]+)(?::\d+)?[:/](?P<path>.+)$")
# https://github.com/owner/repo.git, https://user@gitlab.com/group/sub/repo/
_HTTPS_PATTERN = re.compile(r"^https?://(?:[^@/]+@)?(?P<host>[\w.-]+)(?::\d+)?/(?P<path>.+)$")


def select_remote(remotes: Sequence[GitRemote], requested: str | None) -> str:
    """Pick the remote to push to and read PRs from.

    Prefers the requested remote, then "origin", then the first configured.

    Raises:
        RemoteNotFoundError: If the requested remote does not exist or there
            are no remotes at all
    """
    names = [remote.name for remote in remotes]
    if requested is not None:
        if requested not in names:
            raise RemoteNotFoundError(requested)
        return requested
    if not names:
        raise RemoteNotFoundError(None)
    if DEFAULT_REMOTE in names:
        return DEFAULT_REMOTE
    return names[0]


def detect_platform(host: str) -> PlatformKind | None:
    """Platform served by `host`: github.com, or any host named like GitLab."""
    if host == "github.com":
        return "github"
    if "gitlab" in host.split("."):
        return "gitlab"
    return None


def parse_remote_url(url: str) -> RepoId:
    """Parse platform, host, owner and repo name from a remote URL.

    Accepts SSH and HTTPS forms, with or without a ".git" suffix and trailing
    slashes. GitHub paths are exactly owner/repo; GitLab paths may nest the
    project in subgroups.

    Raises:
        UnsupportedRemoteError: If the URL does not point at a GitHub or
            GitLab repository

    Example:
        >>> parse_remote_url("git@gitlab.com:acme/tools/widgets.git")
        RepoId(owner='acme/tools', repo='widgets', host='gitlab.com', platform='gitlab')
    """
    stripped = url.strip()
    match = _SSH_PATTERN.match(stripped) or _HTTPS_PATTERN.match(stripped)
    if match is None:
        raise UnsupportedRemoteError(url)

    host = match.group("host")
    platform = detect_platform(host)
    if platform is None:
        raise UnsupportedRemoteError(url)

    path = match.group("path").rstrip("/")
    if path.endswith(".git"):
        path = path[: -len(".git")]
    parts = path.split("/")
    if not all(parts) or "-" in parts:
        raise UnsupportedRemoteError(url)
    if platform == "github" and len(parts) != 2:
        raise UnsupportedRemoteError(url)
    if len(parts) < 2:
        raise UnsupportedRemoteError(url)

    return RepoId(owner="/".join(parts[:-1]), repo=parts[-1], host=host, platform=platform)
