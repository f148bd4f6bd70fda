"""Application context with dependency injection."""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

from jjstack.core.config import LoadedConfig, default_config, load_config
from jjstack.core.errors import RemoteNotFoundError, VcsError
from jjstack.gateway.jj.abc import Jj
from jjstack.gateway.jj.fake import FakeJj
from jjstack.gateway.jj.real import RealJj
from jjstack.gateway.platform.abc import Platform
from jjstack.gateway.platform.detection import parse_remote_url, select_remote
from jjstack.gateway.platform.fake import FakePlatform
from jjstack.gateway.platform.github import RealGitHubPlatform
from jjstack.gateway.platform.gitlab import RealGitLabPlatform
from jjstack.gateway.platform.types import RepoId
from jjstack.tracking.abc import StateStore
from jjstack.tracking.fake import FakeStateStore
from jjstack.tracking.toml_store import TomlStateStore, get_state_dir

logger = logging.getLogger(__name__)

PlatformFactory = Callable[[RepoId], Platform]


@dataclass(frozen=True)
class RepoContext:
    """The jj workspace a command runs in, with its state and config."""

    root: Path
    state_store: StateStore
    config: LoadedConfig


@dataclass(frozen=True)
class NoRepoSentinel:
    """Marks a context created outside a jj workspace."""

    message: str


@dataclass(frozen=True)
class ConnectedPlatform:
    """The remote a command talks to and the platform serving it."""

    remote: str
    repo_id: RepoId
    platform: Platform


@dataclass(frozen=True)
class StackContext:
    """Immutable context holding all dependencies for jjstack commands.

    Created at the CLI entry point and threaded through commands via
    click's context object. Tests build one with context_for_test().
    """

    jj: Jj
    platform_factory: PlatformFactory
    repo: RepoContext | NoRepoSentinel
    cwd: Path

    def connect_platform(self, requested_remote: str | None) -> ConnectedPlatform:
        """Select a remote and create the platform for its repository.

        Args:
            requested_remote: Remote from --remote or config; None for the
                default choice

        Raises:
            RemoteNotFoundError: If the remote does not exist
            UnsupportedRemoteError: If the remote is not a GitHub or GitLab
                repository
        """
        remotes = self.jj.git_remotes()
        remote = select_remote(remotes, requested_remote)
        url = next((r.url for r in remotes if r.name == remote), None)
        if url is None:
            raise RemoteNotFoundError(remote)
        repo_id = parse_remote_url(url)
        logger.debug("using remote %s (%s %s)", remote, repo_id.platform, repo_id.path)
        return ConnectedPlatform(
            remote=remote,
            repo_id=repo_id,
            platform=self.platform_factory(repo_id),
        )


def discover_repo_or_sentinel(jj: Jj) -> RepoContext | NoRepoSentinel:
    """Locate the jj workspace and load its config and state store.

    Returns NoRepoSentinel when not inside a jj workspace, so commands that
    only show help still work.
    """
    try:
        root = jj.workspace_root()
    except VcsError as e:
        return NoRepoSentinel(message=f"Not in a jj repository: {e}")

    return RepoContext(
        root=root,
        state_store=TomlStateStore(root),
        config=load_config(get_state_dir(root)),
    )


def create_platform(repo_id: RepoId, cwd: Path) -> Platform:
    """Create the real platform gateway for the repository's hosting platform."""
    if repo_id.platform == "gitlab":
        return RealGitLabPlatform(repo_id, cwd)
    return RealGitHubPlatform(repo_id, cwd)


def create_context(cwd: Path) -> StackContext:
    """Create production context with real implementations.

    Raises:
        UserInputError: If the repository config has invalid values
        StateFileError: If the repository config is not valid TOML
    """
    jj = RealJj(cwd)
    return StackContext(
        jj=jj,
        platform_factory=lambda repo_id: create_platform(repo_id, cwd),
        repo=discover_repo_or_sentinel(jj),
        cwd=cwd,
    )


def context_for_test(
    *,
    jj: Jj | None = None,
    platform: Platform | None = None,
    state_store: StateStore | None = None,
    config: LoadedConfig | None = None,
    root: Path | None = None,
    in_repo: bool = True,
) -> StackContext:
    """Create a context backed by fakes, for tests.

    Args:
        jj: Jj implementation (default: empty FakeJj)
        platform: Platform returned for any repository (default: FakePlatform)
        state_store: State store (default: empty FakeStateStore)
        config: Repository config (default: all defaults)
        root: Workspace root (default: /fake/repo)
        in_repo: If False, the context has no repository
    """
    resolved_root = root if root is not None else Path("/fake/repo")
    resolved_jj = jj if jj is not None else FakeJj(root=resolved_root)
    resolved_platform = platform if platform is not None else FakePlatform()

    repo: RepoContext | NoRepoSentinel
    if in_repo:
        repo = RepoContext(
            root=resolved_root,
            state_store=state_store if state_store is not None else FakeStateStore(),
            config=config if config is not None else default_config(),
        )
    else:
        repo = NoRepoSentinel(message="Not in a jj repository")

    return StackContext(
        jj=resolved_jj,
        platform_factory=lambda _repo_id: resolved_platform,
        repo=repo,
        cwd=resolved_root,
    )
