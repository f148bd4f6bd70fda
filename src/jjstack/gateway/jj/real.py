"""Production implementation of jj operations using subprocess."""

from pathlib import Path

from jjstack.core.errors import RebaseError, VcsError
from jjstack.gateway.jj.abc import STACK_REVSET, Jj
from jjstack.gateway.jj.parsing import (
    LOG_TEMPLATE,
    TRUNK_NAME_TEMPLATE,
    parse_log_output,
    parse_remote_list,
    parse_trunk_name,
)
from jjstack.gateway.platform.types import GitRemote
from jjstack.stack.types import LogEntry
from jjstack.subprocess_utils import run_subprocess_with_context

# Used when trunk() resolves to a commit without bookmarks (e.g. root())
FALLBACK_TRUNK = "main"


class RealJj(Jj):
    """Real implementation of jj operations using the jj CLI."""

    def __init__(self, cwd: Path) -> None:
        self._cwd = cwd

    def _run(self, args: list[str], operation_context: str) -> str:
        try:
            result = run_subprocess_with_context(
                ["jj", "--color", "never", *args],
                operation_context=operation_context,
                cwd=self._cwd,
            )
        except FileNotFoundError as e:
            msg = "jj not found; install it from https://jj-vcs.github.io/jj"
            raise VcsError(msg) from e
        except RuntimeError as e:
            raise VcsError(str(e)) from e
        return result.stdout

    def workspace_root(self) -> Path:
        return Path(self._run(["workspace", "root"], "find jj workspace root").strip())

    def read_log(self, revset: str = STACK_REVSET) -> list[LogEntry]:
        stdout = self._run(
            ["log", "-r", revset, "--no-graph", "-T", LOG_TEMPLATE],
            f"read jj log for '{revset}'",
        )
        try:
            return parse_log_output(stdout)
        except ValueError as e:
            raise VcsError(str(e)) from e

    def default_branch(self) -> str:
        stdout = self._run(
            ["log", "-r", "trunk()", "--no-graph", "-T", TRUNK_NAME_TEMPLATE],
            "resolve trunk()",
        )
        return parse_trunk_name(stdout) or FALLBACK_TRUNK

    def git_remotes(self) -> list[GitRemote]:
        return parse_remote_list(self._run(["git", "remote", "list"], "list git remotes"))

    def git_fetch(self, remote: str) -> None:
        self._run(["git", "fetch", "--remote", remote], f"fetch from '{remote}'")

    def git_push(self, bookmark: str, remote: str) -> None:
        self._run(
            ["git", "push", "--remote", remote, "--bookmark", bookmark, "--allow-new"],
            f"push bookmark '{bookmark}' to '{remote}'",
        )

    def rebase_bookmark_onto_trunk(self, bookmark: str) -> None:
        try:
            self._run(
                ["rebase", "-b", bookmark, "-d", "trunk()"],
                f"rebase '{bookmark}' onto trunk",
            )
        except VcsError as e:
            raise RebaseError(str(e)) from e

    def delete_bookmark(self, bookmark: str) -> None:
        self._run(["bookmark", "delete", bookmark], f"delete bookmark '{bookmark}'")
