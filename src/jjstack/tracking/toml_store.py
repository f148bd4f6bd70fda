"""State file I/O for .jj/repo/jjstack/state.toml."""

import logging
from datetime import datetime
from pathlib import Path
from typing import Any

import tomli
import tomli_w

from jjstack.core.errors import StateFileError
from jjstack.tracking.abc import StateStore
from jjstack.tracking.types import CachedPr, StackState, TrackedBookmark

logger = logging.getLogger(__name__)

STATE_DIR_NAME = "jjstack"
STATE_FILE_NAME = "state.toml"

# Schema version for future migrations
SCHEMA_VERSION = 1


def resolve_repo_path(workspace_root: Path) -> Path:
    """Resolve the `.jj/repo` directory of a workspace.

    In secondary workspaces (`jj workspace add`), `.jj/repo` is a plain file
    holding the path of the main workspace's repo directory. If that file
    does not point at a directory, its own path is returned so later I/O
    surfaces the error.
    """
    repo_path = workspace_root / ".jj" / "repo"
    if not repo_path.is_file():
        return repo_path

    target = Path(repo_path.read_text(encoding="utf-8").strip())
    if not target.is_absolute():
        target = (repo_path.parent / target).resolve()
    if target.is_dir():
        return target
    return repo_path


def get_state_dir(workspace_root: Path) -> Path:
    return resolve_repo_path(workspace_root) / STATE_DIR_NAME


def get_state_path(workspace_root: Path) -> Path:
    """Get path to state.toml file."""
    return get_state_dir(workspace_root) / STATE_FILE_NAME


class TomlStateStore(StateStore):
    """Production implementation that reads/writes `.jj/repo/jjstack/state.toml`."""

    def __init__(self, workspace_root: Path) -> None:
        self._path = get_state_path(workspace_root)

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> StackState:
        if not self._path.exists():
            return StackState()

        try:
            with open(self._path, "rb") as f:
                data = tomli.load(f)
        except (OSError, tomli.TOMLDecodeError) as e:
            msg = f"Failed to read {self._path}: {e}"
            raise StateFileError(msg) from e

        schema_version = data.get("schema_version", SCHEMA_VERSION)
        if schema_version > SCHEMA_VERSION:
            msg = (
                f"{self._path} uses schema version {schema_version}, "
                f"but this version of jjstack only supports up to version {SCHEMA_VERSION}"
            )
            raise StateFileError(msg)

        try:
            return StackState(
                tracked=tuple(_tracked_from_toml(item) for item in data.get("tracked", [])),
                prs=tuple(_pr_from_toml(item) for item in data.get("prs", [])),
            )
        except (KeyError, TypeError, ValueError) as e:
            msg = f"Malformed entry in {self._path}: {e}"
            raise StateFileError(msg) from e

    def save(self, state: StackState) -> None:
        data: dict[str, Any] = {
            "schema_version": SCHEMA_VERSION,
            "tracked": [_tracked_to_toml(bookmark) for bookmark in state.tracked],
            "prs": [_pr_to_toml(pr) for pr in state.prs],
        }
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            with open(self._path, "wb") as f:
                tomli_w.dump(data, f)
        except OSError as e:
            msg = f"Failed to write {self._path}: {e}"
            raise StateFileError(msg) from e
        logger.debug(
            "saved %d tracked bookmarks and %d PRs to %s",
            len(state.tracked),
            len(state.prs),
            self._path,
        )


def _tracked_from_toml(item: dict[str, Any]) -> TrackedBookmark:
    return TrackedBookmark(
        name=item["name"],
        change_id=item["change_id"],
        remote=item.get("remote"),
        tracked_at=datetime.fromisoformat(item["tracked_at"]),
    )


def _tracked_to_toml(bookmark: TrackedBookmark) -> dict[str, Any]:
    entry: dict[str, Any] = {
        "name": bookmark.name,
        "change_id": bookmark.change_id,
        "tracked_at": bookmark.tracked_at.isoformat(),
    }
    # TOML has no null; an unset remote is omitted
    if bookmark.remote is not None:
        entry["remote"] = bookmark.remote
    return entry


def _pr_from_toml(item: dict[str, Any]) -> CachedPr:
    return CachedPr(
        bookmark=item["bookmark"],
        number=item["number"],
        url=item["url"],
        base=item["base"],
        updated_at=datetime.fromisoformat(item["updated_at"]),
    )


def _pr_to_toml(pr: CachedPr) -> dict[str, Any]:
    return {
        "bookmark": pr.bookmark,
        "number": pr.number,
        "url": pr.url,
        "base": pr.base,
        "updated_at": pr.updated_at.isoformat(),
    }
