"""Tests for the TOML-backed state store."""

from datetime import UTC, datetime
from pathlib import Path

import pytest

from jjstack.core.errors import StateFileError
from jjstack.tracking.toml_store import TomlStateStore, get_state_path, resolve_repo_path
from jjstack.tracking.types import CachedPr, StackState, TrackedBookmark

WHEN = datetime(2024, 5, 1, 12, 30, tzinfo=UTC)


def _workspace(tmp_path: Path) -> Path:
    (tmp_path / ".jj" / "repo").mkdir(parents=True)
    return tmp_path


def test_missing_file_loads_empty_state(tmp_path: Path) -> None:
    store = TomlStateStore(_workspace(tmp_path))

    assert store.load() == StackState()


def test_saved_state_loads_back(tmp_path: Path) -> None:
    store = TomlStateStore(_workspace(tmp_path))
    state = StackState(
        tracked=(
            TrackedBookmark(name="a", change_id="kkkk", remote="origin", tracked_at=WHEN),
            TrackedBookmark(name="b", change_id="llll", remote=None, tracked_at=WHEN),
        ),
        prs=(
            CachedPr(
                bookmark="a",
                number=12,
                url="https://github.com/owner/repo/pull/12",
                base="main",
                updated_at=WHEN,
            ),
        ),
    )

    store.save(state)

    assert store.path == tmp_path / ".jj" / "repo" / "jjstack" / "state.toml"
    assert store.load() == state
    assert 'schema_version = 1' in store.path.read_text(encoding="utf-8")


def test_invalid_toml_raises_state_file_error(tmp_path: Path) -> None:
    store = TomlStateStore(_workspace(tmp_path))
    store.path.parent.mkdir(parents=True)
    store.path.write_text("not = [valid", encoding="utf-8")

    with pytest.raises(StateFileError):
        store.load()


def test_newer_schema_is_rejected(tmp_path: Path) -> None:
    store = TomlStateStore(_workspace(tmp_path))
    store.path.parent.mkdir(parents=True)
    store.path.write_text("schema_version = 99\n", encoding="utf-8")

    with pytest.raises(StateFileError, match="schema version 99"):
        store.load()


def test_malformed_entry_raises_state_file_error(tmp_path: Path) -> None:
    store = TomlStateStore(_workspace(tmp_path))
    store.path.parent.mkdir(parents=True)
    store.path.write_text('[[tracked]]\nname = "a"\n', encoding="utf-8")

    with pytest.raises(StateFileError, match="Malformed"):
        store.load()


def test_secondary_workspace_follows_repo_pointer(tmp_path: Path) -> None:
    main = _workspace(tmp_path / "main")
    secondary = tmp_path / "secondary"
    (secondary / ".jj").mkdir(parents=True)
    (secondary / ".jj" / "repo").write_text(str(main / ".jj" / "repo"), encoding="utf-8")

    assert resolve_repo_path(secondary) == main / ".jj" / "repo"
    assert get_state_path(secondary) == main / ".jj" / "repo" / "jjstack" / "state.toml"


def test_relative_repo_pointer_is_resolved(tmp_path: Path) -> None:
    main = _workspace(tmp_path / "main")
    secondary = tmp_path / "secondary"
    (secondary / ".jj").mkdir(parents=True)
    (secondary / ".jj" / "repo").write_text("../../main/.jj/repo", encoding="utf-8")

    assert resolve_repo_path(secondary) == (main / ".jj" / "repo").resolve()
