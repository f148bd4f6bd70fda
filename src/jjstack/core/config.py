import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from jjstack.core.errors import StateFileError, UserInputError
from jjstack.gateway.platform.types import MERGE_METHODS, MergeMethod

CONFIG_FILE_NAME = "config.toml"
DEFAULT_GATHER_WORKERS = 4


@dataclass(frozen=True)
class LoadedConfig:
    """In-memory representation of `.jj/repo/jjstack/config.toml`.

    Example config.toml:
      remote = "upstream"
      trunk = "main"
      merge_method = "rebase"
      draft = true
      stack_comments = false
      gather_workers = 8
    """

    remote: str | None
    trunk: str | None
    merge_method: MergeMethod
    draft: bool
    stack_comments: bool
    gather_workers: int


def default_config() -> LoadedConfig:
    return LoadedConfig(
        remote=None,
        trunk=None,
        merge_method="squash",
        draft=False,
        stack_comments=True,
        gather_workers=DEFAULT_GATHER_WORKERS,
    )


def load_config(config_dir: Path) -> LoadedConfig:
    """Load config.toml from the given directory if present; otherwise return defaults.

    Raises:
        StateFileError: If the file is not valid TOML
        UserInputError: If a value has the wrong type or is out of range
    """
    cfg_path = config_dir / CONFIG_FILE_NAME
    if not cfg_path.exists():
        return default_config()

    try:
        data = tomllib.loads(cfg_path.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError as e:
        msg = f"Failed to parse {cfg_path}: {e}"
        raise StateFileError(msg) from e

    return parse_config(data)


def parse_config(data: dict[str, Any]) -> LoadedConfig:
    """Validate raw TOML data; missing keys take their defaults."""
    defaults = default_config()

    merge_method = data.get("merge_method", defaults.merge_method)
    if merge_method not in MERGE_METHODS:
        msg = f"Invalid merge_method {merge_method!r}: expected one of {', '.join(MERGE_METHODS)}"
        raise UserInputError(msg)

    gather_workers = data.get("gather_workers", defaults.gather_workers)
    # bool is an int subclass
    if (
        isinstance(gather_workers, bool)
        or not isinstance(gather_workers, int)
        or gather_workers < 1
    ):
        msg = f"Invalid gather_workers {gather_workers!r}: expected an integer >= 1"
        raise UserInputError(msg)

    return LoadedConfig(
        remote=_optional_str(data, "remote"),
        trunk=_optional_str(data, "trunk"),
        merge_method=merge_method,
        draft=_bool(data, "draft", defaults.draft),
        stack_comments=_bool(data, "stack_comments", defaults.stack_comments),
        gather_workers=gather_workers,
    )


def _optional_str(data: dict[str, Any], key: str) -> str | None:
    value = data.get(key)
    if value is None:
        return None
    if not isinstance(value, str) or not value:
        msg = f"Invalid {key} {value!r}: expected a non-empty string"
        raise UserInputError(msg)
    return value


def _bool(data: dict[str, Any], key: str, default: bool) -> bool:
    value = data.get(key, default)
    if not isinstance(value, bool):
        msg = f"Invalid {key} {value!r}: expected true or false"
        raise UserInputError(msg)
    return value
