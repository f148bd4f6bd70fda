"""Log template and output parsing for the jj CLI."""

from jjstack.gateway.platform.types import GitRemote
from jjstack.stack.types import LogEntry

FIELD_SEPARATOR = "␟"
RECORD_SEPARATOR = "␞"
LIST_SEPARATOR = ","

# One record per commit: ids, description, parents, bookmarks, working-copy flag
LOG_TEMPLATE = (
    f'commit_id ++ "{FIELD_SEPARATOR}"'
    f' ++ change_id ++ "{FIELD_SEPARATOR}"'
    f' ++ description ++ "{FIELD_SEPARATOR}"'
    f' ++ parents.map(|c| c.commit_id()).join("{LIST_SEPARATOR}") ++ "{FIELD_SEPARATOR}"'
    f' ++ local_bookmarks.map(|b| b.name()).join("{LIST_SEPARATOR}") ++ "{FIELD_SEPARATOR}"'
    f' ++ remote_bookmarks.map(|b| b.name() ++ "@" ++ b.remote()).join("{LIST_SEPARATOR}")'
    f' ++ "{FIELD_SEPARATOR}"'
    f' ++ if(current_working_copy, "1", "0") ++ "{RECORD_SEPARATOR}"'
)

# Names of the bookmarks on the trunk commit, remote ones first
TRUNK_NAME_TEMPLATE = (
    'remote_bookmarks.map(|b| b.name()).join("\\n") ++ "\\n"'
    ' ++ local_bookmarks.map(|b| b.name()).join("\\n")'
)

_FIELD_COUNT = 7


def parse_log_output(stdout: str) -> list[LogEntry]:
    """Parse `jj log --no-graph -T LOG_TEMPLATE` output.

    Raises:
        ValueError: If a record does not have the expected number of fields
    """
    entries: list[LogEntry] = []
    for record in stdout.split(RECORD_SEPARATOR):
        if not record.strip():
            continue
        fields = record.lstrip("\n").split(FIELD_SEPARATOR)
        if len(fields) != _FIELD_COUNT:
            msg = f"Unexpected jj log record with {len(fields)} fields: {record!r}"
            raise ValueError(msg)
        commit_id, change_id, description, parents, local, remote, working_copy = fields
        entries.append(
            LogEntry(
                commit_id=commit_id,
                change_id=change_id,
                description=description,
                parents=_split_list(parents),
                local_bookmarks=_split_list(local),
                remote_bookmarks=_split_list(remote),
                is_working_copy=working_copy.strip() == "1",
            )
        )
    return entries


def _split_list(value: str) -> tuple[str, ...]:
    return tuple(item for item in value.split(LIST_SEPARATOR) if item)


def parse_trunk_name(stdout: str) -> str | None:
    """First bookmark name printed by TRUNK_NAME_TEMPLATE, if any."""
    for line in stdout.splitlines():
        name = line.strip()
        if name:
            return name
    return None


def parse_remote_list(stdout: str) -> list[GitRemote]:
    """Parse `jj git remote list` output ("<name> <url>" per line)."""
    remotes: list[GitRemote] = []
    for line in stdout.splitlines():
        parts = line.split(maxsplit=1)
        if len(parts) != 2:
            continue
        remotes.append(GitRemote(name=parts[0], url=parts[1].strip()))
    return remotes
