"""Build a ChangeGraph from `jj log` entries.

The log covers `trunk()..@` and is printed newest first. The graph is built
by walking it oldest first: commits accumulate until one carries local
bookmarks, which closes a segment owned by those bookmarks. Commits above
the last bookmark belong to no segment.

Only linear stacks are supported. The first merge commit ends the stack and
every bookmark at or above it is excluded.
"""

from collections.abc import Sequence

from jjstack.stack.types import Bookmark, BookmarkSegment, ChangeGraph, LogEntry

# jj's pseudo-remote mirroring the colocated git repo
GIT_PSEUDO_REMOTE = "git"


def build_change_graph(entries: Sequence[LogEntry], *, remote: str) -> ChangeGraph:
    """Build the linear stack from log entries.

    Args:
        entries: Log entries for `trunk()..@`, newest first
        remote: Remote used to decide whether a bookmark is synced

    Returns:
        ChangeGraph with segments ordered trunk to working copy
    """
    remote_names = _collect_remote_bookmark_names(entries)

    segments: list[BookmarkSegment] = []
    pending: list[LogEntry] = []
    excluded = 0
    hit_merge = False

    for entry in reversed(entries):
        if hit_merge or entry.is_merge:
            hit_merge = True
            excluded += len(entry.local_bookmarks)
            continue

        pending.append(entry)
        if not entry.local_bookmarks:
            continue

        bookmarks = tuple(
            _make_bookmark(name, entry, remote_names=remote_names, remote=remote)
            for name in entry.local_bookmarks
        )
        segments.append(BookmarkSegment(bookmarks=bookmarks, changes=tuple(reversed(pending))))
        pending = []

    return ChangeGraph(
        bookmarks={b.name: b for segment in segments for b in segment.bookmarks},
        segments=tuple(segments),
        excluded_bookmark_count=excluded,
    )


def _collect_remote_bookmark_names(entries: Sequence[LogEntry]) -> set[str]:
    """Names of bookmarks that exist on at least one real remote."""
    names: set[str] = set()
    for entry in entries:
        for remote_bookmark in entry.remote_bookmarks:
            name, _, remote_name = remote_bookmark.rpartition("@")
            if name and remote_name != GIT_PSEUDO_REMOTE:
                names.add(name)
    return names


def _make_bookmark(
    name: str,
    entry: LogEntry,
    *,
    remote_names: set[str],
    remote: str,
) -> Bookmark:
    return Bookmark(
        name=name,
        commit_id=entry.commit_id,
        change_id=entry.change_id,
        has_remote=name in remote_names,
        is_synced=f"{name}@{remote}" in entry.remote_bookmarks,
    )
