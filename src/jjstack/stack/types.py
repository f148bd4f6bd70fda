"""Type definitions for jj change graphs and stack analyses."""

from dataclasses import dataclass


@dataclass(frozen=True)
class Bookmark:
    """A jj bookmark (named pointer to a commit).

    Attributes:
        name: Bookmark name
        commit_id: Git commit ID (hex) the bookmark points at
        change_id: jj change ID (hex) the bookmark points at
        has_remote: True if the bookmark exists on any remote
        is_synced: True if the selected remote's copy points at the same commit
    """

    name: str
    commit_id: str
    change_id: str
    has_remote: bool
    is_synced: bool


@dataclass(frozen=True)
class LogEntry:
    """One commit as read from `jj log`.

    Attributes:
        commit_id: Git commit ID (hex)
        change_id: jj change ID (hex)
        description: Full change description (first line is the summary)
        parents: Parent commit IDs
        local_bookmarks: Local bookmarks pointing at this commit
        remote_bookmarks: Remote bookmarks pointing at this commit ("name@remote")
        is_working_copy: True for the working-copy commit
    """

    commit_id: str
    change_id: str
    description: str
    parents: tuple[str, ...]
    local_bookmarks: tuple[str, ...]
    remote_bookmarks: tuple[str, ...]
    is_working_copy: bool

    @property
    def summary(self) -> str:
        """First line of the description."""
        return self.description.split("\n", 1)[0].strip()

    @property
    def is_merge(self) -> bool:
        return len(self.parents) > 1


@dataclass(frozen=True)
class BookmarkSegment:
    """Commits owned by one or more bookmarks pointing at the same tip.

    `changes` is newest first, as `jj log` prints them.
    """

    bookmarks: tuple[Bookmark, ...]
    changes: tuple[LogEntry, ...]


@dataclass(frozen=True)
class ChangeGraph:
    """The linear stack between trunk and the working copy.

    Attributes:
        bookmarks: Every bookmark in the stack, by name
        segments: Segments ordered from trunk (index 0) to the working copy
        excluded_bookmark_count: Bookmarks dropped because they sit at or
            above a merge commit
    """

    bookmarks: dict[str, Bookmark]
    segments: tuple[BookmarkSegment, ...]
    excluded_bookmark_count: int

    @property
    def is_empty(self) -> bool:
        return not self.segments


@dataclass(frozen=True)
class Segment:
    """A segment narrowed to a single bookmark.

    `changes` is newest first; reverse it for root-to-tip order.
    """

    bookmark: Bookmark
    changes: tuple[LogEntry, ...]

    @property
    def name(self) -> str:
        return self.bookmark.name


@dataclass(frozen=True)
class StackAnalysis:
    """Ordered segments from trunk up to the target bookmark.

    The trunk-adjacent segment comes first and bookmark names are unique.
    """

    target_bookmark: str
    segments: tuple[Segment, ...]

    @property
    def bookmark_names(self) -> list[str]:
        return [segment.name for segment in self.segments]

    def restricted_to(self, names: set[str] | frozenset[str]) -> "StackAnalysis":
        """Return a copy keeping only segments whose bookmark is in `names`."""
        return StackAnalysis(
            target_bookmark=self.target_bookmark,
            segments=tuple(s for s in self.segments if s.name in names),
        )
