"""Local stack state: tracked bookmarks and the PR cache.

StackState is immutable. Every mutation returns a new value, which the
caller saves through a StateStore.
"""

from dataclasses import dataclass, field, replace
from datetime import UTC, datetime


def utc_now() -> datetime:
    return datetime.now(UTC)


@dataclass(frozen=True)
class TrackedBookmark:
    """A bookmark the user asked jjstack to manage.

    Attributes:
        name: Bookmark name
        change_id: jj change ID the bookmark pointed at when tracked
        remote: Remote the bookmark is pushed to, if chosen
        tracked_at: When tracking started
    """

    name: str
    change_id: str
    remote: str | None
    tracked_at: datetime


@dataclass(frozen=True)
class CachedPr:
    """Last known PR for a bookmark."""

    bookmark: str
    number: int
    url: str
    base: str
    updated_at: datetime


@dataclass(frozen=True)
class StackState:
    """Tracked bookmarks and PR cache for one repository."""

    tracked: tuple[TrackedBookmark, ...] = field(default=())
    prs: tuple[CachedPr, ...] = field(default=())

    @property
    def tracked_names(self) -> list[str]:
        return [bookmark.name for bookmark in self.tracked]

    def is_tracked(self, name: str) -> bool:
        return any(bookmark.name == name for bookmark in self.tracked)

    def cached_pr(self, bookmark: str) -> CachedPr | None:
        for pr in self.prs:
            if pr.bookmark == bookmark:
                return pr
        return None

    def with_tracked(self, bookmark: TrackedBookmark) -> "StackState":
        """Track a bookmark, replacing any existing entry with the same name."""
        others = tuple(b for b in self.tracked if b.name != bookmark.name)
        return replace(self, tracked=(*others, bookmark))

    def without_tracked(self, name: str) -> "StackState":
        return replace(self, tracked=tuple(b for b in self.tracked if b.name != name))

    def with_cached_pr(self, pr: CachedPr) -> "StackState":
        others = tuple(p for p in self.prs if p.bookmark != pr.bookmark)
        return replace(self, prs=(*others, pr))

    def without_cached_pr(self, bookmark: str) -> "StackState":
        return replace(self, prs=tuple(p for p in self.prs if p.bookmark != bookmark))

    def without_bookmark(self, name: str) -> "StackState":
        """Forget a bookmark entirely: tracking entry and cached PR."""
        return self.without_tracked(name).without_cached_pr(name)
