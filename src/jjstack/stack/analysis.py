"""Stack analysis: narrow a change graph to the segments up to a target.

Pure functions only; nothing here touches jj or the network.
"""

from collections.abc import Sequence

from jjstack.core.errors import BookmarkNotFoundError, StackNotFoundError
from jjstack.stack.types import Bookmark, BookmarkSegment, ChangeGraph, Segment, StackAnalysis

TEMPORARY_PREFIXES = ("wip-", "tmp-", "temp-")
TEMPORARY_SUFFIXES = ("-old", "-wip", "-tmp", "-backup")


def analyze_stack(graph: ChangeGraph, target: str | None) -> StackAnalysis:
    """Return the segments from trunk up to and including the target bookmark.

    Args:
        graph: Change graph for trunk()..@
        target: Bookmark to stop at. Defaults to the bookmark nearest the
            working copy (the last segment).

    Returns:
        StackAnalysis ordered trunk to target

    Raises:
        StackNotFoundError: If the graph has no bookmarked segments
        BookmarkNotFoundError: If target is not in the stack
    """
    if graph.is_empty:
        raise StackNotFoundError()

    if target is None:
        end_index = len(graph.segments) - 1
    else:
        end_index = _find_segment_index(graph.segments, target)

    segments = tuple(
        Segment(
            bookmark=select_bookmark_for_segment(segment, target),
            changes=segment.changes,
        )
        for segment in graph.segments[: end_index + 1]
    )
    return StackAnalysis(target_bookmark=segments[-1].name, segments=segments)


def _find_segment_index(segments: Sequence[BookmarkSegment], target: str) -> int:
    for index, segment in enumerate(segments):
        if any(bookmark.name == target for bookmark in segment.bookmarks):
            return index
    raise BookmarkNotFoundError(target)


def select_bookmark_for_segment(segment: BookmarkSegment, target: str | None) -> Bookmark:
    """Pick the bookmark that represents a segment.

    The target wins when it points at this segment. Otherwise temporary-looking
    names are dropped and the shortest remaining name is used, alphabetical
    order breaking ties. If every name looks temporary the shortest of all wins.
    """
    if len(segment.bookmarks) == 1:
        return segment.bookmarks[0]

    for bookmark in segment.bookmarks:
        if bookmark.name == target:
            return bookmark

    candidates = [b for b in segment.bookmarks if not is_temporary_bookmark(b.name)]
    if not candidates:
        candidates = list(segment.bookmarks)
    return min(candidates, key=lambda b: (len(b.name), b.name))


def is_temporary_bookmark(name: str) -> bool:
    lowered = name.lower()
    return lowered.startswith(TEMPORARY_PREFIXES) or lowered.endswith(TEMPORARY_SUFFIXES)


def get_base_branch(bookmark: str, segments: Sequence[Segment], trunk: str) -> str:
    """Return the branch a bookmark's PR should target.

    Raises:
        BookmarkNotFoundError: If bookmark is not one of the segments
    """
    for index, segment in enumerate(segments):
        if segment.name == bookmark:
            return trunk if index == 0 else segments[index - 1].name
    raise BookmarkNotFoundError(bookmark)
