"""Derive PR titles and bodies from a segment's commit descriptions."""

from jjstack.stack.types import LogEntry, Segment

BODY_SEPARATOR = "\n\n"


def pr_title(segment: Segment) -> str:
    """Title for a segment's PR: the summary line of its oldest commit.

    Falls back to the bookmark name when that commit has no description.
    """
    if not segment.changes:
        return segment.name
    root = segment.changes[-1]
    return root.summary or segment.name


def pr_body(segment: Segment) -> str | None:
    """Body for a segment's PR, or None when no commit has one.

    Each commit contributes the text after the first blank line of its
    description. Contributions are joined root to tip with one blank line
    between them; commits without body text are skipped.
    """
    bodies = [body for body in map(commit_body, reversed(segment.changes)) if body]
    if not bodies:
        return None
    return BODY_SEPARATOR.join(bodies)


def commit_body(entry: LogEntry) -> str:
    """Text after the first blank-line separator of a description, trimmed."""
    description = entry.description.replace("\r\n", "\n")
    _, separator, rest = description.partition(BODY_SEPARATOR)
    if not separator:
        return ""
    return rest.strip()
