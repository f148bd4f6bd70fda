"""Stack overview comments posted on every PR of a submitted stack.

Each PR gets one comment listing the whole stack, leaf first, with the PR
it is posted on marked. The comment embeds its data as JSON in a hidden
HTML marker. Later runs find the comment by its marker and compare that
data with the current stack to decide whether it needs rewriting.
"""

import json
import logging
from collections.abc import Generator, Mapping
from dataclasses import asdict, dataclass

from jjstack.core.errors import PlatformError
from jjstack.gateway.platform.abc import Platform
from jjstack.gateway.platform.types import PrComment, PullRequest
from jjstack.output.events import CompletionEvent, ProgressEvent
from jjstack.stack.types import StackAnalysis

logger = logging.getLogger(__name__)

STACK_COMMENT_VERSION = 1
STACK_COMMENT_MARKER = "<!-- jjstack-stack:"
CURRENT_PR_POINTER = "👈"
STACK_COMMENT_FOOTER = "This stack of pull requests is managed by jjstack."


@dataclass(frozen=True)
class StackCommentItem:
    bookmark: str
    pr_number: int
    url: str
    title: str


@dataclass(frozen=True)
class StackCommentData:
    """Everything a stack comment renders, ordered trunk to leaf."""

    version: int
    base_branch: str
    items: tuple[StackCommentItem, ...]


@dataclass(frozen=True)
class StackCommentSummary:
    created: int
    updated: int
    unchanged: int
    failed: int


def build_stack_comment_data(
    analysis: StackAnalysis,
    prs: Mapping[str, PullRequest],
    trunk_branch: str,
) -> StackCommentData:
    """Collect the PRs of the stack, trunk to leaf; segments without a PR are left out."""
    items = tuple(
        StackCommentItem(
            bookmark=segment.name,
            pr_number=prs[segment.name].number,
            url=prs[segment.name].url,
            title=prs[segment.name].title,
        )
        for segment in analysis.segments
        if segment.name in prs
    )
    return StackCommentData(version=STACK_COMMENT_VERSION, base_branch=trunk_branch, items=items)


def format_stack_comment(data: StackCommentData, current_index: int) -> str:
    """Render the comment for the PR at `current_index` (trunk-to-leaf index)."""
    payload = json.dumps(asdict(data), separators=(",", ":"), ensure_ascii=False)
    # ">" only occurs inside JSON strings; escaping it keeps "-->" out of the marker
    payload = payload.replace(">", "\\u003e")
    lines = [f"{STACK_COMMENT_MARKER} {payload} -->", ""]
    for index in reversed(range(len(data.items))):
        item = data.items[index]
        if index == current_index:
            lines.append(f"* **#{item.pr_number}** {CURRENT_PR_POINTER}")
        else:
            lines.append(f"* #{item.pr_number}")
    lines.append(f"* `{data.base_branch}`")
    lines.extend(["", "---", STACK_COMMENT_FOOTER])
    return "\n".join(lines)


def parse_stack_comment_data(body: str) -> StackCommentData | None:
    """Read the embedded data back from a comment body, if it has a marker."""
    start = body.find(STACK_COMMENT_MARKER)
    if start == -1:
        return None
    end = body.find("-->", start)
    if end == -1:
        return None
    try:
        raw = json.loads(body[start + len(STACK_COMMENT_MARKER) : end])
        return StackCommentData(
            version=raw["version"],
            base_branch=raw["base_branch"],
            items=tuple(StackCommentItem(**item) for item in raw["items"]),
        )
    except (json.JSONDecodeError, KeyError, TypeError):
        logger.debug("ignoring malformed stack comment data", exc_info=True)
        return None


def find_stack_comment(comments: list[PrComment]) -> PrComment | None:
    for comment in comments:
        if STACK_COMMENT_MARKER in comment.body:
            return comment
    return None


def update_stack_comments(
    platform: Platform,
    data: StackCommentData,
) -> Generator[ProgressEvent | CompletionEvent[StackCommentSummary], None, None]:
    """Create or update the stack comment on every PR in `data`.

    A failure on one PR is reported as a warning and the rest are still
    processed; comments never affect whether the submission succeeded.
    """
    created = updated = unchanged = failed = 0
    for index, item in enumerate(data.items):
        body = format_stack_comment(data, index)
        try:
            existing = find_stack_comment(platform.list_pr_comments(item.pr_number))
            if existing is None:
                platform.create_pr_comment(item.pr_number, body)
                created += 1
            elif parse_stack_comment_data(existing.body) != data:
                platform.update_pr_comment(item.pr_number, existing.id, body)
                updated += 1
            else:
                unchanged += 1
        except PlatformError as e:
            failed += 1
            yield ProgressEvent(
                f"Could not update stack comment on PR #{item.pr_number}: {e}",
                style="warning",
            )

    if created or updated:
        yield ProgressEvent(
            f"Stack comments: {created} created, {updated} updated", style="success"
        )
    yield CompletionEvent(
        StackCommentSummary(created=created, updated=updated, unchanged=unchanged, failed=failed)
    )
