"""Gather phase for merging: PR details and readiness for each segment."""

import logging
from collections.abc import Sequence
from dataclasses import dataclass

from jjstack.core.parallel import map_in_order
from jjstack.gateway.platform.abc import Platform
from jjstack.gateway.platform.types import MergeReadiness, PullRequestDetails

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PrMergeInfo:
    """Snapshot of one bookmark's PR, fetched once per invocation."""

    bookmark: str
    details: PullRequestDetails
    readiness: MergeReadiness


def gather_merge_info(
    platform: Platform,
    bookmarks: Sequence[str],
    *,
    max_workers: int,
) -> dict[str, PrMergeInfo]:
    """Fetch details and readiness of the open PR of each bookmark.

    Bookmarks without an open PR are absent from the result. Lookups for
    different bookmarks run in parallel.

    Raises:
        PlatformError: If any lookup fails
    """

    def fetch(bookmark: str) -> PrMergeInfo | None:
        pr = platform.find_existing_pr(bookmark)
        if pr is None:
            return None
        return PrMergeInfo(
            bookmark=bookmark,
            details=platform.get_pr_details(pr.number),
            readiness=platform.check_merge_readiness(pr.number),
        )

    results = map_in_order(fetch, bookmarks, max_workers=max_workers)
    info = {item.bookmark: item for item in results if item is not None}
    logger.debug("gathered merge info for %d of %d bookmarks", len(info), len(bookmarks))
    return info
