"""Gather phase for submission: look up the open PR of every segment."""

import logging
from collections.abc import Sequence

from jjstack.core.parallel import map_in_order
from jjstack.gateway.platform.abc import Platform
from jjstack.gateway.platform.types import PullRequest

logger = logging.getLogger(__name__)


def gather_existing_prs(
    platform: Platform,
    bookmarks: Sequence[str],
    *,
    max_workers: int,
) -> dict[str, PullRequest]:
    """Find the open PR for each bookmark.

    Lookups run in parallel. Bookmarks without an open PR are absent from
    the result.

    Raises:
        PlatformError: If any lookup fails
    """
    found = map_in_order(platform.find_existing_pr, bookmarks, max_workers=max_workers)
    existing = {
        bookmark: pr for bookmark, pr in zip(bookmarks, found, strict=True) if pr is not None
    }
    logger.debug("found %d existing PRs for %d bookmarks", len(existing), len(bookmarks))
    return existing
