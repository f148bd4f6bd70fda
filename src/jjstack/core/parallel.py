"""Bounded parallel execution of independent read-only calls."""

from collections.abc import Callable, Sequence
from concurrent.futures import ThreadPoolExecutor
from typing import TypeVar

T = TypeVar("T")
R = TypeVar("R")


def map_in_order(fn: Callable[[T], R], items: Sequence[T], *, max_workers: int) -> list[R]:
    """Apply fn to every item using a thread pool, keeping input order.

    The first exception in input order is re-raised once the pool has
    drained; results of other calls are discarded in that case.
    """
    if not items:
        return []
    with ThreadPoolExecutor(max_workers=min(max_workers, len(items))) as executor:
        return list(executor.map(fn, items))
