"""Event types yielded by long-running operations.

Executors are generators: they yield ProgressEvent values while they work
and finish with exactly one CompletionEvent carrying their result. The CLI
renders the stream with render_events(); tests collect the result directly.
"""

from dataclasses import dataclass
from typing import Generic, Literal, TypeVar

T = TypeVar("T")

ProgressStyle = Literal["info", "success", "warning", "error"]


@dataclass(frozen=True)
class ProgressEvent:
    """A status update emitted while an operation runs."""

    message: str
    style: ProgressStyle = "info"


@dataclass(frozen=True)
class CompletionEvent(Generic[T]):
    """The final event of an operation, carrying its result."""

    result: T
