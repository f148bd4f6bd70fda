"""Rendering helpers for operation event streams."""

import sys
from collections.abc import Generator
from typing import TypeVar

import click

from jjstack.output.events import CompletionEvent, ProgressEvent

T = TypeVar("T")

# Style mapping for progress events
STYLE_MAP: dict[str, dict[str, str | bool]] = {
    "info": {},
    "success": {"fg": "green"},
    "warning": {"fg": "yellow"},
    "error": {"fg": "red", "bold": True},
}


def render_events(
    events: Generator[ProgressEvent | CompletionEvent[T], None, None],
) -> T:
    """Consume event stream, render progress to stderr, return result.

    Args:
        events: Generator yielding ProgressEvent and CompletionEvent

    Returns:
        The result from the final CompletionEvent

    Raises:
        RuntimeError: If operation ends without a CompletionEvent
    """
    for event in events:
        match event:
            case ProgressEvent(message=msg, style=style):
                click.echo(click.style(f"  {msg}", **STYLE_MAP[style]), err=True)
                sys.stderr.flush()
            case CompletionEvent(result=result):
                return result
    raise RuntimeError("Operation ended without completion")


def collect_result(
    events: Generator[ProgressEvent | CompletionEvent[T], None, None],
) -> tuple[list[ProgressEvent], T]:
    """Consume event stream silently, returning progress events and result.

    Raises:
        RuntimeError: If operation ends without a CompletionEvent
    """
    progress: list[ProgressEvent] = []
    for event in events:
        if isinstance(event, CompletionEvent):
            return progress, event.result
        progress.append(event)
    raise RuntimeError("Operation ended without completion")


def forward_progress(
    events: Generator[ProgressEvent | CompletionEvent[T], None, None],
) -> Generator[ProgressEvent, None, T]:
    """Re-yield progress events from a nested operation and return its result.

    Use with ``yield from`` inside another operation generator:

        result = yield from forward_progress(execute_submission(...))

    Raises:
        RuntimeError: If the nested operation ends without a CompletionEvent
    """
    for event in events:
        if isinstance(event, CompletionEvent):
            return event.result
        yield event
    raise RuntimeError("Operation ended without completion")
