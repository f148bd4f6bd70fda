"""Fake state store for testing."""

from jjstack.core.errors import StateFileError
from jjstack.tracking.abc import StateStore
from jjstack.tracking.types import StackState


class FakeStateStore(StateStore):
    """In-memory state store that records every save."""

    def __init__(
        self, *, state: StackState | None = None, save_error: str | None = None
    ) -> None:
        self._state = state if state is not None else StackState()
        self._save_error = save_error
        self._saved_states: list[StackState] = []

    def load(self) -> StackState:
        return self._state

    def save(self, state: StackState) -> None:
        if self._save_error is not None:
            raise StateFileError(self._save_error)
        self._saved_states.append(state)
        self._state = state

    @property
    def state(self) -> StackState:
        """The most recently saved (or initial) state."""
        return self._state

    @property
    def saved_states(self) -> list[StackState]:
        return list(self._saved_states)
