"""Abstract base class for local stack state persistence."""

from abc import ABC, abstractmethod

from jjstack.tracking.types import StackState


class StateStore(ABC):
    """Loads and saves the StackState of one repository.

    Owned by a single command invocation; concurrent writers are not
    supported.
    """

    @abstractmethod
    def load(self) -> StackState:
        """Load the saved state, or an empty state if nothing was saved.

        Raises:
            StateFileError: If the saved state cannot be read
        """
        ...

    @abstractmethod
    def save(self, state: StackState) -> None:
        """Persist the state, replacing what was saved before.

        Raises:
            StateFileError: If the state cannot be written
        """
        ...
