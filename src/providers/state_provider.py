from abc import ABC, abstractmethod
from typing import List, Optional

from models.models import InstanceState


class PersistenceUnavailableError(Exception):
    """Raised when the backing store cannot be read or written."""


class StateProvider(ABC):
    """
    Durable storage for the state of each calendar instance.

    Entries are keyed by integer instance id. Implementations raise
    PersistenceUnavailableError on any backend failure, and a completed
    put/delete must be visible to the next get.
    """

    @abstractmethod
    def get(self, instance_id: int) -> Optional[InstanceState]:
        """Stored state for the instance, or None when nothing is stored"""
        pass

    @abstractmethod
    def put(self, state: InstanceState) -> None:
        """Create or replace the entry for ``state.instance_id``"""
        pass

    @abstractmethod
    def delete(self, instance_id: int) -> None:
        """Delete the entry; deleting a missing entry is not an error"""
        pass

    @abstractmethod
    def states(self) -> List[InstanceState]:
        """Every stored entry, ordered by instance id"""
        pass
