import logging
import threading
from contextlib import contextmanager
from datetime import date
from typing import Callable, Dict, Iterable, Iterator, List, Optional, Set

from models.enums import NavigationDirection
from models.models import InstanceState, YearMonth
from providers.state_provider import PersistenceUnavailableError, StateProvider

logger = logging.getLogger(__name__)


class _InstanceLock:
    __slots__ = ("lock", "users")

    def __init__(self):
        self.lock = threading.Lock()
        self.users = 0


class InstanceStateStore:
    """
    Owns the month and selected day of each calendar instance.

    Entries are created by the first navigation or day selection, never by a
    plain read: an instance without an entry shows the current month.
    Persistence failures degrade to that default for the call instead of
    propagating, and every read-modify-write on one instance runs under that
    instance's lock.
    """

    def __init__(
        self,
        provider: StateProvider,
        *,
        today_provider: Callable[[], date] = date.today,
        logger: Optional[logging.Logger] = None,
    ):
        self.provider = provider
        self.today_provider = today_provider
        self.logger = logger or logging.getLogger(__name__)
        # an entry exists only while some call holds or waits for its lock
        self._locks: Dict[int, _InstanceLock] = {}
        self._locks_guard = threading.Lock()

    def get_state(self, instance_id: int) -> InstanceState:
        """Stored state for the instance, or a fresh current-month state when there is none."""
        with self._locked(instance_id):
            return self._read(instance_id)

    def get_current_year_month(self, instance_id: int) -> YearMonth:
        """Stored month for the instance, or the current month when there is none."""
        return self.get_state(instance_id).year_month

    def advance(self, instance_id: int, direction: NavigationDirection) -> YearMonth:
        """
        Step the instance one month in ``direction``, store and return the new month.

        At the first or last representable month the instance stays where it is
        and nothing is written.
        """
        with self._locked(instance_id):
            current = self._read(instance_id)
            try:
                updated = current.year_month.shifted(direction.delta)
            except ValueError:
                self.logger.warning(
                    "Calendar %s cannot move %s from %s", instance_id, direction.value, current.year_month
                )
                return current.year_month

            self._write(current.model_copy(update={"year_month": updated}))
            self.logger.debug(
                "Calendar %s moved %s: %s -> %s", instance_id, direction.value, current.year_month, updated
            )
            return updated

    def select_date(self, instance_id: int, selected_date: date) -> InstanceState:
        """Remember ``selected_date`` for the instance and show the month it falls in."""
        with self._locked(instance_id):
            state = InstanceState(
                instance_id=instance_id,
                year_month=YearMonth.from_date(selected_date),
                selected_date=selected_date,
            )
            self._write(state)
            return state

    def has_state(self, instance_id: int) -> bool:
        with self._locked(instance_id):
            try:
                return self.provider.get(instance_id) is not None
            except PersistenceUnavailableError as exc:
                self.logger.warning("Could not read state of calendar %s: %s", instance_id, exc)
                return False

    def instance_ids(self) -> List[int]:
        """Ids of every stored instance; empty when the backing store cannot be read."""
        try:
            return [state.instance_id for state in self.provider.states()]
        except PersistenceUnavailableError as exc:
            self.logger.warning("Could not list stored calendars: %s", exc)
            return []

    def remove(self, instance_id: int) -> bool:
        """
        Delete the instance's entry. Removing an unknown instance is a no-op.

        Returns False when the backing store could not be updated.
        """
        with self._locked(instance_id):
            try:
                self.provider.delete(instance_id)
            except PersistenceUnavailableError as exc:
                self.logger.warning("Could not remove state of calendar %s: %s", instance_id, exc)
                return False
        return True

    def remove_all(self, instance_ids: Iterable[int]) -> Set[int]:
        """
        Remove every listed instance, carrying on past individual failures.

        Returns the ids whose entries could not be removed.
        """
        failed = {instance_id for instance_id in set(instance_ids) if not self.remove(instance_id)}
        if failed:
            self.logger.warning("Failed to remove %d calendar state(s): %s", len(failed), sorted(failed))
        return failed

    def _read(self, instance_id: int) -> InstanceState:
        try:
            stored = self.provider.get(instance_id)
        except PersistenceUnavailableError as exc:
            self.logger.warning(
                "Could not read state of calendar %s, showing the current month: %s", instance_id, exc
            )
            stored = None
        return stored if stored is not None else InstanceState.initial(instance_id, self.today_provider())

    def _write(self, state: InstanceState) -> None:
        try:
            self.provider.put(state)
        except PersistenceUnavailableError as exc:
            self.logger.warning(
                "Could not persist state %s of calendar %s: %s", state.year_month, state.instance_id, exc
            )

    @contextmanager
    def _locked(self, instance_id: int) -> Iterator[None]:
        with self._locks_guard:
            entry = self._locks.get(instance_id)
            if entry is None:
                entry = self._locks[instance_id] = _InstanceLock()
            entry.users += 1
        try:
            with entry.lock:
                yield
        finally:
            with self._locks_guard:
                entry.users -= 1
                if entry.users == 0:
                    del self._locks[instance_id]
