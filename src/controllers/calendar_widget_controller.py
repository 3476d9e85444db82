import logging
from abc import ABC, abstractmethod
from datetime import date
from typing import Callable, Iterable, Set

from models.enums import NavigationDirection
from models.models import InstanceState, MonthGrid
from services.InstanceStateStore import InstanceStateStore
from services.MonthGridCalculator import MonthGridCalculating

logger = logging.getLogger(__name__)


class CalendarWidgetControlling(ABC):
    @abstractmethod
    def render(self, instance_id: int) -> MonthGrid:
        """Grid for the month the instance currently shows"""
        pass

    @abstractmethod
    def navigate(self, instance_id: int, direction: NavigationDirection) -> MonthGrid:
        """Step the instance one month and return the grid to show"""
        pass

    @abstractmethod
    def select_day(self, instance_id: int, selected_date: date) -> MonthGrid:
        """Remember the tapped date and return the grid with it highlighted"""
        pass

    @abstractmethod
    def close(self, instance_id: int) -> bool:
        pass

    @abstractmethod
    def close_all(self, instance_ids: Iterable[int]) -> Set[int]:
        """Close several instances; returns the ids that could not be cleaned up"""
        pass

    @abstractmethod
    def close_untracked(self, tracked_ids: Iterable[int]) -> Set[int]:
        """Close every stored instance not in ``tracked_ids``; returns the ids closed"""
        pass


class CalendarWidgetController(CalendarWidgetControlling):

    def __init__(
        self,
        store: InstanceStateStore,
        calculator: MonthGridCalculating,
        *,
        today_provider: Callable[[], date] = date.today,
    ):
        self.store = store
        self.calculator = calculator
        self.today_provider = today_provider

    def render(self, instance_id: int) -> MonthGrid:
        return self._grid_for(self.store.get_state(instance_id))

    def navigate(self, instance_id: int, direction: NavigationDirection) -> MonthGrid:
        year_month = self.store.advance(instance_id, direction)
        logger.info("Calendar %s now shows %s", instance_id, year_month)
        selected = self.store.get_state(instance_id).selected_date
        return self.calculator.compute_grid(year_month, today=self.today_provider(), selected=selected)

    def select_day(self, instance_id: int, selected_date: date) -> MonthGrid:
        logger.info("Calendar %s selected %s", instance_id, selected_date.isoformat())
        return self._grid_for(self.store.select_date(instance_id, selected_date))

    def close(self, instance_id: int) -> bool:
        logger.info("Closing calendar %s", instance_id)
        return self.store.remove(instance_id)

    def close_all(self, instance_ids: Iterable[int]) -> Set[int]:
        instance_ids = set(instance_ids)
        logger.info("Closing %d calendar(s)", len(instance_ids))
        return self.store.remove_all(instance_ids)

    def close_untracked(self, tracked_ids: Iterable[int]) -> Set[int]:
        untracked = set(self.store.instance_ids()) - set(tracked_ids)
        if not untracked:
            return set()
        logger.info("Closing %d calendar(s) no chat refers to", len(untracked))
        return untracked - self.store.remove_all(untracked)

    def _grid_for(self, state: InstanceState) -> MonthGrid:
        return self.calculator.compute_grid(
            state.year_month, today=self.today_provider(), selected=state.selected_date
        )
