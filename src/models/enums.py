import calendar
from enum import Enum


class NavigationDirection(str, Enum):
    PREV = "prev"
    NEXT = "next"

    @property
    def delta(self) -> int:
        return -1 if self is NavigationDirection.PREV else 1


class WeekStart(str, Enum):
    SUNDAY = "sunday"
    MONDAY = "monday"

    @property
    def firstweekday(self) -> int:
        """First weekday in the numbering used by the ``calendar`` module."""
        return calendar.SUNDAY if self is WeekStart.SUNDAY else calendar.MONDAY


class CalendarAction(str, Enum):
    PREV = "prev"
    NEXT = "next"
    CLOSE = "close"
    DAY = "day"
