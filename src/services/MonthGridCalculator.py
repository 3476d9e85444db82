import calendar
from abc import ABC, abstractmethod
from datetime import date
from typing import List, Optional

from localization import Key
from models.enums import WeekStart
from models.models import GRID_COLUMNS, GRID_SIZE, GridCell, MonthGrid, YearMonth


class InvalidMonthError(ValueError):
    """Raised when a grid is requested for a month outside 1..12."""

    def __init__(self, month: int):
        super().__init__(f"month must be within 1..12, got {month}")
        self.month = month


def days_in_month(year: int, month: int) -> int:
    """Number of days in the month under Gregorian leap-year rules."""
    if not 1 <= month <= 12:
        raise InvalidMonthError(month)
    return calendar.monthrange(year, month)[1]


def first_weekday_offset(year: int, month: int, week_start: WeekStart = WeekStart.SUNDAY) -> int:
    """Zero-based column of the 1st of the month when weeks begin on ``week_start``."""
    if not 1 <= month <= 12:
        raise InvalidMonthError(month)
    return (calendar.weekday(year, month, 1) - week_start.firstweekday) % GRID_COLUMNS


class MonthGridCalculating(ABC):
    @abstractmethod
    def compute_grid(
        self, target: YearMonth, today: Optional[date] = None, selected: Optional[date] = None
    ) -> MonthGrid:
        """Lay ``target`` out on the 42-cell grid, flagging ``today`` and ``selected`` when they fall in it."""
        pass


class MonthGridCalculator(MonthGridCalculating):

    def __init__(self, week_start: WeekStart = WeekStart.SUNDAY, locale: Optional[str] = None):
        self.week_start = week_start
        self.locale = locale

    def compute_grid(
        self, target: YearMonth, today: Optional[date] = None, selected: Optional[date] = None
    ) -> MonthGrid:
        # model_construct can bypass the YearMonth validators
        if not 1 <= target.month <= 12:
            raise InvalidMonthError(target.month)

        offset = first_weekday_offset(target.year, target.month, self.week_start)
        day_count = days_in_month(target.year, target.month)
        assert offset + day_count <= GRID_SIZE, f"{target} does not fit in {GRID_SIZE} cells"

        today_day = today.day if today is not None and target.contains(today) else None
        selected_day = selected.day if selected is not None and target.contains(selected) else None

        cells: List[GridCell] = [GridCell() for _ in range(GRID_SIZE)]
        for day in range(1, day_count + 1):
            cells[offset + day - 1] = GridCell(day=day, is_today=day == today_day, is_selected=day == selected_day)

        return MonthGrid(
            label=self.format_label(target),
            cells=tuple(cells),
            year_month=target,
            week_start=self.week_start,
        )

    def format_label(self, target: YearMonth) -> str:
        return str(
            Key.for_locale(self.locale).calendar.month_label.format(
                year=target.year,
                month=target.month,
                month_name=calendar.month_name[target.month],
            )
        )
