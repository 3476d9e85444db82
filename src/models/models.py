from datetime import MAXYEAR, MINYEAR, date
from typing import List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, field_validator

from models.enums import WeekStart

GRID_ROWS = 6
GRID_COLUMNS = 7
GRID_SIZE = GRID_ROWS * GRID_COLUMNS


class YearMonth(BaseModel):
    """A calendar month with no day component, within the years ``date`` supports."""

    model_config = ConfigDict(frozen=True)

    year: int
    month: int

    @field_validator("year")
    @classmethod
    def _year_in_range(cls, value: int) -> int:
        if not MINYEAR <= value <= MAXYEAR:
            raise ValueError(f"year must be within {MINYEAR}..{MAXYEAR}, got {value}")
        return value

    @field_validator("month")
    @classmethod
    def _month_in_range(cls, value: int) -> int:
        if not 1 <= value <= 12:
            raise ValueError(f"month must be within 1..12, got {value}")
        return value

    @classmethod
    def from_date(cls, day: date) -> "YearMonth":
        return cls(year=day.year, month=day.month)

    def shifted(self, delta: int) -> "YearMonth":
        """Return the month ``delta`` months away, rolling the year over as needed."""
        zero_based = self.year * 12 + (self.month - 1) + delta
        year, month_index = divmod(zero_based, 12)
        return YearMonth(year=year, month=month_index + 1)

    def contains(self, day: date) -> bool:
        return day.year == self.year and day.month == self.month

    def __str__(self) -> str:
        return f"{self.year:04d}-{self.month:02d}"


class GridCell(BaseModel):
    model_config = ConfigDict(frozen=True)

    day: Optional[int] = None
    is_today: bool = False
    is_selected: bool = False

    @property
    def is_empty(self) -> bool:
        return self.day is None


class MonthGrid(BaseModel):
    """
    A month laid out on a fixed 6x7 grid.

    ``cells[i]`` is the slot at row ``i // 7`` and column ``i % 7``. Columns
    follow ``week_start``.
    """

    model_config = ConfigDict(frozen=True)

    label: str
    cells: Tuple[GridCell, ...]
    year_month: YearMonth
    week_start: WeekStart = WeekStart.SUNDAY

    @property
    def rows(self) -> List[Tuple[GridCell, ...]]:
        return [
            self.cells[row * GRID_COLUMNS:(row + 1) * GRID_COLUMNS]
            for row in range(GRID_ROWS)
        ]

    @property
    def day_count(self) -> int:
        return sum(1 for cell in self.cells if not cell.is_empty)

    @property
    def today_index(self) -> Optional[int]:
        return next((index for index, cell in enumerate(self.cells) if cell.is_today), None)

    @property
    def selected_index(self) -> Optional[int]:
        return next((index for index, cell in enumerate(self.cells) if cell.is_selected), None)

    def index_of(self, day: int) -> Optional[int]:
        return next((index for index, cell in enumerate(self.cells) if cell.day == day), None)


class InstanceState(BaseModel):
    """What one calendar instance shows: its month and the day last tapped, if any."""

    model_config = ConfigDict(frozen=True)

    instance_id: int
    year_month: YearMonth
    selected_date: Optional[date] = None

    @classmethod
    def initial(cls, instance_id: int, today: date) -> "InstanceState":
        return cls(instance_id=instance_id, year_month=YearMonth.from_date(today))
