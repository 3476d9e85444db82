from dataclasses import dataclass
from datetime import date
from typing import List, Optional

from telegram import InlineKeyboardButton, InlineKeyboardMarkup

from localization import Key
from models.enums import CalendarAction, WeekStart
from models.models import GridCell, MonthGrid


@dataclass(frozen=True)
class CalendarCallbackData:
    prefix: str = "cal"
    separator: str = ":"
    noop: str = "noop"


@dataclass(frozen=True)
class CalendarCallback:
    instance_id: int
    action: CalendarAction
    selected_date: Optional[date] = None


class CalendarKeyboardMarkup:
    """
    Month calendar inline keyboard for one calendar instance.

    - Label row, weekday header row, then the 42 grid cells as 6 rows of 7.
    - The selected day uses the locale's selected marker, today's cell the
      today marker; selection wins when both apply.
    - Bottom row holds previous, close and next controls.
    - Emits callback data of the form `cal:<instance_id>:prev|next|close` and
      `cal:<instance_id>:day:<YYYY-MM-DD>`, so a day button names the exact
      date it was drawn for.
    """

    callback_data = CalendarCallbackData()

    @classmethod
    def build(cls, grid: MonthGrid, instance_id: int, *, locale: Optional[str] = None) -> InlineKeyboardMarkup:
        keys = Key.for_locale(locale).calendar

        keyboard: List[List[InlineKeyboardButton]] = [
            [InlineKeyboardButton(grid.label, callback_data=cls.callback_data.noop)],
            [
                InlineKeyboardButton(day, callback_data=cls.callback_data.noop)
                for day in cls.weekday_labels(grid.week_start, locale=locale)
            ],
        ]

        for row in grid.rows:
            keyboard.append([cls._cell_button(cell, grid, instance_id, locale=locale) for cell in row])

        keyboard.append(
            [
                InlineKeyboardButton(
                    keys.prev_button, callback_data=cls.encode(instance_id, CalendarAction.PREV)
                ),
                InlineKeyboardButton(
                    keys.close_button, callback_data=cls.encode(instance_id, CalendarAction.CLOSE)
                ),
                InlineKeyboardButton(
                    keys.next_button, callback_data=cls.encode(instance_id, CalendarAction.NEXT)
                ),
            ]
        )

        return InlineKeyboardMarkup(keyboard)

    @classmethod
    def weekday_labels(cls, week_start: WeekStart, *, locale: Optional[str] = None) -> List[str]:
        keys = Key.for_locale(locale).calendar
        labels = keys.weekdays_sunday_first if week_start is WeekStart.SUNDAY else keys.weekdays_monday_first
        return labels.lines

    @classmethod
    def encode(cls, instance_id: int, action: CalendarAction, selected_date: Optional[date] = None) -> str:
        parts = [cls.callback_data.prefix, str(instance_id), action.value]
        if action is CalendarAction.DAY:
            parts.append(selected_date.isoformat())
        return cls.callback_data.separator.join(parts)

    @classmethod
    def parse(cls, data: str) -> CalendarCallback:
        parts = data.split(cls.callback_data.separator)
        if len(parts) < 3 or parts[0] != cls.callback_data.prefix:
            raise ValueError(f"Not a calendar callback: {data!r}")

        instance_id = int(parts[1])
        action = CalendarAction(parts[2])

        if action is CalendarAction.DAY:
            if len(parts) != 4:
                raise ValueError(f"Day callback without a date: {data!r}")
            selected_date = date.fromisoformat(parts[3])
            return CalendarCallback(instance_id=instance_id, action=action, selected_date=selected_date)

        if len(parts) != 3:
            raise ValueError(f"Unexpected calendar callback: {data!r}")
        return CalendarCallback(instance_id=instance_id, action=action)

    @classmethod
    def pattern(cls) -> str:
        """Regex matching every callback this keyboard emits."""
        sep = cls.callback_data.separator
        return rf"^{cls.callback_data.prefix}{sep}-?\d+{sep}(prev|next|close|day{sep}\d{{4}}-\d{{2}}-\d{{2}})$"

    @classmethod
    def _cell_button(
        cls, cell: GridCell, grid: MonthGrid, instance_id: int, *, locale: Optional[str]
    ) -> InlineKeyboardButton:
        if cell.is_empty:
            return InlineKeyboardButton(" ", callback_data=cls.callback_data.noop)

        keys = Key.for_locale(locale).calendar
        label = str(cell.day)
        if cell.is_selected:
            label = keys.selected_marker.format(day=cell.day)
        elif cell.is_today:
            label = keys.today_marker.format(day=cell.day)

        cell_date = date(grid.year_month.year, grid.year_month.month, cell.day)
        return InlineKeyboardButton(label, callback_data=cls.encode(instance_id, CalendarAction.DAY, cell_date))
