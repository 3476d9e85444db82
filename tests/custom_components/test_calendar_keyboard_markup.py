import re
from datetime import date

import pytest

from custom_components.CalendarKeyboardMarkup import CalendarCallback, CalendarKeyboardMarkup
from models.enums import CalendarAction, WeekStart
from models.models import YearMonth
from services.MonthGridCalculator import MonthGridCalculator


def build_may_2024(week_start=WeekStart.SUNDAY, locale=None, selected=None):
    grid = MonthGridCalculator(week_start=week_start, locale=locale).compute_grid(
        YearMonth(year=2024, month=5), today=date(2024, 5, 17), selected=selected
    )
    return CalendarKeyboardMarkup.build(grid, instance_id=42, locale=locale)


def test_calendar_build_lays_out_label_weekdays_grid_and_navigation():
    keyboard = build_may_2024().inline_keyboard

    assert len(keyboard) == 9
    assert keyboard[0][0].text == "May 2024"
    assert [button.text for button in keyboard[1]] == ["Su", "Mo", "Tu", "We", "Th", "Fr", "Sa"]
    assert all(len(row) == 7 for row in keyboard[2:8])

    day_buttons = [
        button
        for row in keyboard[2:8]
        for button in row
        if button.callback_data != CalendarKeyboardMarkup.callback_data.noop
    ]
    assert len(day_buttons) == 31
    # 1 May 2024 is a Wednesday
    assert keyboard[2][3].text == "1"
    assert keyboard[2][3].callback_data == "cal:42:day:2024-05-01"

    prev_button, close_button, next_button = keyboard[-1]
    assert prev_button.callback_data == "cal:42:prev"
    assert close_button.callback_data == "cal:42:close"
    assert next_button.callback_data == "cal:42:next"


def test_calendar_build_marks_today():
    keyboard = build_may_2024().inline_keyboard
    flattened = [button for row in keyboard[2:8] for button in row]

    today_buttons = [button for button in flattened if button.text == "[17]"]
    assert len(today_buttons) == 1
    assert today_buttons[0].callback_data == "cal:42:day:2024-05-17"


def test_calendar_build_marks_selected_day_over_today():
    keyboard = build_may_2024(selected=date(2024, 5, 17)).inline_keyboard
    texts = [button.text for row in keyboard[2:8] for button in row]

    assert "(17)" in texts
    assert "[17]" not in texts

    keyboard = build_may_2024(selected=date(2024, 5, 3)).inline_keyboard
    texts = [button.text for row in keyboard[2:8] for button in row]

    assert "(3)" in texts
    assert "[17]" in texts


def test_calendar_build_ignores_selection_in_another_month():
    keyboard = build_may_2024(selected=date(2024, 6, 3)).inline_keyboard

    assert not any(button.text.startswith("(") for row in keyboard[2:8] for button in row)


def test_calendar_build_empty_cells_are_blank():
    keyboard = build_may_2024().inline_keyboard

    assert [button.text for button in keyboard[2][:3]] == [" ", " ", " "]
    assert all(button.callback_data == "noop" for button in keyboard[7])


def test_calendar_build_monday_first_and_locale():
    keyboard = build_may_2024(week_start=WeekStart.MONDAY, locale="zh").inline_keyboard

    assert keyboard[0][0].text == "2024年5月"
    assert [button.text for button in keyboard[1]] == ["一", "二", "三", "四", "五", "六", "日"]
    assert keyboard[2][2].text == "1"
    # navigation labels fall back to the default locale
    assert keyboard[-1][0].text == "◀️"


@pytest.mark.parametrize(
    "action, selected_date, expected",
    [
        (CalendarAction.PREV, None, "cal:7:prev"),
        (CalendarAction.NEXT, None, "cal:7:next"),
        (CalendarAction.CLOSE, None, "cal:7:close"),
        (CalendarAction.DAY, date(2024, 2, 29), "cal:7:day:2024-02-29"),
        (CalendarAction.DAY, date(1, 1, 1), "cal:7:day:0001-01-01"),
    ],
)
def test_calendar_callbacks_encode_and_decode(action, selected_date, expected):
    encoded = CalendarKeyboardMarkup.encode(7, action, selected_date)

    assert encoded == expected
    assert CalendarKeyboardMarkup.parse(encoded) == CalendarCallback(
        instance_id=7, action=action, selected_date=selected_date
    )


@pytest.mark.parametrize(
    "data",
    [
        "noop",
        "step:2024-05",
        "cal:x:prev",
        "cal:7:jump",
        "cal:7:day",
        "cal:7:day:17",
        "cal:7:day:2023-02-29",
        "cal:7:prev:1",
    ],
)
def test_calendar_parse_rejects_foreign_data(data):
    with pytest.raises(ValueError):
        CalendarKeyboardMarkup.parse(data)


def test_calendar_pattern_matches_emitted_callbacks():
    pattern = re.compile(CalendarKeyboardMarkup.pattern())

    assert pattern.match("cal:42:prev")
    assert pattern.match("cal:42:day:2024-05-17")
    assert not pattern.match("noop")
    assert not pattern.match("cal:42:day:")
    assert not pattern.match("cal:42:day:17")
