from datetime import date

import pytest

from controllers.calendar_widget_controller import CalendarWidgetController
from models.enums import NavigationDirection, WeekStart
from models.models import YearMonth
from services.MonthGridCalculator import MonthGridCalculator


@pytest.fixture
def controller(store, today) -> CalendarWidgetController:
    return CalendarWidgetController(
        store=store,
        calculator=MonthGridCalculator(week_start=WeekStart.SUNDAY),
        today_provider=lambda: today,
    )


def test_render_shows_current_month_with_today(controller, provider):
    grid = controller.render(10)

    assert grid.year_month == YearMonth(year=2024, month=5)
    assert grid.label == "May 2024"
    assert grid.cells[grid.today_index].day == 17
    assert provider.states() == []


def test_navigate_moves_and_renders(controller):
    grid = controller.navigate(10, NavigationDirection.NEXT)

    assert grid.year_month == YearMonth(year=2024, month=6)
    assert grid.label == "June 2024"
    assert grid.today_index is None
    assert controller.render(10).year_month == YearMonth(year=2024, month=6)


def test_navigate_back_to_current_month_restores_highlight(controller):
    controller.navigate(10, NavigationDirection.PREV)
    grid = controller.navigate(10, NavigationDirection.NEXT)

    assert grid.cells[grid.today_index].day == 17


def test_select_day_highlights_and_remembers_the_date(controller, provider):
    controller.navigate(10, NavigationDirection.NEXT)

    grid = controller.select_day(10, date(2024, 4, 30))

    assert grid.year_month == YearMonth(year=2024, month=4)
    assert grid.cells[grid.selected_index].day == 30
    assert provider.get(10).selected_date == date(2024, 4, 30)
    assert controller.render(10).selected_index == grid.selected_index


def test_selection_stays_with_its_month(controller):
    controller.select_day(10, date(2024, 5, 17))

    grid = controller.navigate(10, NavigationDirection.NEXT)
    assert grid.selected_index is None

    grid = controller.navigate(10, NavigationDirection.PREV)
    assert grid.cells[grid.selected_index].day == 17
    assert grid.selected_index == grid.today_index


def test_close_and_close_all_remove_state(controller, provider):
    for instance_id in (1, 2, 3):
        controller.navigate(instance_id, NavigationDirection.NEXT)

    assert controller.close(1)
    assert controller.close_all([2, 3]) == set()
    assert provider.states() == []


def test_close_untracked_removes_only_forgotten_instances(controller, provider):
    for instance_id in (1, 2, 3):
        controller.navigate(instance_id, NavigationDirection.NEXT)

    assert controller.close_untracked({2, 40}) == {1, 3}
    assert [state.instance_id for state in provider.states()] == [2]
    assert controller.close_untracked({2}) == set()
