import asyncio
import logging
from typing import List, Optional, Set

from telegram import CallbackQuery, Update
from telegram.error import BadRequest
from telegram.ext import BaseHandler, CallbackQueryHandler, CommandHandler, ContextTypes

from controllers.calendar_widget_controller import CalendarWidgetControlling
from custom_components.CalendarKeyboardMarkup import CalendarKeyboardMarkup
from localization import Key
from models.enums import CalendarAction, NavigationDirection
from models.models import MonthGrid

logger = logging.getLogger(__name__)

INSTANCES_KEY = "calendar_instances"


class CalendarHandler:
    """
    Handles the lifecycle of calendar messages.

    Every /calendar command creates a new calendar instance whose id is the
    command's update id, and the chat keeps the ids it has opened. Keyboard
    buttons navigate between months, select a day or close the calendar, and
    /reset_calendars closes every calendar the chat has opened. Buttons of a
    calendar the chat no longer tracks are refused, so a closed calendar
    cannot bring its state back.

    State changes run in a worker thread because the file-backed store
    writes synchronously.
    """

    def __init__(self, controller: CalendarWidgetControlling, *, locale: Optional[str] = None):
        self.controller = controller
        self.locale = locale

    def get_handlers(self) -> List[BaseHandler]:
        return [
            CommandHandler("calendar", self.open_calendar),
            CommandHandler("reset_calendars", self.reset_calendars),
            CallbackQueryHandler(self.calendar_button, pattern=CalendarKeyboardMarkup.pattern()),
            CallbackQueryHandler(
                self.ignore_button, pattern=rf"^{CalendarKeyboardMarkup.callback_data.noop}$"
            ),
        ]

    async def open_calendar(self, update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
        """Handle the /calendar command"""
        instance_id = update.update_id
        logger.info("Opening calendar %s in chat %s", instance_id, update.effective_chat.id)

        grid = await asyncio.to_thread(self.controller.render, instance_id)
        markup = CalendarKeyboardMarkup.build(grid, instance_id, locale=self.locale)
        await update.message.reply_text(grid.label, reply_markup=markup)

        self._chat_instances(context).add(instance_id)

    async def calendar_button(self, update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
        """Handle prev/next/close/day buttons of a calendar keyboard"""
        query = update.callback_query
        keys = Key.for_locale(self.locale).calendar

        try:
            callback = CalendarKeyboardMarkup.parse(query.data)
        except ValueError as exc:
            logger.warning("Ignoring calendar callback %r: %s", query.data, exc)
            await query.answer(text=keys.unknown_action)
            return

        instance_id = callback.instance_id
        if instance_id not in self._chat_instances(context):
            logger.info(
                "Ignoring %s on calendar %s, which is not open in this chat", callback.action.value, instance_id
            )
            await query.answer(text=keys.unknown_action)
            return

        if callback.action is CalendarAction.DAY:
            grid = await asyncio.to_thread(self.controller.select_day, instance_id, callback.selected_date)
            await query.answer(text=keys.selected_day.format(selected_date=callback.selected_date))
            await self._show_grid(query, grid, instance_id)
            return

        await query.answer()

        if callback.action is CalendarAction.CLOSE:
            # failed removals stay listed so /reset_calendars retries them
            if await asyncio.to_thread(self.controller.close, instance_id):
                self._chat_instances(context).discard(instance_id)
            await query.edit_message_text(text=keys.closed)
            return

        direction = NavigationDirection(callback.action.value)
        grid = await asyncio.to_thread(self.controller.navigate, instance_id, direction)
        await self._show_grid(query, grid, instance_id)

    async def reset_calendars(self, update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
        """Handle the /reset_calendars command"""
        keys = Key.for_locale(self.locale).calendar
        instances = self._chat_instances(context)

        if not instances:
            await update.message.reply_text(keys.reset_nothing)
            return

        failed = await asyncio.to_thread(self.controller.close_all, set(instances))
        closed = len(instances) - len(failed)
        instances.intersection_update(failed)

        await update.message.reply_text(keys.reset_done.format(count=closed))

    @staticmethod
    async def ignore_button(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
        await update.callback_query.answer()

    async def _show_grid(self, query: CallbackQuery, grid: MonthGrid, instance_id: int) -> None:
        markup = CalendarKeyboardMarkup.build(grid, instance_id, locale=self.locale)
        try:
            await query.edit_message_text(text=grid.label, reply_markup=markup)
        except BadRequest as exc:
            # same day tapped twice, or navigation stopped at the edge of the calendar
            if "not modified" not in str(exc).lower():
                raise
            logger.debug("Calendar %s unchanged", instance_id)

    @staticmethod
    def _chat_instances(context: ContextTypes.DEFAULT_TYPE) -> Set[int]:
        return context.chat_data.setdefault(INSTANCES_KEY, set())
