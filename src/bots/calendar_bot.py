import asyncio
import logging
from pathlib import Path
from typing import Optional

from telegram.ext import Application

from bots.bot_core import BotCore
from command_handlers.calendar_handler import INSTANCES_KEY, CalendarHandler
from command_handlers.start_handler import StartHandler
from controllers.calendar_widget_controller import CalendarWidgetController
from localization import store as locale_store
from models.enums import WeekStart
from providers.state_provider import StateProvider
from providers.state_provider_impl import InMemoryStateProvider, JsonFileStateProvider
from services.InstanceStateStore import InstanceStateStore
from services.MonthGridCalculator import MonthGridCalculator

logger = logging.getLogger(__name__)

class CalendarBot:
    """
    Calendar bot that keeps one navigable month calendar per calendar message.

    This bot is responsible for:
    1. Wiring the state provider, state store, grid calculator and controller
    2. Setting up the /start, /calendar and /reset_calendars handlers
    3. Dropping stored calendars that no chat tracks any more at startup
    4. Managing the bot lifecycle
    """

    def __init__(
        self,
        token: str,
        *,
        state_file: Optional[Path] = None,
        chat_data_file: Optional[Path] = None,
        week_start: WeekStart = WeekStart.SUNDAY,
        locale: str = "en",
    ):
        """
        Initialize the calendar bot.

        Args:
            token: Telegram bot token
            state_file: JSON file for calendar state, kept in memory when None
            chat_data_file: Pickle file for the calendars each chat has open,
                kept in memory when None
            week_start: First column of the month grid
            locale: Catalog used for labels and replies
        """
        logger.info("Initializing calendar bot...")
        if locale not in locale_store.available_locales:
            logger.warning("Locale '%s' is not available, falling back to '%s'", locale, locale_store.default_locale)
            locale = locale_store.default_locale

        self.locale = locale
        self.store = InstanceStateStore(provider=self._build_provider(state_file))
        self.controller = CalendarWidgetController(
            store=self.store,
            calculator=MonthGridCalculator(week_start=week_start, locale=locale),
        )
        self.core = BotCore(token=token, persistence_file=chat_data_file)
        self.core.add_startup_hook(self._close_untracked_calendars)
        self._setup_command_handlers()
        logger.info("Calendar bot initialized")

    @staticmethod
    def _build_provider(state_file: Optional[Path]) -> StateProvider:
        if state_file is None:
            logger.warning("No state file configured, calendar months are kept in memory only")
            return InMemoryStateProvider()
        logger.info("Persisting calendar state to %s", state_file)
        return JsonFileStateProvider(state_file)

    def _setup_command_handlers(self):
        """Register the start handler and the calendar handlers."""
        logger.info("Setting up command handlers...")
        self.core.application.add_handler(StartHandler(locale=self.locale).get_handler())

        calendar_handler = CalendarHandler(controller=self.controller, locale=self.locale)
        for handler in calendar_handler.get_handlers():
            self.core.application.add_handler(handler)
        logger.info("Command handlers set up")

    async def _close_untracked_calendars(self, application: Application):
        """Remove stored state of calendars whose chat no longer lists them."""
        tracked = {
            instance_id
            for chat_data in application.chat_data.values()
            for instance_id in chat_data.get(INSTANCES_KEY, ())
        }
        closed = await asyncio.to_thread(self.controller.close_untracked, tracked)
        if closed:
            logger.info("Closed %d untracked calendar(s) at startup", len(closed))

    def run(self):
        """Run the bot"""
        logger.info("Starting calendar bot...")
        self.core.run()

    def stop(self):
        """Stop the bot"""
        logger.info("Stopping calendar bot...")
        self.core.stop()
