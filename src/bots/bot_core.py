from pathlib import Path
from typing import Awaitable, Callable, List, Optional

from telegram import BotCommand
from telegram.ext import Application, PicklePersistence
import logging

logger = logging.getLogger(__name__)

StartupHook = Callable[[Application], Awaitable[None]]

class BotCore:
    """
    Core bot implementation with common functionality.

    This class handles:
    1. Bot initialization
    2. Application setup, with chat data kept across restarts when a file is given
    3. Registration of the command menu and other startup work
    """

    BOT_COMMANDS = [
        BotCommand("start", "show what this bot can do"),
        BotCommand("calendar", "open a new month calendar"),
        BotCommand("reset_calendars", "close every calendar in this chat"),
    ]

    def __init__(self, token: str, *, persistence_file: Optional[Path] = None):
        """
        Initialize the bot core.

        Args:
            token: Telegram bot token
            persistence_file: Pickle file for chat data, kept in memory when None
        """
        logger.info("Initializing bot core...")
        self._startup_hooks: List[StartupHook] = []
        builder = Application.builder().token(token)
        if persistence_file is not None:
            logger.info("Persisting chat data to %s", persistence_file)
            builder.persistence(PicklePersistence(filepath=persistence_file))
        builder.post_init(self._post_init)
        self.application = builder.build()
        logger.info("Bot core initialized")

    def add_startup_hook(self, hook: StartupHook):
        """Run ``hook`` once the application is initialized and persisted data is loaded."""
        self._startup_hooks.append(hook)

    def run(self):
        """Run the bot"""
        logger.info("Starting bot...")
        self.application.run_polling()

    def stop(self):
        """Stop the bot"""
        logger.info("Stopping bot...")
        self.application.stop()

    async def _post_init(self, application: Application):
        await self._register_bot_commands(application)
        for hook in self._startup_hooks:
            await hook(application)

    async def _register_bot_commands(self, application: Application):
        """Register bot commands once the application is ready."""
        await application.bot.set_my_commands(commands=self.BOT_COMMANDS)
