from typing import Optional

from telegram import Update
from telegram.ext import CommandHandler, ContextTypes
from localization import Key
import logging

logger = logging.getLogger(__name__)

class StartHandler:
    """Handler for the /start command."""

    def __init__(self, locale: Optional[str] = None):
        self.locale = locale

    def get_handler(self) -> CommandHandler:
        """Get the start command handler.

        Returns:
            CommandHandler: The start command handler
        """
        return CommandHandler("start", self._start_command)

    async def _start_command(self, update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
        """Greet the user and list the calendar commands.

        Args:
            update: The update object
            context: The context object
        """
        try:
            logger.info("Start command received from user %s", update.effective_user.id)
            await update.message.reply_text(Key.for_locale(self.locale).start_greeting)
        except Exception as e:
            logger.error(f"Error in start command: {str(e)}", exc_info=True)
            raise
