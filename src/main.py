import sys
from pathlib import Path

# Add src directory to Python path
src_dir = str(Path(__file__).parent)
if src_dir not in sys.path:
    sys.path.append(src_dir)

from bots.calendar_bot import CalendarBot
from config.settings import settings
import logging

# Set up logging
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

def main():
    """Start the bot."""
    if not settings.calendar_bot_token:
        logger.error("Error: CALENDAR_BOT_TOKEN not found in environment variables")
        return

    bot = CalendarBot(
        settings.calendar_bot_token,
        state_file=settings.state_file,
        chat_data_file=settings.chat_data_file,
        week_start=settings.week_start,
        locale=settings.locale,
    )
    logger.info("Starting bot in %s environment...", settings.environment)

    try:
        bot.run()
    except KeyboardInterrupt:
        logger.info("Bot stopped by user")
    except Exception as e:
        logger.error(f"Error running bot: {str(e)}", exc_info=True)

if __name__ == "__main__":
    main()
