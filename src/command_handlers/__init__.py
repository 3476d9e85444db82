"""
Command Handlers package.

This package contains the command handlers for Telegram bot interactions:
- start_handler: Handles the /start command
- calendar_handler: Handles /calendar, /reset_calendars and calendar keyboard buttons
"""
