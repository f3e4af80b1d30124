"""Main entry point for the application."""

import logging
import sys

from eventdesk.bot import EventDeskBot, register_event_handlers
from eventdesk.commands.account_commands import setup_commands as setup_account_commands
from eventdesk.commands.admin_commands import setup_commands as setup_admin_commands
from eventdesk.commands.event_commands import setup_commands as setup_event_commands
from eventdesk.commands.notification_commands import (
    setup_commands as setup_notification_commands,
)
from eventdesk.commands.report_commands import setup_commands as setup_report_commands
from eventdesk.commands.review_commands import setup_commands as setup_review_commands
from eventdesk.commands.ticket_commands import setup_commands as setup_ticket_commands
from eventdesk.commands.transaction_commands import (
    setup_commands as setup_transaction_commands,
)
from eventdesk.config import get_config_value, validate_config
from eventdesk.logging_setup import setup_logging

# Setup logging first
setup_logging()

logger = logging.getLogger(__name__)

validate_config()

if __name__ == "__main__":
    try:
        logger.info("Starting EventDesk Discord Bot")

        api_base_url = get_config_value("api.base_url")
        discord_token = get_config_value("discord.token")

        if not all([api_base_url, discord_token]):
            logger.critical(
                "Missing API or Discord configuration. Please check your config.yaml and .env file."
            )
            sys.exit(1)

        bot = EventDeskBot(api_base_url)

        register_event_handlers(bot)

        setup_account_commands(bot)
        logger.debug("Account commands setup.")
        setup_event_commands(bot)
        logger.debug("Event commands setup.")
        setup_transaction_commands(bot)
        logger.debug("Transaction commands setup.")
        setup_report_commands(bot)
        logger.debug("Report commands setup.")
        setup_ticket_commands(bot)
        logger.debug("Ticket commands setup.")
        setup_review_commands(bot)
        logger.debug("Review commands setup.")
        setup_notification_commands(bot)
        logger.debug("Notification commands setup.")
        setup_admin_commands(bot)
        logger.debug("Admin commands setup.")

        bot.run(discord_token, log_handler=None)
    except Exception as e:
        logger.critical(f"Failed to start bot: {e}", exc_info=True)
        sys.exit(1)
