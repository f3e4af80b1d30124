"""
Discord front end for the EventDesk ticketing backend.

Key components:
- EventDeskBot class: Main bot implementation inheriting from discord.Client
- UserContext: Per-Discord-user session and stores built from a linked token
- register_event_handlers: Sets up event listeners for the bot
"""

import datetime
import logging
from typing import Any, Dict, Optional

import discord
from discord import app_commands

from eventdesk.api_client import TicketingApiClient
from eventdesk.config import get_config_value
from eventdesk.database import Database
from eventdesk.messaging import create_embed, get_message
from eventdesk.models import AdminAction, LinkedAccount
from eventdesk.session import Session
from eventdesk.stores.event_store import EventStore
from eventdesk.stores.notification_store import NotificationStore
from eventdesk.stores.report_store import ReportStore
from eventdesk.stores.review_store import ReviewStore
from eventdesk.stores.ticket_store import TicketStore
from eventdesk.stores.transaction_store import (
    AdminTransactionStore,
    TopUpStore,
    TransactionStore,
)
from eventdesk.stores.user_store import AdminUserStore
from eventdesk.transaction_filters import TransactionListView


class UserContext:
    """Everything one Discord user needs to talk to the backend as themselves."""

    def __init__(self, client: TicketingApiClient, account: LinkedAccount):
        self.account = account
        self.session = Session(client, account.token, account.role)
        authed = self.session.client
        self.reports = ReportStore(authed, account.role)
        self.events = EventStore(authed)
        self.tickets = TicketStore(authed)
        self.reviews = ReviewStore(authed)
        self.notifications = NotificationStore(authed)
        self.admin_users = AdminUserStore(authed)
        self.transactions = TransactionStore(authed)
        self.admin_transactions = AdminTransactionStore(authed)
        self.top_up = TopUpStore(authed)
        self.transaction_view = TransactionListView(
            page_size=get_config_value("transactions.page_size", 10)
        )

    @property
    def role(self) -> str:
        return self.account.role


class EventDeskBot(discord.Client):
    """
    Discord bot for the event ticketing backend.

    Attributes:
        api_client: Unauthenticated API client shared by every user context
        db: Database holding linked tokens and the admin audit log
        tree: Command tree for registering slash commands
        audit_log_channel_id: Channel for administrative action logging (0 disables it)
    """

    def __init__(self, api_base_url: str):
        self.logger = logging.getLogger(self.__class__.__name__)
        try:
            intents = discord.Intents.default()
            super().__init__(intents=intents)

            self.logger.info("Initializing API client...")
            self.api_client = TicketingApiClient(api_base_url)
            self.logger.info("Initializing Database...")
            db_file_path = get_config_value("bot_settings.db_file_name", "eventdesk.db")
            self.db = Database(db_file_path)
            self.logger.info("Initializing Command Tree...")
            self.tree = app_commands.CommandTree(self)
            self.user_contexts: Dict[str, UserContext] = {}

            config_audit_channel_id = get_config_value("discord.audit_log_channel_id")
            self.audit_log_channel_id = 0
            if config_audit_channel_id:
                try:
                    self.audit_log_channel_id = int(config_audit_channel_id)
                except ValueError:
                    self.logger.warning(
                        f"Invalid format for discord.audit_log_channel_id: '{config_audit_channel_id}'. Audit logging to Discord disabled."
                    )

            if self.audit_log_channel_id == 0:
                self.logger.warning(
                    "discord.audit_log_channel_id is not set. Admin actions will only be recorded locally."
                )
            self.logger.info("EventDeskBot initialized successfully.")
        except Exception as e:
            init_logger = getattr(self, "logger", logging.getLogger())
            init_logger.critical(
                f"Failed to initialize EventDeskBot: {str(e)}", exc_info=True
            )
            raise

    def get_user_context(self, discord_id: str) -> Optional[UserContext]:
        """
        Look up the user's linked token and return their context.

        Contexts are cached so store state (selected report, list paging) survives
        between commands; a changed token or role rebuilds the context. Blocking,
        call through asyncio.to_thread.
        """
        account = self.db.get_linked_account(discord_id)
        if account is None:
            self.user_contexts.pop(discord_id, None)
            return None

        context = self.user_contexts.get(discord_id)
        if (
            context is None
            or context.account.token != account.token
            or context.account.role != account.role
        ):
            self.logger.debug(f"Building user context for Discord user {discord_id} ({account.role})")
            context = UserContext(self.api_client, account)
            self.user_contexts[discord_id] = context
        return context

    def forget_user(self, discord_id: str) -> bool:
        """Drop the cached context and the stored token. Blocking."""
        self.user_contexts.pop(discord_id, None)
        return self.db.unlink_account(discord_id)

    async def setup_hook(self):
        """Sync slash commands to the configured guild when the bot connects."""
        try:
            guild_id_str = get_config_value("discord.guild_id")
            if not guild_id_str:
                self.logger.error(
                    "discord.guild_id is not set in config. Command sync will be skipped."
                )
                return

            try:
                guild_id_int = int(guild_id_str)
            except ValueError:
                self.logger.error(
                    f"Invalid format for discord.guild_id: '{guild_id_str}'. Command sync will be skipped."
                )
                return

            self.logger.info(f"Running setup_hook to sync commands for guild ID: {guild_id_int}")
            guild = discord.Object(id=guild_id_int)
            self.tree.copy_global_to(guild=guild)
            await self.tree.sync(guild=guild)
            self.logger.info(f"Successfully synced commands to guild ID: {guild_id_int}")
        except discord.HTTPException as e:
            self.logger.error(f"Error during setup_hook command sync: {str(e)}", exc_info=True)
            raise

    async def log_admin_action(self, action: AdminAction) -> None:
        """
        Send an administrative action to the audit log channel, if one is configured.

        The action is expected to be recorded in the database by the caller.
        """
        if self.audit_log_channel_id == 0:
            self.logger.debug("Skipping Discord audit log: no channel configured.")
            return

        try:
            await self.wait_until_ready()
            channel = self.get_channel(self.audit_log_channel_id)
            if channel is None:
                self.logger.error(
                    f"Cannot log admin action to Discord: Channel {self.audit_log_channel_id} not found."
                )
                return

            embed = create_embed(
                title_key="admin_log.embed_title",
                color_type="info",
                timestamp=datetime.datetime.fromtimestamp(
                    action.performed_at, tz=datetime.timezone.utc
                ),
                fields=[
                    (
                        get_message("admin_log.field_action_type_name"),
                        action.action_type,
                        True,
                    ),
                    (
                        get_message("admin_log.field_performed_by_name"),
                        get_message(
                            "admin_log.field_performed_by_value",
                            admin_username=action.admin_username,
                            admin_id=action.admin_id,
                        ),
                        True,
                    ),
                    (
                        get_message("admin_log.field_target_name"),
                        action.target_id,
                        True,
                    ),
                    (
                        get_message("admin_log.field_details_name"),
                        action.details or "N/A",
                        False,
                    ),
                ],
            )
            await channel.send(embed=embed)
            self.logger.info(
                f"Sent admin action log ({action.action_type} by {action.admin_username}) to channel {self.audit_log_channel_id}."
            )
        except discord.errors.Forbidden:
            self.logger.error(
                f"Failed to send admin action log to channel {self.audit_log_channel_id}: Bot lacks necessary permissions (Forbidden)."
            )
        except discord.errors.HTTPException as e:
            self.logger.error(
                f"Failed to send admin action log to channel {self.audit_log_channel_id} due to an HTTP error: {str(e)}"
            )

    async def on_error(self, event_method: str, *args: Any, **kwargs: Any) -> None:
        """Handle errors for the bot."""
        self.logger.exception(f"Unhandled error in {event_method}")


def register_event_handlers(bot: EventDeskBot):
    """Register event handlers for the bot instance."""

    @bot.event
    async def on_ready():
        bot.logger.info("------ BOT READY ------")
        bot.logger.info(f"Logged in as: {bot.user} (ID: {bot.user.id})")
        bot.logger.info(f"Connected to {len(bot.guilds)} guild(s).")
        bot.logger.info(f"Backend: {bot.api_client.base_url}")
        bot.logger.info(f"Discord.py Version: {discord.__version__}")
        bot.logger.info("-----------------------")
