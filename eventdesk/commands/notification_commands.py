"""Command handlers for in-app notifications."""

import asyncio
import logging
from typing import List

import discord
from discord import app_commands

from eventdesk.commands.auth import handle_command_error, require_linked_account, send_failure
from eventdesk.formatting import format_datetime
from eventdesk.messaging import create_embed, get_message
from eventdesk.models import Notification

logger = logging.getLogger(__name__)

MAX_NOTIFICATIONS_PER_EMBED = 10


def notification_list_embed(
    notifications: List[Notification], unread_count: int, unread_only: bool
) -> discord.Embed:
    shown = notifications[:MAX_NOTIFICATIONS_PER_EMBED]
    embed = create_embed(
        title_key="notifications.unread_list_title" if unread_only else "notifications.list_title",
        description_key="notifications.list_empty" if not notifications else None,
        color_type="blue" if unread_count else "info",
    )
    if shown:
        embed.description = "\n\n".join(
            get_message(
                "notifications.list_line",
                marker=get_message(
                    "notifications.marker_read" if n.read else "notifications.marker_unread"
                ),
                id=n.id,
                title=n.title,
                date=format_datetime(n.created_at),
                message=n.message,
            )
            for n in shown
        )
    if len(notifications) > len(shown):
        footer = get_message(
            "notifications.list_truncated",
            shown=len(shown),
            total=len(notifications),
            count=unread_count,
        )
    else:
        footer = get_message("notifications.unread_footer", count=unread_count)
    embed.set_footer(text=footer)
    return embed


async def _context(interaction: discord.Interaction):
    return await asyncio.to_thread(
        interaction.client.get_user_context, str(interaction.user.id)
    )


async def notifications_command(interaction: discord.Interaction, unread_only: bool):
    await interaction.response.defer(ephemeral=True)
    store = (await _context(interaction)).notifications
    notifications, message = await asyncio.to_thread(store.fetch_notifications, unread_only)
    if notifications is None:
        await send_failure(interaction, message, store.error_status)
        return
    unread, _ = await asyncio.to_thread(store.fetch_unread_count)
    await interaction.edit_original_response(
        embed=notification_list_embed(
            notifications, unread if unread is not None else store.unread_count, unread_only
        )
    )


async def notification_read_command(interaction: discord.Interaction, notification_id: str):
    await interaction.response.defer(ephemeral=True)
    store = (await _context(interaction)).notifications
    success, message = await asyncio.to_thread(store.mark_as_read, notification_id)
    if not success:
        await send_failure(interaction, message, store.error_status)
        return
    await interaction.edit_original_response(
        content=get_message("notifications.marked_read", id=notification_id)
    )


async def notifications_read_all_command(interaction: discord.Interaction):
    await interaction.response.defer(ephemeral=True)
    store = (await _context(interaction)).notifications
    success, message = await asyncio.to_thread(store.mark_all_as_read)
    if not success:
        await send_failure(interaction, message, store.error_status)
        return
    await interaction.edit_original_response(content=get_message("notifications.marked_all_read"))


async def notification_delete_command(interaction: discord.Interaction, notification_id: str):
    await interaction.response.defer(ephemeral=True)
    store = (await _context(interaction)).notifications
    success, message = await asyncio.to_thread(store.delete_notification, notification_id)
    if not success:
        await send_failure(interaction, message, store.error_status)
        return
    await interaction.edit_original_response(
        content=get_message("notifications.deleted", id=notification_id)
    )


def setup_commands(bot):
    """Register the notification commands with the bot."""

    @bot.tree.command(name="notifications", description="Show your notifications.")
    @app_commands.describe(unread_only="Only show notifications you have not read")
    @require_linked_account()
    async def notifications(interaction: discord.Interaction, unread_only: bool = False):
        await notifications_command(interaction, unread_only)

    @bot.tree.command(name="notification-read", description="Mark a notification as read.")
    @app_commands.describe(notification_id="The notification ID")
    @require_linked_account()
    async def notification_read(interaction: discord.Interaction, notification_id: str):
        await notification_read_command(interaction, notification_id)

    @bot.tree.command(name="notifications-read-all", description="Mark every notification as read.")
    @require_linked_account()
    async def notifications_read_all(interaction: discord.Interaction):
        await notifications_read_all_command(interaction)

    @bot.tree.command(name="notification-delete", description="Delete a notification.")
    @app_commands.describe(notification_id="The notification ID")
    @require_linked_account()
    async def notification_delete(interaction: discord.Interaction, notification_id: str):
        await notification_delete_command(interaction, notification_id)

    for command in (
        notifications,
        notification_read,
        notifications_read_all,
        notification_delete,
    ):
        command.error(handle_command_error)
