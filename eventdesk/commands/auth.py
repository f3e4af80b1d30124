"""Authorization checks and shared failure rendering for commands."""

import asyncio
import datetime
import logging
from typing import Optional

import discord
from discord import app_commands

from eventdesk.messaging import create_embed, get_message
from eventdesk.models import AdminAction, Role

logger = logging.getLogger(__name__)


def require_linked_account():
    """Check that the user has linked a backend account with /login."""

    async def predicate(interaction: discord.Interaction) -> bool:
        bot = interaction.client
        context = await asyncio.to_thread(bot.get_user_context, str(interaction.user.id))
        if context is None:
            logger.debug(
                f"Auth check failed for user {interaction.user}: no linked account."
            )
            await interaction.response.send_message(
                get_message("errors.not_linked"), ephemeral=True
            )
            return False
        return True

    return app_commands.check(predicate)


def require_role(*roles: Role):
    """Check that the user's linked account holds one of the given roles."""
    allowed = {Role(r).value for r in roles}

    async def predicate(interaction: discord.Interaction) -> bool:
        bot = interaction.client
        context = await asyncio.to_thread(bot.get_user_context, str(interaction.user.id))
        if context is None:
            await interaction.response.send_message(
                get_message("errors.not_linked"), ephemeral=True
            )
            return False
        is_allowed, message = context.session.require_role(*sorted(allowed))
        if not is_allowed:
            logger.warning(
                f"Auth check failed for user {interaction.user}: role {context.session.role} not in {sorted(allowed)} for command '{interaction.command.name if interaction.command else 'Unknown'}'."
            )
            await interaction.response.send_message(message, ephemeral=True)
            return False
        return True

    return app_commands.check(predicate)


async def send_failure(
    interaction: discord.Interaction,
    message: str,
    status_code: Optional[int] = None,
) -> None:
    """
    Replace the deferred response with an error embed for a failed store call.

    A 401 means the linked token is no longer accepted, so it is forgotten.
    """
    if status_code == 401:
        await asyncio.to_thread(interaction.client.forget_user, str(interaction.user.id))
        description_key = "errors.session_expired"
    elif status_code == 403:
        description_key = "errors.forbidden"
    elif status_code == 404:
        description_key = "errors.not_found"
    else:
        description_key = "errors.api_error"

    embed = create_embed(
        title_key="errors.title",
        description_key=description_key,
        description_kwargs={"message": message},
        color_type="error",
    )
    await interaction.edit_original_response(content=None, embed=embed, view=None)


async def handle_command_error(
    interaction: discord.Interaction, error: app_commands.AppCommandError
):
    """Error handler shared by every command."""
    err_logger = logger.getChild("error")
    if isinstance(error, app_commands.errors.CheckFailure):
        err_logger.debug(f"CheckFailure suppressed for user {interaction.user}: {error}")
        return

    err_logger.error(
        f"Error in command '{interaction.command.name if interaction.command else 'Unknown'}' for user {interaction.user}: {type(error).__name__} - {error}",
        exc_info=error,
    )
    error_message = get_message("errors.generic_command_error")
    try:
        if not interaction.response.is_done():
            await interaction.response.send_message(error_message, ephemeral=True)
        else:
            await interaction.followup.send(error_message, ephemeral=True)
    except discord.HTTPException:
        err_logger.error("Failed to send error followup message.")


async def record_action(
    interaction: discord.Interaction,
    action_type: str,
    target_id: str,
    details: Optional[str] = None,
) -> None:
    """Store a destructive action in the audit table and post it to the audit channel."""
    bot = interaction.client
    action = AdminAction(
        admin_id=str(interaction.user.id),
        admin_username=str(interaction.user),
        action_type=action_type,
        target_id=str(target_id),
        details=details,
        performed_at=int(datetime.datetime.now(datetime.timezone.utc).timestamp()),
    )
    await asyncio.to_thread(bot.db.record_admin_action, action)
    await bot.log_admin_action(action)
