"""Command handlers for linking a Discord user to a backend account."""

import asyncio
import logging

import discord
from discord import app_commands

from eventdesk.commands.auth import handle_command_error, require_linked_account, send_failure
from eventdesk.formatting import format_currency
from eventdesk.messaging import create_embed, get_message
from eventdesk.models import Role
from eventdesk.session import Session

logger = logging.getLogger(__name__)

REGISTRATION_ROLES = [
    app_commands.Choice(name="Attendee", value=Role.ATTENDEE.value),
    app_commands.Choice(name="Organizer", value=Role.ORGANIZER.value),
]


async def login_command(interaction: discord.Interaction, email: str, password: str):
    await interaction.response.defer(ephemeral=True)
    bot = interaction.client
    discord_id = str(interaction.user.id)

    session = Session(bot.api_client)
    user, message = await asyncio.to_thread(session.login, email, password)
    if user is None:
        logger.info(f"[login] Failed for Discord user {interaction.user}: {message}")
        await interaction.edit_original_response(
            embed=create_embed(
                title_key="account.login_failed_title",
                description_key="account.login_failed_description",
                description_kwargs={"message": message},
                color_type="error",
            )
        )
        return

    await asyncio.to_thread(
        bot.db.link_account, discord_id, session.token, user.email or email, user.role
    )
    logger.info(f"[login] Discord user {interaction.user} linked to {user.email} ({user.role})")
    await interaction.edit_original_response(
        embed=create_embed(
            title_key="account.login_success_title",
            description_key="account.login_success_description",
            description_kwargs={"email": user.email or email, "role": user.role},
            color_type="success",
        )
    )


async def logout_command(interaction: discord.Interaction):
    await interaction.response.defer(ephemeral=True)
    removed = await asyncio.to_thread(interaction.client.forget_user, str(interaction.user.id))
    key = "account.logout_success" if removed else "account.logout_not_linked"
    await interaction.edit_original_response(content=get_message(key))


async def me_command(interaction: discord.Interaction):
    await interaction.response.defer(ephemeral=True)
    bot = interaction.client
    discord_id = str(interaction.user.id)
    context = await asyncio.to_thread(bot.get_user_context, discord_id)

    user, message = await asyncio.to_thread(context.session.fetch_current_user)
    if user is None:
        status = None if context.session.is_authenticated else 401
        await send_failure(interaction, message, status)
        return

    if user.role and user.role != context.role:
        logger.info(f"[me] Role for {discord_id} changed from {context.role} to {user.role}")
        await asyncio.to_thread(bot.db.update_account_role, discord_id, user.role)

    fields = [
        (get_message("account.field_email"), user.email or "N/A", True),
        (get_message("account.field_role"), user.role or "N/A", True),
    ]
    if context.session.is_attendee():
        fields.append((get_message("account.field_balance"), format_currency(user.balance), True))
    await interaction.edit_original_response(
        embed=create_embed(
            title_key="account.profile_title",
            title_kwargs={"name": user.full_name or user.email},
            color_type="blue",
            fields=fields,
        )
    )


async def register_command(
    interaction: discord.Interaction,
    full_name: str,
    email: str,
    password: str,
    role: str,
):
    await interaction.response.defer(ephemeral=True)
    session = Session(interaction.client.api_client)
    success, message = await asyncio.to_thread(
        session.register, full_name, email, password, role
    )
    if not success:
        await interaction.edit_original_response(
            embed=create_embed(
                title_key="account.register_failed_title",
                description_key="account.register_failed_description",
                description_kwargs={"message": message},
                color_type="error",
            )
        )
        return

    await interaction.edit_original_response(
        embed=create_embed(
            title_key="account.register_success_title",
            description_key="account.register_success_description",
            description_kwargs={"email": email},
            color_type="success",
        )
    )


def setup_commands(bot):
    """Register the account commands with the bot."""

    @bot.tree.command(name="login", description="Link your ticketing account to Discord.")
    @app_commands.describe(email="Your account email", password="Your account password")
    async def login(interaction: discord.Interaction, email: str, password: str):
        await login_command(interaction, email, password)

    @bot.tree.command(name="logout", description="Unlink your ticketing account.")
    async def logout(interaction: discord.Interaction):
        await logout_command(interaction)

    @bot.tree.command(name="me", description="Show the account linked to you.")
    @require_linked_account()
    async def me(interaction: discord.Interaction):
        await me_command(interaction)

    @bot.tree.command(name="register", description="Create a new ticketing account.")
    @app_commands.describe(
        full_name="Your full name",
        email="Email address to sign in with",
        password="At least 6 characters",
        role="Account type",
    )
    @app_commands.choices(role=REGISTRATION_ROLES)
    async def register(
        interaction: discord.Interaction,
        full_name: str,
        email: str,
        password: str,
        role: app_commands.Choice[str],
    ):
        await register_command(interaction, full_name, email, password, role.value)

    for command in (login, logout, me, register):
        command.error(handle_command_error)
