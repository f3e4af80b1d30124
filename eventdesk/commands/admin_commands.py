"""Admin-only commands: backend user management and the local audit log."""

import asyncio
import logging
from typing import List, Optional

import discord
from discord import app_commands

from eventdesk.commands.auth import (
    handle_command_error,
    record_action,
    require_role,
    send_failure,
)
from eventdesk.commands.views import ask_confirmation
from eventdesk.formatting import format_currency
from eventdesk.messaging import create_embed, get_message
from eventdesk.models import AdminAction, Role, UserProfile

logger = logging.getLogger(__name__)

MAX_USERS_PER_EMBED = 20

ROLE_CHOICES = [app_commands.Choice(name=r.value.title(), value=r.value) for r in Role]


def user_list_embed(users: List[UserProfile], role: Optional[str]) -> discord.Embed:
    shown = users[:MAX_USERS_PER_EMBED]
    embed = create_embed(
        title_key="users.role_list_title" if role else "users.list_title",
        title_kwargs={"role": role},
        description_key="users.list_empty" if not users else None,
        color_type="blue",
    )
    if shown:
        embed.description = "\n".join(
            get_message(
                "users.list_line",
                id=u.id,
                name=u.full_name or "N/A",
                email=u.email or "N/A",
                role=u.role,
            )
            for u in shown
        )
    if len(users) > len(shown):
        embed.set_footer(
            text=get_message("users.list_truncated", shown=len(shown), total=len(users))
        )
    return embed


def user_detail_embed(user: UserProfile) -> discord.Embed:
    embed = create_embed(
        color_type="blue",
        fields=[
            (get_message("account.field_email"), user.email or "N/A", True),
            (get_message("account.field_role"), user.role or "N/A", True),
            (get_message("account.field_balance"), format_currency(user.balance), True),
        ],
    )
    embed.title = get_message("account.profile_title", name=user.full_name or user.email or user.id)
    embed.set_footer(text=f"ID: {user.id}")
    return embed


def audit_log_embed(actions: List[AdminAction]) -> discord.Embed:
    embed = create_embed(
        title_key="audit.title",
        description_key="audit.empty" if not actions else None,
        color_type="info",
    )
    if actions:
        embed.description = "\n".join(
            get_message(
                "audit.line",
                date=f"<t:{a.performed_at}:f>",
                action_type=a.action_type,
                target_id=a.target_id,
                admin_username=a.admin_username,
                details=f" ({a.details})" if a.details else "",
            )
            for a in actions
        )
    return embed


async def _context(interaction: discord.Interaction):
    return await asyncio.to_thread(
        interaction.client.get_user_context, str(interaction.user.id)
    )


async def audit_log_command(interaction: discord.Interaction, limit: int):
    await interaction.response.defer(ephemeral=True)
    actions = await asyncio.to_thread(interaction.client.db.get_recent_admin_actions, limit)
    await interaction.edit_original_response(embed=audit_log_embed(actions))


async def users_command(interaction: discord.Interaction, role: Optional[str]):
    await interaction.response.defer(ephemeral=True)
    store = (await _context(interaction)).admin_users
    users, message = await asyncio.to_thread(store.fetch_users, role)
    if users is None:
        await send_failure(interaction, message, store.error_status)
        return
    await interaction.edit_original_response(embed=user_list_embed(users, role))


async def user_command(interaction: discord.Interaction, user_id: str):
    await interaction.response.defer(ephemeral=True)
    store = (await _context(interaction)).admin_users
    user, message = await asyncio.to_thread(store.fetch_user, user_id)
    if user is None:
        await send_failure(interaction, message, store.error_status)
        return
    await interaction.edit_original_response(embed=user_detail_embed(user))


async def user_update_command(
    interaction: discord.Interaction,
    user_id: str,
    email: Optional[str] = None,
    full_name: Optional[str] = None,
    role: Optional[str] = None,
    balance: Optional[int] = None,
    password: Optional[str] = None,
):
    await interaction.response.defer(ephemeral=True)
    store = (await _context(interaction)).admin_users
    changes = {
        "email": email,
        "fullName": full_name,
        "role": role,
        "balance": balance,
        "password": password,
    }
    user, message = await asyncio.to_thread(store.update_user, user_id, changes)
    if user is None:
        await send_failure(interaction, message, store.error_status)
        return
    changed = sorted(k for k, v in changes.items() if v not in (None, "") and k != "password")
    if password:
        changed.append("password")
    await record_action(interaction, "UPDATE_USER", user_id, ", ".join(changed))
    await interaction.edit_original_response(
        content=get_message("users.updated", id=user_id), embed=user_detail_embed(user)
    )


async def user_delete_command(interaction: discord.Interaction, user_id: str):
    await interaction.response.defer(ephemeral=True)
    if not await ask_confirmation(
        interaction, get_message("users.confirm_delete", id=user_id)
    ):
        return
    store = (await _context(interaction)).admin_users
    success, message = await asyncio.to_thread(store.delete_user, user_id, True)
    if not success:
        await send_failure(interaction, message, store.error_status)
        return
    await record_action(interaction, "DELETE_USER", user_id)
    await interaction.edit_original_response(
        content=get_message("users.deleted", id=user_id), view=None
    )


def setup_commands(bot):
    """Register the admin commands with the bot."""

    @bot.tree.command(name="audit-log", description="Show recent destructive admin actions.")
    @app_commands.describe(limit="How many actions to show")
    @require_role(Role.ADMIN)
    async def audit_log(
        interaction: discord.Interaction, limit: app_commands.Range[int, 1, 25] = 10
    ):
        await audit_log_command(interaction, limit)

    @bot.tree.command(name="users", description="List backend user accounts.")
    @app_commands.describe(role="Only users with this role")
    @app_commands.choices(role=ROLE_CHOICES)
    @require_role(Role.ADMIN)
    async def users(interaction: discord.Interaction, role: Optional[str] = None):
        await users_command(interaction, role)

    @bot.tree.command(name="user", description="Show one backend user account.")
    @app_commands.describe(user_id="The user ID")
    @require_role(Role.ADMIN)
    async def user(interaction: discord.Interaction, user_id: str):
        await user_command(interaction, user_id)

    @bot.tree.command(name="user-update", description="Change a user's account details.")
    @app_commands.describe(
        user_id="The user ID",
        email="New email",
        full_name="New full name",
        role="New role",
        balance="New balance in Rupiah",
        password="New password (leave empty to keep the current one)",
    )
    @app_commands.choices(role=ROLE_CHOICES)
    @require_role(Role.ADMIN)
    async def user_update(
        interaction: discord.Interaction,
        user_id: str,
        email: Optional[str] = None,
        full_name: Optional[str] = None,
        role: Optional[str] = None,
        balance: Optional[int] = None,
        password: Optional[str] = None,
    ):
        await user_update_command(
            interaction, user_id, email, full_name, role, balance, password
        )

    @bot.tree.command(name="user-delete", description="Permanently delete a user account.")
    @app_commands.describe(user_id="The user ID")
    @require_role(Role.ADMIN)
    async def user_delete(interaction: discord.Interaction, user_id: str):
        await user_delete_command(interaction, user_id)

    for command in (audit_log, users, user, user_update, user_delete):
        command.error(handle_command_error)
