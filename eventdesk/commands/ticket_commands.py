"""Command handlers for the ticket catalogue."""

import asyncio
import logging
from typing import List, Optional

import discord
from discord import app_commands

from eventdesk.commands.auth import (
    handle_command_error,
    record_action,
    require_linked_account,
    require_role,
    send_failure,
)
from eventdesk.commands.views import ask_confirmation
from eventdesk.formatting import format_currency
from eventdesk.messaging import create_embed, get_message
from eventdesk.models import Role, Ticket, TicketCategory

logger = logging.getLogger(__name__)

MAX_TICKETS_PER_EMBED = 20

CATEGORY_CHOICES = [
    app_commands.Choice(name=c.value.title(), value=c.value) for c in TicketCategory
]


def _availability(ticket: Ticket) -> str:
    if ticket.is_available():
        return get_message("tickets.available", quota=ticket.quota)
    return get_message("tickets.sold_out")


def ticket_list_embed(tickets: List[Ticket], event_id: Optional[str]) -> discord.Embed:
    shown = tickets[:MAX_TICKETS_PER_EMBED]
    embed = create_embed(
        title_key="tickets.event_list_title" if event_id else "tickets.list_title",
        title_kwargs={"event_id": event_id},
        description_key="tickets.list_empty" if not tickets else None,
        color_type="blue",
    )
    if shown:
        embed.description = "\n".join(
            get_message(
                "tickets.list_line",
                id=t.id,
                name=t.name,
                category=t.category,
                price=format_currency(t.price),
                availability=_availability(t),
                event_id=t.event_id or "N/A",
            )
            for t in shown
        )
    if len(tickets) > len(shown):
        embed.set_footer(
            text=get_message("tickets.list_truncated", shown=len(shown), total=len(tickets))
        )
    return embed


def ticket_detail_embed(ticket: Ticket) -> discord.Embed:
    embed = create_embed(
        color_type="success" if ticket.is_available() else "warning",
        fields=[
            (get_message("tickets.field_event"), ticket.event_id or "N/A", True),
            (get_message("tickets.field_category"), ticket.category, True),
            (get_message("tickets.field_price"), format_currency(ticket.price), True),
            (get_message("tickets.field_availability"), _availability(ticket), True),
        ],
    )
    embed.title = get_message("tickets.detail_title", name=ticket.name, id=ticket.id)
    return embed


async def _context(interaction: discord.Interaction):
    return await asyncio.to_thread(
        interaction.client.get_user_context, str(interaction.user.id)
    )


async def tickets_command(interaction: discord.Interaction, event_id: Optional[str]):
    await interaction.response.defer(ephemeral=True)
    store = (await _context(interaction)).tickets
    tickets, message = await asyncio.to_thread(store.fetch_tickets, event_id)
    if tickets is None:
        await send_failure(interaction, message, store.error_status)
        return
    await interaction.edit_original_response(embed=ticket_list_embed(tickets, event_id))


async def ticket_command(interaction: discord.Interaction, ticket_id: str):
    await interaction.response.defer(ephemeral=True)
    store = (await _context(interaction)).tickets
    ticket, message = await asyncio.to_thread(store.fetch_ticket, ticket_id)
    if ticket is None:
        await send_failure(interaction, message, store.error_status)
        return
    await interaction.edit_original_response(embed=ticket_detail_embed(ticket))


async def ticket_create_command(
    interaction: discord.Interaction,
    event_id: str,
    name: str,
    category: str,
    price: float,
    quota: int,
):
    await interaction.response.defer(ephemeral=True)
    store = (await _context(interaction)).tickets
    form = {
        "eventId": event_id,
        "name": name,
        "category": category,
        "price": price,
        "quota": quota,
    }
    ticket, message = await asyncio.to_thread(store.create_ticket, form)
    if ticket is None:
        await send_failure(interaction, message, store.error_status)
        return
    logger.info(f"[ticket-create] {interaction.user} created ticket {ticket.id} for event {event_id}")
    await interaction.edit_original_response(
        content=get_message("tickets.created", name=ticket.name, id=ticket.id),
        embed=ticket_detail_embed(ticket),
    )


async def ticket_update_command(
    interaction: discord.Interaction,
    ticket_id: str,
    name: Optional[str] = None,
    category: Optional[str] = None,
    price: Optional[float] = None,
    quota: Optional[int] = None,
):
    """Load the ticket, overlay the given fields and send the full form back."""
    await interaction.response.defer(ephemeral=True)
    store = (await _context(interaction)).tickets
    current, message = await asyncio.to_thread(store.fetch_ticket, ticket_id)
    if current is None:
        await send_failure(interaction, message, store.error_status)
        return

    form = {
        "eventId": current.event_id,
        "name": name if name is not None else current.name,
        "category": category if category is not None else current.category,
        "price": price if price is not None else current.price,
        "quota": quota if quota is not None else current.quota,
    }
    ticket, message = await asyncio.to_thread(store.update_ticket, ticket_id, form)
    if ticket is None:
        await send_failure(interaction, message, store.error_status)
        return
    logger.info(f"[ticket-update] {interaction.user} updated ticket {ticket_id}")
    await interaction.edit_original_response(
        content=get_message("tickets.updated", name=ticket.name, id=ticket.id),
        embed=ticket_detail_embed(ticket),
    )


async def ticket_delete_command(interaction: discord.Interaction, ticket_id: str):
    await interaction.response.defer(ephemeral=True)
    if not await ask_confirmation(
        interaction, get_message("tickets.confirm_delete", id=ticket_id)
    ):
        return
    store = (await _context(interaction)).tickets
    success, message = await asyncio.to_thread(store.delete_ticket, ticket_id, True)
    if not success:
        await send_failure(interaction, message, store.error_status)
        return
    await record_action(interaction, "DELETE_TICKET", ticket_id)
    await interaction.edit_original_response(
        content=get_message("tickets.deleted", id=ticket_id), view=None
    )


def setup_commands(bot):
    """Register the ticket commands with the bot."""

    @bot.tree.command(name="tickets", description="List tickets on sale.")
    @app_commands.describe(event_id="Only tickets for this event")
    @require_linked_account()
    async def tickets(interaction: discord.Interaction, event_id: Optional[str] = None):
        await tickets_command(interaction, event_id)

    @bot.tree.command(name="ticket", description="Show one ticket.")
    @app_commands.describe(ticket_id="The ticket ID")
    @require_linked_account()
    async def ticket(interaction: discord.Interaction, ticket_id: str):
        await ticket_command(interaction, ticket_id)

    @bot.tree.command(name="ticket-create", description="Put a new ticket type on sale.")
    @app_commands.describe(
        event_id="The event the ticket admits to",
        name="Ticket name, e.g. Early Bird",
        category="Ticket category",
        price="Price in Rupiah",
        quota="How many can be sold",
    )
    @app_commands.choices(category=CATEGORY_CHOICES)
    @require_role(Role.ORGANIZER)
    async def ticket_create(
        interaction: discord.Interaction,
        event_id: str,
        name: str,
        category: str,
        price: float,
        quota: int,
    ):
        await ticket_create_command(interaction, event_id, name, category, price, quota)

    @bot.tree.command(name="ticket-update", description="Edit a ticket type.")
    @app_commands.describe(
        ticket_id="The ticket ID",
        name="New name",
        category="New category",
        price="New price in Rupiah",
        quota="New quota",
    )
    @app_commands.choices(category=CATEGORY_CHOICES)
    @require_role(Role.ORGANIZER)
    async def ticket_update(
        interaction: discord.Interaction,
        ticket_id: str,
        name: Optional[str] = None,
        category: Optional[str] = None,
        price: Optional[float] = None,
        quota: Optional[int] = None,
    ):
        await ticket_update_command(interaction, ticket_id, name, category, price, quota)

    @bot.tree.command(name="ticket-delete", description="Stop selling a ticket type.")
    @app_commands.describe(ticket_id="The ticket ID")
    @require_role(Role.ORGANIZER, Role.ADMIN)
    async def ticket_delete(interaction: discord.Interaction, ticket_id: str):
        await ticket_delete_command(interaction, ticket_id)

    for command in (tickets, ticket, ticket_create, ticket_update, ticket_delete):
        command.error(handle_command_error)
