"""Command handlers for browsing and managing events."""

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
from eventdesk.formatting import format_currency, format_datetime
from eventdesk.messaging import create_embed, get_message
from eventdesk.models import Event, Role

logger = logging.getLogger(__name__)

MAX_EVENTS_PER_EMBED = 15


def _event_status(event: Event) -> str:
    if event.cancelled:
        return get_message("events.status_cancelled")
    if not event.active:
        return get_message("events.status_inactive")
    return get_message("events.status_active")


def _event_line(event: Event) -> str:
    return get_message(
        "events.list_line",
        id=event.id,
        title=event.title,
        date=format_datetime(event.event_date),
        price=format_currency(event.price),
        status=_event_status(event),
    )


def event_list_embed(title_key: str, events: List[Event]) -> discord.Embed:
    shown = events[:MAX_EVENTS_PER_EMBED]
    embed = create_embed(
        title_key=title_key,
        description_key="events.list_empty" if not events else None,
        color_type="blue",
    )
    if shown:
        embed.description = "\n".join(_event_line(e) for e in shown)
    if len(events) > len(shown):
        embed.set_footer(
            text=get_message("events.list_truncated", shown=len(shown), total=len(events))
        )
    return embed


def event_detail_embed(event: Event) -> discord.Embed:
    fields = [
        (get_message("events.field_date"), format_datetime(event.event_date), True),
        (get_message("events.field_location"), event.location or "N/A", True),
        (get_message("events.field_price"), format_currency(event.price), True),
        (get_message("events.field_status"), _event_status(event), True),
    ]
    if event.organizer_name:
        fields.append((get_message("events.field_organizer"), event.organizer_name, True))
    if event.is_soft_cancelled():
        fields.append(
            (get_message("events.field_cancelled_at"), format_datetime(event.cancellation_time), True)
        )
    embed = create_embed(color_type="blue", fields=fields)
    embed.title = event.title
    embed.description = event.description or None
    return embed


async def events_command(interaction: discord.Interaction, upcoming_only: bool):
    await interaction.response.defer(ephemeral=True)
    context = await asyncio.to_thread(
        interaction.client.get_user_context, str(interaction.user.id)
    )
    store = context.events
    events, message = await asyncio.to_thread(store.fetch_events)
    if events is None:
        await send_failure(interaction, message, store.error_status)
        return
    if upcoming_only:
        events = store.active_events()
    await interaction.edit_original_response(embed=event_list_embed("events.list_title", events))


async def event_command(interaction: discord.Interaction, event_id: str):
    await interaction.response.defer(ephemeral=True)
    context = await asyncio.to_thread(
        interaction.client.get_user_context, str(interaction.user.id)
    )
    event, message = await asyncio.to_thread(context.events.fetch_event, event_id)
    if event is None:
        await send_failure(interaction, message, context.events.error_status)
        return
    await interaction.edit_original_response(embed=event_detail_embed(event))


async def my_events_command(interaction: discord.Interaction):
    await interaction.response.defer(ephemeral=True)
    context = await asyncio.to_thread(
        interaction.client.get_user_context, str(interaction.user.id)
    )
    events, message = await asyncio.to_thread(context.events.fetch_organizer_events)
    if events is None:
        await send_failure(interaction, message, context.events.error_status)
        return
    await interaction.edit_original_response(embed=event_list_embed("events.my_list_title", events))


async def event_create_command(
    interaction: discord.Interaction,
    title: str,
    description: str,
    event_date: str,
    location: str,
    price: float,
):
    await interaction.response.defer(ephemeral=True)
    context = await asyncio.to_thread(
        interaction.client.get_user_context, str(interaction.user.id)
    )
    form = {
        "title": title,
        "description": description,
        "eventDate": event_date,
        "location": location,
        "price": price,
    }
    event, message = await asyncio.to_thread(context.events.create_event, form)
    if event is None:
        await send_failure(interaction, message, context.events.error_status)
        return
    logger.info(f"[event-create] {interaction.user} created event {event.id} '{event.title}'")
    embed = event_detail_embed(event)
    embed.color = discord.Color.green()
    await interaction.edit_original_response(
        content=get_message("events.created", title=event.title, id=event.id), embed=embed
    )


async def event_update_command(
    interaction: discord.Interaction,
    event_id: str,
    title: Optional[str] = None,
    description: Optional[str] = None,
    event_date: Optional[str] = None,
    location: Optional[str] = None,
    price: Optional[float] = None,
):
    """Load the event, overlay the given fields and send the full form back."""
    await interaction.response.defer(ephemeral=True)
    context = await asyncio.to_thread(
        interaction.client.get_user_context, str(interaction.user.id)
    )
    store = context.events
    current, message = await asyncio.to_thread(store.fetch_event, event_id)
    if current is None:
        await send_failure(interaction, message, store.error_status)
        return

    form = {
        "title": title if title is not None else current.title,
        "description": description if description is not None else current.description,
        "eventDate": event_date if event_date is not None else current.event_date,
        "location": location if location is not None else current.location,
        "price": price if price is not None else current.price,
    }
    event, message = await asyncio.to_thread(store.update_event, event_id, form)
    if event is None:
        await send_failure(interaction, message, store.error_status)
        return
    logger.info(f"[event-update] {interaction.user} updated event {event_id}")
    await interaction.edit_original_response(
        content=get_message("events.updated", title=event.title, id=event.id),
        embed=event_detail_embed(event),
    )


async def event_cancel_command(interaction: discord.Interaction, event_id: str):
    await interaction.response.defer(ephemeral=True)
    if not await ask_confirmation(
        interaction, get_message("events.confirm_cancel", id=event_id)
    ):
        return
    context = await asyncio.to_thread(
        interaction.client.get_user_context, str(interaction.user.id)
    )
    success, message = await asyncio.to_thread(context.events.cancel_event, event_id)
    if not success:
        await send_failure(interaction, message, context.events.error_status)
        return
    await record_action(interaction, "CANCEL_EVENT", event_id, message)
    await interaction.edit_original_response(
        content=get_message("events.cancelled", id=event_id, message=message), view=None
    )


async def event_delete_command(interaction: discord.Interaction, event_id: str):
    await interaction.response.defer(ephemeral=True)
    if not await ask_confirmation(
        interaction, get_message("events.confirm_delete", id=event_id)
    ):
        return
    context = await asyncio.to_thread(
        interaction.client.get_user_context, str(interaction.user.id)
    )
    success, message = await asyncio.to_thread(
        context.events.delete_event, event_id, True
    )
    if not success:
        await send_failure(interaction, message, context.events.error_status)
        return
    await record_action(interaction, "DELETE_EVENT", event_id, None)
    await interaction.edit_original_response(
        content=get_message("events.deleted", id=event_id), view=None
    )


def setup_commands(bot):
    """Register the event commands with the bot."""

    @bot.tree.command(name="events", description="List events.")
    @app_commands.describe(upcoming_only="Only show active events that have not happened yet")
    @require_linked_account()
    async def events(interaction: discord.Interaction, upcoming_only: bool = True):
        await events_command(interaction, upcoming_only)

    @bot.tree.command(name="event", description="Show one event.")
    @app_commands.describe(event_id="The event ID")
    @require_linked_account()
    async def event(interaction: discord.Interaction, event_id: str):
        await event_command(interaction, event_id)

    @bot.tree.command(name="my-events", description="List the events you organize.")
    @require_role(Role.ORGANIZER)
    async def my_events(interaction: discord.Interaction):
        await my_events_command(interaction)

    @bot.tree.command(name="event-create", description="Create a new event.")
    @app_commands.describe(
        title="Event title",
        description="What the event is about",
        event_date="Start time, e.g. 2026-12-31T19:00",
        location="Where it takes place",
        price="Ticket price in Rupiah",
    )
    @require_role(Role.ORGANIZER)
    async def event_create(
        interaction: discord.Interaction,
        title: str,
        description: str,
        event_date: str,
        location: str,
        price: float,
    ):
        await event_create_command(interaction, title, description, event_date, location, price)

    @bot.tree.command(name="event-update", description="Edit one of your events.")
    @app_commands.describe(
        event_id="The event ID",
        title="New title",
        description="New description",
        event_date="New start time, e.g. 2026-12-31T19:00",
        location="New location",
        price="New ticket price in Rupiah",
    )
    @require_role(Role.ORGANIZER)
    async def event_update(
        interaction: discord.Interaction,
        event_id: str,
        title: Optional[str] = None,
        description: Optional[str] = None,
        event_date: Optional[str] = None,
        location: Optional[str] = None,
        price: Optional[float] = None,
    ):
        await event_update_command(
            interaction, event_id, title, description, event_date, location, price
        )

    @bot.tree.command(name="event-cancel", description="Cancel an event. It stays visible as cancelled.")
    @app_commands.describe(event_id="The event ID")
    @require_role(Role.ORGANIZER)
    async def event_cancel(interaction: discord.Interaction, event_id: str):
        await event_cancel_command(interaction, event_id)

    @bot.tree.command(name="event-delete", description="Permanently delete an event.")
    @app_commands.describe(event_id="The event ID")
    @require_role(Role.ORGANIZER, Role.ADMIN)
    async def event_delete(interaction: discord.Interaction, event_id: str):
        await event_delete_command(interaction, event_id)

    for command in (
        events,
        event,
        my_events,
        event_create,
        event_update,
        event_cancel,
        event_delete,
    ):
        command.error(handle_command_error)
