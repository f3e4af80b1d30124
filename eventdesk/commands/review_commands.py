"""Command handlers for event reviews and their moderation."""

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
from eventdesk.formatting import format_datetime
from eventdesk.messaging import create_embed, get_message
from eventdesk.models import Review, ReviewPage, ReviewSort, Role

logger = logging.getLogger(__name__)

PAGE_SIZE = 5
MAX_CONTENT_LENGTH = 300

SORT_CHOICES = [
    app_commands.Choice(name=s.value.title(), value=s.value) for s in ReviewSort
]

RATING_CHOICES = [
    app_commands.Choice(name="★" * n, value=n) for n in range(5, 0, -1)
]


def _stars(rating: int) -> str:
    rating = min(max(rating, 0), 5)
    return "★" * rating + "☆" * (5 - rating)


def _review_line(review: Review) -> str:
    content = review.content
    if len(content) > MAX_CONTENT_LENGTH:
        content = content[: MAX_CONTENT_LENGTH - 3] + "..."
    line = get_message(
        "reviews.list_line",
        id=review.id,
        stars=_stars(review.rating),
        author=review.user_name or "Anonymous",
        date=format_datetime(review.created_at),
        content=content,
    )
    if review.hidden:
        line += get_message("reviews.hidden_marker")
    return line


def review_list_embed(
    title_key: str,
    reviews: List[Review],
    title_kwargs: Optional[dict] = None,
    page: Optional[ReviewPage] = None,
    average: Optional[str] = None,
) -> discord.Embed:
    embed = create_embed(
        title_key=title_key,
        title_kwargs=title_kwargs or {},
        description_key="reviews.list_empty" if not reviews else None,
        color_type="blue",
    )
    parts = []
    if average is not None:
        parts.append(get_message("reviews.average", rating=average))
    if reviews:
        parts.extend(_review_line(r) for r in reviews)
        embed.description = "\n\n".join(parts)
    elif parts:
        embed.description = "\n\n".join(parts + [embed.description or ""])
    if page is not None and page.total_pages:
        embed.set_footer(
            text=get_message(
                "reviews.page_footer",
                page=page.page + 1,
                pages=page.total_pages,
                total=page.total_items,
            )
        )
    return embed


def review_detail_embed(review: Review, show_moderation: bool, show_respond_hint: bool) -> discord.Embed:
    fields = [
        (get_message("reviews.field_rating"), _stars(review.rating), True),
        (get_message("reviews.field_event"), review.event_id or "N/A", True),
        (get_message("reviews.field_author"), review.user_name or "Anonymous", True),
    ]
    if review.organizer_response is not None:
        fields.append(
            (get_message("reviews.field_response"), review.organizer_response.content, False)
        )
    if show_moderation:
        fields.append(
            (
                get_message("reviews.field_moderation"),
                get_message(
                    "reviews.moderation_value",
                    hidden="Yes" if review.hidden else "No",
                    reported="Yes" if review.reported else "No",
                ),
                False,
            )
        )
    embed = create_embed(color_type="warning" if review.hidden else "blue", fields=fields)
    embed.title = get_message("reviews.detail_title", id=review.id)
    embed.description = review.content or None
    if show_respond_hint and review.organizer_response is None:
        embed.set_footer(text=get_message("reviews.respond_hint", id=review.id))
    return embed


async def _context(interaction: discord.Interaction):
    return await asyncio.to_thread(
        interaction.client.get_user_context, str(interaction.user.id)
    )


async def reviews_command(
    interaction: discord.Interaction,
    event_id: str,
    page: int = 1,
    sort: str = ReviewSort.NEWEST.value,
    search: Optional[str] = None,
):
    """Show one page of an event's reviews. Pages are 1-based here and 0-based on the backend."""
    await interaction.response.defer(ephemeral=True)
    store = (await _context(interaction)).reviews
    if search and search.strip():
        result, message = await asyncio.to_thread(
            store.search_reviews, event_id, search, page - 1, PAGE_SIZE
        )
        title_key = "reviews.search_title"
    else:
        result, message = await asyncio.to_thread(
            store.fetch_event_reviews, event_id, page - 1, PAGE_SIZE, sort
        )
        title_key = "reviews.list_title"
    if result is None:
        await send_failure(interaction, message, store.error_status)
        return

    average, _ = await asyncio.to_thread(store.fetch_average_rating, event_id)
    await interaction.edit_original_response(
        embed=review_list_embed(
            title_key,
            result.reviews,
            title_kwargs={"event_id": event_id, "keyword": (search or "").strip()},
            page=result,
            average=f"{average:.1f}" if average is not None else None,
        )
    )


async def review_command(interaction: discord.Interaction, review_id: str):
    await interaction.response.defer(ephemeral=True)
    context = await _context(interaction)
    review, message = await asyncio.to_thread(context.reviews.fetch_review, review_id)
    if review is None:
        await send_failure(interaction, message, context.reviews.error_status)
        return
    await interaction.edit_original_response(
        embed=review_detail_embed(
            review,
            show_moderation=context.session.is_admin(),
            show_respond_hint=context.session.is_organizer(),
        )
    )


async def my_reviews_command(interaction: discord.Interaction):
    await interaction.response.defer(ephemeral=True)
    store = (await _context(interaction)).reviews
    reviews, message = await asyncio.to_thread(store.fetch_my_reviews)
    if reviews is None:
        await send_failure(interaction, message, store.error_status)
        return
    await interaction.edit_original_response(
        embed=review_list_embed("reviews.my_list_title", reviews)
    )


async def review_create_command(
    interaction: discord.Interaction, event_id: str, rating: int, content: str
):
    await interaction.response.defer(ephemeral=True)
    store = (await _context(interaction)).reviews
    review, message = await asyncio.to_thread(store.create_review, event_id, rating, content)
    if review is None:
        await send_failure(interaction, message, store.error_status)
        return
    logger.info(f"[review-create] {interaction.user} reviewed event {event_id} ({rating} stars)")
    await interaction.edit_original_response(
        content=get_message("reviews.created", event_id=event_id, id=review.id or "?")
    )


async def review_update_command(
    interaction: discord.Interaction, review_id: str, rating: int, content: str
):
    await interaction.response.defer(ephemeral=True)
    store = (await _context(interaction)).reviews
    review, message = await asyncio.to_thread(store.update_review, review_id, rating, content)
    if review is None:
        await send_failure(interaction, message, store.error_status)
        return
    await interaction.edit_original_response(
        content=get_message("reviews.updated", id=review_id),
        embed=review_detail_embed(review, show_moderation=False, show_respond_hint=False),
    )


async def review_delete_command(interaction: discord.Interaction, review_id: str):
    await interaction.response.defer(ephemeral=True)
    if not await ask_confirmation(
        interaction, get_message("reviews.confirm_delete", id=review_id)
    ):
        return
    store = (await _context(interaction)).reviews
    success, message = await asyncio.to_thread(store.delete_review, review_id, True)
    if not success:
        await send_failure(interaction, message, store.error_status)
        return
    await interaction.edit_original_response(
        content=get_message("reviews.deleted", id=review_id), view=None
    )


async def review_respond_command(interaction: discord.Interaction, review_id: str, content: str):
    await interaction.response.defer(ephemeral=True)
    store = (await _context(interaction)).reviews
    success, message = await asyncio.to_thread(store.respond, review_id, content)
    if not success:
        await send_failure(interaction, message, store.error_status)
        return
    await interaction.edit_original_response(content=get_message("reviews.responded", id=review_id))


async def review_report_command(interaction: discord.Interaction, review_id: str, reason: str):
    await interaction.response.defer(ephemeral=True)
    store = (await _context(interaction)).reviews
    success, message = await asyncio.to_thread(store.report, review_id, reason)
    if not success:
        await send_failure(interaction, message, store.error_status)
        return
    logger.info(f"[review-report] {interaction.user} reported review {review_id}")
    await interaction.edit_original_response(content=get_message("reviews.reported", id=review_id))


async def review_visibility_command(interaction: discord.Interaction, review_id: str, hidden: bool):
    await interaction.response.defer(ephemeral=True)
    store = (await _context(interaction)).reviews
    operation = store.hide if hidden else store.restore
    success, message = await asyncio.to_thread(operation, review_id)
    if not success:
        await send_failure(interaction, message, store.error_status)
        return
    await record_action(interaction, "HIDE_REVIEW" if hidden else "RESTORE_REVIEW", review_id)
    key = "reviews.hidden" if hidden else "reviews.restored"
    await interaction.edit_original_response(content=get_message(key, id=review_id))


def setup_commands(bot):
    """Register the review commands with the bot."""

    @bot.tree.command(name="reviews", description="Read the reviews for an event.")
    @app_commands.describe(
        event_id="The event ID",
        page="Page number (starts at 1)",
        sort="Sort order",
        search="Only reviews containing this text",
    )
    @app_commands.choices(sort=SORT_CHOICES)
    @require_linked_account()
    async def reviews(
        interaction: discord.Interaction,
        event_id: str,
        page: app_commands.Range[int, 1] = 1,
        sort: str = ReviewSort.NEWEST.value,
        search: Optional[str] = None,
    ):
        await reviews_command(interaction, event_id, page, sort, search)

    @bot.tree.command(name="review", description="Show one review.")
    @app_commands.describe(review_id="The review ID")
    @require_linked_account()
    async def review(interaction: discord.Interaction, review_id: str):
        await review_command(interaction, review_id)

    @bot.tree.command(name="my-reviews", description="List the reviews you have written.")
    @require_role(Role.ATTENDEE)
    async def my_reviews(interaction: discord.Interaction):
        await my_reviews_command(interaction)

    @bot.tree.command(name="review-create", description="Review an event you bought a ticket for.")
    @app_commands.describe(event_id="The event ID", rating="Your rating", content="Your review")
    @app_commands.choices(rating=RATING_CHOICES)
    @require_role(Role.ATTENDEE)
    async def review_create(
        interaction: discord.Interaction, event_id: str, rating: int, content: str
    ):
        await review_create_command(interaction, event_id, rating, content)

    @bot.tree.command(name="review-update", description="Edit one of your reviews.")
    @app_commands.describe(review_id="The review ID", rating="Your rating", content="Your review")
    @app_commands.choices(rating=RATING_CHOICES)
    @require_role(Role.ATTENDEE)
    async def review_update(
        interaction: discord.Interaction, review_id: str, rating: int, content: str
    ):
        await review_update_command(interaction, review_id, rating, content)

    @bot.tree.command(name="review-delete", description="Delete one of your reviews.")
    @app_commands.describe(review_id="The review ID")
    @require_role(Role.ATTENDEE)
    async def review_delete(interaction: discord.Interaction, review_id: str):
        await review_delete_command(interaction, review_id)

    @bot.tree.command(name="review-respond", description="Reply publicly to a review of your event.")
    @app_commands.describe(review_id="The review ID", content="Your response")
    @require_role(Role.ORGANIZER)
    async def review_respond(interaction: discord.Interaction, review_id: str, content: str):
        await review_respond_command(interaction, review_id, content)

    @bot.tree.command(name="review-report", description="Report a review to the moderators.")
    @app_commands.describe(review_id="The review ID", reason="What is wrong with it")
    @require_linked_account()
    async def review_report(interaction: discord.Interaction, review_id: str, reason: str):
        await review_report_command(interaction, review_id, reason)

    @bot.tree.command(name="review-hide", description="Hide a review from attendees.")
    @app_commands.describe(review_id="The review ID")
    @require_role(Role.ADMIN)
    async def review_hide(interaction: discord.Interaction, review_id: str):
        await review_visibility_command(interaction, review_id, True)

    @bot.tree.command(name="review-restore", description="Make a hidden review visible again.")
    @app_commands.describe(review_id="The review ID")
    @require_role(Role.ADMIN)
    async def review_restore(interaction: discord.Interaction, review_id: str):
        await review_visibility_command(interaction, review_id, False)

    for command in (
        reviews,
        review,
        my_reviews,
        review_create,
        review_update,
        review_delete,
        review_respond,
        review_report,
        review_hide,
        review_restore,
    ):
        command.error(handle_command_error)
