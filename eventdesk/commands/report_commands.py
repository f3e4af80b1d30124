"""Command handlers for the report status/comment workflow."""

import asyncio
import logging
from typing import List

import discord
from discord import app_commands

from eventdesk.commands.auth import (
    handle_command_error,
    record_action,
    require_linked_account,
    require_role,
    send_failure,
)
from eventdesk.commands.views import CommentModal, ask_confirmation
from eventdesk.formatting import format_datetime, report_category_label, report_status_label
from eventdesk.messaging import create_embed, get_message
from eventdesk.models import Report, ReportCategory, ReportStatus, Role

logger = logging.getLogger(__name__)

MAX_REPORTS_PER_EMBED = 15
# Discord limits an embed to 25 fields; leave room for the summary fields
MAX_COMMENTS_SHOWN = 20

STATUS_CHOICES = [
    app_commands.Choice(name=report_status_label(s.value), value=s.value)
    for s in ReportStatus
]

CATEGORY_CHOICES = [
    app_commands.Choice(name=report_category_label(c.value), value=c.value)
    for c in ReportCategory
]

STATUS_COLORS = {
    ReportStatus.PENDING.value: "warning",
    ReportStatus.ON_PROGRESS.value: "blue",
    ReportStatus.RESOLVED.value: "success",
}


def report_list_embed(reports: List[Report], status: str) -> discord.Embed:
    shown = reports[:MAX_REPORTS_PER_EMBED]
    embed = create_embed(
        title_key="reports.list_title",
        title_kwargs={"status": report_status_label(status) if status else "All"},
        description_key="reports.list_empty" if not reports else None,
        color_type="blue",
    )
    if shown:
        embed.description = "\n".join(
            get_message(
                "reports.list_line",
                id=r.id,
                category=report_category_label(r.category),
                status=report_status_label(r.status),
                date=format_datetime(r.created_at),
            )
            for r in shown
        )
    if len(reports) > len(shown):
        embed.set_footer(
            text=get_message("reports.list_truncated", shown=len(shown), total=len(reports))
        )
    return embed


def report_detail_embed(report: Report) -> discord.Embed:
    fields = [
        (get_message("reports.field_category"), report_category_label(report.category), True),
        (get_message("reports.field_status"), report_status_label(report.status), True),
        (get_message("reports.field_created"), format_datetime(report.created_at), True),
    ]
    if report.user_email:
        fields.append((get_message("reports.field_reporter"), report.user_email, True))

    comments = report.comments[-MAX_COMMENTS_SHOWN:]
    for comment in comments:
        fields.append(
            (
                get_message(
                    "reports.comment_heading",
                    role=comment.responder_role,
                    author=comment.responder_email or comment.responder_role,
                    date=format_datetime(comment.created_at),
                ),
                comment.message[:1024] or "-",
                False,
            )
        )

    embed = create_embed(
        title_key="reports.detail_title",
        title_kwargs={"id": report.id},
        color_type=STATUS_COLORS.get(report.status, "info"),
        fields=fields,
    )
    embed.description = report.description or None
    if not report.comments:
        embed.add_field(
            name=get_message("reports.field_comments"),
            value=get_message("reports.no_comments"),
            inline=False,
        )
    elif len(report.comments) > len(comments):
        embed.set_footer(
            text=get_message(
                "reports.comments_truncated", shown=len(comments), total=len(report.comments)
            )
        )
    return embed


async def _context(interaction: discord.Interaction):
    return await asyncio.to_thread(
        interaction.client.get_user_context, str(interaction.user.id)
    )


async def reports_command(interaction: discord.Interaction, status: str):
    await interaction.response.defer(ephemeral=True)
    store = (await _context(interaction)).reports
    reports, message = await asyncio.to_thread(store.fetch_reports, status or None)
    if reports is None:
        await send_failure(interaction, message, store.error_status)
        return
    await interaction.edit_original_response(embed=report_list_embed(reports, status))


async def report_command(interaction: discord.Interaction, report_id: str):
    await interaction.response.defer(ephemeral=True)
    store = (await _context(interaction)).reports
    report, message = await asyncio.to_thread(store.fetch_report, report_id)
    if report is None:
        await send_failure(interaction, message, store.error_status)
        return
    await interaction.edit_original_response(embed=report_detail_embed(report))


async def report_create_command(
    interaction: discord.Interaction, category: str, description: str
):
    await interaction.response.defer(ephemeral=True)
    store = (await _context(interaction)).reports
    report, message = await asyncio.to_thread(store.create_report, category, description)
    if report is None:
        await send_failure(interaction, message, store.error_status)
        return
    logger.info(f"[report-create] {interaction.user} filed a {category} report")
    await interaction.edit_original_response(
        embed=create_embed(
            title_key="reports.created_title",
            description_key="reports.created_description",
            description_kwargs={
                "id": report.id or "?",
                "category": report_category_label(category),
            },
            color_type="success",
        )
    )


async def submit_comment(interaction: discord.Interaction, report_id: str, message: str):
    """Modal submit callback: post the comment and show the reloaded thread."""
    await interaction.response.defer(ephemeral=True, thinking=True)
    store = (await _context(interaction)).reports
    success, result_message = await asyncio.to_thread(store.add_comment, report_id, message)
    if not success:
        if store.comment_error:
            await interaction.edit_original_response(content=store.comment_error)
        else:
            await send_failure(interaction, result_message, store.error_status)
        return

    report = store.selected_report
    await interaction.edit_original_response(
        content=result_message,
        embed=report_detail_embed(report) if report and report.id == str(report_id) else None,
    )


async def report_status_command(
    interaction: discord.Interaction, report_id: str, status: str
):
    await interaction.response.defer(ephemeral=True)
    store = (await _context(interaction)).reports
    success, message = await asyncio.to_thread(store.update_status, report_id, status)
    if not success:
        await send_failure(interaction, message, store.error_status)
        return
    report = store.selected_report
    await interaction.edit_original_response(
        content=message,
        embed=report_detail_embed(report) if report and report.id == str(report_id) else None,
    )


async def report_delete_command(interaction: discord.Interaction, report_id: str):
    await interaction.response.defer(ephemeral=True)
    if not await ask_confirmation(
        interaction, get_message("reports.confirm_delete", id=report_id)
    ):
        return
    store = (await _context(interaction)).reports
    success, message = await asyncio.to_thread(store.delete_report, report_id, True)
    if not success:
        await send_failure(interaction, message, store.error_status)
        return
    await record_action(interaction, "DELETE_REPORT", report_id)
    await interaction.edit_original_response(
        content=get_message("reports.deleted", id=report_id), view=None
    )


def setup_commands(bot):
    """Register the report commands with the bot."""

    @bot.tree.command(name="reports", description="List reports visible to you.")
    @app_commands.describe(status="Only reports with this status")
    @app_commands.choices(status=STATUS_CHOICES)
    @require_linked_account()
    async def reports(interaction: discord.Interaction, status: str = ""):
        await reports_command(interaction, status)

    @bot.tree.command(name="report", description="Show a report and its comments.")
    @app_commands.describe(report_id="The report ID")
    @require_linked_account()
    async def report(interaction: discord.Interaction, report_id: str):
        await report_command(interaction, report_id)

    @bot.tree.command(name="report-create", description="File a new report.")
    @app_commands.describe(category="What the problem is about", description="Describe the problem")
    @app_commands.choices(category=CATEGORY_CHOICES)
    @require_role(Role.ATTENDEE)
    async def report_create(interaction: discord.Interaction, category: str, description: str):
        await report_create_command(interaction, category, description)

    @bot.tree.command(name="report-comment", description="Reply to a report.")
    @app_commands.describe(report_id="The report ID")
    @require_linked_account()
    async def report_comment(interaction: discord.Interaction, report_id: str):
        await interaction.response.send_modal(CommentModal(report_id, submit_comment))

    @bot.tree.command(name="report-status", description="Change a report's status.")
    @app_commands.describe(report_id="The report ID", status="New status")
    @app_commands.choices(status=STATUS_CHOICES)
    @require_role(Role.ADMIN, Role.ORGANIZER)
    async def report_status(interaction: discord.Interaction, report_id: str, status: str):
        await report_status_command(interaction, report_id, status)

    @bot.tree.command(name="report-delete", description="Permanently delete a report.")
    @app_commands.describe(report_id="The report ID")
    @require_role(Role.ADMIN)
    async def report_delete(interaction: discord.Interaction, report_id: str):
        await report_delete_command(interaction, report_id)

    for command in (
        reports,
        report,
        report_create,
        report_comment,
        report_status,
        report_delete,
    ):
        command.error(handle_command_error)
