"""Command handlers for balance, top-ups, ticket purchases and transactions."""

import asyncio
import logging
from typing import List

import discord
from discord import app_commands

from eventdesk.commands.auth import (
    handle_command_error,
    record_action,
    require_role,
    send_failure,
)
from eventdesk.commands.views import ask_confirmation
from eventdesk.config import get_config_value
from eventdesk.formatting import (
    format_currency,
    format_datetime,
    transaction_status_label,
    transaction_type_label,
)
from eventdesk.messaging import create_embed, get_message
from eventdesk.models import Role, TopUpType, Transaction, TransactionStatus, TransactionType
from eventdesk.transaction_filters import (
    ALL,
    SORT_AMOUNT_HIGH,
    SORT_AMOUNT_LOW,
    SORT_TIMESTAMP_ASC,
    SORT_TIMESTAMP_DESC,
    SORT_TYPE,
    Page,
    TransactionListView,
)

logger = logging.getLogger(__name__)

TOP_UP_TYPES = [
    app_commands.Choice(name="Preset amount", value=TopUpType.FIXED.value),
    app_commands.Choice(name="Custom amount", value=TopUpType.CUSTOM.value),
]

STATUS_FILTERS = [app_commands.Choice(name="All", value=ALL)] + [
    app_commands.Choice(name=transaction_status_label(s.value), value=s.value)
    for s in TransactionStatus
]

TYPE_FILTERS = [app_commands.Choice(name="All", value=ALL)] + [
    app_commands.Choice(name=transaction_type_label(t.value), value=t.value)
    for t in TransactionType
]

SORT_CHOICES = [
    app_commands.Choice(name="Newest first", value=SORT_TIMESTAMP_DESC),
    app_commands.Choice(name="Oldest first", value=SORT_TIMESTAMP_ASC),
    app_commands.Choice(name="Highest amount", value=SORT_AMOUNT_HIGH),
    app_commands.Choice(name="Lowest amount", value=SORT_AMOUNT_LOW),
    app_commands.Choice(name="Type", value=SORT_TYPE),
]


def _transaction_line(transaction: Transaction, show_user: bool = False) -> str:
    line = get_message(
        "transactions.list_line",
        id=transaction.id,
        type=transaction_type_label(transaction.type),
        amount=format_currency(transaction.amount),
        status=transaction_status_label(transaction.status),
        date=format_datetime(transaction.sort_time),
    )
    if show_user and transaction.username:
        line += get_message("transactions.list_line_user", username=transaction.username)
    return line


def transaction_page_embed(title_key: str, page: Page, show_user: bool = False) -> discord.Embed:
    embed = create_embed(
        title_key=title_key,
        description_key="transactions.list_empty" if not page.items else None,
        color_type="blue",
    )
    if page.items:
        embed.description = "\n".join(_transaction_line(t, show_user) for t in page.items)
    embed.set_footer(
        text=get_message(
            "transactions.page_footer",
            start=page.start_index,
            end=page.end_index,
            total=page.total_items,
            page=page.page,
            pages=page.total_pages,
        )
    )
    return embed


def transaction_list_embed(title_key: str, transactions: List[Transaction]) -> discord.Embed:
    view = TransactionListView(page_size=get_config_value("transactions.page_size", 10))
    view.set_transactions(transactions)
    return transaction_page_embed(title_key, view.current())


async def _context(interaction: discord.Interaction):
    return await asyncio.to_thread(
        interaction.client.get_user_context, str(interaction.user.id)
    )


async def balance_command(interaction: discord.Interaction):
    await interaction.response.defer(ephemeral=True)
    store = (await _context(interaction)).top_up
    balance, message = await asyncio.to_thread(store.fetch_balance)
    if balance is None:
        await send_failure(interaction, message, store.error_status)
        return
    await interaction.edit_original_response(
        embed=create_embed(
            title_key="balance.title",
            description_key="balance.description",
            description_kwargs={"balance": format_currency(balance)},
            color_type="blue",
        )
    )


async def topup_command(interaction: discord.Interaction, amount: int, top_up_type: str):
    await interaction.response.defer(ephemeral=True)
    store = (await _context(interaction)).top_up
    result, message = await asyncio.to_thread(store.process_top_up, amount, top_up_type)
    if result is None:
        await send_failure(interaction, message, store.error_status)
        return
    logger.info(f"[topup] {interaction.user} topped up {amount} ({top_up_type})")
    await interaction.edit_original_response(
        embed=create_embed(
            title_key="balance.topup_success_title",
            description_key="balance.topup_success_description",
            description_kwargs={
                "amount": format_currency(amount),
                "balance": format_currency(store.balance),
            },
            color_type="success",
        )
    )


async def topup_history_command(interaction: discord.Interaction):
    await interaction.response.defer(ephemeral=True)
    store = (await _context(interaction)).top_up
    history, message = await asyncio.to_thread(store.fetch_history)
    if history is None:
        await send_failure(interaction, message, store.error_status)
        return
    await interaction.edit_original_response(
        embed=transaction_list_embed("balance.history_title", history)
    )


async def buy_ticket_command(interaction: discord.Interaction, ticket_id: str):
    await interaction.response.defer(ephemeral=True)
    context = await _context(interaction)
    result, message = await asyncio.to_thread(context.transactions.purchase_ticket, ticket_id)
    if result is None:
        await send_failure(interaction, message, context.transactions.error_status)
        return

    balance, _ = await asyncio.to_thread(context.top_up.fetch_balance)
    logger.info(f"[buy-ticket] {interaction.user} bought ticket {ticket_id}")
    await interaction.edit_original_response(
        embed=create_embed(
            title_key="transactions.purchase_success_title",
            description_key="transactions.purchase_success_description",
            description_kwargs={
                "ticket_id": ticket_id,
                "balance": format_currency(balance if balance is not None else context.top_up.balance),
            },
            color_type="success",
        )
    )


async def transactions_command(
    interaction: discord.Interaction, page: int, transaction_type: str = ALL, status: str = ALL
):
    await interaction.response.defer(ephemeral=True)
    store = (await _context(interaction)).transactions
    transactions, message = await asyncio.to_thread(store.fetch_my_transactions)
    if transactions is None:
        await send_failure(interaction, message, store.error_status)
        return
    if transaction_type != ALL:
        transactions = store.by_type(transaction_type)
    if status != ALL:
        transactions = store.by_status(status, transactions)
    view = TransactionListView(page_size=get_config_value("transactions.page_size", 10))
    view.set_transactions(transactions)
    await interaction.edit_original_response(
        embed=transaction_page_embed("transactions.my_list_title", view.go_to_page(page))
    )


def transaction_detail_embed(transaction: Transaction) -> discord.Embed:
    fields = [
        (get_message("transactions.field_type"), transaction_type_label(transaction.type), True),
        (get_message("transactions.field_amount"), format_currency(transaction.amount), True),
        (get_message("transactions.field_status"), transaction_status_label(transaction.status), True),
        (get_message("transactions.field_date"), format_datetime(transaction.sort_time), True),
    ]
    if transaction.event_id:
        fields.append((get_message("transactions.field_event"), transaction.event_id, True))
    if transaction.username:
        fields.append((get_message("transactions.field_user"), transaction.username, True))
    color = {
        TransactionStatus.SUCCESS.value: "success",
        TransactionStatus.FAILED.value: "error",
    }.get(transaction.status, "warning")
    embed = create_embed(
        title_key="transactions.detail_title",
        title_kwargs={"id": transaction.id},
        color_type=color,
        fields=fields,
    )
    embed.description = transaction.description or None
    return embed


async def transaction_command(interaction: discord.Interaction, transaction_id: str):
    await interaction.response.defer(ephemeral=True)
    store = (await _context(interaction)).transactions
    transaction, message = await asyncio.to_thread(store.get_transaction, transaction_id)
    if transaction is None:
        await send_failure(interaction, message, store.error_status)
        return
    await interaction.edit_original_response(embed=transaction_detail_embed(transaction))


async def admin_transactions_command(
    interaction: discord.Interaction,
    status: str,
    transaction_type: str,
    search: str,
    sort: str,
    page: int,
):
    await interaction.response.defer(ephemeral=True)
    context = await _context(interaction)
    store = context.admin_transactions
    transactions, message = await asyncio.to_thread(store.fetch_all_transactions)
    if transactions is None:
        await send_failure(interaction, message, store.error_status)
        return

    view = context.transaction_view
    view.set_transactions(transactions)
    view.update_criteria(status=status, type=transaction_type, search=search, sort=sort)
    result = view.go_to_page(page)

    embed = transaction_page_embed("transactions.admin_list_title", result, show_user=True)
    counts = store.status_counts()
    embed.add_field(
        name=get_message("transactions.field_summary"),
        value=get_message(
            "transactions.summary_value",
            success=counts.get(TransactionStatus.SUCCESS.value, 0),
            pending=counts.get(TransactionStatus.PENDING.value, 0),
            failed=counts.get(TransactionStatus.FAILED.value, 0),
        ),
        inline=False,
    )
    await interaction.edit_original_response(embed=embed)


async def transaction_delete_command(interaction: discord.Interaction, transaction_id: str):
    await interaction.response.defer(ephemeral=True)
    if not await ask_confirmation(
        interaction, get_message("transactions.confirm_delete", id=transaction_id)
    ):
        return
    store = (await _context(interaction)).admin_transactions
    success, message = await asyncio.to_thread(store.delete_transaction, transaction_id, True)
    if not success:
        await send_failure(interaction, message, store.error_status)
        return
    await record_action(interaction, "DELETE_TRANSACTION", transaction_id)
    await interaction.edit_original_response(
        content=get_message("transactions.deleted", id=transaction_id), view=None
    )


async def transaction_mark_failed_command(interaction: discord.Interaction, transaction_id: str):
    await interaction.response.defer(ephemeral=True)
    if not await ask_confirmation(
        interaction, get_message("transactions.confirm_mark_failed", id=transaction_id)
    ):
        return
    store = (await _context(interaction)).admin_transactions
    success, message = await asyncio.to_thread(store.mark_failed, transaction_id, True)
    if not success:
        await send_failure(interaction, message, store.error_status)
        return
    await record_action(interaction, "MARK_TRANSACTION_FAILED", transaction_id)
    await interaction.edit_original_response(
        content=get_message("transactions.marked_failed", id=transaction_id), view=None
    )


def setup_commands(bot):
    """Register the balance and transaction commands with the bot."""

    @bot.tree.command(name="balance", description="Show your current balance.")
    @require_role(Role.ATTENDEE)
    async def balance(interaction: discord.Interaction):
        await balance_command(interaction)

    @bot.tree.command(name="topup", description="Add funds to your balance.")
    @app_commands.describe(
        amount="Amount in Rupiah", top_up_type="Preset amounts or a custom amount"
    )
    @app_commands.choices(top_up_type=TOP_UP_TYPES)
    @require_role(Role.ATTENDEE)
    async def topup(
        interaction: discord.Interaction,
        amount: int,
        top_up_type: app_commands.Choice[str],
    ):
        await topup_command(interaction, amount, top_up_type.value)

    @topup.autocomplete("amount")
    async def topup_amount_autocomplete(
        interaction: discord.Interaction, current: str
    ) -> List[app_commands.Choice[int]]:
        amounts = get_config_value("topup.fixed_amounts", [])
        return [
            app_commands.Choice(name=format_currency(a), value=a)
            for a in amounts
            if current in str(a)
        ][:25]

    @bot.tree.command(name="topup-history", description="Show your past top-ups.")
    @require_role(Role.ATTENDEE)
    async def topup_history(interaction: discord.Interaction):
        await topup_history_command(interaction)

    @bot.tree.command(name="buy-ticket", description="Buy a ticket with your balance.")
    @app_commands.describe(ticket_id="The ticket ID")
    @require_role(Role.ATTENDEE)
    async def buy_ticket(interaction: discord.Interaction, ticket_id: str):
        await buy_ticket_command(interaction, ticket_id)

    @buy_ticket.autocomplete("ticket_id")
    async def buy_ticket_autocomplete(
        interaction: discord.Interaction, current: str
    ) -> List[app_commands.Choice[str]]:
        context = await _context(interaction)
        if context is None:
            return []
        tickets = context.tickets.tickets
        if not tickets:
            tickets, _ = await asyncio.to_thread(context.tickets.fetch_tickets)
        needle = current.lower()
        return [
            app_commands.Choice(
                name=f"{t.name} ({format_currency(t.price)}) #{t.id}"[:100], value=t.id
            )
            for t in tickets or []
            if t.is_available() and (needle in t.name.lower() or needle in t.id)
        ][:25]

    @bot.tree.command(name="transactions", description="Show your transactions.")
    @app_commands.describe(
        page="Page number", transaction_type="Only this type", status="Only this status"
    )
    @app_commands.choices(transaction_type=TYPE_FILTERS, status=STATUS_FILTERS)
    @require_role(Role.ATTENDEE)
    async def transactions(
        interaction: discord.Interaction,
        page: int = 1,
        transaction_type: str = ALL,
        status: str = ALL,
    ):
        await transactions_command(interaction, page, transaction_type, status)

    @bot.tree.command(name="transaction", description="Show one transaction.")
    @app_commands.describe(transaction_id="The transaction ID")
    @require_role(Role.ATTENDEE, Role.ADMIN)
    async def transaction(interaction: discord.Interaction, transaction_id: str):
        await transaction_command(interaction, transaction_id)

    @bot.tree.command(name="admin-transactions", description="Browse all transactions.")
    @app_commands.describe(
        status="Only this status",
        transaction_type="Only this type",
        search="Match ID, username or description",
        sort="Sort order",
        page="Page number",
    )
    @app_commands.choices(status=STATUS_FILTERS, transaction_type=TYPE_FILTERS, sort=SORT_CHOICES)
    @require_role(Role.ADMIN)
    async def admin_transactions(
        interaction: discord.Interaction,
        status: str = ALL,
        transaction_type: str = ALL,
        search: str = "",
        sort: str = SORT_TIMESTAMP_DESC,
        page: int = 1,
    ):
        await admin_transactions_command(interaction, status, transaction_type, search, sort, page)

    @bot.tree.command(name="transaction-delete", description="Permanently delete a transaction.")
    @app_commands.describe(transaction_id="The transaction ID")
    @require_role(Role.ADMIN)
    async def transaction_delete(interaction: discord.Interaction, transaction_id: str):
        await transaction_delete_command(interaction, transaction_id)

    @bot.tree.command(name="transaction-mark-failed", description="Mark a transaction as failed.")
    @app_commands.describe(transaction_id="The transaction ID")
    @require_role(Role.ADMIN)
    async def transaction_mark_failed(interaction: discord.Interaction, transaction_id: str):
        await transaction_mark_failed_command(interaction, transaction_id)

    for command in (
        balance,
        topup,
        topup_history,
        buy_ticket,
        transactions,
        transaction,
        admin_transactions,
        transaction_delete,
        transaction_mark_failed,
    ):
        command.error(handle_command_error)
