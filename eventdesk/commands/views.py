"""Interactive components shared by the command modules."""

import logging
from typing import Awaitable, Callable, Optional

import discord

from eventdesk.config import get_config_value
from eventdesk.messaging import get_message

logger = logging.getLogger(__name__)


class ConfirmView(discord.ui.View):
    """Confirm/cancel buttons for an irreversible action.

    Only the user who invoked the command may press them. After wait(),
    `confirmed` is True, False, or None on timeout.
    """

    def __init__(self, owner_id: int, timeout: float = 60):
        super().__init__(timeout=timeout)
        self.owner_id = owner_id
        self.confirmed: Optional[bool] = None

    async def interaction_check(self, interaction: discord.Interaction) -> bool:
        if interaction.user.id != self.owner_id:
            await interaction.response.send_message(
                get_message("confirm.not_yours"), ephemeral=True
            )
            return False
        return True

    async def _finish(self, interaction: discord.Interaction, confirmed: bool) -> None:
        self.confirmed = confirmed
        for item in self.children:
            item.disabled = True
        await interaction.response.edit_message(view=self)
        self.stop()

    @discord.ui.button(label="Confirm", style=discord.ButtonStyle.danger)
    async def confirm(self, interaction: discord.Interaction, button: discord.ui.Button):
        await self._finish(interaction, True)

    @discord.ui.button(label="Cancel", style=discord.ButtonStyle.secondary)
    async def cancel(self, interaction: discord.Interaction, button: discord.ui.Button):
        await self._finish(interaction, False)


async def ask_confirmation(interaction: discord.Interaction, prompt: str) -> bool:
    """Show a ConfirmView on the deferred response and wait for the answer."""
    view = ConfirmView(interaction.user.id)
    await interaction.edit_original_response(content=prompt, embed=None, view=view)
    await view.wait()
    if not view.confirmed:
        await interaction.edit_original_response(
            content=get_message("confirm.cancelled"), embed=None, view=None
        )
        return False
    return True


class CommentModal(discord.ui.Modal):
    """Free-text comment input, capped at the configured maximum length."""

    def __init__(
        self,
        report_id: str,
        on_submit_comment: Callable[[discord.Interaction, str, str], Awaitable[None]],
    ):
        super().__init__(title=get_message("reports.comment_modal_title", report_id=report_id))
        self.report_id = report_id
        self.on_submit_comment = on_submit_comment
        self.message = discord.ui.TextInput(
            label=get_message("reports.comment_modal_label"),
            style=discord.TextStyle.paragraph,
            max_length=get_config_value("reports.comment_max_length", 500),
            required=True,
        )
        self.add_item(self.message)

    async def on_submit(self, interaction: discord.Interaction) -> None:
        await self.on_submit_comment(interaction, self.report_id, self.message.value)

    async def on_error(self, interaction: discord.Interaction, error: Exception) -> None:
        logger.error(f"Error submitting comment for report {self.report_id}: {error}", exc_info=error)
        message = get_message("errors.generic_command_error")
        if not interaction.response.is_done():
            await interaction.response.send_message(message, ephemeral=True)
        else:
            await interaction.followup.send(message, ephemeral=True)
