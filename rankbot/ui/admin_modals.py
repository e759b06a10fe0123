"""
Admin modals

Secret entry for unlocking admin mode and typed confirmation for
destructive record operations.
"""

import discord
from typing import Callable, Awaitable

from rankbot.services.admin_auth import AdminAuthService
from rankbot.utils.error_embeds import ErrorEmbeds
from rankbot.utils.exceptions import AdminAuthError
from rankbot.utils.logger import setup_logger

logger = setup_logger(__name__)


class AdminLoginModal(discord.ui.Modal):
    """Modal asking for the shared admin secret"""

    def __init__(self, auth: AdminAuthService):
        super().__init__(title="Admin Login", timeout=120)
        self.auth = auth

        self.secret_input = discord.ui.TextInput(
            label="Admin password",
            placeholder="Enter the admin password",
            required=True,
            max_length=200
        )
        self.add_item(self.secret_input)

    async def on_submit(self, interaction: discord.Interaction):
        try:
            await self.auth.unlock(interaction.user.id, self.secret_input.value)
        except AdminAuthError as e:
            await interaction.response.send_message(embed=ErrorEmbeds.from_exception(e), ephemeral=True)
            return

        await interaction.response.send_message(
            "🔓 **Admin mode unlocked.** Use `/admin-logout` when you are done.",
            ephemeral=True
        )

    async def on_error(self, interaction: discord.Interaction, error: Exception):
        logger.error(f"Admin login modal failed: {error}", exc_info=True)
        await interaction.response.send_message(
            embed=ErrorEmbeds.command_error("Login could not be processed."),
            ephemeral=True
        )


class AdminConfirmationModal(discord.ui.Modal):
    """Modal for confirming destructive admin operations"""

    def __init__(
        self,
        title: str,
        confirmation_text: str,
        on_confirm: Callable[[discord.Interaction], Awaitable[None]]
    ):
        super().__init__(title=title, timeout=300)
        self.confirmation_text = confirmation_text
        self.on_confirm = on_confirm

        self.confirmation_input = discord.ui.TextInput(
            label=f'Type "{confirmation_text}" to confirm'[:45],
            placeholder=confirmation_text[:100],
            required=True,
            max_length=len(confirmation_text) + 10
        )
        self.add_item(self.confirmation_input)

    async def on_submit(self, interaction: discord.Interaction):
        user_input = self.confirmation_input.value.strip()

        if user_input != self.confirmation_text:
            await interaction.response.send_message(
                f"❌ **Confirmation Failed**\n"
                f"You typed: `{user_input}`\n"
                f"Required: `{self.confirmation_text}`\n"
                f"Operation cancelled.",
                ephemeral=True
            )
            return

        await self.on_confirm(interaction)

    async def on_error(self, interaction: discord.Interaction, error: Exception):
        logger.error(f"Confirmation modal failed: {error}", exc_info=True)
        embed = ErrorEmbeds.command_error(str(error))
        if interaction.response.is_done():
            await interaction.followup.send(embed=embed, ephemeral=True)
        else:
            await interaction.response.send_message(embed=embed, ephemeral=True)
