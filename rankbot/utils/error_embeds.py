"""
Centralized error embeds for consistent error handling across the records bot.

Engine exceptions carry their own user_message; from_exception picks the
matching title so every cog reports errors the same way.
"""

import discord

from rankbot.utils.exceptions import (
    RecordsException, DuplicateIdentityError, InvalidReferenceError,
    SelfFightError, InconsistentMethodError, StoreUnavailableError, AdminAuthError
)


class ErrorEmbeds:
    """Centralized error embed factory for consistent error handling."""

    _TITLES = (
        (DuplicateIdentityError, "Fighter Already Exists"),
        (InvalidReferenceError, "Not Found"),
        (SelfFightError, "Invalid Fight"),
        (InconsistentMethodError, "Invalid Fight"),
        (StoreUnavailableError, "Database Error"),
        (AdminAuthError, "Permission Denied"),
    )

    @staticmethod
    def from_exception(error: RecordsException) -> discord.Embed:
        """Create embed for an engine error using its user-facing message."""
        title = "Invalid Input"
        for error_type, candidate in ErrorEmbeds._TITLES:
            if isinstance(error, error_type):
                title = candidate
                break
        return discord.Embed(
            title=title,
            description=error.user_message,
            color=discord.Color.red()
        )

    @staticmethod
    def command_error(error: str) -> discord.Embed:
        """Create embed for general command errors."""
        return discord.Embed(
            title="Command Error",
            description=f"An error occurred: {error}\n\nPlease try again or contact an administrator.",
            color=discord.Color.red()
        )

    @staticmethod
    def admin_required() -> discord.Embed:
        """Create embed for admin commands used without unlocking admin mode."""
        embed = discord.Embed(
            title="❌ Admin Mode Required",
            description="Use `/admin-login` and enter the admin password first.",
            color=discord.Color.red()
        )
        embed.set_footer(text="Admin mode expires automatically.")
        return embed
