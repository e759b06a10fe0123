import discord
from discord import app_commands
from discord.ext import commands
from typing import Optional
import logging

from rankbot.database.models import Platform
from rankbot.utils.embeds import (
    build_ranking_embed, build_profile_embed, build_fighter_list_embed, build_fight_list_embed
)
from rankbot.utils.error_embeds import ErrorEmbeds
from rankbot.utils.exceptions import RecordsException

logger = logging.getLogger(__name__)

PLATFORM_CHOICES = [
    app_commands.Choice(name=platform.display_name, value=platform.value)
    for platform in Platform
]


async def fighter_name_autocomplete(
    interaction: discord.Interaction,
    current: str
) -> list[app_commands.Choice[str]]:
    """Suggest fighter names, narrowed to the chosen platform when one is set."""
    platform = getattr(interaction.namespace, "platform", None)
    try:
        fighters = await interaction.client.rankings.search_fighters(current or "", platform)
    except RecordsException:
        return []
    names = sorted({f.name for f in fighters}, key=str.casefold)
    return [app_commands.Choice(name=name, value=name) for name in names[:25]]


class RankingsCog(commands.Cog):
    """Public read-only record and ranking commands"""

    def __init__(self, bot):
        self.bot = bot
        self.rankings = bot.rankings

    @app_commands.command(name="rankings", description="View the champion and top contenders for a platform")
    @app_commands.describe(platform="Platform to view")
    @app_commands.choices(platform=PLATFORM_CHOICES)
    async def rankings(self, interaction: discord.Interaction, platform: app_commands.Choice[str]):
        await interaction.response.defer()
        try:
            board = await self.rankings.get_ranking(platform.value)
        except RecordsException as e:
            await interaction.followup.send(embed=ErrorEmbeds.from_exception(e))
            return
        await interaction.followup.send(embed=build_ranking_embed(board))

    @app_commands.command(name="record", description="View a fighter's record and fight history")
    @app_commands.describe(platform="Fighter's platform", name="Fighter name")
    @app_commands.choices(platform=PLATFORM_CHOICES)
    @app_commands.autocomplete(name=fighter_name_autocomplete)
    async def record(self, interaction: discord.Interaction, platform: app_commands.Choice[str], name: str):
        await interaction.response.defer()
        try:
            profile = await self.rankings.get_fighter_profile(name, platform.value)
        except RecordsException as e:
            await interaction.followup.send(embed=ErrorEmbeds.from_exception(e))
            return
        await interaction.followup.send(embed=build_profile_embed(profile))

    @app_commands.command(name="fighters", description="Search fighters by name")
    @app_commands.describe(query="Part of a fighter name (leave empty to list all)", platform="Limit to one platform")
    @app_commands.choices(platform=PLATFORM_CHOICES)
    async def fighters(
        self,
        interaction: discord.Interaction,
        query: Optional[str] = None,
        platform: Optional[app_commands.Choice[str]] = None
    ):
        await interaction.response.defer(ephemeral=True)
        platform_value = platform.value if platform else None
        try:
            found = await self.rankings.search_fighters(query or "", platform_value)
        except RecordsException as e:
            await interaction.followup.send(embed=ErrorEmbeds.from_exception(e), ephemeral=True)
            return

        title = f"Fighters matching '{query}'" if query else "Fighters"
        if platform:
            title += f" on {platform.name}"
        await interaction.followup.send(embed=build_fighter_list_embed(title, found), ephemeral=True)

    @app_commands.command(name="fights", description="Search the fight log by fighter name")
    @app_commands.describe(query="Part of a fighter or winner name", platform="Limit to one platform")
    @app_commands.choices(platform=PLATFORM_CHOICES)
    async def fights(
        self,
        interaction: discord.Interaction,
        query: str,
        platform: Optional[app_commands.Choice[str]] = None
    ):
        await interaction.response.defer(ephemeral=True)
        try:
            found = await self.rankings.search_fights(query, platform.value if platform else None)
        except RecordsException as e:
            await interaction.followup.send(embed=ErrorEmbeds.from_exception(e), ephemeral=True)
            return

        # Newest first
        found.sort(key=lambda f: (f.date, f.id or 0), reverse=True)
        await interaction.followup.send(
            embed=build_fight_list_embed(f"Fights matching '{query}'", found),
            ephemeral=True
        )


async def setup(bot):
    await bot.add_cog(RankingsCog(bot))
