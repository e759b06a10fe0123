import discord
from discord import app_commands
from discord.ext import commands
from datetime import date
from typing import Awaitable, Callable, Optional

from rankbot.cogs.rankings import PLATFORM_CHOICES, fighter_name_autocomplete
from rankbot.data_models.records import MutationResult
from rankbot.database.models import FightMethod
from rankbot.ui.admin_modals import AdminLoginModal, AdminConfirmationModal
from rankbot.utils.embeds import build_success_embed
from rankbot.utils.error_embeds import ErrorEmbeds
from rankbot.utils.exceptions import RecordsException
from rankbot.utils.logger import setup_logger

logger = setup_logger(__name__)

METHOD_CHOICES = [app_commands.Choice(name=method.value, value=method.value) for method in FightMethod]


async def admin_unlocked(interaction: discord.Interaction) -> bool:
    """Check that the invoking user has unlocked admin mode."""
    return await interaction.client.admin_auth.is_unlocked(interaction.user.id)


class AdminCog(commands.Cog):
    """Admin commands that change fighters, fights and champions"""

    def __init__(self, bot):
        self.bot = bot
        self.gateway = bot.gateway
        self.auth = bot.admin_auth

    async def _apply(
        self,
        interaction: discord.Interaction,
        mutation: Awaitable[MutationResult],
        title: str,
        describe: Callable[[MutationResult], str]
    ):
        """Run one gateway mutation and report the outcome ephemerally."""
        if not interaction.response.is_done():
            await interaction.response.defer(ephemeral=True)
        try:
            result = await mutation
        except RecordsException as e:
            await interaction.followup.send(embed=ErrorEmbeds.from_exception(e), ephemeral=True)
            return

        logger.info(f"{interaction.user} ran {result.operation}")
        embed = build_success_embed(title, describe(result))
        if result.recomputed:
            embed.set_footer(text=f"Recomputed {len(result.recomputed)} fighter record(s)")
        await interaction.followup.send(embed=embed, ephemeral=True)

    # Admin mode

    @app_commands.command(name="admin-login", description="Unlock admin mode with the admin password")
    async def admin_login(self, interaction: discord.Interaction):
        await interaction.response.send_modal(AdminLoginModal(self.auth))

    @app_commands.command(name="admin-logout", description="Lock admin mode")
    async def admin_logout(self, interaction: discord.Interaction):
        await self.auth.lock(interaction.user.id)
        await interaction.response.send_message("🔒 Admin mode locked.", ephemeral=True)

    # Fighters

    @app_commands.command(name="admin-add-fighter", description="Add a fighter with an empty record")
    @app_commands.check(admin_unlocked)
    @app_commands.choices(platform=PLATFORM_CHOICES)
    async def admin_add_fighter(self, interaction: discord.Interaction, platform: app_commands.Choice[str], name: str):
        await self._apply(
            interaction,
            self.gateway.add_fighter(name, platform.value),
            "Fighter Added",
            lambda r: f"**{r.fighter.name}** added to {r.fighter.platform.display_name}."
        )

    @app_commands.command(name="admin-rename-fighter", description="Rename a fighter everywhere they appear")
    @app_commands.check(admin_unlocked)
    @app_commands.choices(platform=PLATFORM_CHOICES)
    @app_commands.autocomplete(old_name=fighter_name_autocomplete)
    async def admin_rename_fighter(
        self,
        interaction: discord.Interaction,
        platform: app_commands.Choice[str],
        old_name: str,
        new_name: str
    ):
        await self._apply(
            interaction,
            self.gateway.rename_fighter(old_name, new_name, platform.value),
            "Fighter Renamed",
            lambda r: f"**{old_name}** is now **{r.fighter.name}** ({r.fighter.record_line()})."
        )

    @app_commands.command(name="admin-delete-fighter", description="Delete a fighter and all of their fights")
    @app_commands.check(admin_unlocked)
    @app_commands.choices(platform=PLATFORM_CHOICES)
    @app_commands.autocomplete(name=fighter_name_autocomplete)
    async def admin_delete_fighter(self, interaction: discord.Interaction, platform: app_commands.Choice[str], name: str):
        async def confirmed(modal_interaction: discord.Interaction):
            await self._apply(
                modal_interaction,
                self.gateway.delete_fighter(name, platform.value),
                "Fighter Deleted",
                lambda r: f"**{r.fighter.name}** and their fights were removed from {platform.name}."
            )

        await interaction.response.send_modal(
            AdminConfirmationModal(title="Delete Fighter", confirmation_text=name, on_confirm=confirmed)
        )

    @app_commands.command(name="admin-set-record", description="Manually override a fighter's record")
    @app_commands.check(admin_unlocked)
    @app_commands.choices(platform=PLATFORM_CHOICES)
    @app_commands.autocomplete(name=fighter_name_autocomplete)
    async def admin_set_record(
        self,
        interaction: discord.Interaction,
        platform: app_commands.Choice[str],
        name: str,
        wins: app_commands.Range[int, 0],
        losses: app_commands.Range[int, 0],
        draws: app_commands.Range[int, 0],
        ko_wins: app_commands.Range[int, 0]
    ):
        await self._apply(
            interaction,
            self.gateway.set_fighter_record(name, platform.value, wins, losses, draws, ko_wins),
            "Record Overridden",
            lambda r: (
                f"**{r.fighter.name}** is now {r.fighter.record_line()}.\n"
                f"Run `/admin-recompute` to restore counts from the fight log."
            )
        )

    # Fights

    @app_commands.command(name="admin-add-fight", description="Record a fight result")
    @app_commands.check(admin_unlocked)
    @app_commands.describe(
        winner="Winner's name, or Draw",
        fight_date="Fight date as YYYY-MM-DD (defaults to today)"
    )
    @app_commands.choices(platform=PLATFORM_CHOICES, method=METHOD_CHOICES)
    @app_commands.autocomplete(fighter1=fighter_name_autocomplete, fighter2=fighter_name_autocomplete)
    async def admin_add_fight(
        self,
        interaction: discord.Interaction,
        platform: app_commands.Choice[str],
        fighter1: str,
        fighter2: str,
        winner: str,
        method: app_commands.Choice[str],
        fight_date: Optional[str] = None
    ):
        await self._apply(
            interaction,
            self.gateway.add_fight(
                fighter1, fighter2, winner, method.value, platform.value,
                fight_date or date.today().isoformat()
            ),
            "Fight Recorded",
            lambda r: f"`#{r.fight.id}` {r.fight.summary()}"
        )

    @app_commands.command(name="admin-edit-fight", description="Edit fields of a recorded fight")
    @app_commands.check(admin_unlocked)
    @app_commands.describe(fight_id="Fight number shown in /fights", fight_date="New date as YYYY-MM-DD")
    @app_commands.choices(platform=PLATFORM_CHOICES, method=METHOD_CHOICES)
    async def admin_edit_fight(
        self,
        interaction: discord.Interaction,
        fight_id: int,
        fighter1: Optional[str] = None,
        fighter2: Optional[str] = None,
        winner: Optional[str] = None,
        method: Optional[app_commands.Choice[str]] = None,
        platform: Optional[app_commands.Choice[str]] = None,
        fight_date: Optional[str] = None
    ):
        changes = {
            "fighter1": fighter1,
            "fighter2": fighter2,
            "winner": winner,
            "method": method.value if method else None,
            "platform": platform.value if platform else None,
            "date": fight_date,
        }
        changes = {key: value for key, value in changes.items() if value is not None}
        if not changes:
            await interaction.response.send_message("❌ Nothing to change.", ephemeral=True)
            return

        await self._apply(
            interaction,
            self.gateway.edit_fight(fight_id, **changes),
            "Fight Updated",
            lambda r: f"`#{fight_id}` {r.fight.summary()}"
        )

    @app_commands.command(name="admin-delete-fight", description="Delete a recorded fight")
    @app_commands.check(admin_unlocked)
    @app_commands.describe(fight_id="Fight number shown in /fights")
    async def admin_delete_fight(self, interaction: discord.Interaction, fight_id: int):
        await self._apply(
            interaction,
            self.gateway.delete_fight(fight_id),
            "Fight Deleted",
            lambda r: f"Removed `#{fight_id}` {r.fight.summary()}"
        )

    # Champions

    @app_commands.command(name="admin-set-champion", description="Set the champion for a platform")
    @app_commands.check(admin_unlocked)
    @app_commands.choices(platform=PLATFORM_CHOICES)
    @app_commands.autocomplete(name=fighter_name_autocomplete)
    async def admin_set_champion(self, interaction: discord.Interaction, platform: app_commands.Choice[str], name: str):
        await self._apply(
            interaction,
            self.gateway.set_champion(platform.value, name),
            "Champion Crowned",
            lambda r: f"👑 **{r.fighter.name}** is the {platform.name} champion."
        )

    @app_commands.command(name="admin-clear-champion", description="Vacate the champion slot for a platform")
    @app_commands.check(admin_unlocked)
    @app_commands.choices(platform=PLATFORM_CHOICES)
    async def admin_clear_champion(self, interaction: discord.Interaction, platform: app_commands.Choice[str]):
        await self._apply(
            interaction,
            self.gateway.clear_champion(platform.value),
            "Title Vacated",
            lambda r: f"The {platform.name} championship is now vacant."
        )

    # Maintenance

    @app_commands.command(name="admin-recompute", description="Rebuild every fighter record from the fight log")
    @app_commands.check(admin_unlocked)
    async def admin_recompute(self, interaction: discord.Interaction):
        await self._apply(
            interaction,
            self.gateway.recompute_all(),
            "Records Recomputed",
            lambda r: f"{len(r.snapshot.fighters)} fighter(s) checked against {len(r.snapshot.fights)} fight(s)."
        )


async def setup(bot):
    await bot.add_cog(AdminCog(bot))
