import asyncio
from typing import Optional

import discord
from discord.ext import commands
from discord import app_commands

from rankbot.config import Config
from rankbot.database.database import Database
from rankbot.operations.mutation_gateway import MutationGateway
from rankbot.services.admin_auth import AdminAuthService
from rankbot.services.rankings import RankingService
from rankbot.services.snapshot import SnapshotService
from rankbot.utils.error_embeds import ErrorEmbeds
from rankbot.utils.exceptions import RecordsException
from rankbot.utils.logger import setup_logger, configure_library_logging


class RankBot(commands.Bot):
    def __init__(self):
        intents = discord.Intents.default()
        intents.guilds = True

        super().__init__(
            command_prefix=Config.COMMAND_PREFIX,
            intents=intents,
            help_command=None
        )

        # Attach app command error handler
        self.tree.on_error = self.on_app_command_error

        self.db: Optional[Database] = None
        self.snapshots: Optional[SnapshotService] = None
        self.gateway: Optional[MutationGateway] = None
        self.rankings: Optional[RankingService] = None
        self.admin_auth = AdminAuthService()
        self.logger = setup_logger(__name__)

    async def setup_hook(self):
        """Called when the bot is starting up"""
        self.logger.info("Setting up UFL records bot...")

        self.db = Database()
        await self.db.initialize()

        self.snapshots = SnapshotService(self.db)
        self.gateway = MutationGateway(self.db, self.snapshots)
        self.rankings = RankingService(self.snapshots)

        # Warm the snapshot so the first reader does not pay for the load
        await self.snapshots.current()

        await self.load_cogs()
        await self._sync_commands()

        self.logger.info("UFL records bot setup complete!")

    async def load_cogs(self):
        cogs_to_load = [
            'rankbot.cogs.rankings',
            'rankbot.cogs.admin',
        ]

        for cog in cogs_to_load:
            await self.load_extension(cog)
            self.logger.info(f"Loaded cog: {cog}")

    async def _sync_commands(self):
        """Sync slash commands with Discord"""
        guild_ids = Config.get_guild_ids()

        if not guild_ids:
            # Global sync can take up to an hour to propagate
            self.logger.info("Syncing commands globally...")
            synced = await self.tree.sync()
            self.logger.info(f"Synced {len(synced)} command(s) globally")
            return

        for guild_id in guild_ids:
            guild = discord.Object(id=guild_id)
            self.tree.copy_global_to(guild=guild)
            try:
                synced = await self.tree.sync(guild=guild)
            except discord.errors.Forbidden:
                self.logger.error(
                    f"Permission error syncing to guild {guild_id}. Ensure the bot has the "
                    f"'applications.commands' scope and is in the guild.",
                    exc_info=True
                )
                continue
            except discord.errors.HTTPException as e:
                self.logger.error(f"HTTP error syncing to guild {guild_id}. Status: {e.status}", exc_info=True)
                continue
            self.logger.info(f"Synced {len(synced)} command(s) to guild {guild_id}")

    async def on_ready(self):
        self.logger.info(f'{self.user} has connected to Discord!')
        self.logger.info(f'Bot is in {len(self.guilds)} guilds')

        await self.change_presence(activity=discord.Game(name="UFL Rankings | /rankings"))

    async def on_app_command_error(self, interaction: discord.Interaction, error: app_commands.AppCommandError):
        """Global error handler for slash commands"""
        command_name = interaction.command.name if interaction.command else 'Unknown'
        original = getattr(error, 'original', error)

        if isinstance(error, app_commands.CheckFailure):
            self.logger.info(f"Admin mode required for '{command_name}', denied for user {interaction.user}")
            embed = ErrorEmbeds.admin_required()
        elif isinstance(original, RecordsException):
            self.logger.info(f"Command '{command_name}' rejected: {original}")
            embed = ErrorEmbeds.from_exception(original)
        else:
            self.logger.error(f"Error in app command '{command_name}': {error}", exc_info=error)
            embed = ErrorEmbeds.command_error("An unexpected error occurred while processing your command.")

        try:
            if interaction.response.is_done():
                await interaction.followup.send(embed=embed, ephemeral=True)
            else:
                await interaction.response.send_message(embed=embed, ephemeral=True)
        except discord.HTTPException as e:
            self.logger.error(f"Failed to send error response: {e}")

    async def close(self):
        """Cleanup when bot is shutting down"""
        self.logger.info("Shutting down UFL records bot...")

        if self.db:
            await self.db.close()

        await super().close()


async def main():
    """Main entry point"""
    Config.validate()
    configure_library_logging()

    bot = RankBot()

    try:
        await bot.start(Config.DISCORD_TOKEN)
    finally:
        await bot.close()


def run():
    asyncio.run(main())


if __name__ == "__main__":
    run()
