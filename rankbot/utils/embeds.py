"""
Shared embed utilities for the records bot.

Provides reusable embed builders for rankings, fighter profiles, search
results and mutation confirmations.
"""

import discord
from typing import List

from rankbot.constants import UIConstants
from rankbot.data_models.leaderboard import FighterProfile, RankingBoard
from rankbot.data_models.records import FighterRecord, FightRecord


def build_ranking_embed(board: RankingBoard) -> discord.Embed:
    """
    Build the platform leaderboard embed.

    Champion first in its own field, then the numbered contenders with their
    record and score.
    """
    embed = discord.Embed(
        title=f"{UIConstants.TROPHY_EMOJI} {board.platform.display_name} Rankings",
        color=UIConstants.CHAMPION_COLOR if board.champion else UIConstants.DEFAULT_EMBED_COLOR
    )

    if board.champion:
        embed.add_field(
            name=f"{UIConstants.CROWN_EMOJI} Champion",
            value=f"**{board.champion.name}** ({board.champion.record_line()})",
            inline=False
        )
    else:
        embed.add_field(name=f"{UIConstants.CROWN_EMOJI} Champion", value="Vacant", inline=False)

    if board.contenders:
        lines = [
            f"**{entry.rank}.** {entry.fighter.name}: {entry.fighter.record_line()} | {entry.score} pts"
            for entry in board.contenders
        ]
        embed.add_field(name="Contenders", value="\n".join(lines), inline=False)
    else:
        embed.add_field(name="Contenders", value="No contenders yet.", inline=False)

    footer = f"As of {board.as_of.isoformat()}"
    if board.degraded:
        footer += " • ⚠️ Database unavailable, showing cached data"
    embed.set_footer(text=footer)
    return embed


def build_profile_embed(profile: FighterProfile, max_fights: int = 10) -> discord.Embed:
    fighter = profile.fighter
    title = f"{UIConstants.GLOVE_EMOJI} {fighter.name} ({fighter.platform.display_name})"
    if profile.is_champion:
        title = f"{UIConstants.CROWN_EMOJI} {title}"

    embed = discord.Embed(
        title=title,
        color=UIConstants.CHAMPION_COLOR if profile.is_champion else UIConstants.DEFAULT_EMBED_COLOR
    )
    counts = profile.counts
    embed.add_field(
        name="📊 Record",
        value=(
            f"**Wins:** {counts.wins} | **Losses:** {counts.losses} | **Draws:** {counts.draws}\n"
            f"**KO Wins:** {counts.ko_wins}"
        ),
        inline=False
    )

    if profile.fights:
        lines = [f"`#{f.id}` {f.summary()}" for f in profile.fights[:max_fights]]
        if len(profile.fights) > max_fights:
            lines.append(f"... and {len(profile.fights) - max_fights} more")
        embed.add_field(name="Recent Fights", value="\n".join(lines), inline=False)

    if profile.degraded:
        embed.set_footer(text="⚠️ Database unavailable, showing cached data")
    return embed


def build_fighter_list_embed(title: str, fighters: List[FighterRecord]) -> discord.Embed:
    embed = discord.Embed(title=title, color=UIConstants.DEFAULT_EMBED_COLOR)
    shown = fighters[:UIConstants.MAX_SEARCH_RESULTS]
    if shown:
        embed.description = "\n".join(
            f"• **{f.name}** ({f.platform.display_name}): {f.record_line()}" for f in shown
        )
    else:
        embed.description = "No fighters found."
    if len(fighters) > len(shown):
        embed.set_footer(text=f"Showing {len(shown)} of {len(fighters)}")
    return embed


def build_fight_list_embed(title: str, fights: List[FightRecord]) -> discord.Embed:
    embed = discord.Embed(title=title, color=UIConstants.DEFAULT_EMBED_COLOR)
    shown = fights[:UIConstants.MAX_SEARCH_RESULTS]
    if shown:
        embed.description = "\n".join(
            f"`#{f.id}` [{f.platform.value}] {f.summary()}" for f in shown
        )
    else:
        embed.description = "No fights found."
    if len(fights) > len(shown):
        embed.set_footer(text=f"Showing {len(shown)} of {len(fights)}")
    return embed


def build_success_embed(title: str, description: str) -> discord.Embed:
    return discord.Embed(
        title=f"✅ {title}",
        description=description,
        color=UIConstants.SUCCESS_COLOR
    )
