"""Tests for the embed builders in rankbot.utils.embeds and error_embeds."""

from datetime import date

from rankbot.constants import UIConstants
from rankbot.data_models.leaderboard import FighterProfile, RankingBoard, RankingEntry
from rankbot.data_models.records import FighterRecord, FightRecord
from rankbot.database.models import Platform, FightMethod
from rankbot.utils.embeds import (
    build_ranking_embed, build_profile_embed, build_fighter_list_embed, build_fight_list_embed
)
from rankbot.utils.error_embeds import ErrorEmbeds
from rankbot.utils.exceptions import SelfFightError, StoreUnavailableError

ALICE = FighterRecord(id=1, name="Alice", platform=Platform.PC, wins=3, losses=1, ko_wins=2)
BOB = FighterRecord(id=2, name="Bob", platform=Platform.PC, wins=1, losses=3)
FIGHT = FightRecord(
    id=7, fighter1="Alice", fighter2="Bob", winner="Alice",
    method=FightMethod.KO, platform=Platform.PC, date=date(2025, 1, 10)
)


class TestRankingEmbed:
    def test_champion_and_contenders(self) -> None:
        board = RankingBoard(
            platform=Platform.PC,
            champion=ALICE,
            contenders=[RankingEntry(rank=1, fighter=BOB, base_score=-1, recent_wins=0, score=-1)],
            as_of=date(2025, 1, 15),
        )
        embed = build_ranking_embed(board)
        assert "UFL PC" in embed.title
        assert embed.color.value == UIConstants.CHAMPION_COLOR
        assert "Alice" in embed.fields[0].value
        assert "**1.** Bob" in embed.fields[1].value

    def test_vacant_title_and_degraded_footer(self) -> None:
        board = RankingBoard(
            platform=Platform.PS5, champion=None, contenders=[],
            as_of=date(2025, 1, 15), degraded=True
        )
        embed = build_ranking_embed(board)
        assert embed.fields[0].value == "Vacant"
        assert "cached" in embed.footer.text


class TestListEmbeds:
    def test_profile_embed(self) -> None:
        profile = FighterProfile(
            fighter=ALICE, counts=ALICE.counts, is_champion=True, fights=[FIGHT]
        )
        embed = build_profile_embed(profile)
        assert embed.title.startswith(UIConstants.CROWN_EMOJI)
        assert "#7" in embed.fields[1].value

    def test_fight_list_truncates(self) -> None:
        fights = [FIGHT] * (UIConstants.MAX_SEARCH_RESULTS + 5)
        embed = build_fight_list_embed("Fights", fights)
        assert embed.description.count("\n") == UIConstants.MAX_SEARCH_RESULTS - 1
        assert embed.footer.text == f"Showing {UIConstants.MAX_SEARCH_RESULTS} of {len(fights)}"

    def test_empty_fighter_list(self) -> None:
        assert build_fighter_list_embed("Fighters", []).description == "No fighters found."


class TestErrorEmbeds:
    def test_uses_user_message(self) -> None:
        error = SelfFightError("Alice")
        embed = ErrorEmbeds.from_exception(error)
        assert embed.title == "Invalid Fight"
        assert embed.description == error.user_message

    def test_store_error_title(self) -> None:
        assert ErrorEmbeds.from_exception(StoreUnavailableError("read")).title == "Database Error"
