"""Tests for rankbot.services.rankings read operations."""

import pytest

from rankbot.data_models.records import RecordCounts
from rankbot.utils.exceptions import InvalidReferenceError


async def seed(engine):
    for name in ("Alice", "Bob", "Alison"):
        await engine.gateway.add_fighter(name, "PC")
    await engine.gateway.add_fighter("Alice", "PS5")
    await engine.gateway.add_fight("Alice", "Bob", "Alice", "KO", "PC", "2025-01-01")
    await engine.gateway.add_fight("Bob", "Alison", "Bob", "Decision", "PC", "2025-02-01")
    await engine.gateway.add_fight("Alice", "Bob", "Bob", "Decision", "PC", "2025-03-01")


class TestProfile:
    def test_profile_lists_fights_newest_first(self, run_engine) -> None:
        async def scenario(engine):
            await seed(engine)
            await engine.gateway.set_champion("PC", "Bob")
            return await engine.rankings.get_fighter_profile("bob", "UFL PC")

        profile = run_engine(scenario)
        assert profile.fighter.name == "Bob"
        assert profile.is_champion is True
        assert profile.counts == RecordCounts(wins=2, losses=1)
        assert [f.date.month for f in profile.fights] == [3, 2, 1]
        assert profile.degraded is False

    def test_profile_counts_come_from_log(self, run_engine) -> None:
        async def scenario(engine):
            await seed(engine)
            await engine.gateway.set_fighter_record("Alice", "PC", 9, 9, 9, 9)
            return await engine.rankings.get_fighter_profile("Alice", "PC")

        profile = run_engine(scenario)
        assert profile.fighter.wins == 9
        assert profile.counts == RecordCounts(wins=1, losses=1, ko_wins=1)

    def test_unknown_fighter(self, run_engine) -> None:
        async def scenario(engine):
            await seed(engine)
            with pytest.raises(InvalidReferenceError):
                await engine.rankings.get_fighter_profile("Alice", "XBOX")

        run_engine(scenario)


class TestSearch:
    def test_search_fighters_substring(self, run_engine) -> None:
        async def scenario(engine):
            await seed(engine)
            everywhere = await engine.rankings.search_fighters("ALI")
            on_pc = await engine.rankings.search_fighters("ali", "PC")
            return everywhere, on_pc

        everywhere, on_pc = run_engine(scenario)
        assert [(f.name, f.platform.value) for f in everywhere] == [
            ("Alice", "PC"), ("Alison", "PC"), ("Alice", "PS5")
        ]
        assert [f.name for f in on_pc] == ["Alice", "Alison"]

    def test_search_fights_by_participant(self, run_engine) -> None:
        async def scenario(engine):
            await seed(engine)
            return await engine.rankings.search_fights("alison")

        fights = run_engine(scenario)
        assert [(f.fighter1, f.fighter2) for f in fights] == [("Bob", "Alison")]

    def test_list_fighters_by_platform(self, run_engine) -> None:
        async def scenario(engine):
            await seed(engine)
            return await engine.rankings.list_fighters("PS5")

        assert [f.name for f in run_engine(scenario)] == ["Alice"]
