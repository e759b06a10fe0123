"""Tests for rankbot.operations.mutation_gateway against a SQLite store."""

import asyncio
from datetime import date

import pytest

from rankbot.data_models.records import FightRecord, FighterRecord, RecordCounts
from rankbot.database.models import Platform, FightMethod
from rankbot.utils.exceptions import (
    DuplicateIdentityError, InvalidReferenceError, SelfFightError,
    InconsistentMethodError, FighterValidationError, FightValidationError,
    StoreUnavailableError
)
from rankbot.utils.record_calculator import RecordCalculator

FIGHT_DAY = date(2025, 1, 10)
AS_OF = date(2025, 1, 15)


def counts_by_name(snapshot):
    return {f.name: f.counts for f in snapshot.fighters}


async def add_fighters(engine, *names, platform="PC"):
    for name in names:
        await engine.gateway.add_fighter(name, platform)


class TestFighters:
    def test_add_fighter_starts_at_zero(self, run_engine) -> None:
        async def scenario(engine):
            return await engine.gateway.add_fighter("  Alice ", "PC")

        result = run_engine(scenario)
        assert result.fighter.name == "Alice"
        assert result.fighter.platform is Platform.PC
        assert result.fighter.counts == RecordCounts()

    def test_duplicate_identity_is_case_insensitive(self, run_engine) -> None:
        async def scenario(engine):
            await engine.gateway.add_fighter("Alice", "PC")
            with pytest.raises(DuplicateIdentityError):
                await engine.gateway.add_fighter("ALICE", "PC")
            # Same name on another platform is a different fighter
            await engine.gateway.add_fighter("Alice", "PS5")
            return await engine.db.list_fighters()

        fighters = run_engine(scenario)
        assert [(f.name, f.platform) for f in fighters] == [("Alice", Platform.PC), ("Alice", Platform.PS5)]

    def test_draw_is_reserved(self, run_engine) -> None:
        async def scenario(engine):
            with pytest.raises(FighterValidationError):
                await engine.gateway.add_fighter("draw", "PC")
            return await engine.db.list_fighters()

        assert run_engine(scenario) == []


class TestFights:
    def test_ko_scenario_updates_records_and_ranking(self, run_engine) -> None:
        async def scenario(engine):
            await add_fighters(engine, "Alice", "Bob")
            result = await engine.gateway.add_fight("Alice", "Bob", "Alice", "KO", "PC", FIGHT_DAY)
            board = await engine.rankings.get_ranking("PC", as_of=AS_OF)
            return result, board

        result, board = run_engine(scenario)
        counts = counts_by_name(result.snapshot)
        assert counts["Alice"] == RecordCounts(wins=1, ko_wins=1)
        assert counts["Bob"] == RecordCounts(losses=1)
        assert result.fight.id is not None
        assert {f.name for f in result.recomputed} == {"Alice", "Bob"}
        assert [f.name for f in board.fighters] == ["Alice", "Bob"]
        assert board.champion is None

    def test_deleting_only_fight_resets_records(self, run_engine) -> None:
        async def scenario(engine):
            await add_fighters(engine, "Alice", "Bob")
            added = await engine.gateway.add_fight("Alice", "Bob", "Alice", "KO", "PC", FIGHT_DAY)
            return await engine.gateway.delete_fight(added.fight.id)

        result = run_engine(scenario)
        assert result.snapshot.fights == ()
        assert all(c == RecordCounts() for c in counts_by_name(result.snapshot).values())

    def test_self_fight_rejected_without_changes(self, run_engine) -> None:
        async def scenario(engine):
            await add_fighters(engine, "Alice")
            with pytest.raises(SelfFightError):
                await engine.gateway.add_fight("Alice", "alice", "Alice", "KO", "PC", FIGHT_DAY)
            return await engine.db.load_snapshot()

        snapshot = run_engine(scenario)
        assert snapshot.fights == ()
        assert counts_by_name(snapshot) == {"Alice": RecordCounts()}

    def test_draw_must_match_method(self, run_engine) -> None:
        async def scenario(engine):
            await add_fighters(engine, "Alice", "Bob")
            with pytest.raises(InconsistentMethodError):
                await engine.gateway.add_fight("Alice", "Bob", "Alice", "Draw", "PC", FIGHT_DAY)
            with pytest.raises(InconsistentMethodError):
                await engine.gateway.add_fight("Alice", "Bob", "Draw", "KO", "PC", FIGHT_DAY)
            return await engine.gateway.add_fight("Alice", "Bob", "draw", "Draw", "PC", FIGHT_DAY)

        result = run_engine(scenario)
        assert result.fight.winner == "Draw"
        assert counts_by_name(result.snapshot) == {
            "Alice": RecordCounts(draws=1),
            "Bob": RecordCounts(draws=1),
        }

    def test_unknown_references_rejected(self, run_engine) -> None:
        async def scenario(engine):
            await add_fighters(engine, "Alice", "Bob", "Carol")
            with pytest.raises(InvalidReferenceError):
                await engine.gateway.add_fight("Alice", "Zed", "Alice", "KO", "PC", FIGHT_DAY)
            with pytest.raises(InvalidReferenceError):
                await engine.gateway.add_fight("Alice", "Bob", "Carol", "KO", "PC", FIGHT_DAY)
            # Bob exists on PC only
            with pytest.raises(InvalidReferenceError):
                await engine.gateway.add_fight("Alice", "Bob", "Alice", "KO", "PS5", FIGHT_DAY)
            with pytest.raises(InvalidReferenceError):
                await engine.gateway.delete_fight(999)
            return await engine.db.list_fights()

        assert run_engine(scenario) == []

    def test_names_stored_in_canonical_spelling(self, run_engine) -> None:
        async def scenario(engine):
            await add_fighters(engine, "Alice", "Bob")
            return await engine.gateway.add_fight(" alice ", "BOB", "ALICE", "decision", "pc", "2025-01-10")

        fight = run_engine(scenario).fight
        assert (fight.fighter1, fight.fighter2, fight.winner) == ("Alice", "Bob", "Alice")
        assert fight.date == FIGHT_DAY

    def test_edit_recomputes_old_and_new_participants(self, run_engine) -> None:
        async def scenario(engine):
            await add_fighters(engine, "Alice", "Bob", "Carol")
            added = await engine.gateway.add_fight("Alice", "Bob", "Alice", "KO", "PC", FIGHT_DAY)
            return await engine.gateway.edit_fight(added.fight.id, fighter2="Carol", method="Decision")

        result = run_engine(scenario)
        counts = counts_by_name(result.snapshot)
        assert counts["Alice"] == RecordCounts(wins=1)
        assert counts["Bob"] == RecordCounts()
        assert counts["Carol"] == RecordCounts(losses=1)
        assert result.fight.fighter2 == "Carol"

    def test_edit_date_and_winner(self, run_engine) -> None:
        async def scenario(engine):
            await add_fighters(engine, "Alice", "Bob")
            added = await engine.gateway.add_fight("Alice", "Bob", "Alice", "KO", "PC", FIGHT_DAY)
            return await engine.gateway.edit_fight(added.fight.id, winner="Bob", date="2025-02-01")

        result = run_engine(scenario)
        assert result.fight.date == date(2025, 2, 1)
        assert counts_by_name(result.snapshot) == {
            "Alice": RecordCounts(losses=1),
            "Bob": RecordCounts(wins=1, ko_wins=1),
        }

    def test_edit_rejects_unknown_fields(self, run_engine) -> None:
        async def scenario(engine):
            await add_fighters(engine, "Alice", "Bob")
            added = await engine.gateway.add_fight("Alice", "Bob", "Alice", "KO", "PC", FIGHT_DAY)
            with pytest.raises(FightValidationError):
                await engine.gateway.edit_fight(added.fight.id, referee="Herb")
            with pytest.raises(SelfFightError):
                await engine.gateway.edit_fight(added.fight.id, fighter2="Alice")
            return await engine.db.list_fights()

        fights = run_engine(scenario)
        assert fights[0].fighter2 == "Bob"


class TestRecompute:
    @staticmethod
    async def busy_store(engine):
        await add_fighters(engine, "Alice", "Bob", "Carol", "Dave")
        await engine.gateway.add_fight("Alice", "Bob", "Alice", "KO", "PC", "2025-01-01")
        await engine.gateway.add_fight("Bob", "Carol", "Draw", "Draw", "PC", "2025-01-02")
        await engine.gateway.add_fight("Carol", "Dave", "Carol", "Decision", "PC", "2025-01-03")
        await engine.gateway.add_fight("Dave", "Alice", "Dave", "KO", "PC", "2025-01-04")

    def test_recompute_all_is_idempotent(self, run_engine) -> None:
        async def scenario(engine):
            await self.busy_store(engine)
            first = await engine.gateway.recompute_all()
            second = await engine.gateway.recompute_all()
            return first.snapshot, second.snapshot

        first, second = run_engine(scenario)
        assert first.fighters == second.fighters
        assert RecordCalculator.find_drift(second.fighters, second.fights) == []

    def test_conservation_after_add_edit_delete(self, run_engine) -> None:
        async def scenario(engine):
            await self.busy_store(engine)
            await engine.gateway.add_fighter("Alice", "PS5")
            await engine.gateway.add_fighter("Eve", "PS5")
            await engine.gateway.add_fight("Alice", "Eve", "Eve", "KO", "PS5", "2025-01-05")
            fights = await engine.db.list_fights()
            await engine.gateway.edit_fight(fights[0].id, fighter2="Carol", winner="Carol", method="Decision")
            await engine.gateway.edit_fight(fights[2].id, winner="Draw", method="Draw")
            await engine.gateway.delete_fight(fights[1].id)
            await engine.gateway.add_fight("Bob", "Dave", "Bob", "KO", "PC", "2025-01-06")
            return await engine.db.load_snapshot()

        snapshot = run_engine(scenario)
        assert len(snapshot.fights) == 5
        for fighter in snapshot.fighters:
            involved = [
                x for x in snapshot.fights
                if x.platform == fighter.platform and x.involves(fighter.name)
            ]
            assert fighter.wins + fighter.losses + fighter.draws == len(involved), fighter.name
        decisive = [f for f in snapshot.fights if not f.is_draw]
        assert sum(f.wins for f in snapshot.fighters) == len(decisive)
        assert sum(f.losses for f in snapshot.fighters) == len(decisive)

    def test_record_override_until_recompute(self, run_engine) -> None:
        async def scenario(engine):
            await add_fighters(engine, "Alice", "Bob")
            await engine.gateway.add_fight("Alice", "Bob", "Alice", "KO", "PC", FIGHT_DAY)
            overridden = await engine.gateway.set_fighter_record("alice", "PC", 10, 2, 1, 4)
            with pytest.raises(FighterValidationError):
                await engine.gateway.set_fighter_record("Alice", "PC", 1, 0, 0, 2)
            restored = await engine.gateway.recompute_all()
            return overridden, restored

        overridden, restored = run_engine(scenario)
        assert overridden.fighter.counts == RecordCounts(wins=10, losses=2, draws=1, ko_wins=4)
        assert counts_by_name(restored.snapshot)["Alice"] == RecordCounts(wins=1, ko_wins=1)
        assert [f.name for f in restored.recomputed] == ["Alice", "Bob"]

    def test_record_override_rejects_bools(self, run_engine) -> None:
        async def scenario(engine):
            await add_fighters(engine, "Alice")
            with pytest.raises(FighterValidationError):
                await engine.gateway.set_fighter_record("Alice", "PC", True, False, False, True)
            return await engine.db.list_fighters()

        assert run_engine(scenario)[0].counts == RecordCounts()


class TestChampions:
    def test_champion_shown_separately(self, run_engine) -> None:
        async def scenario(engine):
            await add_fighters(engine, "Alice", "Bob", "Carol")
            await engine.gateway.add_fight("Alice", "Bob", "Alice", "KO", "PC", FIGHT_DAY)
            await engine.gateway.set_champion("PC", "alice")
            return await engine.rankings.get_ranking("PC", as_of=AS_OF)

        board = run_engine(scenario)
        assert board.champion.name == "Alice"
        assert "Alice" not in [f.name for f in board.fighters]

    def test_set_unknown_champion_rejected(self, run_engine) -> None:
        async def scenario(engine):
            with pytest.raises(InvalidReferenceError):
                await engine.gateway.set_champion("PC", "Nobody")
            return await engine.db.get_champions()

        assert run_engine(scenario) == {}

    def test_clear_champion(self, run_engine) -> None:
        async def scenario(engine):
            await add_fighters(engine, "Alice")
            await engine.gateway.set_champion("PC", "Alice")
            await engine.gateway.clear_champion("PC")
            return await engine.rankings.get_ranking("PC", as_of=AS_OF)

        board = run_engine(scenario)
        assert board.champion is None
        assert [f.name for f in board.fighters] == ["Alice"]


class TestStoreFailure:
    def test_failed_write_rolls_back_and_schedules_repair(self, run_engine, monkeypatch) -> None:
        async def scenario(engine):
            await add_fighters(engine, "Alice", "Bob")

            async def broken_append(record, session=None):
                raise StoreUnavailableError("append_fight", "disk I/O error")

            with monkeypatch.context() as patch:
                patch.setattr(engine.db, "append_fight", broken_append)
                with pytest.raises(StoreUnavailableError):
                    await engine.gateway.add_fight("Alice", "Bob", "Alice", "KO", "PC", FIGHT_DAY)

            flagged = engine.gateway.needs_repair
            result = await engine.gateway.add_fight("Alice", "Bob", "Bob", "Decision", "PC", FIGHT_DAY)
            return flagged, engine.gateway.needs_repair, result

        flagged, still_flagged, result = run_engine(scenario)
        assert flagged is True
        assert still_flagged is False
        assert len(result.snapshot.fights) == 1
        assert counts_by_name(result.snapshot) == {
            "Alice": RecordCounts(losses=1),
            "Bob": RecordCounts(wins=1),
        }


class TestConcurrency:
    def test_concurrent_writes_are_serialized(self, run_engine) -> None:
        async def scenario(engine):
            await add_fighters(engine, "Alice", "Bob")
            writes = [
                engine.gateway.add_fight("Alice", "Bob", "Alice", "KO", "PC", FIGHT_DAY)
                for _ in range(10)
            ]
            results = await asyncio.gather(
                *writes, engine.rankings.get_ranking("PC", as_of=AS_OF)
            )
            return results[-1], await engine.db.load_snapshot()

        board, snapshot = run_engine(scenario)
        assert len(snapshot.fights) == 10
        assert len({f.id for f in snapshot.fights}) == 10
        assert counts_by_name(snapshot) == {
            "Alice": RecordCounts(wins=10, ko_wins=10),
            "Bob": RecordCounts(losses=10),
        }
        # The reader saw one consistent state, before or after any given write
        seen = {f.name: f for f in board.fighters}
        assert seen["Alice"].wins == seen["Bob"].losses


class TestRepair:
    def test_verification_pass_cleans_store(self, run_engine) -> None:
        async def scenario(engine):
            await add_fighters(engine, "Alice", "Bob")
            await engine.gateway.add_fight("Alice", "Bob", "Alice", "KO", "PC", FIGHT_DAY)

            # Writes that bypass the gateway and leave the store inconsistent
            await engine.db.append_fight(FightRecord(
                id=None, fighter1="Alice", fighter2="Ghost", winner="Alice",
                method=FightMethod.KO, platform=Platform.PC, date=FIGHT_DAY
            ))
            await engine.db.set_champion(Platform.PC, "Ghost")
            alice = (await engine.db.list_fighters())[0]
            await engine.db.upsert_fighter(FighterRecord(
                id=alice.id, name="Alice", platform=Platform.PC, wins=7, losses=3
            ))

            await engine.gateway.verify_and_repair()
            return await engine.db.load_snapshot()

        snapshot = run_engine(scenario)
        assert [(f.fighter1, f.fighter2) for f in snapshot.fights] == [("Alice", "Bob")]
        assert snapshot.champions == {}
        assert RecordCalculator.find_drift(snapshot.fighters, snapshot.fights) == []
        assert counts_by_name(snapshot)["Alice"] == RecordCounts(wins=1, ko_wins=1)
