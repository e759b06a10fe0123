"""Tests for rankbot.utils.record_calculator."""

from datetime import date

from rankbot.data_models.records import FighterRecord, FightRecord, RecordCounts
from rankbot.database.models import Platform, FightMethod
from rankbot.utils.record_calculator import RecordCalculator

DAY = date(2025, 1, 10)


def fight(fight_id, fighter1, fighter2, winner, method=FightMethod.DECISION, platform=Platform.PC):
    return FightRecord(
        id=fight_id, fighter1=fighter1, fighter2=fighter2, winner=winner,
        method=method, platform=platform, date=DAY
    )


LOG = [
    fight(1, "Alice", "Bob", "Alice", FightMethod.KO),
    fight(2, "Bob", "Alice", "Bob"),
    fight(3, "Alice", "Carol", "Draw", FightMethod.DRAW),
    fight(4, "Alice", "Bob", "Alice", FightMethod.KO, platform=Platform.PS5),
]


class TestCalculateCounts:
    def test_mixed_log(self) -> None:
        counts = RecordCalculator.calculate_counts("Alice", Platform.PC, LOG)
        assert counts == RecordCounts(wins=1, losses=1, draws=1, ko_wins=1)

    def test_other_platform_ignored(self) -> None:
        counts = RecordCalculator.calculate_counts("Alice", Platform.PS5, LOG)
        assert counts == RecordCounts(wins=1, ko_wins=1)

    def test_name_case_insensitive(self) -> None:
        assert RecordCalculator.calculate_counts("bob", Platform.PC, LOG) == RecordCounts(wins=1, losses=1)

    def test_unknown_fighter_is_zero(self) -> None:
        assert RecordCalculator.calculate_counts("Dave", Platform.PC, LOG) == RecordCounts()


class TestRecompute:
    def test_only_requested_identities_change(self) -> None:
        fighters = [
            FighterRecord(id=1, name="Alice", platform=Platform.PC, wins=9),
            FighterRecord(id=2, name="Bob", platform=Platform.PC, wins=9),
        ]
        updated = RecordCalculator.recompute_fighters(fighters, LOG, {("alice", Platform.PC)})
        assert updated[0].counts == RecordCounts(wins=1, losses=1, draws=1, ko_wins=1)
        assert updated[1] is fighters[1]

    def test_find_drift_reports_stale_fighters(self) -> None:
        fighters = [
            FighterRecord(id=1, name="Alice", platform=Platform.PC, wins=1, losses=1, draws=1, ko_wins=1),
            FighterRecord(id=3, name="Carol", platform=Platform.PC),
        ]
        drift = RecordCalculator.find_drift(fighters, LOG)
        assert [(f.name, expected) for f, expected in drift] == [("Carol", RecordCounts(draws=1))]
