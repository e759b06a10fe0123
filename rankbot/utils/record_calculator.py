from typing import Iterable, List, Optional, Set, Tuple

from rankbot.data_models.records import FighterRecord, FightRecord, IdentityKey, RecordCounts
from rankbot.database.models import Platform, FightMethod
from rankbot.utils.identity import identity_key


class RecordCalculator:
    """Derives fighter aggregates from the fight log"""

    @staticmethod
    def calculate_counts(name: str, platform: Platform, fights: Iterable[FightRecord]) -> RecordCounts:
        """
        Fold the fight log into win/loss/draw/KO counts for one fighter

        Args:
            name: Fighter name (compared case-insensitively)
            platform: Fighter platform; fights on other platforms are ignored
            fights: Full or partial fight log

        Returns:
            RecordCounts for the fighter
        """
        key = identity_key(name)
        wins = losses = draws = ko_wins = 0

        for fight in fights:
            if fight.platform != platform or not fight.involves(name):
                continue
            if identity_key(fight.winner) == key:
                wins += 1
                if fight.method == FightMethod.KO:
                    ko_wins += 1
            elif fight.is_draw:
                draws += 1
            else:
                losses += 1

        return RecordCounts(wins=wins, losses=losses, draws=draws, ko_wins=ko_wins)

    @staticmethod
    def recompute_fighters(
        fighters: Iterable[FighterRecord],
        fights: Iterable[FightRecord],
        identities: Optional[Set[IdentityKey]] = None
    ) -> List[FighterRecord]:
        """
        Recompute cached aggregates for the given identities (all when None)

        Fighters outside `identities` are returned unchanged. Order is preserved.
        """
        fights = list(fights)
        updated = []
        for fighter in fighters:
            if identities is not None and fighter.identity not in identities:
                updated.append(fighter)
                continue
            counts = RecordCalculator.calculate_counts(fighter.name, fighter.platform, fights)
            updated.append(fighter.with_counts(counts))
        return updated

    @staticmethod
    def find_drift(
        fighters: Iterable[FighterRecord],
        fights: Iterable[FightRecord]
    ) -> List[Tuple[FighterRecord, RecordCounts]]:
        """Return (fighter, expected counts) for every fighter whose cached counts disagree with the log."""
        fights = list(fights)
        drifted = []
        for fighter in fighters:
            expected = RecordCalculator.calculate_counts(fighter.name, fighter.platform, fights)
            if expected != fighter.counts:
                drifted.append((fighter, expected))
        return drifted
