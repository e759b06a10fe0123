"""
Record data models for the fighter/fight engine.

Immutable data transfer objects passed between the store, the calculators and
the command layer. The engine never touches ORM rows directly.
"""

from dataclasses import dataclass, field, replace
from datetime import date
from typing import Dict, Optional, Tuple

from rankbot.constants import RecordConstants
from rankbot.database.models import Platform, FightMethod
from rankbot.utils.identity import identity_key, is_draw

# (identity_key(name), platform)
IdentityKey = Tuple[str, Platform]


@dataclass(frozen=True)
class RecordCounts:
    """Aggregates derived from the fight log."""
    wins: int = 0
    losses: int = 0
    draws: int = 0
    ko_wins: int = 0

    @property
    def total(self) -> int:
        return self.wins + self.losses + self.draws


@dataclass(frozen=True)
class FighterRecord:
    """Single fighter with cached aggregates."""
    id: Optional[int]
    name: str
    platform: Platform
    wins: int = 0
    losses: int = 0
    draws: int = 0
    ko_wins: int = 0

    @property
    def identity(self) -> IdentityKey:
        return (identity_key(self.name), self.platform)

    @property
    def counts(self) -> RecordCounts:
        return RecordCounts(self.wins, self.losses, self.draws, self.ko_wins)

    @property
    def total_fights(self) -> int:
        return self.wins + self.losses + self.draws

    def with_counts(self, counts: RecordCounts) -> "FighterRecord":
        return replace(
            self, wins=counts.wins, losses=counts.losses,
            draws=counts.draws, ko_wins=counts.ko_wins
        )

    def record_line(self) -> str:
        return f"{self.wins}-{self.losses}-{self.draws} ({self.ko_wins} KO)"


@dataclass(frozen=True)
class FightRecord:
    """Single entry of the fight log."""
    id: Optional[int]
    fighter1: str
    fighter2: str
    winner: str
    method: FightMethod
    platform: Platform
    date: date

    @property
    def is_draw(self) -> bool:
        return is_draw(self.winner)

    @property
    def loser(self) -> Optional[str]:
        """Name of the losing side, None for draws."""
        if self.is_draw:
            return None
        if identity_key(self.winner) == identity_key(self.fighter1):
            return self.fighter2
        return self.fighter1

    def involves(self, name: str) -> bool:
        key = identity_key(name)
        return key in (identity_key(self.fighter1), identity_key(self.fighter2))

    def participants(self) -> Tuple[IdentityKey, IdentityKey]:
        return (
            (identity_key(self.fighter1), self.platform),
            (identity_key(self.fighter2), self.platform),
        )

    def summary(self) -> str:
        if self.is_draw:
            outcome = RecordConstants.DRAW
        else:
            outcome = f"{self.winner} by {self.method.value}"
        return f"{self.fighter1} vs {self.fighter2}: {outcome} ({self.date.isoformat()})"


@dataclass(frozen=True)
class StoreSnapshot:
    """Consistent view of fighters, fights and champions at one point in time."""
    fighters: Tuple[FighterRecord, ...]
    fights: Tuple[FightRecord, ...]
    champions: Dict[Platform, str] = field(default_factory=dict)

    def fighters_on(self, platform: Platform) -> Tuple[FighterRecord, ...]:
        return tuple(f for f in self.fighters if f.platform == platform)

    def fights_on(self, platform: Platform) -> Tuple[FightRecord, ...]:
        return tuple(f for f in self.fights if f.platform == platform)

    def find_fighter(self, name: str, platform: Platform) -> Optional[FighterRecord]:
        key = identity_key(name)
        for fighter in self.fighters:
            if fighter.platform == platform and identity_key(fighter.name) == key:
                return fighter
        return None

    def find_fight(self, fight_id: int) -> Optional[FightRecord]:
        for fight in self.fights:
            if fight.id == fight_id:
                return fight
        return None

    def champion_of(self, platform: Platform) -> Optional[FighterRecord]:
        name = self.champions.get(platform)
        if not name:
            return None
        return self.find_fighter(name, platform)

    def is_champion(self, fighter: FighterRecord) -> bool:
        name = self.champions.get(fighter.platform)
        return bool(name) and identity_key(name) == identity_key(fighter.name)

    def with_fighters(self, fighters) -> "StoreSnapshot":
        return replace(self, fighters=tuple(fighters))


@dataclass(frozen=True)
class MutationResult:
    """Outcome of a write: the post-commit snapshot plus what was touched."""
    operation: str
    snapshot: StoreSnapshot
    fighter: Optional[FighterRecord] = None
    fight: Optional[FightRecord] = None
    recomputed: Tuple[FighterRecord, ...] = ()
