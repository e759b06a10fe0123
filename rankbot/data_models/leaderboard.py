"""
Leaderboard data models for platform rankings and fighter profiles.

Provides immutable data transfer objects for the read side of the engine.
"""

from dataclasses import dataclass
from datetime import date
from typing import List, Optional

from rankbot.data_models.records import FighterRecord, FightRecord, RecordCounts
from rankbot.database.models import Platform


@dataclass(frozen=True)
class RankingEntry:
    """Single contender row."""
    rank: int
    fighter: FighterRecord
    base_score: int
    recent_wins: int
    score: int


@dataclass(frozen=True)
class RankingBoard:
    """Champion plus ordered contenders for one platform."""
    platform: Platform
    champion: Optional[FighterRecord]
    contenders: List[RankingEntry]
    as_of: date
    degraded: bool = False

    @property
    def fighters(self) -> List[FighterRecord]:
        return [entry.fighter for entry in self.contenders]


@dataclass(frozen=True)
class FighterProfile:
    """Fighter with stats recomputed from the log and their fights."""
    fighter: FighterRecord
    counts: RecordCounts
    is_champion: bool
    fights: List[FightRecord]
    degraded: bool = False
