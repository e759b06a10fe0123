"""
Ranking service: read-only views over the current store snapshot.

Provides platform leaderboards, fighter profiles and search. Nothing here
writes to the store.
"""

import logging
from datetime import date
from typing import List, Optional, Union

from rankbot.config import Config
from rankbot.data_models.leaderboard import FighterProfile, RankingBoard
from rankbot.data_models.records import FighterRecord, FightRecord
from rankbot.database.models import Platform
from rankbot.operations.identity_operations import IdentityNormalizer
from rankbot.services.snapshot import SnapshotService
from rankbot.utils.identity import identity_key, parse_platform
from rankbot.utils.ranking import RankingCalculator
from rankbot.utils.record_calculator import RecordCalculator

logger = logging.getLogger(__name__)


class RankingService:
    """Leaderboards and lookups for the command layer."""

    def __init__(self, snapshots: SnapshotService):
        self.snapshots = snapshots

    async def get_ranking(
        self,
        platform: Union[Platform, str],
        as_of: Optional[date] = None,
        limit: Optional[int] = None
    ) -> RankingBoard:
        """Champion plus the ordered top contenders for a platform."""
        platform = parse_platform(platform)
        snapshot, degraded = await self.snapshots.current()
        as_of = as_of or date.today()

        champion = snapshot.champion_of(platform)
        contenders = RankingCalculator.rank_contenders(
            snapshot.fighters,
            snapshot.fights,
            platform,
            champion_name=champion.name if champion else None,
            as_of=as_of,
            limit=Config.RANKING_SIZE if limit is None else limit
        )
        logger.debug(
            f"Ranking {platform.value}: champion={champion.name if champion else None}, "
            f"contenders={[entry.fighter.name for entry in contenders]}"
        )
        return RankingBoard(
            platform=platform,
            champion=champion,
            contenders=contenders,
            as_of=as_of,
            degraded=degraded
        )

    async def get_fighter_profile(self, name: str, platform: Union[Platform, str]) -> FighterProfile:
        """Fighter, log-derived counts, champion flag and fights newest first."""
        platform = parse_platform(platform)
        snapshot, degraded = await self.snapshots.current()
        fighter = IdentityNormalizer.resolve(snapshot, name, platform)

        fights = [f for f in snapshot.fights_on(platform) if f.involves(fighter.name)]
        fights.sort(key=lambda f: (f.date, f.id or 0), reverse=True)

        return FighterProfile(
            fighter=fighter,
            counts=RecordCalculator.calculate_counts(fighter.name, platform, fights),
            is_champion=snapshot.is_champion(fighter),
            fights=fights,
            degraded=degraded
        )

    async def list_fighters(self, platform: Union[Platform, str, None] = None) -> List[FighterRecord]:
        snapshot, _ = await self.snapshots.current()
        if platform is None:
            return list(snapshot.fighters)
        return list(snapshot.fighters_on(parse_platform(platform)))

    async def search_fighters(
        self,
        query: str,
        platform: Union[Platform, str, None] = None
    ) -> List[FighterRecord]:
        """Case-insensitive substring match on fighter names."""
        needle = identity_key(query)
        fighters = await self.list_fighters(platform)
        return [f for f in fighters if needle in identity_key(f.name)]

    async def search_fights(
        self,
        query: str,
        platform: Union[Platform, str, None] = None
    ) -> List[FightRecord]:
        """Case-insensitive substring match on fighter1, fighter2 or winner."""
        needle = identity_key(query)
        snapshot, _ = await self.snapshots.current()
        fights = snapshot.fights if platform is None else snapshot.fights_on(parse_platform(platform))
        return [
            f for f in fights
            if needle in identity_key(f.fighter1)
            or needle in identity_key(f.fighter2)
            or needle in identity_key(f.winner)
        ]
