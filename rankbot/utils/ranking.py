"""
Contender ranking for a single platform.

Score is 5*wins - 2*losses + 2*ko_wins, plus a bonus for every win inside the
recency window. Head-to-head results override score entirely: if A has beaten B
more often than B has beaten A, A ranks above B whatever their scores. The
head-to-head relation can be cyclic (A > B > C > A); no cycle resolution is
attempted, the stable sort simply produces whatever order the pairwise
comparator yields.
"""

from collections import defaultdict
from datetime import date, timedelta
from functools import cmp_to_key
from typing import Dict, Iterable, List, Optional

from rankbot.config import Config
from rankbot.constants import ScoringConstants
from rankbot.data_models.leaderboard import RankingEntry
from rankbot.data_models.records import FighterRecord, FightRecord
from rankbot.database.models import Platform
from rankbot.utils.identity import identity_key

HeadToHead = Dict[str, Dict[str, int]]


class RankingCalculator:
    """Pure ranking logic shared by the ranking service and tests."""

    @staticmethod
    def base_score(fighter: FighterRecord) -> int:
        return (
            ScoringConstants.WIN_POINTS * fighter.wins
            - ScoringConstants.LOSS_PENALTY * fighter.losses
            + ScoringConstants.KO_WIN_POINTS * fighter.ko_wins
        )

    @staticmethod
    def recent_win_counts(
        fights: Iterable[FightRecord],
        platform: Platform,
        as_of: date,
        window_days: int
    ) -> Dict[str, int]:
        """
        Count wins per fighter dated on or after as_of - window_days.

        Fights dated after as_of also count.
        """
        cutoff = as_of - timedelta(days=window_days)
        counts: Dict[str, int] = defaultdict(int)
        for fight in fights:
            if fight.platform != platform or fight.is_draw:
                continue
            if fight.date >= cutoff:
                counts[identity_key(fight.winner)] += 1
        return dict(counts)

    @staticmethod
    def head_to_head(fights: Iterable[FightRecord], platform: Platform) -> HeadToHead:
        """beats[winner][loser] over every non-draw fight on the platform."""
        beats: HeadToHead = defaultdict(lambda: defaultdict(int))
        for fight in fights:
            if fight.platform != platform or fight.is_draw:
                continue
            beats[identity_key(fight.winner)][identity_key(fight.loser)] += 1
        return beats

    @staticmethod
    def compare(a: RankingEntry, b: RankingEntry, beats: HeadToHead) -> int:
        """Negative when a ranks above b."""
        a_key = identity_key(a.fighter.name)
        b_key = identity_key(b.fighter.name)
        a_over_b = beats.get(a_key, {}).get(b_key, 0)
        b_over_a = beats.get(b_key, {}).get(a_key, 0)

        if a_over_b != b_over_a:
            return b_over_a - a_over_b
        return b.score - a.score

    @staticmethod
    def rank_contenders(
        fighters: Iterable[FighterRecord],
        fights: Iterable[FightRecord],
        platform: Platform,
        champion_name: Optional[str] = None,
        as_of: Optional[date] = None,
        limit: Optional[int] = None,
        window_days: Optional[int] = None
    ) -> List[RankingEntry]:
        """
        Produce the ordered contender list for one platform.

        Args:
            fighters: All fighters (other platforms are filtered out)
            fights: Fight log
            platform: Platform to rank
            champion_name: Reigning champion, excluded from contenders
            as_of: Reference day for the recency window (defaults to today)
            limit: Number of contenders to keep (defaults to Config.RANKING_SIZE)
            window_days: Recency window (defaults to Config.RECENCY_WINDOW_DAYS)

        Returns:
            RankingEntry list with 1-based ranks
        """
        as_of = as_of or date.today()
        limit = Config.RANKING_SIZE if limit is None else limit
        window_days = Config.RECENCY_WINDOW_DAYS if window_days is None else window_days
        champion_key = identity_key(champion_name) if champion_name else None
        fights = [f for f in fights if f.platform == platform]

        recent = RankingCalculator.recent_win_counts(fights, platform, as_of, window_days)
        beats = RankingCalculator.head_to_head(fights, platform)

        entries = []
        for fighter in fighters:
            if fighter.platform != platform:
                continue
            key = identity_key(fighter.name)
            if key == champion_key:
                continue
            base = RankingCalculator.base_score(fighter)
            recent_wins = recent.get(key, 0)
            entries.append(RankingEntry(
                rank=0,
                fighter=fighter,
                base_score=base,
                recent_wins=recent_wins,
                score=base + ScoringConstants.RECENT_WIN_BONUS * recent_wins
            ))

        ordered = sorted(entries, key=cmp_to_key(lambda a, b: RankingCalculator.compare(a, b, beats)))

        return [
            RankingEntry(
                rank=position,
                fighter=entry.fighter,
                base_score=entry.base_score,
                recent_wins=entry.recent_wins,
                score=entry.score
            )
            for position, entry in enumerate(ordered[:limit], start=1)
        ]
