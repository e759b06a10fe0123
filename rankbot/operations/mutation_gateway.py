"""
Mutation Gateway

Every write to fighters, fights or champions goes through MutationGateway.
Each operation is one critical section: acquire the write lock, open one
transaction, read the current state, validate, write, recompute the affected
fighters from the fight log, commit, then publish the new snapshot.

Validation errors are raised before the first write, and the transaction is
rolled back on any error, so a rejected call leaves the store untouched.
If the store fails mid-operation the gateway marks itself for repair and the
next write first runs a verification pass over the whole store.
"""

from datetime import date
from typing import Any, Awaitable, Callable, Dict, Optional, Set, Tuple, Union
from dataclasses import dataclass, field, replace
from sqlalchemy.ext.asyncio import AsyncSession

from rankbot.data_models.records import (
    FighterRecord, FightRecord, IdentityKey, MutationResult, StoreSnapshot
)
from rankbot.database.models import Platform, FightMethod
from rankbot.operations.identity_operations import IdentityNormalizer
from rankbot.services.snapshot import SnapshotService
from rankbot.constants import RecordConstants
from rankbot.utils.exceptions import (
    RecordsValidationError, StoreUnavailableError, InvalidReferenceError,
    SelfFightError, InconsistentMethodError, FighterValidationError, FightValidationError
)
from rankbot.utils.identity import (
    canonical_name, identity_key, is_draw, validate_fighter_name,
    parse_platform, parse_method, parse_fight_date
)
from rankbot.utils.record_calculator import RecordCalculator
from rankbot.utils.logger import setup_logger

logger = setup_logger(__name__)

EDITABLE_FIGHT_FIELDS = ("fighter1", "fighter2", "winner", "method", "platform", "date")


@dataclass
class _Outcome:
    """What an operation body hands back to _run."""
    affected: Set[IdentityKey] = field(default_factory=set)
    fighter: Optional[FighterRecord] = None
    fight: Optional[FightRecord] = None
    fight_id: Optional[int] = None


class MutationGateway:
    """Validates, sequences and persists every write to the records store."""

    def __init__(self, database, snapshots: SnapshotService):
        self.db = database
        self.snapshots = snapshots
        self.identity = IdentityNormalizer(database)
        self.logger = logger
        self._needs_repair = False

    @property
    def needs_repair(self) -> bool:
        return self._needs_repair

    async def _run(
        self,
        operation: str,
        body: Callable[[AsyncSession, StoreSnapshot], Awaitable[_Outcome]]
    ) -> MutationResult:
        async with self.snapshots.write_lock:
            if self._needs_repair:
                await self._repair_locked()

            try:
                async with self.db.transaction() as session:
                    before = await self.db.load_snapshot(session=session)
                    outcome = await body(session, before)
                    after, recomputed = await self._recompute(session, outcome.affected)
            except RecordsValidationError as e:
                self.logger.info(f"Rejected {operation}: {e}")
                raise
            except StoreUnavailableError as e:
                self._needs_repair = True
                self.snapshots.invalidate()
                self.logger.error(f"Store failure during {operation}, repair scheduled: {e}")
                raise

            self.snapshots.publish(after)

        fight = outcome.fight
        if outcome.fight_id is not None:
            fight = after.find_fight(outcome.fight_id) or fight
        fighter = outcome.fighter
        if fighter is not None and fighter.id is not None:
            fighter = next((f for f in after.fighters if f.id == fighter.id), fighter)

        return MutationResult(
            operation=operation,
            snapshot=after,
            fighter=fighter,
            fight=fight,
            recomputed=tuple(recomputed)
        )

    async def _recompute(
        self,
        session: AsyncSession,
        affected: Optional[Set[IdentityKey]]
    ) -> Tuple[StoreSnapshot, list]:
        """Re-derive aggregates for the affected identities (all when None) and persist changes."""
        current = await self.db.load_snapshot(session=session)
        if affected is not None and not affected:
            return current, []

        updated = RecordCalculator.recompute_fighters(current.fighters, current.fights, affected)
        changed = []
        for old, new in zip(current.fighters, updated):
            if affected is None or old.identity in affected:
                changed.append(new)
            if new.counts != old.counts:
                await self.db.upsert_fighter(new, session=session)

        return current.with_fighters(updated), changed

    # Validation helpers

    def _build_fight(
        self,
        snapshot: StoreSnapshot,
        fighter1: str,
        fighter2: str,
        winner: str,
        method: Union[FightMethod, str],
        platform: Union[Platform, str],
        fight_date: Union[date, str],
        fight_id: Optional[int] = None
    ) -> FightRecord:
        """Validate raw fight input and return it with canonical stored names."""
        platform = parse_platform(platform)
        method = parse_method(method)
        fight_date = parse_fight_date(fight_date)

        if not canonical_name(fighter1) or not canonical_name(fighter2) or not canonical_name(winner):
            raise FightValidationError(
                "Fight is missing a fighter or winner",
                "❌ Both fighters and a winner are required!"
            )

        if identity_key(fighter1) == identity_key(fighter2):
            raise SelfFightError(canonical_name(fighter1))

        first = IdentityNormalizer.resolve(snapshot, fighter1, platform)
        second = IdentityNormalizer.resolve(snapshot, fighter2, platform)

        draw = is_draw(winner)
        if (method == FightMethod.DRAW) != draw:
            raise InconsistentMethodError(method.value, canonical_name(winner))

        if draw:
            stored_winner = RecordConstants.DRAW
        elif identity_key(winner) == identity_key(first.name):
            stored_winner = first.name
        elif identity_key(winner) == identity_key(second.name):
            stored_winner = second.name
        else:
            raise InvalidReferenceError(canonical_name(winner), platform.display_name)

        return FightRecord(
            id=fight_id,
            fighter1=first.name,
            fighter2=second.name,
            winner=stored_winner,
            method=method,
            platform=platform,
            date=fight_date
        )

    @staticmethod
    def _find_fight(snapshot: StoreSnapshot, fight_id: int) -> FightRecord:
        fight = snapshot.find_fight(fight_id)
        if fight is None:
            raise InvalidReferenceError(f"fight #{fight_id}")
        return fight

    # Fighter operations

    async def add_fighter(self, name: str, platform: Union[Platform, str]) -> MutationResult:
        """Create a zero-record fighter; DuplicateIdentityError if (name, platform) exists."""
        name = validate_fighter_name(name)
        platform = parse_platform(platform)

        async def body(session, snapshot):
            IdentityNormalizer.ensure_available(snapshot, name, platform)
            created = await self.db.upsert_fighter(
                FighterRecord(id=None, name=name, platform=platform), session=session
            )
            return _Outcome(fighter=created)

        result = await self._run("add_fighter", body)
        self.logger.info(f"Added fighter '{name}' on {platform.value}")
        return result

    async def rename_fighter(self, old_name: str, new_name: str, platform: Union[Platform, str]) -> MutationResult:
        platform = parse_platform(platform)

        async def body(session, snapshot):
            renamed = await self.identity.rename(snapshot, old_name, new_name, platform, session)
            return _Outcome(affected={renamed.identity}, fighter=renamed)

        return await self._run("rename_fighter", body)

    async def delete_fighter(self, name: str, platform: Union[Platform, str]) -> MutationResult:
        """Cascading delete; opponents of the removed fights are recomputed."""
        platform = parse_platform(platform)

        async def body(session, snapshot):
            fighter, removed = await self.identity.delete(snapshot, name, platform, session)
            affected = set()
            for fight in removed:
                affected.update(fight.participants())
            affected.discard(fighter.identity)
            return _Outcome(affected=affected, fighter=fighter)

        return await self._run("delete_fighter", body)

    async def set_fighter_record(
        self,
        name: str,
        platform: Union[Platform, str],
        wins: int,
        losses: int,
        draws: int,
        ko_wins: int
    ) -> MutationResult:
        """
        Admin override of a fighter's cached counts.

        The override stands until the next recompute that touches the fighter;
        recompute_all() restores the log-derived values.
        """
        platform = parse_platform(platform)
        counts = {"wins": wins, "losses": losses, "draws": draws, "ko_wins": ko_wins}
        for label, value in counts.items():
            if isinstance(value, bool) or not isinstance(value, int) or value < 0:
                raise FighterValidationError(
                    f"{label} must be a non-negative integer, got {value!r}",
                    f"❌ {label} must be zero or more!"
                )
        if ko_wins > wins:
            raise FighterValidationError(
                f"ko_wins ({ko_wins}) exceeds wins ({wins})",
                "❌ KO wins cannot exceed wins!"
            )

        async def body(session, snapshot):
            fighter = IdentityNormalizer.resolve(snapshot, name, platform)
            updated = await self.db.upsert_fighter(replace(fighter, **counts), session=session)
            self.logger.warning(
                f"Manual record override for '{fighter.name}' on {platform.value}: "
                f"{fighter.record_line()} -> {updated.record_line()}"
            )
            return _Outcome(fighter=updated)

        return await self._run("set_fighter_record", body)

    # Fight operations

    async def add_fight(
        self,
        fighter1: str,
        fighter2: str,
        winner: str,
        method: Union[FightMethod, str],
        platform: Union[Platform, str],
        fight_date: Union[date, str]
    ) -> MutationResult:
        """Append a fight and recompute both participants."""

        async def body(session, snapshot):
            record = self._build_fight(snapshot, fighter1, fighter2, winner, method, platform, fight_date)
            fight_id = await self.db.append_fight(record, session=session)
            self.logger.info(f"Added fight #{fight_id}: {record.summary()} [{record.platform.value}]")
            return _Outcome(
                affected=set(record.participants()),
                fight=replace(record, id=fight_id),
                fight_id=fight_id
            )

        return await self._run("add_fight", body)

    async def edit_fight(self, fight_id: int, **changes: Any) -> MutationResult:
        """
        Apply field changes to a fight, validating the merged record.

        Old and new participants are both recomputed so the previous
        contribution is undone.
        """
        unknown = set(changes) - set(EDITABLE_FIGHT_FIELDS)
        if unknown:
            raise FightValidationError(
                f"Unknown fight fields: {sorted(unknown)}",
                f"❌ Cannot edit: {', '.join(sorted(unknown))}"
            )

        async def body(session, snapshot):
            existing = self._find_fight(snapshot, fight_id)
            merged: Dict[str, Any] = {
                "fighter1": existing.fighter1,
                "fighter2": existing.fighter2,
                "winner": existing.winner,
                "method": existing.method,
                "platform": existing.platform,
                "fight_date": existing.date,
            }
            for key, value in changes.items():
                merged["fight_date" if key == "date" else key] = value

            record = self._build_fight(snapshot, fight_id=fight_id, **merged)
            await self.db.update_fight(fight_id, record, session=session)
            self.logger.info(f"Edited fight #{fight_id}: {existing.summary()} -> {record.summary()}")
            return _Outcome(
                affected=set(existing.participants()) | set(record.participants()),
                fight=record,
                fight_id=fight_id
            )

        return await self._run("edit_fight", body)

    async def delete_fight(self, fight_id: int) -> MutationResult:
        """Remove a fight by id and recompute its two participants."""

        async def body(session, snapshot):
            existing = self._find_fight(snapshot, fight_id)
            await self.db.delete_fight(fight_id, session=session)
            self.logger.info(f"Deleted fight #{fight_id}: {existing.summary()}")
            return _Outcome(affected=set(existing.participants()), fight=existing)

        return await self._run("delete_fight", body)

    # Champion registry

    async def set_champion(self, platform: Union[Platform, str], name: str) -> MutationResult:
        platform = parse_platform(platform)

        async def body(session, snapshot):
            fighter = IdentityNormalizer.resolve(snapshot, name, platform)
            await self.db.set_champion(platform, fighter.name, session=session)
            self.logger.info(f"{platform.value} champion set to '{fighter.name}'")
            return _Outcome(fighter=fighter)

        return await self._run("set_champion", body)

    async def clear_champion(self, platform: Union[Platform, str]) -> MutationResult:
        platform = parse_platform(platform)

        async def body(session, snapshot):
            await self.db.set_champion(platform, None, session=session)
            self.logger.info(f"{platform.value} champion slot cleared")
            return _Outcome()

        return await self._run("clear_champion", body)

    # Maintenance

    async def recompute_all(self) -> MutationResult:
        """Re-derive every fighter's aggregates from the log."""

        async def body(session, snapshot):
            drift = RecordCalculator.find_drift(snapshot.fighters, snapshot.fights)
            for fighter, expected in drift:
                self.logger.info(
                    f"Recompute corrects '{fighter.name}' on {fighter.platform.value}: "
                    f"{fighter.record_line()} -> {expected.wins}-{expected.losses}-{expected.draws} "
                    f"({expected.ko_wins} KO)"
                )
            return _Outcome(affected={f.identity for f in snapshot.fighters})

        result = await self._run("recompute_all", body)
        self.logger.info(f"Recomputed {len(result.recomputed)} fighters")
        return result

    async def verify_and_repair(self) -> None:
        """Run the verification pass now, regardless of the repair flag."""
        async with self.snapshots.write_lock:
            await self._repair_locked()

    async def _repair_locked(self) -> None:
        """
        Bring the store back to a consistent state after a failed write.

        Drops fights whose fighters no longer exist, clears champion slots
        pointing at missing fighters and recomputes every fighter. Must be
        called with the write lock held.
        """
        self.logger.warning("Running store verification pass")
        async with self.db.transaction() as session:
            snapshot = await self.db.load_snapshot(session=session)

            dangling = [f for f in snapshot.fights if not self._fight_resolves(snapshot, f)]
            for fight in dangling:
                self.logger.warning(f"Removing dangling fight #{fight.id}: {fight.summary()}")
            await self.db.delete_fights([f.id for f in dangling], session=session)

            for platform, name in snapshot.champions.items():
                if snapshot.find_fighter(name, platform) is None:
                    self.logger.warning(f"Clearing {platform.value} champion slot held by missing '{name}'")
                    await self.db.set_champion(platform, None, session=session)

            after, _ = await self._recompute(session, None)

        self._needs_repair = False
        self.snapshots.publish(after)
        self.logger.info("Store verification pass complete")

    @staticmethod
    def _fight_resolves(snapshot: StoreSnapshot, fight: FightRecord) -> bool:
        if snapshot.find_fighter(fight.fighter1, fight.platform) is None:
            return False
        if snapshot.find_fighter(fight.fighter2, fight.platform) is None:
            return False
        return fight.is_draw or fight.involves(fight.winner)
