"""
Identity Operations Module

Fighters are referenced by name inside the fight log and the champion
registry, so renaming or deleting a fighter touches three collections.
IdentityNormalizer is the only component allowed to change the name of a
stored fighter.

Key functionality:
- resolve(): name -> stored FighterRecord (case-insensitive)
- rename(): fighter row + fight log + champion slot, one transaction
- delete(): cascading delete of the fighter, their fights and their title

Both writes expect the caller's session; the caller's transaction is the
atomicity boundary.
"""

from typing import List, Optional, Tuple
from dataclasses import replace
from sqlalchemy.ext.asyncio import AsyncSession

from rankbot.data_models.records import FighterRecord, FightRecord, StoreSnapshot
from rankbot.database.models import Platform
from rankbot.utils.exceptions import DuplicateIdentityError, InvalidReferenceError
from rankbot.utils.identity import identity_key, validate_fighter_name
from rankbot.utils.logger import setup_logger

logger = setup_logger(__name__)


class IdentityNormalizer:
    """Name <-> fighter mapping and the multi-record writes that change it."""

    def __init__(self, database):
        """Initialize with database instance"""
        self.db = database
        self.logger = logger

    @staticmethod
    def resolve(snapshot: StoreSnapshot, name: str, platform: Platform) -> FighterRecord:
        """Return the stored fighter for (name, platform) or raise InvalidReferenceError."""
        fighter = snapshot.find_fighter(name, platform)
        if fighter is None:
            raise InvalidReferenceError(name, platform.display_name)
        return fighter

    @staticmethod
    def ensure_available(
        snapshot: StoreSnapshot,
        name: str,
        platform: Platform,
        exclude_id: Optional[int] = None
    ) -> None:
        """Raise DuplicateIdentityError if another fighter already holds (name, platform)."""
        existing = snapshot.find_fighter(name, platform)
        if existing is not None and existing.id != exclude_id:
            raise DuplicateIdentityError(existing.name, platform.display_name)

    async def rename(
        self,
        snapshot: StoreSnapshot,
        old_name: str,
        new_name: str,
        platform: Platform,
        session: AsyncSession
    ) -> FighterRecord:
        """
        Move a fighter to a new name, rewriting the fight log and champion slot.

        Args:
            snapshot: State read inside the caller's transaction
            old_name: Current name (case-insensitive)
            new_name: Desired name
            platform: Platform of the fighter
            session: Caller's transaction

        Returns:
            The renamed FighterRecord (aggregates unchanged)

        Raises:
            InvalidReferenceError: old_name does not exist on the platform
            DuplicateIdentityError: new_name belongs to another fighter
            FighterValidationError: new_name is empty or reserved
        """
        fighter = self.resolve(snapshot, old_name, platform)
        new_name = validate_fighter_name(new_name)
        self.ensure_available(snapshot, new_name, platform, exclude_id=fighter.id)

        old_key = identity_key(fighter.name)

        # (a) fighter row
        renamed = await self.db.upsert_fighter(replace(fighter, name=new_name), session=session)

        # (b) fight log
        rewritten = 0
        for fight in snapshot.fights_on(platform):
            updated = self._rewrite_fight(fight, old_key, new_name)
            if updated is not fight:
                await self.db.update_fight(fight.id, updated, session=session)
                rewritten += 1

        # (c) champion registry
        champion = snapshot.champions.get(platform)
        if champion and identity_key(champion) == old_key:
            await self.db.set_champion(platform, new_name, session=session)

        self.logger.info(
            f"Renamed fighter {fighter.id} '{fighter.name}' -> '{new_name}' on {platform.value} "
            f"({rewritten} fights rewritten)"
        )
        return renamed

    @staticmethod
    def _rewrite_fight(fight: FightRecord, old_key: str, new_name: str) -> FightRecord:
        changes = {}
        if identity_key(fight.fighter1) == old_key:
            changes["fighter1"] = new_name
        if identity_key(fight.fighter2) == old_key:
            changes["fighter2"] = new_name
        if identity_key(fight.winner) == old_key:
            changes["winner"] = new_name
        if not changes:
            return fight
        return replace(fight, **changes)

    async def delete(
        self,
        snapshot: StoreSnapshot,
        name: str,
        platform: Platform,
        session: AsyncSession
    ) -> Tuple[FighterRecord, List[FightRecord]]:
        """
        Remove a fighter, every fight referencing them on the platform and
        their champion slot.

        Returns:
            (deleted fighter, removed fights)
        """
        fighter = self.resolve(snapshot, name, platform)

        removed = [f for f in snapshot.fights_on(platform) if f.involves(fighter.name)]
        await self.db.delete_fights([f.id for f in removed], session=session)
        await self.db.delete_fighter(fighter.id, session=session)

        if snapshot.is_champion(fighter):
            await self.db.set_champion(platform, None, session=session)
            self.logger.info(f"Cleared {platform.value} champion slot held by '{fighter.name}'")

        self.logger.info(
            f"Deleted fighter {fighter.id} '{fighter.name}' on {platform.value} "
            f"({len(removed)} fights removed)"
        )
        return fighter, removed
