from typing import Dict, Iterable, List, Optional
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy import select, delete
from sqlalchemy.exc import SQLAlchemyError
from contextlib import asynccontextmanager

from rankbot.config import Config
from rankbot.database.models import Base, Fighter, Fight, Champion, Platform
from rankbot.data_models.records import FighterRecord, FightRecord, StoreSnapshot
from rankbot.utils.exceptions import StoreUnavailableError, InvalidReferenceError
from rankbot.utils.logger import setup_logger

class Database:
    """Entity store for fighters, the fight log and the champion registry.

    Every store method takes an optional session. When one is passed the caller
    owns the transaction; otherwise the method runs in its own transaction.
    """

    def __init__(self, database_url: str = None):
        self.logger = setup_logger(__name__)
        self.database_url = database_url or Config.DATABASE_URL
        self.engine = None
        self.async_session = None

    @property
    def session_factory(self):
        return self.async_session

    async def initialize(self):
        """Initialize the database connection and create tables"""
        self.logger.info("Initializing database...")

        # Convert sqlite URL to async if needed
        database_url = self.database_url
        if database_url.startswith('sqlite:///'):
            database_url = database_url.replace('sqlite:///', 'sqlite+aiosqlite:///')

        try:
            self.engine = create_async_engine(
                database_url,
                echo=Config.DEBUG,
                future=True
            )

            self.async_session = async_sessionmaker(
                self.engine,
                class_=AsyncSession,
                expire_on_commit=False
            )

            async with self.engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
        except (SQLAlchemyError, OSError) as e:
            raise StoreUnavailableError("initialize", str(e)) from e

        self.logger.info("Database initialized successfully")

    @asynccontextmanager
    async def get_session(self):
        """Get a database session"""
        async with self.async_session() as session:
            try:
                yield session
            except Exception:
                await session.rollback()
                raise
            finally:
                await session.close()

    @asynccontextmanager
    async def transaction(self):
        """
        Create a transaction boundary for atomic operations.

        All operations within the context commit together on success or roll
        back together on failure. Driver errors surface as StoreUnavailableError.

        Usage:
            async with db.transaction() as session:
                await db.append_fight(record, session=session)
                await db.upsert_fighter(updated, session=session)
                # Both commit together here
        """
        if self.async_session is None:
            raise StoreUnavailableError("transaction", "database not initialized")

        async with self.async_session() as session:
            try:
                yield session
                await session.commit()
            except (SQLAlchemyError, OSError) as e:
                await session.rollback()
                raise StoreUnavailableError("transaction", str(e)) from e
            except Exception:
                await session.rollback()
                raise
            finally:
                await session.close()

    @asynccontextmanager
    async def _get_session_context(self, session: Optional[AsyncSession] = None):
        """
        Provides a session context. Uses the provided session if available,
        otherwise creates and manages a new transaction.
        """
        if session:
            try:
                yield session
            except (SQLAlchemyError, OSError) as e:
                raise StoreUnavailableError("store operation", str(e)) from e
        else:
            async with self.transaction() as new_session:
                yield new_session

    async def close(self):
        """Close the database connection"""
        if self.engine:
            await self.engine.dispose()
            self.logger.info("Database connection closed")

    # Conversions

    @staticmethod
    def _to_fighter_record(row: Fighter) -> FighterRecord:
        return FighterRecord(
            id=row.id,
            name=row.name,
            platform=row.platform,
            wins=row.wins or 0,
            losses=row.losses or 0,
            draws=row.draws or 0,
            ko_wins=row.ko_wins or 0
        )

    @staticmethod
    def _to_fight_record(row: Fight) -> FightRecord:
        return FightRecord(
            id=row.id,
            fighter1=row.fighter1,
            fighter2=row.fighter2,
            winner=row.winner,
            method=row.method,
            platform=row.platform,
            date=row.date
        )

    # Reads

    async def list_fighters(self, session: Optional[AsyncSession] = None) -> List[FighterRecord]:
        """All fighters in storage order"""
        async with self._get_session_context(session) as s:
            result = await s.execute(select(Fighter).order_by(Fighter.id))
            return [self._to_fighter_record(row) for row in result.scalars().all()]

    async def list_fights(self, session: Optional[AsyncSession] = None) -> List[FightRecord]:
        """The full fight log in insertion order"""
        async with self._get_session_context(session) as s:
            result = await s.execute(select(Fight).order_by(Fight.id))
            return [self._to_fight_record(row) for row in result.scalars().all()]

    async def get_champions(self, session: Optional[AsyncSession] = None) -> Dict[Platform, str]:
        async with self._get_session_context(session) as s:
            result = await s.execute(select(Champion))
            return {row.platform: row.fighter_name for row in result.scalars().all()}

    async def get_champion(self, platform: Platform, session: Optional[AsyncSession] = None) -> Optional[str]:
        async with self._get_session_context(session) as s:
            row = await s.get(Champion, platform)
            return row.fighter_name if row else None

    async def load_snapshot(self, session: Optional[AsyncSession] = None) -> StoreSnapshot:
        """Read fighters, fights and champions through a single session"""
        async with self._get_session_context(session) as s:
            fighters = await self.list_fighters(session=s)
            fights = await self.list_fights(session=s)
            champions = await self.get_champions(session=s)
        return StoreSnapshot(fighters=tuple(fighters), fights=tuple(fights), champions=champions)

    # Writes

    async def upsert_fighter(self, record: FighterRecord, session: Optional[AsyncSession] = None) -> FighterRecord:
        """Insert a new fighter (id None) or overwrite an existing one by id"""
        async with self._get_session_context(session) as s:
            if record.id is None:
                row = Fighter(platform=record.platform)
                s.add(row)
            else:
                row = await s.get(Fighter, record.id)
                if row is None:
                    raise InvalidReferenceError(f"fighter #{record.id}")

            row.name = record.name
            row.platform = record.platform
            row.wins = record.wins
            row.losses = record.losses
            row.draws = record.draws
            row.ko_wins = record.ko_wins

            await s.flush()
            return self._to_fighter_record(row)

    async def delete_fighter(self, fighter_id: int, session: Optional[AsyncSession] = None) -> None:
        async with self._get_session_context(session) as s:
            await s.execute(delete(Fighter).where(Fighter.id == fighter_id))

    async def append_fight(self, record: FightRecord, session: Optional[AsyncSession] = None) -> int:
        """Append to the fight log and return the assigned id"""
        async with self._get_session_context(session) as s:
            row = Fight(
                fighter1=record.fighter1,
                fighter2=record.fighter2,
                winner=record.winner,
                method=record.method,
                platform=record.platform,
                date=record.date
            )
            s.add(row)
            await s.flush()
            return row.id

    async def update_fight(self, fight_id: int, record: FightRecord, session: Optional[AsyncSession] = None) -> None:
        async with self._get_session_context(session) as s:
            row = await s.get(Fight, fight_id)
            if row is None:
                raise InvalidReferenceError(f"fight #{fight_id}")
            row.fighter1 = record.fighter1
            row.fighter2 = record.fighter2
            row.winner = record.winner
            row.method = record.method
            row.platform = record.platform
            row.date = record.date
            await s.flush()

    async def delete_fight(self, fight_id: int, session: Optional[AsyncSession] = None) -> None:
        async with self._get_session_context(session) as s:
            await s.execute(delete(Fight).where(Fight.id == fight_id))

    async def delete_fights(self, fight_ids: Iterable[int], session: Optional[AsyncSession] = None) -> None:
        fight_ids = list(fight_ids)
        if not fight_ids:
            return
        async with self._get_session_context(session) as s:
            await s.execute(delete(Fight).where(Fight.id.in_(fight_ids)))

    async def set_champion(self, platform: Platform, name: Optional[str], session: Optional[AsyncSession] = None) -> None:
        """Assign the platform's champion slot; None empties it"""
        async with self._get_session_context(session) as s:
            row = await s.get(Champion, platform)
            if name is None:
                if row is not None:
                    await s.delete(row)
            elif row is None:
                s.add(Champion(platform=platform, fighter_name=name))
            else:
                row.fighter_name = name
            await s.flush()
