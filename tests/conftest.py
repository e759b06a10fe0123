"""Shared pytest fixtures: a fresh SQLite-backed engine per test."""

import asyncio
from types import SimpleNamespace

import pytest

from rankbot.database.database import Database
from rankbot.operations.mutation_gateway import MutationGateway
from rankbot.services.rankings import RankingService
from rankbot.services.snapshot import SnapshotService


@pytest.fixture()
def run_engine(tmp_path):
    """
    Run an async scenario against a temporary store.

    The scenario receives a namespace with db, snapshots, gateway and
    rankings. Everything runs inside one event loop and the engine is
    closed afterwards.
    """
    database_url = f"sqlite+aiosqlite:///{tmp_path / 'records.db'}"

    def run(scenario, **snapshot_options):
        async def runner():
            db = Database(database_url)
            await db.initialize()
            snapshots = SnapshotService(db, **snapshot_options)
            engine = SimpleNamespace(
                db=db,
                snapshots=snapshots,
                gateway=MutationGateway(db, snapshots),
                rankings=RankingService(snapshots),
            )
            try:
                return await scenario(engine)
            finally:
                await db.close()

        return asyncio.run(runner())

    return run
