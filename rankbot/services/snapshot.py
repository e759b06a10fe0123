"""
Snapshot service: the single source of reads for the records engine.

Readers get immutable StoreSnapshot objects. The mutation gateway publishes a
fresh snapshot after every commit, so a reader sees either the pre- or the
post-mutation state. Reloads from the store run under the same write lock the
gateway holds, so a reload never observes a half-applied write.
"""

import asyncio
import time
from typing import Optional, Tuple

from rankbot.config import Config
from rankbot.data_models.records import StoreSnapshot
from rankbot.services.base import BaseService
from rankbot.utils.exceptions import StoreUnavailableError
from rankbot.utils.logger import setup_logger

logger = setup_logger(__name__)


class SnapshotService(BaseService):
    """Caches the current store snapshot with a TTL and optional fallback."""

    def __init__(
        self,
        database,
        ttl_seconds: Optional[int] = None,
        fallback_enabled: Optional[bool] = None,
        max_retries: int = 3
    ):
        super().__init__(database, max_retries=max_retries)
        self.ttl_seconds = Config.SNAPSHOT_TTL_SECONDS if ttl_seconds is None else ttl_seconds
        self.fallback_enabled = Config.STORE_FALLBACK_CACHE if fallback_enabled is None else fallback_enabled
        # Held by every writer and by reloads
        self.write_lock = asyncio.Lock()
        self._snapshot: Optional[StoreSnapshot] = None
        self._loaded_at: float = 0.0

    def _is_fresh(self) -> bool:
        if self._snapshot is None:
            return False
        return time.monotonic() - self._loaded_at < self.ttl_seconds

    def publish(self, snapshot: StoreSnapshot) -> None:
        """Replace the current snapshot (called after a successful commit)."""
        self._snapshot = snapshot
        self._loaded_at = time.monotonic()
        logger.debug(
            f"Published snapshot: {len(snapshot.fighters)} fighters, {len(snapshot.fights)} fights"
        )

    def invalidate(self) -> None:
        """Force the next read to reload, keeping the old snapshot as fallback."""
        self._loaded_at = 0.0

    async def _reload(self) -> StoreSnapshot:
        snapshot = await self.db.load_snapshot()
        self.publish(snapshot)
        return snapshot

    async def current(self) -> Tuple[StoreSnapshot, bool]:
        """
        Return (snapshot, degraded).

        degraded is True when the store failed and the last good snapshot was
        served instead. Without a fallback snapshot the StoreUnavailableError
        propagates.
        """
        if self._is_fresh():
            return self._snapshot, False

        try:
            async with self.write_lock:
                # Another reader may have reloaded while we waited
                if self._is_fresh():
                    return self._snapshot, False
                snapshot = await self.execute_with_retry(self._reload)
        except StoreUnavailableError as e:
            if self.fallback_enabled and self._snapshot is not None:
                logger.warning(f"Store unavailable, serving cached snapshot (degraded mode): {e}")
                return self._snapshot, True
            logger.error(f"Store unavailable and no fallback snapshot: {e}")
            raise

        return snapshot, False
