"""
Shared-secret admin access for write commands.

A user unlocks admin mode by presenting the shared secret; the unlock expires
after Config.ADMIN_SESSION_MINUTES.
"""

import asyncio
import hmac
import time
import logging
from typing import Dict, Optional

from rankbot.config import Config
from rankbot.utils.exceptions import AdminAuthError

logger = logging.getLogger(__name__)

class AdminAuthService:
    """In-memory registry of users currently unlocked for admin commands."""

    def __init__(self, secret: Optional[str] = None, session_minutes: Optional[int] = None):
        self._secret = secret if secret is not None else Config.ADMIN_SECRET
        minutes = Config.ADMIN_SESSION_MINUTES if session_minutes is None else session_minutes
        self._session_seconds = minutes * 60
        self._unlocked: Dict[int, float] = {}  # user_id -> expiry (monotonic)
        self._lock = asyncio.Lock()

    async def unlock(self, user_id: int, secret: str) -> None:
        """Unlock admin mode for user_id; AdminAuthError on a wrong secret."""
        if not self._secret or not hmac.compare_digest(
            (secret or "").encode("utf-8"), self._secret.encode("utf-8")
        ):
            logger.warning(f"Rejected admin unlock attempt by user {user_id}")
            raise AdminAuthError()

        async with self._lock:
            self._unlocked[user_id] = time.monotonic() + self._session_seconds
        logger.info(f"Admin mode unlocked for user {user_id}")

    async def lock(self, user_id: int) -> None:
        async with self._lock:
            self._unlocked.pop(user_id, None)
        logger.info(f"Admin mode locked for user {user_id}")

    async def is_unlocked(self, user_id: int) -> bool:
        now = time.monotonic()
        async with self._lock:
            # Drop expired sessions
            for uid in [uid for uid, expiry in self._unlocked.items() if expiry <= now]:
                del self._unlocked[uid]
            return user_id in self._unlocked
