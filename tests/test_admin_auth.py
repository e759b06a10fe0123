"""Tests for rankbot.services.admin_auth."""

import asyncio

import pytest

from rankbot.services.admin_auth import AdminAuthService
from rankbot.utils.exceptions import AdminAuthError


class TestAdminAuth:
    def test_unlock_and_lock(self) -> None:
        auth = AdminAuthService(secret="hunter2", session_minutes=60)

        async def scenario():
            await auth.unlock(42, "hunter2")
            unlocked = await auth.is_unlocked(42)
            other = await auth.is_unlocked(7)
            await auth.lock(42)
            return unlocked, other, await auth.is_unlocked(42)

        assert asyncio.run(scenario()) == (True, False, False)

    def test_wrong_secret_rejected(self) -> None:
        auth = AdminAuthService(secret="hunter2", session_minutes=60)

        async def scenario():
            with pytest.raises(AdminAuthError):
                await auth.unlock(42, "Hunter2")
            return await auth.is_unlocked(42)

        assert asyncio.run(scenario()) is False

    def test_no_configured_secret_never_unlocks(self) -> None:
        auth = AdminAuthService(secret="", session_minutes=60)

        with pytest.raises(AdminAuthError):
            asyncio.run(auth.unlock(42, ""))

    def test_session_expires(self) -> None:
        auth = AdminAuthService(secret="hunter2", session_minutes=0)

        async def scenario():
            await auth.unlock(42, "hunter2")
            return await auth.is_unlocked(42)

        assert asyncio.run(scenario()) is False
