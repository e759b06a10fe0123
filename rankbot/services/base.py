"""
Base service class for the UFL records bot.

Provides access to the entity store and retry logic for store reads.
"""

import asyncio
import logging
from typing import Callable, Any

from rankbot.utils.exceptions import StoreUnavailableError

logger = logging.getLogger(__name__)

class BaseService:
    """Base class for services backed by the entity store."""

    def __init__(self, database, max_retries: int = 3):
        """
        Initialize base service with the store.

        Args:
            database: Database instance (entity store)
            max_retries: Attempts made by execute_with_retry
        """
        self.db = database
        self.max_retries = max_retries

    async def execute_with_retry(self, func: Callable, max_retries: int = None) -> Any:
        """Execute a function with automatic retry when the store is unavailable."""
        max_retries = max_retries or self.max_retries
        for attempt in range(max_retries):
            try:
                return await func()
            except StoreUnavailableError as e:
                if attempt == max_retries - 1:
                    raise
                logger.warning(f"Retry attempt {attempt + 1} for {func.__name__}: {e}")
                await asyncio.sleep(0.1 * (2 ** attempt))  # Exponential backoff
