#!/usr/bin/env python3
"""
A data manager built from an async callable, with real cancellation of
the fetch in progress.

---
LazyBroadcast - Lazily-loaded data broadcasting

Author: Bastian Cerf
Copyright (C) 2025 Mecacerf SA
License: AGPL-3.0 <https://www.gnu.org/licenses/>
"""

# Standard libraries
import asyncio
import logging
from typing import Awaitable, Callable, Optional

# Internal libraries
from .data_manager import DataManager, T
from .manager_config import ManagerConfig

logger = logging.getLogger(__name__)


class CallableDataManager(DataManager[T]):
    """
    Data manager fetching its value with the given callable.

    Each fetch runs in its own task, which `cancel_fetch()` cancels.
    Clearing the cache also cancels the fetch in progress, so a value
    fetched before the clear is never published.
    """

    def __init__(
        self,
        fetcher: Callable[[], Awaitable[T]],
        config: Optional[ManagerConfig] = None,
    ):
        """
        Args:
            fetcher (Callable[[], Awaitable[T]]): Called without argument
                at each fetch, returns an awaitable resolving to the
                value.
            config (Optional[ManagerConfig]): Manager configuration.
        """
        super().__init__(config)
        self._fetcher = fetcher
        self._fetch_task: Optional[asyncio.Future[T]] = None

    async def fetch_data(self) -> T:
        self._fetch_task = asyncio.ensure_future(self._fetcher())
        return await self._fetch_task

    def cancel_fetch(self):
        """
        Cancel the fetch task if still running.
        """
        task = self._fetch_task
        if task is not None and not task.done():
            logger.debug(f"Cancelling fetch of '{type(self).__name__}'.")
            task.cancel()
        self._fetch_task = None

    def clear_cache(self):
        self.cancel_fetch()
        super().clear_cache()

    def teardown(self):
        logger.debug(f"Tearing down '{type(self).__name__}'.")
        super().teardown()
