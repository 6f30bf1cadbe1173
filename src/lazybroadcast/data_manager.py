#!/usr/bin/env python3
"""
An abstract manager broadcasting lazily-loaded data to its listeners.

Subclasses implement the `fetch_data()` coroutine, which typically
performs a network request. The manager caches the last fetched value,
prevents simultaneous fetches with an advisory lock and notifies every
registered listener once a fetch succeeds.

The first registered listener triggers the initial fetch. Subsequent
updates are triggered manually with `trigger_update()`.

---
LazyBroadcast - Lazily-loaded data broadcasting

Author: Bastian Cerf
Copyright (C) 2025 Mecacerf SA
License: AGPL-3.0 <https://www.gnu.org/licenses/>
"""

# Standard libraries
import asyncio
import logging
from abc import ABC, abstractmethod
from types import TracebackType
from typing import Callable, Generic, Optional, Self, Type, TypeVar

# Internal libraries
from .manager_config import ManagerConfig

logger = logging.getLogger(__name__)

T = TypeVar(name="T")  # Generic type declaration

Listener = Callable[[T], None]
ErrorHandler = Callable[[Exception], None]


class DataManager(ABC, Generic[T]):
    """
    Abstract data manager holding a value of type T.

    The manager is bound to the event loop it is used from and is not
    thread safe. Listeners are called synchronously, in registration
    order, once per successful update.
    """

    def __init__(self, config: Optional[ManagerConfig] = None):
        """
        Create the manager with no cached value.

        Args:
            config (Optional[ManagerConfig]): Manager configuration, the
                default configuration is used if `None`.
        """
        self._config = config if config is not None else ManagerConfig()
        self._value: Optional[T] = None
        self._listeners: list[Listener[T]] = []
        self._fetching = False
        self._generation = 0  # Incremented each time a fetch starts
        self._pending_update: Optional[asyncio.Task[None]] = None
        # Keep background updates referenced until they are done
        self._update_tasks: set[asyncio.Task[None]] = set()

    @abstractmethod
    async def fetch_data(self) -> T:
        """
        Retrieve the data. Called each time an update is triggered.

        Returns:
            T: The fetched value.

        Raises:
            Exception: Implementation-defined error on failure.
        """

    def cancel_fetch(self):
        """
        Try to abort the fetch in progress.

        Override this method to really cancel the fetch, for example by
        aborting a network request. It is needed when calling
        `trigger_update()` with `cancel_if_locked` enabled.
        """
        if self._fetching and self._config.warn_on_cancel:
            logger.warning(
                f"cancel_fetch() called on '{type(self).__name__}' while a "
                "fetch is in progress, but it is not implemented."
            )

    def teardown(self):
        """
        Release the manager. Overrides must call `super().teardown()`.
        """
        self.cancel_fetch()

    def clear_cache(self):
        """
        Unset the cached value.

        Overrides may also cancel a pending fetch tied to the value.
        """
        self._value = None

    async def trigger_update(
        self,
        on_error: Optional[ErrorHandler] = None,
        cancel_if_locked: Optional[bool] = None,
    ):
        """
        Update the cached value with `fetch_data()` and notify the
        listeners once finished.

        If an update is already in progress, this call does nothing
        unless `cancel_if_locked` is enabled. In this case the current
        fetch is canceled and a new one is started. A fetch completing
        after a newer one has started is discarded if the configuration
        enables `discard_stale`.

        Args:
            on_error (Optional[ErrorHandler]): Called with the error if
                anything went wrong. The error is raised if `None`.
            cancel_if_locked (Optional[bool]): `True` to cancel the
                current update and start a new one. Configuration
                default if `None`.

        Raises:
            Exception: Any error from the fetch or from a listener when
                no `on_error` handler is given.
        """
        if cancel_if_locked is None:
            cancel_if_locked = self._config.cancel_if_locked

        if self._fetching:
            if not cancel_if_locked:
                logger.debug(f"Update of '{type(self).__name__}' already running.")
                return
            self.cancel_fetch()

        self._generation += 1
        generation = self._generation
        self._fetching = True
        logger.debug(f"Fetch #{generation} of '{type(self).__name__}' started.")

        try:
            value = await self.fetch_data()

            if generation != self._generation and self._config.discard_stale:
                logger.info(
                    f"Fetch #{generation} of '{type(self).__name__}' completed "
                    f"after fetch #{self._generation} started, result discarded."
                )
                return

            self._value = value
            # Iterate a copy, listeners may unregister while notified
            for listener in list(self._listeners):
                listener(value)

        except asyncio.CancelledError:
            # Propagate if the task running this update is canceled
            current = asyncio.current_task()
            if current is not None and current.cancelling():
                raise
            logger.debug(f"Fetch #{generation} of '{type(self).__name__}' canceled.")

        except Exception as e:
            if on_error is None:
                raise
            on_error(e)

        finally:
            # Only the newest fetch owns the lock
            if generation == self._generation:
                self._fetching = False
            logger.debug(f"Fetch #{generation} of '{type(self).__name__}' ended.")

    def register_listener(
        self,
        listener: Listener[T],
        on_error: Optional[ErrorHandler] = None,
        update_if_empty: Optional[bool] = None,
    ) -> Optional[asyncio.Task[None]]:
        """
        Add a listener to the data changes.

        The listener is called immediately if a value is cached.
        Otherwise an update is started in the background, without
        waiting for it, and the listener is called once it succeeds.

        Args:
            listener (Listener[T]): The listener.
            on_error (Optional[ErrorHandler]): Called if the initial
                update fails.
            update_if_empty (Optional[bool]): `True` to start an update
                if no value is cached. Configuration default if `None`.

        Returns:
            Optional[asyncio.Task[None]]: The update task the listener
                waits for, if any. It is shared by the listeners
                registering while it runs, and only the first one's
                `on_error` is used.

        Raises:
            RuntimeError: An update must be started but no event loop is
                running.
        """
        if update_if_empty is None:
            update_if_empty = self._config.update_if_empty

        self._listeners.append(listener)

        if self.has_value:
            listener(self._value)
            return None

        if not update_if_empty:
            return None

        # A background update is already running, it will notify this
        # listener too
        pending = self._pending_update
        if pending is not None and not pending.done():
            return pending

        task = asyncio.get_running_loop().create_task(self.trigger_update(on_error))
        self._update_tasks.add(task)
        task.add_done_callback(self._update_tasks.discard)
        task.add_done_callback(self.__log_unobserved_error)
        self._pending_update = task
        return task

    def unregister_listener(self, listener: Listener[T]):
        """
        Stop notifying the given listener. Every occurrence is removed.
        """
        self._listeners = [x for x in self._listeners if x is not listener]

    async def wait_pending(self):
        """
        Wait for the last update started by `register_listener()`.

        Raises:
            Exception: The error of the update, if it failed.
        """
        if self._pending_update is not None:
            await self._pending_update

    def __log_unobserved_error(self, task: asyncio.Task[None]):
        """
        Log the error of a background update task.
        """
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.error(
                f"Background update of '{type(self).__name__}' failed: {error!r}",
                exc_info=error,
            )

    @property
    def value(self) -> Optional[T]:
        """
        Returns:
            Optional[T]: Cached value or `None`.
        """
        return self._value

    @property
    def has_value(self) -> bool:
        return self._value is not None

    @property
    def is_fetching(self) -> bool:
        return self._fetching

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def listeners(self) -> tuple[Listener[T], ...]:
        return tuple(self._listeners)

    @property
    def listener_count(self) -> int:
        return len(self._listeners)

    @property
    def pending_update(self) -> Optional[asyncio.Task[None]]:
        return self._pending_update

    @property
    def config(self) -> ManagerConfig:
        return self._config

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc_value: Optional[BaseException],
        traceback: Optional[TracebackType],
    ):
        """
        Tear down the manager when leaving the context.
        """
        self.teardown()
