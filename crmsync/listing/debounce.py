"""Last-value-wins debounce timer for asyncio event loops."""

import asyncio
from collections.abc import Callable
from typing import Generic, TypeVar

from crmsync.listing.models import SearchState

T = TypeVar("T")


class Debouncer(Generic[T]):
    """Coalesce bursts of triggers into one callback with the last value.

    Each ``trigger`` cancels the running timer and starts a new one; the
    callback runs once ``delay_seconds`` pass without another trigger.
    Must be used from inside a running event loop.
    """

    def __init__(self, delay_seconds: float, on_commit: Callable[[T], None]):
        """Initialize debouncer.

        Args:
            delay_seconds: Quiet period required before committing
            on_commit: Called with the last triggered value
        """
        if delay_seconds < 0:
            raise ValueError(f"delay_seconds must be >= 0, got {delay_seconds}")

        self._delay = delay_seconds
        self._on_commit = on_commit
        self._state = SearchState.IDLE
        self._pending_value: T | None = None
        self._task: asyncio.Task[None] | None = None

    @property
    def state(self) -> SearchState:
        return self._state

    @property
    def pending_value(self) -> T | None:
        return self._pending_value

    @property
    def delay_seconds(self) -> float:
        return self._delay

    def trigger(self, value: T) -> None:
        """(Re)start the timer for ``value``; a running timer never fires."""
        self.cancel()
        self._pending_value = value
        self._state = SearchState.PENDING
        self._task = asyncio.get_running_loop().create_task(self._commit_later(value))

    async def _commit_later(self, value: T) -> None:
        await asyncio.sleep(self._delay)

        self._task = None
        self._pending_value = None
        self._state = SearchState.COMMITTED
        try:
            self._on_commit(value)
        finally:
            self._state = SearchState.IDLE

    def cancel(self) -> bool:
        """Drop the pending value without committing.

        Returns:
            True if a timer was running
        """
        task = self._task
        self._task = None
        self._pending_value = None
        self._state = SearchState.IDLE

        if task is None or task.done():
            return False
        task.cancel()
        return True

    async def wait(self) -> None:
        """Wait until no timer is pending, following re-triggers."""
        while self._task is not None:
            await asyncio.wait({self._task})

    async def aclose(self) -> None:
        """Cancel the pending timer and wait for the cancellation to land."""
        task = self._task
        self.cancel()
        if task is not None:
            await asyncio.wait({task})
