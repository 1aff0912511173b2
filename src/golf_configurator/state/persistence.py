"""Debounced persistence of selection snapshots."""

import asyncio
import logging
from collections.abc import Callable
from typing import Generic, TypeVar

from sqlalchemy.orm import Session, sessionmaker

from golf_configurator.database.engine import get_session_factory
from golf_configurator.database.repository import SelectionRepository
from golf_configurator.models.pydantic_models import SelectionState

logger = logging.getLogger(__name__)

T = TypeVar("T")


class DebouncedTask(Generic[T]):
    """Run an action with the latest value once scheduling goes quiet.

    Every ``schedule()`` cancels the pending timer and arms a new one, so a
    burst of values results in a single call with the last value. Timers run
    on the current asyncio loop and the action runs in a worker thread, one
    write at a time and in order. Without a running loop the action runs
    immediately.
    """

    def __init__(self, delay_seconds: float, action: Callable[[T], None]) -> None:
        self._delay = delay_seconds
        self._action = action
        self._handle: asyncio.TimerHandle | None = None
        self._value: T | None = None
        self._has_value = False
        self._running: asyncio.Task[None] | None = None

    @property
    def pending(self) -> bool:
        """True when a value is waiting to be written."""
        return self._has_value

    def schedule(self, value: T) -> None:
        """Replace the pending value and restart the timer."""
        self._value = value
        self._has_value = True
        self._cancel_timer()

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            self.flush()
            return

        self._handle = loop.call_later(self._delay, self._fire)

    def flush(self) -> None:
        """Run the action now with the pending value, if any."""
        self._cancel_timer()
        if not self._has_value:
            return
        self._action(self._take())

    def cancel(self) -> None:
        """Drop the pending value without running the action."""
        self._cancel_timer()
        self._value = None
        self._has_value = False

    def _cancel_timer(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    async def drain(self) -> None:
        """Wait for the write running in the worker thread, if any."""
        if self._running is not None:
            await asyncio.gather(self._running, return_exceptions=True)

    def _take(self) -> T:
        value = self._value
        self._value = None
        self._has_value = False
        return value  # type: ignore[return-value]

    def _fire(self) -> None:
        self._handle = None
        if not self._has_value:
            return
        loop = asyncio.get_running_loop()
        if self._running is not None and not self._running.done():
            # Keep writes ordered: retry once the current one has finished
            self._handle = loop.call_later(self._delay, self._fire)
            return

        self._running = loop.create_task(asyncio.to_thread(self._action, self._take()))
        self._running.add_done_callback(self._log_failure)

    @staticmethod
    def _log_failure(task: "asyncio.Task[None]") -> None:
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("Debounced write failed", exc_info=exc)


class RepositoryWriter:
    """Writes selection snapshots for one session through SelectionRepository."""

    def __init__(
        self,
        session_key: str,
        session_factory: sessionmaker[Session] | None = None,
    ) -> None:
        self._session_key = session_key
        self._session_factory = session_factory

    def __call__(self, state: SelectionState) -> None:
        factory = self._session_factory or get_session_factory()
        session = factory()
        try:
            SelectionRepository(session).save(self._session_key, state)
            logger.debug("Persisted selection for session %s", self._session_key)
        finally:
            session.close()


def load_selection(
    session_key: str,
    session_factory: sessionmaker[Session] | None = None,
) -> SelectionState | None:
    """Load a persisted selection, or None when nothing usable is stored."""
    factory = session_factory or get_session_factory()
    session = factory()
    try:
        return SelectionRepository(session).load(session_key)
    finally:
        session.close()
