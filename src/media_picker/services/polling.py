"""Cooperative polling until the user finishes picking."""

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from enum import Enum

from media_picker.domain.errors import PollTimeoutError, ProviderError
from media_picker.domain.sessions import PickerSession
from media_picker.services.sessions import SessionLifecycleManager

DEFAULT_POLL_INTERVAL_SECONDS = 5.0
DEFAULT_POLL_MAX_WAIT_SECONDS = 300.0

_logger = logging.getLogger(__name__)


class PollState(str, Enum):
    """Lifecycle of a polling loop."""

    IDLE = "IDLE"
    POLLING = "POLLING"
    COMPLETE = "COMPLETE"
    TIMED_OUT = "TIMED_OUT"
    CANCELED = "CANCELED"
    FAILED = "FAILED"


@dataclass
class PollingController:
    """Runs at most one status polling loop at a time.

    The loop refreshes immediately, then every ``interval_seconds`` until the
    session reports ``media_items_set`` or ``max_wait_seconds`` elapse. A
    single task owns both the tick schedule and the deadline, so cancelling
    it stops both. Results that arrive after a cancel are dropped.
    """

    refresh: Callable[[], Awaitable[PickerSession]]
    interval_seconds: float = DEFAULT_POLL_INTERVAL_SECONDS
    max_wait_seconds: float = DEFAULT_POLL_MAX_WAIT_SECONDS
    clock: Callable[[], float] = time.monotonic
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep
    state: PollState = PollState.IDLE
    session: PickerSession | None = None
    error: BaseException | None = None
    ticks: int = 0
    _task: asyncio.Task | None = field(default=None, repr=False)
    _generation: int = field(default=0, repr=False)

    @classmethod
    def for_owner(
        cls,
        manager: SessionLifecycleManager,
        owner_key: str,
        auth_token: str,
        **kwargs: object,
    ) -> "PollingController":
        """Build a controller that refreshes one owner's session."""

        async def refresh() -> PickerSession:
            return await manager.refresh_status(owner_key, auth_token)

        return cls(refresh=refresh, **kwargs)

    @property
    def is_active(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> asyncio.Task:
        """Start polling, stopping any loop that is already running."""
        if self.is_active:
            self.cancel()
        self._generation += 1
        self.state = PollState.POLLING
        self.session = None
        self.error = None
        self.ticks = 0
        self._task = asyncio.create_task(self._run(self._generation))
        return self._task

    def cancel(self) -> None:
        """Stop the active loop; no further refreshes are issued."""
        if self.state is not PollState.POLLING:
            return
        self._generation += 1
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self.state = PollState.CANCELED
        _logger.info("Picker polling cancelled after %s ticks", self.ticks)

    def reset(self) -> None:
        """Return to IDLE, cancelling any active loop."""
        self.cancel()
        self._task = None
        self.state = PollState.IDLE
        self.session = None
        self.error = None
        self.ticks = 0

    async def wait(self) -> PickerSession | None:
        """Wait for the current loop to finish and return its outcome.

        Returns the completed session, or ``None`` if polling was cancelled.
        Raises ``PollTimeoutError`` on timeout and re-raises fatal errors.
        """
        if self._task is None:
            raise RuntimeError("Polling has not been started")
        await asyncio.wait({self._task})
        if self.state is PollState.COMPLETE:
            return self.session
        if self.state is PollState.TIMED_OUT:
            raise PollTimeoutError(self.max_wait_seconds)
        if self.state is PollState.FAILED and self.error is not None:
            raise self.error
        return None

    async def poll(self) -> PickerSession | None:
        """Start polling and wait for the outcome."""
        self.start()
        return await self.wait()

    async def _run(self, generation: int) -> None:
        deadline = self.clock() + self.max_wait_seconds
        while True:
            self.ticks += 1
            try:
                session = await self.refresh()
            except ProviderError as exc:
                if generation != self._generation:
                    return
                self.error = exc
                _logger.warning("Picker poll tick %s failed: %s", self.ticks, exc)
            except Exception as exc:
                if generation != self._generation:
                    return
                self.error = exc
                self.state = PollState.FAILED
                _logger.exception("Picker polling stopped after a fatal error")
                return
            else:
                if generation != self._generation:
                    return
                self.session = session
                self.error = None
                if session.media_items_set:
                    self.state = PollState.COMPLETE
                    _logger.info(
                        "Picker session %s completed after %s ticks",
                        session.id,
                        self.ticks,
                    )
                    return

            remaining = deadline - self.clock()
            if remaining > 0:
                await self.sleep(min(self.interval_seconds, remaining))
                if generation != self._generation:
                    return
                remaining = deadline - self.clock()
            if remaining <= 0:
                self.state = PollState.TIMED_OUT
                _logger.warning(
                    "Picker polling timed out after %s seconds", self.max_wait_seconds
                )
                return
