"""
Periodic callback scheduling for match timers.

The match engine only ever talks to `Scheduler`; production uses the asyncio
implementation, tests drive ticks by hand.
"""
import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Awaitable, Callable, Optional

logger = logging.getLogger(__name__)

TickCallback = Callable[[], Awaitable[None]]


class TimerHandle(ABC):
    @property
    @abstractmethod
    def cancelled(self) -> bool:
        ...

    @abstractmethod
    def cancel(self) -> None:
        """Stop future firings. A cancelled handle never fires again."""


class Scheduler(ABC):
    @abstractmethod
    def call_every(self, period: float, callback: TickCallback) -> TimerHandle:
        ...


class _AsyncioHandle(TimerHandle):
    def __init__(self):
        self._cancelled = False
        self.task: Optional[asyncio.Task] = None

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        self._cancelled = True
        # A callback may cancel its own timer; let it run to completion.
        if self.task is not None and self.task is not asyncio.current_task():
            self.task.cancel()


class AsyncioScheduler(Scheduler):
    """Runs each timer as its own task on the running event loop."""

    def call_every(self, period: float, callback: TickCallback) -> TimerHandle:
        handle = _AsyncioHandle()
        handle.task = asyncio.get_running_loop().create_task(self._run(period, callback, handle))
        return handle

    @staticmethod
    async def _run(period: float, callback: TickCallback, handle: _AsyncioHandle) -> None:
        while not handle.cancelled:
            await asyncio.sleep(period)
            if handle.cancelled:
                break
            try:
                await callback()
            except asyncio.CancelledError:
                raise
            except Exception:
                logger.exception("Timer callback failed")
