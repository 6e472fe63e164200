"""
Per-question countdown.

Runs as an asyncio task on the session's event loop. cancel() is synchronous:
once it returns, neither a tick nor the expiry callback can run, which is what
lets the controller start an evaluation right after it.
"""
import asyncio
from typing import Awaitable, Callable, Optional

from loguru import logger


class CountdownTimer:
    """
    A single countdown that fires its expiry callback exactly once.

    Args:
        limit: Full allotted time for the question, in seconds
        on_expire: Coroutine function awaited when the countdown hits zero
        on_tick: Called with the new remaining time after every tick
        remaining: Start from here instead of the full limit (resume)
        interval: Seconds per tick
    """

    def __init__(
        self,
        limit: int,
        on_expire: Callable[[], Awaitable[None]],
        on_tick: Optional[Callable[[int], None]] = None,
        remaining: Optional[int] = None,
        interval: float = 1.0,
    ):
        self.limit = limit
        self.remaining = limit if remaining is None else max(0, min(remaining, limit))
        self.interval = interval
        self._on_expire = on_expire
        self._on_tick = on_tick
        self._task: Optional[asyncio.Task] = None
        self._cancelled = False
        self._fired = False

    @property
    def elapsed(self) -> int:
        return self.limit - self.remaining

    @property
    def fired(self) -> bool:
        return self._fired

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    @property
    def is_running(self) -> bool:
        return (
            self._task is not None
            and not self._task.done()
            and not self._cancelled
            and not self._fired
        )

    def start(self) -> None:
        if self._task is not None:
            raise RuntimeError("Countdown already started")
        self._task = asyncio.get_running_loop().create_task(self._run())

    def cancel(self) -> bool:
        """
        Stop the countdown. Returns True if this call stopped it, False if it
        had already been cancelled or had already fired.
        """
        if self._cancelled or self._fired:
            return False
        self._cancelled = True
        if self._task is not None and not self._task.done():
            self._task.cancel()
        return True

    async def wait(self) -> None:
        """Wait until the countdown task finishes, including its expiry callback."""
        if self._task is not None:
            await asyncio.wait({self._task})

    async def _run(self) -> None:
        while self.remaining > 0:
            await asyncio.sleep(self.interval)
            if self._cancelled:
                return
            self.remaining -= 1
            if self._on_tick is not None:
                self._on_tick(self.remaining)

        if self._cancelled:
            return
        self._fired = True
        logger.debug(f"Countdown of {self.limit}s expired")
        await self._on_expire()
