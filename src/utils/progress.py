"""Synthetic progress estimation for in-flight wizard operations."""

import asyncio
import inspect
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Callable, Optional

logger = logging.getLogger(__name__)

DEFAULT_INCREMENT = 5
DEFAULT_INTERVAL_SECONDS = 0.2
DEFAULT_CEILING = 95
COMPLETE = 100


class ProgressEstimator:
    """Advances a bounded progress value while an operation is outstanding.

    The value climbs from 0 toward ``ceiling`` in fixed increments on a fixed
    interval and never reaches 100 while the operation is pending. 100 is
    only set by ``finish()``, on success or failure alike. The value is
    advisory user feedback and says nothing about readiness.

    Example usage:
        progress = ProgressEstimator(update_callback=print)

        async with progress.track():
            await slow_provider_call()

        assert progress.value == 100
    """

    def __init__(
        self,
        increment: int = DEFAULT_INCREMENT,
        interval: float = DEFAULT_INTERVAL_SECONDS,
        ceiling: int = DEFAULT_CEILING,
        update_callback: Optional[Callable] = None,
    ):
        """Initialize the estimator.

        Args:
            increment: Amount added on every tick
            interval: Seconds between ticks
            ceiling: Highest value reachable while pending (must be < 100)
            update_callback: Optional sync or async callable receiving the new value
        """
        if not 0 < ceiling < COMPLETE:
            raise ValueError(f"ceiling must be between 0 and {COMPLETE}, got {ceiling}")
        if increment <= 0:
            raise ValueError("increment must be positive")

        self.increment = increment
        self.interval = interval
        self.ceiling = ceiling
        self.update_callback = update_callback

        self.value = 0
        self._ticker: Optional[asyncio.Task] = None
        self._callback_tasks: set = set()

    @property
    def running(self) -> bool:
        """True between start() and finish(), including while parked at the ceiling."""
        return self._ticker is not None and not self._ticker.done()

    def tick(self) -> int:
        """Advance by one increment, capped at the ceiling."""
        if self.value < self.ceiling:
            self.value = min(self.value + self.increment, self.ceiling)
            self._notify_update()
        return self.value

    def start(self) -> None:
        """Reset to 0 and start ticking on the running event loop."""
        self._stop_ticker()
        self.value = 0
        self._notify_update()
        self._ticker = asyncio.get_running_loop().create_task(self._run())

    def finish(self) -> None:
        """Stop ticking and mark the operation as complete."""
        self._stop_ticker()
        self.value = COMPLETE
        self._notify_update()

    @asynccontextmanager
    async def track(self) -> AsyncIterator["ProgressEstimator"]:
        """Run the ticker for the duration of the block."""
        self.start()
        try:
            yield self
        finally:
            self.finish()

    async def _run(self) -> None:
        # Parked at the ceiling until finish() cancels it
        while True:
            await asyncio.sleep(self.interval)
            self.tick()

    def _stop_ticker(self) -> None:
        if self._ticker is not None:
            self._ticker.cancel()
            self._ticker = None

    def _notify_update(self) -> None:
        """Invoke the update callback, scheduling it if it is a coroutine."""
        if not self.update_callback:
            return
        try:
            result = self.update_callback(self.value)
            if inspect.isawaitable(result):
                task = asyncio.ensure_future(result)
                self._callback_tasks.add(task)
                task.add_done_callback(self._callback_tasks.discard)
        except Exception as e:
            logger.warning(f"Progress update callback failed: {e}")
