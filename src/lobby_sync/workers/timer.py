"""Re-armable periodic timer running on the event loop."""
from __future__ import annotations

import asyncio
import logging
from typing import Callable

logger = logging.getLogger(__name__)


class PeriodicTimer:
    """Calls ``callback`` on the loop every ``interval`` seconds while enabled.

    The callback runs synchronously on the loop thread, so it may call
    ``stop()`` or ``start()`` on its own timer. ``start()`` on a running
    timer restarts the interval.
    """

    def __init__(self, interval: float, callback: Callable[[], None], *, name: str = "timer") -> None:
        if interval <= 0:
            raise ValueError("interval must be positive")
        self._interval = interval
        self._callback = callback
        self._name = name
        self._task: asyncio.Task[None] | None = None

    @property
    def interval(self) -> float:
        return self._interval

    @property
    def is_enabled(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        self.stop()
        self._task = asyncio.get_running_loop().create_task(self._run(), name=self._name)

    def stop(self) -> None:
        task, self._task = self._task, None
        if task is not None and not task.done():
            task.cancel()

    async def _run(self) -> None:
        me = asyncio.current_task()
        while True:
            await asyncio.sleep(self._interval)
            try:
                self._callback()
            except Exception:
                logger.exception("Timer %s tick failed", self._name)
            if self._task is not me:
                return
