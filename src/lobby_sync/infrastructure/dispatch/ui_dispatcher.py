"""Single-consumer dispatcher that marshals callbacks onto the UI loop."""
from __future__ import annotations

import asyncio
import logging
import threading

from lobby_sync.application.ports.ui import Action

logger = logging.getLogger(__name__)


class UiDispatcher:
    """Implements application.ports.ui.Dispatcher.

    The thread running the event loop is the UI thread. Calls made on it
    execute inline; calls from any other thread are queued and consumed
    sequentially by a background task.
    """

    def __init__(self) -> None:
        self._loop: asyncio.AbstractEventLoop | None = None
        self._thread_id: int | None = None
        self._queue: asyncio.Queue[Action] | None = None
        self._task: asyncio.Task[None] | None = None

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def start(self) -> None:
        self._loop = asyncio.get_running_loop()
        self._thread_id = threading.get_ident()
        self._queue = asyncio.Queue()
        self._task = asyncio.create_task(self._consume(), name="ui-dispatcher")
        logger.debug("UI dispatcher started")

    async def stop(self) -> None:
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
            logger.debug("UI dispatcher stopped")

    def is_ui_thread(self) -> bool:
        return threading.get_ident() == self._thread_id

    def ui(self, action: Action | None) -> None:
        if action is None:
            return

        try:
            if self._loop is None or self._queue is None:
                raise RuntimeError("UI dispatcher is not started")

            if self.is_ui_thread():
                self._invoke(action)
                return

            self._loop.call_soon_threadsafe(self._queue.put_nowait, action)
        except Exception:
            logger.warning("UI dispatch failed", exc_info=True)

    async def drain(self) -> None:
        """Wait until every queued action has run."""
        if self._queue is not None:
            await self._queue.join()

    def _invoke(self, action: Action) -> None:
        try:
            action()
        except Exception:
            logger.exception("UI action failed")

    async def _consume(self) -> None:
        assert self._queue is not None
        while True:
            action = await self._queue.get()
            try:
                self._invoke(action)
            finally:
                self._queue.task_done()
