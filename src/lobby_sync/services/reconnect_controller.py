"""Reconnect state machine and the user decision when retries run out."""
from __future__ import annotations

import asyncio
import logging
from typing import Any

from lobby_sync.application import messages
from lobby_sync.application.context import SessionContext
from lobby_sync.application.ports.hub import Subscription
from lobby_sync.application.ports.ui import LoginNavigator, ReconnectOverlay, ReconnectPrompt
from lobby_sync.config import settings
from lobby_sync.domain.value_objects.enums import HubEvent, ReconnectState
from lobby_sync.services.chat_controller import ChatController
from lobby_sync.workers.timer import PeriodicTimer

logger = logging.getLogger(__name__)


class ReconnectController:
    """Drives the reconnect overlay from hub connection lifecycle events.

    States::

        CONNECTED -> RECONNECTING          (lost)
        RECONNECTING -> RECONNECTING       (attempt n)
        * -> CONNECTED                     (succeeded)
        RECONNECTING -> EXHAUSTED_DECIDING (exhausted, user not waiting yet)
        EXHAUSTED_DECIDING -> WAITING_INDEFINITELY | NAVIGATED_TO_LOGIN
        * -> WAITING_INDEFINITELY          (exhausted, user chose to wait earlier)

    While waiting, a cycle timer asks the hub for one more reconnect round
    every ``cycle_seconds``. At most one such call is in flight.
    """

    def __init__(
        self,
        ctx: SessionContext,
        overlay: ReconnectOverlay,
        prompt: ReconnectPrompt,
        login_navigator: LoginNavigator,
        chat: ChatController,
        *,
        cycle_seconds: float = settings.RECONNECT_CYCLE_SECONDS,
    ) -> None:
        self._ctx = ctx
        self._overlay = overlay
        self._prompt = prompt
        self._login_navigator = login_navigator
        self._chat = chat

        self._state = ReconnectState.CONNECTED
        self._cycle_timer = PeriodicTimer(cycle_seconds, self._on_cycle_tick, name="reconnect-cycle")
        self._cycle_in_flight = False
        self._decision_pending = False
        self._tasks: set[asyncio.Task[None]] = set()

        self._subscriptions: list[Subscription] = [
            ctx.hub.subscribe(HubEvent.CONNECTION_LOST, self._on_lost),
            ctx.hub.subscribe(HubEvent.RECONNECT_ATTEMPT, self._on_attempt),
            ctx.hub.subscribe(HubEvent.RECONNECT_SUCCEEDED, self._on_succeeded),
            ctx.hub.subscribe(HubEvent.RECONNECT_EXHAUSTED, self._on_exhausted),
        ]

    @property
    def state(self) -> ReconnectState:
        return self._state

    @property
    def is_cycle_timer_running(self) -> bool:
        return self._cycle_timer.is_enabled

    def dispose(self) -> None:
        for sub in self._subscriptions:
            sub.unsubscribe()
        self._subscriptions.clear()
        self._cycle_timer.stop()
        for task in list(self._tasks):
            task.cancel()

    # -- hub notifications ------------------------------------------------

    def _on_lost(self, _: Any = None) -> None:
        def _apply() -> None:
            if self._is_terminal():
                return
            if self._state is ReconnectState.CONNECTED:
                self._state = ReconnectState.RECONNECTING
            self._overlay.show(messages.RECONNECT_STATUS_START)

        self._ctx.ui(_apply)

    def _on_attempt(self, attempt: Any) -> None:
        def _apply() -> None:
            if self._is_terminal():
                return
            if self._state is ReconnectState.CONNECTED:
                self._state = ReconnectState.RECONNECTING
            self._overlay.show(messages.RECONNECT_STATUS_ATTEMPT.format(attempt=attempt))

        self._ctx.ui(_apply)

    def _on_succeeded(self, _: Any = None) -> None:
        def _apply() -> None:
            if self._is_terminal():
                return
            self._cycle_timer.stop()
            self._overlay.hide()
            self._state = ReconnectState.CONNECTED
            logger.info("Connection to hub restored")

        self._ctx.ui(_apply)

    def _on_exhausted(self, _: Any = None) -> None:
        def _apply() -> None:
            if self._is_terminal():
                return

            if self._ctx.state.is_auto_waiting_for_reconnect:
                self._state = ReconnectState.WAITING_INDEFINITELY
                self._overlay.show(messages.RECONNECT_WAITING)
                self._arm_cycle()
                return

            self._state = ReconnectState.EXHAUSTED_DECIDING
            if self._decision_pending:
                logger.debug("Reconnect decision already pending")
                return

            self._decision_pending = True
            self._spawn(self._ask_user(), name="reconnect-decision")

        self._ctx.ui(_apply)

    # -- decision ---------------------------------------------------------

    async def _ask_user(self) -> None:
        try:
            keep_waiting = await self._prompt.ask_keep_waiting(messages.RECONNECT_EXHAUSTED_QUESTION)
        except Exception:
            logger.exception("Reconnect decision prompt failed")
            self._ctx.ui(self._back_to_reconnecting)
            return
        finally:
            self._decision_pending = False

        if keep_waiting:
            self._ctx.ui(self._enter_waiting)
        else:
            self._ctx.ui(self._navigate_to_login)

    def _back_to_reconnecting(self) -> None:
        if self._state is ReconnectState.EXHAUSTED_DECIDING:
            self._state = ReconnectState.RECONNECTING

    def _enter_waiting(self) -> None:
        if self._state is not ReconnectState.EXHAUSTED_DECIDING:
            return
        self._ctx.state.is_auto_waiting_for_reconnect = True
        self._state = ReconnectState.WAITING_INDEFINITELY
        self._chat.append_system_line(messages.RECONNECT_WAITING)
        self._overlay.show(messages.RECONNECT_WAITING)
        self._arm_cycle()
        logger.info("User chose to wait for the hub indefinitely")

    def _navigate_to_login(self) -> None:
        if self._state is not ReconnectState.EXHAUSTED_DECIDING:
            return
        self._state = ReconnectState.NAVIGATED_TO_LOGIN
        self._ctx.state.is_navigating_to_login = True
        self._cycle_timer.stop()
        logger.info("User gave up reconnecting, navigating to login")
        try:
            self._login_navigator.navigate_to_login()
        except Exception:
            logger.exception("Login navigation failed")

    # -- cycle ------------------------------------------------------------

    def _arm_cycle(self) -> None:
        self._cycle_timer.start()

    def _on_cycle_tick(self) -> None:
        self._cycle_timer.stop()
        if self._cycle_in_flight:
            logger.debug("Reconnect cycle already in flight, skipping tick")
            return
        self._cycle_in_flight = True
        self._spawn(self._continue_cycle(), name="reconnect-cycle-call")

    async def _continue_cycle(self) -> None:
        try:
            await self._ctx.hub.continue_reconnect_cycle()
        except Exception:
            logger.warning("Continue reconnect cycle failed", exc_info=True)
        finally:
            self._cycle_in_flight = False

        def _rearm() -> None:
            if self._state is ReconnectState.WAITING_INDEFINITELY and not self._cycle_timer.is_enabled:
                self._arm_cycle()

        self._ctx.ui(_rearm)

    def _spawn(self, coro: Any, *, name: str) -> None:
        task = asyncio.create_task(coro, name=name)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    def _is_terminal(self) -> bool:
        return self._state is ReconnectState.NAVIGATED_TO_LOGIN
