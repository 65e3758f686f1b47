"""Single-flight handoff from the lobby view to a match view."""
from __future__ import annotations

import asyncio
import logging
from typing import Any

from lobby_sync.application import messages
from lobby_sync.application.context import SessionContext
from lobby_sync.application.dto.lobby import MatchInfo
from lobby_sync.application.exceptions import ServiceFault, TransientError
from lobby_sync.application.observable import ObservableValue
from lobby_sync.application.ports.hub import Subscription
from lobby_sync.application.ports.ui import LobbyView, MatchViewFactory, SettingsDialog
from lobby_sync.domain.entities.match import MatchSettings
from lobby_sync.domain.value_objects.enums import HubEvent

logger = logging.getLogger(__name__)


class MatchController:
    def __init__(
        self,
        ctx: SessionContext,
        lobby_view: LobbyView,
        match_views: MatchViewFactory,
        settings_dialog: SettingsDialog,
    ) -> None:
        self._ctx = ctx
        self._lobby_view = lobby_view
        self._match_views = match_views
        self._settings_dialog = settings_dialog

        self.settings = MatchSettings()
        self.is_starting: ObservableValue[bool] = ObservableValue(False)

        self._transition: asyncio.Task[None] | None = None
        self._subscriptions: list[Subscription] = [
            ctx.hub.subscribe(HubEvent.MATCH_STARTED, self.on_match_started),
        ]

    def on_match_started(self, match: Any) -> None:
        if not isinstance(match, MatchInfo):
            return
        self._ctx.ui(lambda: self._begin_transition(match))

    async def open_settings(self) -> None:
        try:
            edited = await self._settings_dialog.edit(self.settings)
        except Exception:
            logger.exception("Match settings dialog failed")
            return
        if edited is not None:
            self.settings = edited

    async def start_match(self) -> None:
        token = self._ctx.token_or_notify()
        if not token:
            return

        notifier = self._ctx.notifier
        self.is_starting.set(True)
        try:
            await self._ctx.hub.start_match(token, self.settings)
        except ServiceFault as fault:
            logger.warning("Fault starting match from lobby: %s", fault)
            notifier.warning(messages.LOBBY_TITLE, messages.fault_text(fault.code, fault.detail))
        except TransientError:
            logger.error("Communication error starting match from lobby", exc_info=True)
            notifier.error(messages.LOBBY_TITLE, messages.NO_CONNECTION)
        except Exception:
            logger.exception("Unexpected error starting match from lobby")
            notifier.error(messages.LOBBY_TITLE, messages.START_MATCH_FAILED)
        finally:
            self.is_starting.set(False)

    def dispose(self) -> None:
        for sub in self._subscriptions:
            sub.unsubscribe()
        self._subscriptions.clear()

    def _begin_transition(self, match: MatchInfo) -> None:
        state = self._ctx.state
        if state.is_opening_match_window:
            logger.warning("Match %s already opening, ignoring match-started", match.match_id)
            return

        state.is_opening_match_window = True
        self._transition = asyncio.create_task(self._open_match_view(match), name="match-transition")

    async def _open_match_view(self, match: MatchInfo) -> None:
        try:
            self._lobby_view.hide()
            await self._match_views.open(
                match,
                token=self._ctx.auth.token,
                account_id=self._ctx.auth.account_id,
                on_closed=self._on_match_view_closed,
            )
            logger.info("Match view opened for match %s", match.match_id)
        except Exception:
            logger.exception("Error opening match view for match %s", match.match_id)
            self._ctx.ui(self._restore_lobby)

    def _on_match_view_closed(self) -> None:
        self._ctx.ui(self._restore_lobby)

    def _restore_lobby(self) -> None:
        try:
            self._lobby_view.show()
        except Exception:
            logger.warning("Error restoring lobby view", exc_info=True)
        finally:
            self._ctx.state.is_opening_match_window = False
