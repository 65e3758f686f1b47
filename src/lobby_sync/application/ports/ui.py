"""Presentation-side collaborators driven by the controllers."""
from __future__ import annotations

from typing import Callable, Protocol

from lobby_sync.application.dto.lobby import MatchInfo
from lobby_sync.application.dto.services import ReportDraft
from lobby_sync.domain.entities.match import MatchSettings
from lobby_sync.domain.entities.roster import PlayerItem

Action = Callable[[], None]


class Dispatcher(Protocol):
    def ui(self, action: Action | None) -> None: ...


class Notifier(Protocol):
    def info(self, title: str, message: str) -> None: ...

    def warning(self, title: str, message: str) -> None: ...

    def error(self, title: str, message: str) -> None: ...


class ReconnectOverlay(Protocol):
    def show(self, status: str) -> None: ...

    def hide(self) -> None: ...


class ReconnectPrompt(Protocol):
    async def ask_keep_waiting(self, message: str) -> bool: ...


class LoginNavigator(Protocol):
    def navigate_to_login(self) -> None: ...


class ReportDialog(Protocol):
    async def capture(self, target: PlayerItem) -> ReportDraft | None: ...


class SettingsDialog(Protocol):
    async def edit(self, current: MatchSettings) -> MatchSettings | None: ...


class DrawerView(Protocol):
    @property
    def visible(self) -> bool: ...

    def show(self) -> None: ...

    def hide(self) -> None: ...


class LobbyView(Protocol):
    def show(self) -> None: ...

    def hide(self) -> None: ...


class MatchViewFactory(Protocol):
    async def open(
        self,
        match: MatchInfo,
        *,
        token: str,
        account_id: int,
        on_closed: Action,
    ) -> None: ...
