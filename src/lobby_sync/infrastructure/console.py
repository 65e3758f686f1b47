"""Headless presentation adapters used by ``python -m lobby_sync``."""
from __future__ import annotations

import asyncio
import logging
import sys

from lobby_sync.application.dto.lobby import MatchInfo
from lobby_sync.application.dto.services import ReportDraft
from lobby_sync.application.ports.ui import Action
from lobby_sync.domain.entities.match import MatchSettings
from lobby_sync.domain.entities.roster import PlayerItem

logger = logging.getLogger(__name__)


class ConsoleNotifier:
    def __init__(self, stream=None) -> None:
        self._stream = stream or sys.stdout

    def _write(self, level: str, title: str, message: str) -> None:
        print(f"[{level}] {title}: {message}", file=self._stream, flush=True)

    def info(self, title: str, message: str) -> None:
        self._write("info", title, message)

    def warning(self, title: str, message: str) -> None:
        self._write("warning", title, message)

    def error(self, title: str, message: str) -> None:
        self._write("error", title, message)


class ConsoleOverlay:
    def __init__(self, notifier: ConsoleNotifier) -> None:
        self._notifier = notifier
        self.visible = False

    def show(self, status: str) -> None:
        self.visible = True
        self._notifier.info("Connection", status)

    def hide(self) -> None:
        if self.visible:
            self._notifier.info("Connection", "Connected.")
        self.visible = False


class FixedAnswerPrompt:
    """Answers the reconnect question without user interaction."""

    def __init__(self, keep_waiting: bool = True) -> None:
        self._keep_waiting = keep_waiting

    async def ask_keep_waiting(self, message: str) -> bool:
        logger.info("Reconnect exhausted; keep waiting=%s", self._keep_waiting)
        return self._keep_waiting


class ShutdownLoginNavigator:
    """Ends the headless session instead of showing a login screen."""

    def __init__(self) -> None:
        self.requested = asyncio.Event()

    def navigate_to_login(self) -> None:
        self.requested.set()


class HeadlessView:
    def __init__(self, name: str, visible: bool = False) -> None:
        self._name = name
        self._visible = visible

    @property
    def visible(self) -> bool:
        return self._visible

    def show(self) -> None:
        self._visible = True
        logger.debug("%s shown", self._name)

    def hide(self) -> None:
        self._visible = False
        logger.debug("%s hidden", self._name)


class HeadlessMatchViewFactory:
    """Logs the match and closes the view straight away."""

    async def open(self, match: MatchInfo, *, token: str, account_id: int, on_closed: Action) -> None:
        logger.info("Match %s started with %d player(s)", match.match_id, len(match.players))
        asyncio.get_running_loop().call_soon(on_closed)


class SkipReportDialog:
    async def capture(self, target: PlayerItem) -> ReportDraft | None:
        logger.info("Reporting is not available in headless mode")
        return None


class KeepSettingsDialog:
    async def edit(self, current: MatchSettings) -> MatchSettings | None:
        return None
