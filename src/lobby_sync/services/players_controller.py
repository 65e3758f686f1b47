"""Roster reconciliation from hub snapshots, plus player reports."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Iterable

from lobby_sync.application import messages
from lobby_sync.application.context import SessionContext
from lobby_sync.application.dto.lobby import AccountMini, LobbyInfo
from lobby_sync.application.dto.services import ReportRequest, ReportResult
from lobby_sync.application.exceptions import ServiceFault, ServiceUnavailableError
from lobby_sync.application.observable import ObservableList, ObservableValue
from lobby_sync.application.ports.hub import Subscription
from lobby_sync.application.ports.services import ReportService
from lobby_sync.application.ports.ui import ReportDialog
from lobby_sync.config import settings
from lobby_sync.domain.entities.roster import DEFAULT_PLAYER_NAME, PlayerItem
from lobby_sync.domain.value_objects.enums import HubEvent, SanctionKind

logger = logging.getLogger(__name__)

SANCTION_TIME_FORMAT = "%Y-%m-%d %H:%M"


@dataclass(frozen=True, slots=True)
class LobbyHeader:
    name: str = messages.LOBBY_TITLE
    access_code: str = ""


def build_roster(accounts: Iterable[AccountMini], my_account_id: int) -> list[PlayerItem]:
    """Project a snapshot's accounts into roster items, first entry per account wins."""
    items: list[PlayerItem] = []
    seen: set[int] = set()
    for account in accounts:
        if account.account_id in seen:
            continue
        seen.add(account.account_id)
        items.append(
            PlayerItem(
                account_id=account.account_id,
                display_name=account.display_name.strip() or DEFAULT_PLAYER_NAME,
                avatar_url=account.avatar_url,
                is_me=account.account_id == my_account_id,
            )
        )
    return items


class PlayersController:
    def __init__(
        self,
        ctx: SessionContext,
        report_service: ReportService,
        report_dialog: ReportDialog,
        *,
        cooldown_code: str = settings.REPORT_COOLDOWN_CODE,
    ) -> None:
        self._ctx = ctx
        self._report_service = report_service
        self._report_dialog = report_dialog
        self._cooldown_code = cooldown_code

        self.players: ObservableList[PlayerItem] = ObservableList()
        self.header: ObservableValue[LobbyHeader] = ObservableValue(LobbyHeader())

        self._subscriptions: list[Subscription] = [
            ctx.hub.subscribe(HubEvent.LOBBY_UPDATED, self.on_lobby_snapshot),
            ctx.hub.subscribe(HubEvent.PLAYER_JOINED, self._on_player_joined),
            ctx.hub.subscribe(HubEvent.PLAYER_LEFT, self._on_player_left),
        ]

    def on_lobby_snapshot(self, info: Any) -> None:
        if not isinstance(info, LobbyInfo):
            return
        self._ctx.ui(lambda: self._apply_snapshot(info))

    def enter_lobby(self, info: LobbyInfo) -> None:
        """Adopt a lobby returned by a create or join-by-code call."""
        self._ctx.ui(lambda: self._apply_snapshot(info))

    async def leave_lobby(self) -> None:
        lobby_id = self._ctx.state.current_lobby_id
        if lobby_id is None:
            return

        token = self._ctx.auth.token
        try:
            if token:
                await self._ctx.hub.leave_lobby(token, lobby_id)
        except Exception:
            logger.warning("Leaving lobby %s failed", lobby_id, exc_info=True)
        finally:
            self._ctx.ui(self._clear)

    async def report_player(self, target: PlayerItem | None) -> None:
        if target is None or target.is_me or not self._ctx.state.has_lobby:
            return
        lobby_id = self._ctx.state.current_lobby_id

        token = self._ctx.token_or_notify()
        if not token:
            return

        notifier = self._ctx.notifier
        try:
            draft = await self._report_dialog.capture(target)
            if draft is None:
                return

            result = await self._report_service.submit_report(
                token,
                ReportRequest(
                    lobby_id=lobby_id,
                    target_account_id=target.account_id,
                    reason=draft.reason,
                    comment=draft.comment.strip(),
                ),
            )
        except ServiceFault as fault:
            if fault.code == self._cooldown_code:
                notifier.info(messages.LOBBY_TITLE, messages.REPORT_COOLDOWN)
            else:
                logger.warning("Report rejected: %s", fault)
                notifier.warning(messages.LOBBY_TITLE, messages.fault_text(fault.code, fault.detail))
            return
        except ServiceUnavailableError:
            logger.warning("Report service unreachable", exc_info=True)
            notifier.error(messages.LOBBY_TITLE, messages.NO_CONNECTION)
            return
        except Exception:
            logger.exception("Unexpected error reporting player %s", target.account_id)
            notifier.error(messages.LOBBY_TITLE, messages.REPORT_FAILED)
            return

        notifier.info(messages.LOBBY_TITLE, _describe_report_result(result))

    def dispose(self) -> None:
        for sub in self._subscriptions:
            sub.unsubscribe()
        self._subscriptions.clear()

    def _apply_snapshot(self, info: LobbyInfo) -> None:
        state = self._ctx.state
        if state.current_lobby_id != info.lobby_id:
            state.current_access_code = ""
        state.current_lobby_id = info.lobby_id
        if info.access_code.strip():
            state.current_access_code = info.access_code.strip()

        self.header.set(
            LobbyHeader(
                name=info.lobby_name.strip() or messages.LOBBY_TITLE,
                access_code=state.current_access_code,
            )
        )
        self.players.replace_all(build_roster(info.players, self._ctx.auth.account_id))

    def _clear(self) -> None:
        self._ctx.state.clear_lobby()
        self.header.set(LobbyHeader())
        self.players.clear()

    def _on_player_joined(self, player: Any) -> None:
        # Roster changes arrive only through full snapshots.
        logger.debug("Ignoring player-joined delta: %s", player)

    def _on_player_left(self, account_id: Any) -> None:
        logger.debug("Ignoring player-left delta: %s", account_id)


def _describe_report_result(result: ReportResult) -> str:
    if not result.sanction_applied or result.sanction is None:
        return messages.REPORT_SENT
    if result.sanction == SanctionKind.PERMANENT:
        return messages.REPORT_BANNED
    if result.sanction_ends_at is not None:
        return messages.REPORT_SUSPENDED_UNTIL.format(
            ends_at=result.sanction_ends_at.strftime(SANCTION_TIME_FORMAT),
        )
    return messages.REPORT_SUSPENDED
