"""Friends drawer state and lobby invites."""
from __future__ import annotations

import logging
from typing import Any

from lobby_sync.application import messages
from lobby_sync.application.context import SessionContext
from lobby_sync.application.exceptions import ServiceFault, ServiceUnavailableError
from lobby_sync.application.observable import ObservableList, ObservableValue
from lobby_sync.application.ports.hub import Subscription
from lobby_sync.application.ports.services import FriendsService
from lobby_sync.application.ports.ui import DrawerView
from lobby_sync.domain.entities.roster import FriendItem
from lobby_sync.services.friends_feed import FriendsFeed

logger = logging.getLogger(__name__)


class FriendsController:
    def __init__(
        self,
        ctx: SessionContext,
        feed: FriendsFeed,
        friends_service: FriendsService,
        drawer: DrawerView,
    ) -> None:
        self._ctx = ctx
        self._feed = feed
        self._friends_service = friends_service
        self._drawer = drawer

        self.friends: ObservableList[FriendItem] = ObservableList()
        self.pending_requests: ObservableValue[int] = ObservableValue(0)

        self._subscriptions: list[Subscription] = [feed.subscribe(self._on_friends_updated)]

    @property
    def is_open(self) -> bool:
        return self._drawer.visible

    async def on_loaded(self) -> None:
        await self._refresh_safe()

    async def open_drawer(self) -> None:
        if self.is_open:
            return
        await self._refresh_safe()
        if self.is_open:
            return
        self._drawer.show()

    def close_drawer(self) -> None:
        if not self.is_open:
            return
        self._drawer.hide()

    async def invite(self, friend: FriendItem | None) -> bool:
        if friend is None:
            return False

        token = self._ctx.token_or_notify()
        if not token:
            return False

        state = self._ctx.state
        if not state.has_lobby or not state.current_access_code.strip():
            self._ctx.notifier.info(messages.LOBBY_TITLE, messages.INVITE_NO_CODE)
            return False

        notifier = self._ctx.notifier
        try:
            await self._friends_service.send_lobby_invite(
                token, friend.account_id, state.current_access_code
            )
        except ServiceFault as fault:
            logger.warning("Invite rejected: %s", fault)
            notifier.warning(messages.LOBBY_TITLE, messages.fault_text(fault.code, fault.detail))
            return False
        except ServiceUnavailableError:
            logger.warning("Friends service unreachable while inviting", exc_info=True)
            notifier.error(messages.LOBBY_TITLE, messages.NO_CONNECTION)
            return False
        except Exception:
            logger.exception("Unexpected error inviting account %s", friend.account_id)
            notifier.error(messages.LOBBY_TITLE, messages.INVITE_FAILED)
            return False

        notifier.info(messages.LOBBY_TITLE, messages.INVITE_SENT)
        return True

    def dispose(self) -> None:
        for sub in self._subscriptions:
            sub.unsubscribe()
        self._subscriptions.clear()

    async def _refresh_safe(self) -> None:
        try:
            await self._feed.refresh()
        except Exception:
            logger.exception("Error refreshing friends list")

    def _on_friends_updated(self, update: Any) -> None:
        friends, pending = update

        def _apply() -> None:
            self.friends.replace_all(friends)
            self.pending_requests.set(pending)

        self._ctx.ui(_apply)
