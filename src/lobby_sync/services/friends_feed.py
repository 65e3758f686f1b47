"""Periodic friends list refresh and presence heartbeat."""
from __future__ import annotations

import asyncio
import logging
from typing import Callable

from lobby_sync.application.context import AuthSession
from lobby_sync.application.dto.services import FriendsPage, FriendSummary
from lobby_sync.application.ports.hub import Subscription
from lobby_sync.application.ports.services import FriendsService
from lobby_sync.config import settings
from lobby_sync.domain.entities.roster import FriendItem
from lobby_sync.domain.value_objects.enums import Presence
from lobby_sync.infrastructure.hub.registry import EventRegistry
from lobby_sync.workers.timer import PeriodicTimer

logger = logging.getLogger(__name__)

FRIENDS_UPDATED = "friends.updated"

STATUS_AVAILABLE = "Available"
STATUS_OFFLINE = "Offline"

FriendsListener = Callable[[tuple[list[FriendItem], int]], None]


def to_friend_item(summary: FriendSummary) -> FriendItem:
    name = summary.display_name.strip() or summary.username.strip()
    return FriendItem(
        account_id=summary.account_id,
        display_name=name,
        is_online=summary.is_online,
        presence=Presence.ONLINE if summary.is_online else Presence.OFFLINE,
        status_text=STATUS_AVAILABLE if summary.is_online else STATUS_OFFLINE,
        avatar_url=summary.avatar_url,
    )


def project_page(page: FriendsPage) -> tuple[list[FriendItem], int]:
    return [to_friend_item(f) for f in page.friends], max(0, len(page.pending_incoming))


class FriendsFeed:
    """Keeps subscribers supplied with full friends snapshots.

    Each update carries the complete list plus the pending request count.
    """

    def __init__(
        self,
        service: FriendsService,
        auth: AuthSession,
        *,
        refresh_seconds: float = settings.FRIENDS_REFRESH_SECONDS,
        heartbeat_seconds: float = settings.FRIENDS_HEARTBEAT_SECONDS,
    ) -> None:
        self._service = service
        self._auth = auth
        self._registry = EventRegistry()
        self._refresh_timer = PeriodicTimer(refresh_seconds, self._on_refresh_tick, name="friends-refresh")
        self._heartbeat_timer = PeriodicTimer(heartbeat_seconds, self._on_heartbeat_tick, name="friends-heartbeat")
        self._refresh_in_flight = False
        self._heartbeat_in_flight = False
        self._tasks: set[asyncio.Task[None]] = set()

    def subscribe(self, listener: FriendsListener) -> Subscription:
        return self._registry.subscribe(FRIENDS_UPDATED, listener)

    async def start(self) -> None:
        self._heartbeat_timer.start()
        self._refresh_timer.start()
        await self.refresh()

    def stop(self) -> None:
        self._heartbeat_timer.stop()
        self._refresh_timer.stop()
        for task in list(self._tasks):
            task.cancel()
        self._refresh_in_flight = False
        self._heartbeat_in_flight = False

    async def refresh(self) -> None:
        token = self._auth.token
        if not token.strip():
            return

        try:
            page = await self._service.list_friends(token, include_pending_incoming=True)
        except Exception:
            logger.warning("Refreshing friends list failed", exc_info=True)
            return

        self._registry.emit(FRIENDS_UPDATED, project_page(page))

    async def heartbeat(self) -> None:
        token = self._auth.token
        if not token.strip():
            return
        try:
            await self._service.presence_heartbeat(token)
        except Exception:
            logger.debug("Presence heartbeat failed", exc_info=True)

    def _on_refresh_tick(self) -> None:
        if self._refresh_in_flight:
            logger.debug("Friends refresh still running, skipping tick")
            return
        self._refresh_in_flight = True
        self._spawn(self._refresh_once(), name="friends-refresh-call")

    def _on_heartbeat_tick(self) -> None:
        if self._heartbeat_in_flight:
            logger.debug("Presence heartbeat still running, skipping tick")
            return
        self._heartbeat_in_flight = True
        self._spawn(self._heartbeat_once(), name="friends-heartbeat-call")

    async def _refresh_once(self) -> None:
        try:
            await self.refresh()
        finally:
            self._refresh_in_flight = False

    async def _heartbeat_once(self) -> None:
        try:
            await self.heartbeat()
        finally:
            self._heartbeat_in_flight = False

    def _spawn(self, coro, *, name: str) -> None:
        task = asyncio.create_task(coro, name=name)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
