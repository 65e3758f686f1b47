from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import AsyncIterator

import redis.asyncio as aioredis

from lobby_sync.application.context import AuthSession, SessionContext
from lobby_sync.application.ports.hub import LobbyHub
from lobby_sync.application.ports.services import FriendsService, ProfileService, ReportService
from lobby_sync.application.ports.ui import (
    DrawerView,
    LobbyView,
    LoginNavigator,
    MatchViewFactory,
    Notifier,
    ReconnectOverlay,
    ReconnectPrompt,
    ReportDialog,
    SettingsDialog,
)
from lobby_sync.config import Settings, settings
from lobby_sync.domain.entities.session import RuntimeState
from lobby_sync.infrastructure.dispatch.ui_dispatcher import UiDispatcher
from lobby_sync.infrastructure.hub.redis_hub import RedisLobbyHub
from lobby_sync.infrastructure.services.http_services import HttpLobbyServices, create_http_client
from lobby_sync.services.chat_controller import ChatController
from lobby_sync.services.friends_controller import FriendsController
from lobby_sync.services.friends_feed import FriendsFeed
from lobby_sync.services.match_controller import MatchController
from lobby_sync.services.players_controller import PlayersController
from lobby_sync.services.profile_controller import ProfileController
from lobby_sync.services.reconnect_controller import ReconnectController

logger = logging.getLogger(__name__)


@dataclass
class UiAdapters:
    notifier: Notifier
    overlay: ReconnectOverlay
    prompt: ReconnectPrompt
    login_navigator: LoginNavigator
    report_dialog: ReportDialog
    settings_dialog: SettingsDialog
    drawer: DrawerView
    lobby_view: LobbyView
    match_views: MatchViewFactory


class LobbySession:
    """Composition root: one context and one controller of each kind."""

    def __init__(
        self,
        ctx: SessionContext,
        dispatcher: UiDispatcher,
        ui: UiAdapters,
        friends_service: FriendsService,
        report_service: ReportService,
        profile_service: ProfileService,
        config: Settings = settings,
    ) -> None:
        self.ctx = ctx
        self.dispatcher = dispatcher
        self.feed = FriendsFeed(
            friends_service,
            ctx.auth,
            refresh_seconds=config.FRIENDS_REFRESH_SECONDS,
            heartbeat_seconds=config.FRIENDS_HEARTBEAT_SECONDS,
        )
        self.profile = ProfileController(ctx, profile_service)
        self.chat = ChatController(
            ctx,
            retry_interval=config.CHAT_RETRY_INTERVAL,
            echo_window_seconds=config.CHAT_ECHO_WINDOW_SECONDS,
            max_message_length=config.CHAT_MAX_MESSAGE_LENGTH,
        )
        self.reconnect = ReconnectController(
            ctx,
            ui.overlay,
            ui.prompt,
            ui.login_navigator,
            self.chat,
            cycle_seconds=config.RECONNECT_CYCLE_SECONDS,
        )
        self.players = PlayersController(
            ctx,
            report_service,
            ui.report_dialog,
            cooldown_code=config.REPORT_COOLDOWN_CODE,
        )
        self.friends = FriendsController(ctx, self.feed, friends_service, ui.drawer)
        self.match = MatchController(ctx, ui.lobby_view, ui.match_views, ui.settings_dialog)

    async def start(self) -> None:
        if not self.dispatcher.is_running:
            await self.dispatcher.start()
        await self.profile.refresh()
        await self.feed.start()
        logger.info("Lobby session started for account %s", self.ctx.auth.account_id)

    async def stop(self) -> None:
        self.feed.stop()
        for controller in (self.match, self.friends, self.players, self.reconnect, self.chat):
            controller.dispose()
        await self.dispatcher.stop()
        logger.info("Lobby session stopped")


def create_session(
    hub: LobbyHub,
    services: HttpLobbyServices,
    ui: UiAdapters,
    auth: AuthSession,
    *,
    config: Settings = settings,
) -> LobbySession:
    dispatcher = UiDispatcher()
    ctx = SessionContext(
        state=RuntimeState(),
        dispatcher=dispatcher,
        hub=hub,
        notifier=ui.notifier,
        auth=auth,
    )
    return LobbySession(ctx, dispatcher, ui, services, services, services, config)


@asynccontextmanager
async def lifespan(ui: UiAdapters, auth: AuthSession, config: Settings = settings) -> AsyncIterator[LobbySession]:
    """Startup / shutdown lifecycle of a signed-in lobby session."""
    redis = aioredis.from_url(config.REDIS_URL, decode_responses=True)
    logger.info("Redis connection pool created")

    hub = RedisLobbyHub(
        redis,
        config.user_channel(auth.account_id),
        command_channel=config.HUB_COMMAND_CHANNEL,
        max_attempts=config.HUB_MAX_RECONNECT_ATTEMPTS,
        base_delay=config.HUB_RECONNECT_BASE_DELAY,
        max_delay=config.HUB_RECONNECT_MAX_DELAY,
    )
    services = HttpLobbyServices(create_http_client(config.SERVICES_BASE_URL, config.SERVICES_TIMEOUT))
    session = create_session(hub, services, ui, auth, config=config)

    await session.start()
    await hub.start()
    try:
        yield session
    finally:
        await session.stop()
        await hub.stop()
        await services.aclose()
        await redis.aclose()
        logger.info("Redis connection pool closed")
