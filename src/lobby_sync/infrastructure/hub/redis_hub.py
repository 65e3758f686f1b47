"""Lobby hub client over Redis Pub/Sub: inbound user channel + outbound command channel."""
from __future__ import annotations

import asyncio
import logging
from typing import Any
from uuid import UUID

import redis.asyncio as aioredis
from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import TimeoutError as RedisTimeoutError

from lobby_sync.application.dto.lobby import AccountMini, ChatMessage, LobbyInfo, MatchInfo
from lobby_sync.application.exceptions import HubUnavailableError
from lobby_sync.application.ports.hub import EventHandler
from lobby_sync.config import settings
from lobby_sync.domain.entities.match import MatchSettings
from lobby_sync.domain.value_objects.enums import HubEvent
from lobby_sync.infrastructure.hub import protocol
from lobby_sync.infrastructure.hub.registry import EventRegistry, HandlerSubscription
from lobby_sync.infrastructure.hub.serializer import deserialize_event, serialize_event

logger = logging.getLogger(__name__)

_CONNECTION_ERRORS = (RedisConnectionError, RedisTimeoutError, OSError)


def _calc_backoff(attempt: int, base: float, cap: float) -> float:
    return min(base * (2 ** (attempt - 1)), cap)


class RedisLobbyHub:
    """Implements application.ports.hub.LobbyHub.

    The listener task emits connection lifecycle events. After a lost
    connection it runs one reconnect round; if the round is exhausted the
    listener parks until ``continue_reconnect_cycle`` succeeds.
    """

    def __init__(
        self,
        redis: aioredis.Redis,
        inbound_channel: str,
        *,
        command_channel: str = settings.HUB_COMMAND_CHANNEL,
        max_attempts: int = settings.HUB_MAX_RECONNECT_ATTEMPTS,
        base_delay: float = settings.HUB_RECONNECT_BASE_DELAY,
        max_delay: float = settings.HUB_RECONNECT_MAX_DELAY,
    ) -> None:
        self._redis = redis
        self._inbound_channel = inbound_channel
        self._command_channel = command_channel
        self._max_attempts = max_attempts
        self._base_delay = base_delay
        self._max_delay = max_delay
        self._registry = EventRegistry()
        self._task: asyncio.Task[None] | None = None
        self._resume = asyncio.Event()
        self._round_lock = asyncio.Lock()
        self._parked = False

    def subscribe(self, event: HubEvent, handler: EventHandler) -> HandlerSubscription:
        return self._registry.subscribe(event, handler)

    async def start(self) -> None:
        self._task = asyncio.create_task(self._listen(), name="lobby-hub-listener")
        logger.info("Lobby hub listening on channel=%s", self._inbound_channel)

    async def stop(self) -> None:
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
            logger.info("Lobby hub stopped")
        self._registry.clear()

    async def send_chat(self, token: str, lobby_id: UUID, text: str) -> None:
        await self._publish(
            protocol.CHAT_SEND,
            {"token": token, "lobby_id": lobby_id, "message": text},
        )

    async def start_match(self, token: str, settings: MatchSettings | None = None) -> None:
        await self._publish(
            protocol.MATCH_START,
            {"token": token, "settings": settings.to_payload() if settings else None},
        )

    async def leave_lobby(self, token: str, lobby_id: UUID) -> None:
        await self._publish(protocol.LOBBY_LEAVE, {"token": token, "lobby_id": lobby_id})

    async def continue_reconnect_cycle(self) -> None:
        if not self._parked:
            logger.debug("Reconnect cycle requested while not parked, ignoring")
            return
        if self._round_lock.locked():
            logger.debug("Reconnect round already running")
            return
        async with self._round_lock:
            if await self._reconnect_round():
                self._parked = False
                self._resume.set()

    async def _publish(self, event_type: str, payload: dict[str, Any]) -> None:
        raw = serialize_event(event_type, payload)
        try:
            receivers = await self._redis.publish(self._command_channel, raw)
        except _CONNECTION_ERRORS as exc:
            raise HubUnavailableError(str(exc)) from exc
        if not receivers:
            raise HubUnavailableError(f"No hub listening on {self._command_channel}")

    async def _listen(self) -> None:
        while True:
            try:
                await self._consume()
                logger.warning("Lobby hub stream ended on channel=%s", self._inbound_channel)
            except asyncio.CancelledError:
                raise
            except _CONNECTION_ERRORS:
                logger.warning("Lobby hub connection lost", exc_info=True)
            except Exception:
                logger.exception("Lobby hub listener failed")

            self._registry.emit(HubEvent.CONNECTION_LOST)
            async with self._round_lock:
                recovered = await self._reconnect_round()
            if not recovered:
                self._resume.clear()
                self._parked = True
                await self._resume.wait()

    async def _reconnect_round(self) -> bool:
        for attempt in range(1, self._max_attempts + 1):
            self._registry.emit(HubEvent.RECONNECT_ATTEMPT, attempt)
            try:
                await self._redis.ping()
            except _CONNECTION_ERRORS:
                logger.info("Reconnect attempt %d/%d failed", attempt, self._max_attempts)
                if attempt < self._max_attempts:
                    await asyncio.sleep(_calc_backoff(attempt, self._base_delay, self._max_delay))
                continue
            logger.info("Reconnected to hub after %d attempt(s)", attempt)
            self._registry.emit(HubEvent.RECONNECT_SUCCEEDED)
            return True

        logger.warning("Reconnect attempts exhausted (%d)", self._max_attempts)
        self._registry.emit(HubEvent.RECONNECT_EXHAUSTED)
        return False

    async def _consume(self) -> None:
        pubsub = self._redis.pubsub()
        await pubsub.subscribe(self._inbound_channel)
        try:
            async for message in pubsub.listen():
                if message["type"] != "message":
                    continue
                try:
                    event_type, data = deserialize_event(message["data"])
                    self.dispatch(event_type, data)
                except Exception:
                    logger.exception("Error processing hub message")
        finally:
            try:
                await pubsub.unsubscribe(self._inbound_channel)
                await pubsub.aclose()
            except Exception:
                logger.debug("Pub/Sub cleanup failed", exc_info=True)

    def dispatch(self, event_type: str, data: dict[str, Any]) -> None:
        """Translate one wire event into a typed hub event."""
        if event_type == protocol.LOBBY_UPDATED:
            self._registry.emit(HubEvent.LOBBY_UPDATED, LobbyInfo.model_validate(data))
        elif event_type == protocol.PLAYER_JOINED:
            self._registry.emit(HubEvent.PLAYER_JOINED, AccountMini.model_validate(data))
        elif event_type == protocol.PLAYER_LEFT:
            self._registry.emit(HubEvent.PLAYER_LEFT, int(data["account_id"]))
        elif event_type == protocol.CHAT_MESSAGE:
            self._registry.emit(HubEvent.CHAT_RECEIVED, ChatMessage.model_validate(data))
        elif event_type == protocol.CHAT_REJECTED:
            self._registry.emit(HubEvent.CHAT_SEND_FAILED, data.get("reason", ""))
        elif event_type == protocol.MATCH_STARTED:
            self._registry.emit(HubEvent.MATCH_STARTED, MatchInfo.model_validate(data))
        else:
            logger.debug("Ignoring unknown hub event: %s", event_type)
