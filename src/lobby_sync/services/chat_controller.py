"""Lobby chat: optimistic send, echo suppression and the offline retry queue."""
from __future__ import annotations

import asyncio
import logging
import uuid
from datetime import datetime, timedelta
from typing import Any
from uuid import UUID

from lobby_sync.application import messages
from lobby_sync.application.context import SessionContext
from lobby_sync.application.dto.lobby import ChatMessage
from lobby_sync.application.observable import ObservableList
from lobby_sync.application.ports.hub import Subscription
from lobby_sync.config import settings
from lobby_sync.domain.entities.chat import ChatLine, PendingMessage
from lobby_sync.domain.value_objects.enums import HubEvent
from lobby_sync.workers.timer import PeriodicTimer

logger = logging.getLogger(__name__)

CHAT_TIME_FORMAT = "%H:%M"


class ChatController:
    def __init__(
        self,
        ctx: SessionContext,
        *,
        retry_interval: float = settings.CHAT_RETRY_INTERVAL,
        echo_window_seconds: float = settings.CHAT_ECHO_WINDOW_SECONDS,
        max_message_length: int = settings.CHAT_MAX_MESSAGE_LENGTH,
    ) -> None:
        self._ctx = ctx
        self._echo_window = timedelta(seconds=echo_window_seconds)
        self._max_length = max_message_length

        self.lines: ObservableList[ChatLine] = ObservableList()
        self.pending: ObservableList[PendingMessage] = ObservableList()

        self._retry_timer = PeriodicTimer(retry_interval, self._on_retry_tick, name="chat-retry")
        self._is_retrying = False
        self._retry_task: asyncio.Task[None] | None = None

        self._last_sent_text = ""
        self._last_sent_at: datetime | None = None

        self._subscriptions: list[Subscription] = [
            ctx.hub.subscribe(HubEvent.CHAT_RECEIVED, self._on_chat_received),
            ctx.hub.subscribe(HubEvent.CHAT_SEND_FAILED, self._on_chat_send_failed),
        ]

    @property
    def is_retry_timer_running(self) -> bool:
        return self._retry_timer.is_enabled

    async def submit_input(self, raw_text: str) -> bool:
        """Send what the user typed in the chat box."""
        text = (raw_text or "").strip()
        if not text:
            return False

        if not self._ctx.state.has_lobby:
            self._ctx.notifier.info(messages.CHAT_TITLE, messages.CHAT_JOIN_FIRST)
            return False

        token = self._ctx.token_or_notify()
        if not token:
            return False

        return await self.send_message(token, self._ctx.state.current_lobby_id, text)

    async def send_message(self, token: str, lobby_id: UUID | None, text: str) -> bool:
        """Append the line locally, then deliver it; queue it when delivery fails.

        Returns True only when the hub accepted the message.
        """
        text = (text or "").strip()
        if not text or lobby_id is None or not (token or "").strip():
            logger.debug("Chat send skipped: missing text, lobby or token")
            return False

        text = text[: self._max_length]

        self._append_line(self._ctx.state.my_display_name, text)
        self._last_sent_text = text
        self._last_sent_at = self._ctx.clock.now()

        try:
            await self._ctx.hub.send_chat(token, lobby_id, text)
        except Exception:
            logger.warning("Chat delivery failed for lobby %s, queueing", lobby_id, exc_info=True)
            self._ctx.ui(lambda: self._enqueue_pending(token, lobby_id, text))
            return False
        return True

    def append_system_line(self, text: str) -> None:
        self._append_line(messages.SYSTEM_AUTHOR, text)

    async def retry_pending(self) -> None:
        """Resend queued messages; drop those whose lobby is no longer current."""
        if self._is_retrying:
            return

        if not len(self.pending):
            self._retry_timer.stop()
            return

        self._is_retrying = True
        try:
            for pm in self.pending.snapshot():
                current = self._ctx.state.current_lobby_id
                if current is None or current != pm.lobby_id:
                    logger.debug("Dropping pending message %s for abandoned lobby %s", pm.client_msg_id, pm.lobby_id)
                    self.pending.remove(pm)
                    continue

                try:
                    await self._ctx.hub.send_chat(pm.token, pm.lobby_id, pm.text)
                except Exception:
                    logger.warning("Retry of pending message %s failed", pm.client_msg_id, exc_info=True)
                    continue

                self.pending.remove(pm)
                self._last_sent_text = pm.text
                self._last_sent_at = self._ctx.clock.now()
                logger.info("Pending message %s delivered", pm.client_msg_id)
        finally:
            self._is_retrying = False

        if not len(self.pending):
            self._retry_timer.stop()

    def dispose(self) -> None:
        for sub in self._subscriptions:
            sub.unsubscribe()
        self._subscriptions.clear()
        self._retry_timer.stop()
        if self._retry_task is not None and not self._retry_task.done():
            self._retry_task.cancel()

    def _append_line(self, author: str | None, text: str | None) -> None:
        line = ChatLine(
            author=author if author and author.strip() else messages.UNKNOWN_AUTHOR,
            text=text or "",
            time=self._ctx.clock.local_now().strftime(CHAT_TIME_FORMAT),
        )
        self._ctx.ui(lambda: self.lines.append(line))

    def _enqueue_pending(self, token: str, lobby_id: UUID, text: str) -> None:
        self.pending.append(
            PendingMessage(
                client_msg_id=uuid.uuid4(),
                token=token,
                lobby_id=lobby_id,
                text=text,
                queued_at=self._ctx.clock.now(),
            )
        )
        self.append_system_line(messages.CHAT_QUEUED_OFFLINE)

        if not self._retry_timer.is_enabled:
            self._retry_timer.start()

    def _on_retry_tick(self) -> None:
        if self._is_retrying:
            return
        self._retry_task = asyncio.create_task(self.retry_pending(), name="chat-retry-sweep")

    def _is_recent_echo(self, author: str, text: str) -> bool:
        if self._last_sent_at is None:
            return False
        return (
            author.casefold() == (self._ctx.state.my_display_name or "").casefold()
            and text == self._last_sent_text
            and self._ctx.clock.now() - self._last_sent_at < self._echo_window
        )

    def _on_chat_received(self, chat: Any) -> None:
        if not isinstance(chat, ChatMessage):
            return

        def _apply() -> None:
            author = chat.from_player_name.strip() or messages.REMOTE_PLAYER_AUTHOR
            if self._is_recent_echo(author, chat.message):
                logger.debug("Suppressed echo of own chat message")
                return
            self._append_line(author, chat.message)

        self._ctx.ui(_apply)

    def _on_chat_send_failed(self, reason: Any) -> None:
        logger.warning("Hub rejected chat message: %s", reason)
        self._ctx.ui(lambda: self.append_system_line(messages.NO_CONNECTION))
