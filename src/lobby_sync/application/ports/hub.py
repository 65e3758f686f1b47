from __future__ import annotations

from typing import Any, Callable, Protocol
from uuid import UUID

from lobby_sync.domain.entities.match import MatchSettings
from lobby_sync.domain.value_objects.enums import HubEvent

EventHandler = Callable[[Any], None]


class Subscription(Protocol):
    def unsubscribe(self) -> None: ...


class LobbyHub(Protocol):
    """Client side of the authoritative lobby hub.

    Handlers may be invoked on any thread; consumers marshal through the
    UI dispatcher before touching shared state.
    """

    def subscribe(self, event: HubEvent, handler: EventHandler) -> Subscription: ...

    async def send_chat(self, token: str, lobby_id: UUID, text: str) -> None: ...

    async def start_match(self, token: str, settings: MatchSettings | None = None) -> None: ...

    async def leave_lobby(self, token: str, lobby_id: UUID) -> None: ...

    async def continue_reconnect_cycle(self) -> None: ...
