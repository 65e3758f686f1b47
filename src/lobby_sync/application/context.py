from __future__ import annotations

from dataclasses import dataclass, field

from lobby_sync.application import messages
from lobby_sync.application.ports.clock import Clock, SystemClock
from lobby_sync.application.ports.hub import LobbyHub
from lobby_sync.application.ports.ui import Action, Dispatcher, Notifier
from lobby_sync.domain.entities.session import RuntimeState


@dataclass(slots=True)
class AuthSession:
    """Credentials of the signed-in account."""

    token: str = ""
    account_id: int = 0

    @property
    def is_authenticated(self) -> bool:
        return bool(self.token.strip())


@dataclass
class SessionContext:
    """Everything a lobby controller needs, handed over at construction."""

    state: RuntimeState
    dispatcher: Dispatcher
    hub: LobbyHub
    notifier: Notifier
    auth: AuthSession = field(default_factory=AuthSession)
    clock: Clock = field(default_factory=SystemClock)

    def ui(self, action: Action | None) -> None:
        self.dispatcher.ui(action)

    def token_or_notify(self) -> str:
        """Return the session token, or show a notice and return ""."""
        if not self.auth.is_authenticated:
            self.notifier.info(messages.LOBBY_TITLE, messages.NO_VALID_SESSION)
            return ""
        return self.auth.token
