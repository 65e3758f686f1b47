"""Shared test fixtures."""
from __future__ import annotations

import asyncio
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, Callable
from uuid import UUID

import pytest
import pytest_asyncio

from lobby_sync.application.context import AuthSession, SessionContext
from lobby_sync.application.dto.lobby import AccountMini, LobbyInfo, MatchInfo
from lobby_sync.application.dto.services import (
    FriendsPage,
    Profile,
    ReportDraft,
    ReportRequest,
    ReportResult,
)
from lobby_sync.application.exceptions import HubUnavailableError
from lobby_sync.domain.entities.match import MatchSettings
from lobby_sync.domain.entities.roster import PlayerItem
from lobby_sync.domain.entities.session import RuntimeState
from lobby_sync.domain.value_objects.enums import HubEvent
from lobby_sync.infrastructure.dispatch.ui_dispatcher import UiDispatcher
from lobby_sync.infrastructure.hub.registry import EventRegistry, HandlerSubscription

MY_ACCOUNT_ID = 7
MY_NAME = "Alice"
TOKEN = "token-abc"


async def settle(rounds: int = 10) -> None:
    """Let spawned tasks and queued callbacks run."""
    for _ in range(rounds):
        await asyncio.sleep(0)


def make_lobby(
    *,
    lobby_id: UUID | None = None,
    name: str = "Friday quiz",
    code: str = "ABC123",
    players: list[tuple[int, str]] | None = None,
) -> LobbyInfo:
    if players is None:
        players = [(MY_ACCOUNT_ID, MY_NAME), (8, "Bob")]
    return LobbyInfo(
        lobby_id=lobby_id or uuid.uuid4(),
        lobby_name=name,
        access_code=code,
        max_players=4,
        players=[AccountMini(account_id=aid, display_name=dn) for aid, dn in players],
    )


def make_match(*, lobby_id: UUID | None = None) -> MatchInfo:
    return MatchInfo(
        match_id=uuid.uuid4(),
        lobby_id=lobby_id,
        players=[AccountMini(account_id=MY_ACCOUNT_ID, display_name=MY_NAME)],
    )


@dataclass
class FakeHub:
    """In-memory hub; ``emit`` plays the server side."""
    registry: EventRegistry = field(default_factory=EventRegistry)
    sent_chats: list[tuple[str, UUID, str]] = field(default_factory=list)
    started: list[tuple[str, MatchSettings | None]] = field(default_factory=list)
    left: list[tuple[str, UUID]] = field(default_factory=list)
    continue_calls: int = 0
    offline: bool = False
    start_error: Exception | None = None
    continue_gate: asyncio.Event | None = None

    def subscribe(self, event: HubEvent, handler: Callable[[Any], None]) -> HandlerSubscription:
        return self.registry.subscribe(event, handler)

    def emit(self, event: HubEvent, payload: Any = None) -> None:
        self.registry.emit(event, payload)

    async def send_chat(self, token: str, lobby_id: UUID, text: str) -> None:
        if self.offline:
            raise HubUnavailableError("hub offline")
        self.sent_chats.append((token, lobby_id, text))

    async def start_match(self, token: str, settings: MatchSettings | None = None) -> None:
        if self.start_error is not None:
            raise self.start_error
        self.started.append((token, settings))

    async def leave_lobby(self, token: str, lobby_id: UUID) -> None:
        if self.offline:
            raise HubUnavailableError("hub offline")
        self.left.append((token, lobby_id))

    async def continue_reconnect_cycle(self) -> None:
        self.continue_calls += 1
        if self.continue_gate is not None:
            await self.continue_gate.wait()


@dataclass
class FakeNotifier:
    notices: list[tuple[str, str, str]] = field(default_factory=list)

    def info(self, title: str, message: str) -> None:
        self.notices.append(("info", title, message))

    def warning(self, title: str, message: str) -> None:
        self.notices.append(("warning", title, message))

    def error(self, title: str, message: str) -> None:
        self.notices.append(("error", title, message))

    @property
    def last(self) -> tuple[str, str, str] | None:
        return self.notices[-1] if self.notices else None


@dataclass
class FakeClock:
    current: datetime = field(default_factory=lambda: datetime(2024, 5, 1, 18, 30, tzinfo=timezone.utc))

    def now(self) -> datetime:
        return self.current

    def local_now(self) -> datetime:
        return self.current

    def advance(self, seconds: float) -> None:
        self.current += timedelta(seconds=seconds)


@dataclass
class FakeOverlay:
    statuses: list[str] = field(default_factory=list)
    visible: bool = False

    def show(self, status: str) -> None:
        self.statuses.append(status)
        self.visible = True

    def hide(self) -> None:
        self.visible = False


@dataclass
class FakePrompt:
    answer: bool = True
    error: Exception | None = None
    questions: list[str] = field(default_factory=list)
    gate: asyncio.Event | None = None

    async def ask_keep_waiting(self, message: str) -> bool:
        self.questions.append(message)
        if self.gate is not None:
            await self.gate.wait()
        if self.error is not None:
            raise self.error
        return self.answer


@dataclass
class FakeNavigator:
    calls: int = 0

    def navigate_to_login(self) -> None:
        self.calls += 1


@dataclass
class FakeView:
    visible: bool = False
    shows: int = 0
    hides: int = 0

    def show(self) -> None:
        self.shows += 1
        self.visible = True

    def hide(self) -> None:
        self.hides += 1
        self.visible = False


@dataclass
class FakeMatchViewFactory:
    opened: list[MatchInfo] = field(default_factory=list)
    on_closed: list[Callable[[], None]] = field(default_factory=list)
    error: Exception | None = None
    gate: asyncio.Event | None = None

    async def open(self, match: MatchInfo, *, token: str, account_id: int, on_closed: Callable[[], None]) -> None:
        self.opened.append(match)
        if self.gate is not None:
            await self.gate.wait()
        if self.error is not None:
            raise self.error
        self.on_closed.append(on_closed)


@dataclass
class FakeReportDialog:
    draft: ReportDraft | None = None
    targets: list[PlayerItem] = field(default_factory=list)

    async def capture(self, target: PlayerItem) -> ReportDraft | None:
        self.targets.append(target)
        return self.draft


@dataclass
class FakeSettingsDialog:
    result: MatchSettings | None = None

    async def edit(self, current: MatchSettings) -> MatchSettings | None:
        return self.result


@dataclass
class FakeReportService:
    result: ReportResult = field(default_factory=ReportResult)
    error: Exception | None = None
    requests: list[ReportRequest] = field(default_factory=list)

    async def submit_report(self, token: str, request: ReportRequest) -> ReportResult:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        return self.result


@dataclass
class FakeFriendsService:
    page: FriendsPage = field(default_factory=FriendsPage)
    list_error: Exception | None = None
    list_gate: asyncio.Event | None = None
    invite_error: Exception | None = None
    list_calls: int = 0
    heartbeats: int = 0
    invites: list[tuple[int, str]] = field(default_factory=list)

    async def list_friends(self, token: str, *, include_pending_incoming: bool = True) -> FriendsPage:
        self.list_calls += 1
        if self.list_gate is not None:
            await self.list_gate.wait()
        if self.list_error is not None:
            raise self.list_error
        return self.page

    async def presence_heartbeat(self, token: str) -> None:
        self.heartbeats += 1

    async def send_lobby_invite(self, token: str, target_account_id: int, lobby_code: str) -> None:
        self.invites.append((target_account_id, lobby_code))
        if self.invite_error is not None:
            raise self.invite_error


@dataclass
class FakeProfileService:
    profile: Profile | None = None
    error: Exception | None = None

    async def get_my_profile(self, token: str) -> Profile:
        if self.error is not None:
            raise self.error
        assert self.profile is not None
        return self.profile


@pytest.fixture
def hub() -> FakeHub:
    return FakeHub()


@pytest.fixture
def notifier() -> FakeNotifier:
    return FakeNotifier()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest_asyncio.fixture
async def dispatcher():
    d = UiDispatcher()
    await d.start()
    yield d
    await d.stop()


@pytest_asyncio.fixture
async def ctx(dispatcher, hub, notifier, clock) -> SessionContext:
    return SessionContext(
        state=RuntimeState(my_display_name=MY_NAME),
        dispatcher=dispatcher,
        hub=hub,
        notifier=notifier,
        auth=AuthSession(token=TOKEN, account_id=MY_ACCOUNT_ID),
        clock=clock,
    )
