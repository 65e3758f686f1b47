from __future__ import annotations

import uuid
from datetime import datetime

import pytest
import pytest_asyncio

from lobby_sync.application import messages
from lobby_sync.application.dto.lobby import AccountMini
from lobby_sync.application.dto.services import ReportDraft, ReportResult
from lobby_sync.application.exceptions import ServiceFault, ServiceUnavailableError
from lobby_sync.domain.entities.roster import PlayerItem
from lobby_sync.domain.value_objects.enums import HubEvent, ReportReason, SanctionKind
from lobby_sync.services.players_controller import LobbyHeader, PlayersController, build_roster
from tests.conftest import MY_ACCOUNT_ID, TOKEN, FakeReportDialog, FakeReportService, make_lobby, settle


@pytest.fixture
def report_service() -> FakeReportService:
    return FakeReportService()


@pytest.fixture
def report_dialog() -> FakeReportDialog:
    return FakeReportDialog(draft=ReportDraft(reason=ReportReason.SPAM, comment="  flooding chat  "))


@pytest_asyncio.fixture
async def players(ctx, report_service, report_dialog):
    controller = PlayersController(ctx, report_service, report_dialog, cooldown_code="REPORT_COOLDOWN")
    yield controller
    controller.dispose()


BOB = PlayerItem(account_id=8, display_name="Bob")


def test_build_roster_marks_me_and_dedupes():
    accounts = [
        AccountMini(account_id=MY_ACCOUNT_ID, display_name="Alice"),
        AccountMini(account_id=8, display_name=""),
        AccountMini(account_id=8, display_name="Bob again"),
    ]

    roster = build_roster(accounts, MY_ACCOUNT_ID)

    assert [(p.account_id, p.display_name, p.is_me) for p in roster] == [
        (MY_ACCOUNT_ID, "Alice", True),
        (8, "Player", False),
    ]


@pytest.mark.asyncio
async def test_snapshot_replaces_roster_and_state(players, ctx, hub):
    lobby = make_lobby()

    hub.emit(HubEvent.LOBBY_UPDATED, lobby)
    await settle()

    assert ctx.state.current_lobby_id == lobby.lobby_id
    assert ctx.state.current_access_code == "ABC123"
    assert players.header.value == LobbyHeader(name="Friday quiz", access_code="ABC123")
    assert [p.account_id for p in players.players] == [MY_ACCOUNT_ID, 8]
    assert [p.is_me for p in players.players] == [True, False]


@pytest.mark.asyncio
async def test_same_snapshot_twice_is_idempotent(players, hub):
    lobby = make_lobby()
    notified = []
    players.players.observe(notified.append)

    hub.emit(HubEvent.LOBBY_UPDATED, lobby)
    first = players.players.snapshot()
    hub.emit(HubEvent.LOBBY_UPDATED, lobby)

    assert players.players.snapshot() == first
    assert len(notified) == 2
    assert notified[0] == notified[1]


@pytest.mark.asyncio
async def test_snapshot_without_code_keeps_known_code(players, ctx, hub):
    lobby = make_lobby()
    hub.emit(HubEvent.LOBBY_UPDATED, lobby)

    hub.emit(HubEvent.LOBBY_UPDATED, make_lobby(lobby_id=lobby.lobby_id, code=""))

    assert ctx.state.current_access_code == "ABC123"


@pytest.mark.asyncio
async def test_new_lobby_without_code_clears_old_code(players, ctx, hub):
    hub.emit(HubEvent.LOBBY_UPDATED, make_lobby())

    hub.emit(HubEvent.LOBBY_UPDATED, make_lobby(code=""))

    assert ctx.state.current_access_code == ""
    assert players.header.value.access_code == ""


@pytest.mark.asyncio
async def test_player_deltas_do_not_touch_roster(players, hub):
    hub.emit(HubEvent.LOBBY_UPDATED, make_lobby())
    before = players.players.snapshot()

    hub.emit(HubEvent.PLAYER_JOINED, AccountMini(account_id=99, display_name="Zed"))
    hub.emit(HubEvent.PLAYER_LEFT, 8)
    await settle()

    assert players.players.snapshot() == before


@pytest.mark.asyncio
async def test_enter_lobby_adopts_info(players, ctx):
    lobby = make_lobby(name="  ")

    players.enter_lobby(lobby)

    assert ctx.state.current_lobby_id == lobby.lobby_id
    assert players.header.value.name == messages.LOBBY_TITLE


@pytest.mark.asyncio
async def test_leave_lobby_clears_state(players, ctx, hub):
    lobby = make_lobby()
    players.enter_lobby(lobby)

    await players.leave_lobby()

    assert hub.left == [(TOKEN, lobby.lobby_id)]
    assert ctx.state.current_lobby_id is None
    assert ctx.state.current_access_code == ""
    assert len(players.players) == 0
    assert players.header.value == LobbyHeader()


@pytest.mark.asyncio
async def test_leave_lobby_clears_even_when_hub_fails(players, ctx, hub):
    players.enter_lobby(make_lobby())
    hub.offline = True

    await players.leave_lobby()

    assert ctx.state.current_lobby_id is None


@pytest.mark.asyncio
async def test_report_submits_trimmed_request(players, ctx, report_service, notifier):
    lobby = make_lobby()
    players.enter_lobby(lobby)

    await players.report_player(BOB)

    assert len(report_service.requests) == 1
    request = report_service.requests[0]
    assert request.lobby_id == lobby.lobby_id
    assert request.target_account_id == 8
    assert request.reason is ReportReason.SPAM
    assert request.comment == "flooding chat"
    assert notifier.last == ("info", messages.LOBBY_TITLE, messages.REPORT_SENT)


@pytest.mark.asyncio
async def test_report_self_is_noop(players, report_dialog, report_service, notifier):
    players.enter_lobby(make_lobby())

    await players.report_player(PlayerItem(account_id=MY_ACCOUNT_ID, display_name="Alice", is_me=True))

    assert report_dialog.targets == []
    assert report_service.requests == []
    assert notifier.notices == []


@pytest.mark.asyncio
async def test_report_outside_lobby_is_noop(players, report_dialog, report_service):
    await players.report_player(BOB)

    assert report_dialog.targets == []
    assert report_service.requests == []


@pytest.mark.asyncio
async def test_report_cancelled_in_dialog(players, report_dialog, report_service, notifier):
    players.enter_lobby(make_lobby())
    report_dialog.draft = None

    await players.report_player(BOB)

    assert report_service.requests == []
    assert notifier.notices == []


@pytest.mark.asyncio
async def test_report_cooldown_is_informational(players, report_service, notifier):
    players.enter_lobby(make_lobby())
    report_service.error = ServiceFault("REPORT_COOLDOWN", "wait 10 minutes")

    await players.report_player(BOB)

    assert notifier.last == ("info", messages.LOBBY_TITLE, messages.REPORT_COOLDOWN)


@pytest.mark.asyncio
async def test_report_other_fault_shows_code_and_message(players, report_service, notifier):
    players.enter_lobby(make_lobby())
    report_service.error = ServiceFault("TARGET_NOT_IN_LOBBY", "Player already left.")

    await players.report_player(BOB)

    assert notifier.last == ("warning", messages.LOBBY_TITLE, "TARGET_NOT_IN_LOBBY: Player already left.")


@pytest.mark.asyncio
async def test_report_unreachable_service(players, report_service, notifier):
    players.enter_lobby(make_lobby())
    report_service.error = ServiceUnavailableError("timeout")

    await players.report_player(BOB)

    assert notifier.last == ("error", messages.LOBBY_TITLE, messages.NO_CONNECTION)


@pytest.mark.asyncio
async def test_report_unexpected_error(players, report_service, notifier):
    players.enter_lobby(make_lobby())
    report_service.error = ValueError("boom")

    await players.report_player(BOB)

    assert notifier.last == ("error", messages.LOBBY_TITLE, messages.REPORT_FAILED)


@pytest.mark.parametrize(
    "result, expected",
    [
        (ReportResult(sanction_applied=False), messages.REPORT_SENT),
        (ReportResult(sanction_applied=True, sanction=SanctionKind.PERMANENT), messages.REPORT_BANNED),
        (
            ReportResult(
                sanction_applied=True,
                sanction=SanctionKind.TEMPORARY,
                sanction_ends_at=datetime(2024, 6, 2, 21, 5),
            ),
            "Report sent. The player was suspended until 2024-06-02 21:05.",
        ),
        (ReportResult(sanction_applied=True, sanction=SanctionKind.TEMPORARY), messages.REPORT_SUSPENDED),
    ],
)
@pytest.mark.asyncio
async def test_report_result_messages(players, report_service, notifier, result, expected):
    players.enter_lobby(make_lobby())
    report_service.result = result

    await players.report_player(BOB)

    assert notifier.last == ("info", messages.LOBBY_TITLE, expected)


@pytest.mark.asyncio
async def test_report_requires_session(players, ctx, report_dialog, notifier):
    players.enter_lobby(make_lobby())
    ctx.auth.token = ""

    await players.report_player(BOB)

    assert report_dialog.targets == []
    assert notifier.last == ("info", messages.LOBBY_TITLE, messages.NO_VALID_SESSION)


@pytest.mark.asyncio
async def test_snapshot_for_other_payload_types_is_ignored(players, ctx, hub):
    hub.emit(HubEvent.LOBBY_UPDATED, {"lobby_id": str(uuid.uuid4())})

    assert ctx.state.current_lobby_id is None
