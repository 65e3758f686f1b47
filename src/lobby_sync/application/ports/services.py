from __future__ import annotations

from typing import Protocol

from lobby_sync.application.dto.services import (
    FriendsPage,
    Profile,
    ReportRequest,
    ReportResult,
)


class FriendsService(Protocol):
    async def list_friends(self, token: str, *, include_pending_incoming: bool = True) -> FriendsPage: ...

    async def presence_heartbeat(self, token: str) -> None: ...

    async def send_lobby_invite(self, token: str, target_account_id: int, lobby_code: str) -> None: ...


class ReportService(Protocol):
    async def submit_report(self, token: str, request: ReportRequest) -> ReportResult: ...


class ProfileService(Protocol):
    async def get_my_profile(self, token: str) -> Profile: ...
