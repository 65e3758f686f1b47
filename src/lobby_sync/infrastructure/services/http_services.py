"""HTTP adapters for the friends, report and profile services."""
from __future__ import annotations

import logging
from typing import Any

import httpx

from lobby_sync.application.dto.services import (
    FriendsPage,
    Profile,
    ReportRequest,
    ReportResult,
)
from lobby_sync.application.exceptions import ServiceFault, ServiceUnavailableError
from lobby_sync.config import settings

logger = logging.getLogger(__name__)

PRESENCE_DEVICE = "desktop"


def create_http_client(
    base_url: str = settings.SERVICES_BASE_URL,
    timeout: float = settings.SERVICES_TIMEOUT,
) -> httpx.AsyncClient:
    return httpx.AsyncClient(base_url=base_url, timeout=timeout)


def _fault_from_response(resp: httpx.Response) -> ServiceFault:
    code = f"HTTP_{resp.status_code}"
    detail = resp.reason_phrase
    try:
        body = resp.json()
    except ValueError:
        body = None
    if isinstance(body, dict):
        code = str(body.get("code") or code)
        detail = str(body.get("message") or body.get("detail") or detail)
    return ServiceFault(code, detail)


class HttpLobbyServices:
    """Implements FriendsService, ReportService and ProfileService."""

    def __init__(self, client: httpx.AsyncClient) -> None:
        self._client = client

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _request(
        self,
        method: str,
        path: str,
        token: str,
        *,
        json: dict[str, Any] | None = None,
        params: dict[str, Any] | None = None,
    ) -> Any:
        try:
            resp = await self._client.request(
                method,
                path,
                json=json,
                params=params,
                headers={"Authorization": f"Bearer {token}"},
            )
        except httpx.HTTPError as exc:
            logger.warning("%s %s failed: %s", method, path, exc)
            raise ServiceUnavailableError(str(exc)) from exc

        if resp.is_error:
            fault = _fault_from_response(resp)
            logger.warning("%s %s rejected: %s", method, path, fault)
            raise fault

        if not resp.content:
            return None
        return resp.json()

    async def list_friends(self, token: str, *, include_pending_incoming: bool = True) -> FriendsPage:
        data = await self._request(
            "GET",
            "/friends",
            token,
            params={"include_pending_incoming": str(include_pending_incoming).lower()},
        )
        return FriendsPage.model_validate(data or {})

    async def presence_heartbeat(self, token: str) -> None:
        await self._request("POST", "/presence/heartbeat", token, json={"device": PRESENCE_DEVICE})

    async def send_lobby_invite(self, token: str, target_account_id: int, lobby_code: str) -> None:
        await self._request(
            "POST",
            "/friends/invites",
            token,
            json={"target_account_id": target_account_id, "lobby_code": lobby_code},
        )

    async def submit_report(self, token: str, request: ReportRequest) -> ReportResult:
        data = await self._request("POST", "/reports", token, json=request.model_dump(mode="json"))
        return ReportResult.model_validate(data or {})

    async def get_my_profile(self, token: str) -> Profile:
        data = await self._request("GET", "/accounts/me", token)
        return Profile.model_validate(data or {})
