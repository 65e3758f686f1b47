"""Data contracts pushed by the lobby hub."""
from __future__ import annotations

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class AccountMini(BaseModel):
    model_config = ConfigDict(frozen=True)

    account_id: int
    display_name: str = ""
    avatar_url: str | None = None


class LobbyInfo(BaseModel):
    model_config = ConfigDict(frozen=True)

    lobby_id: UUID
    lobby_name: str = ""
    access_code: str = ""
    max_players: int | None = None
    players: list[AccountMini] = Field(default_factory=list)


class ChatMessage(BaseModel):
    model_config = ConfigDict(frozen=True)

    lobby_id: UUID | None = None
    from_player_name: str = ""
    message: str = ""
    sent_at: datetime | None = None


class MatchInfo(BaseModel):
    model_config = ConfigDict(frozen=True)

    match_id: UUID
    lobby_id: UUID | None = None
    players: list[AccountMini] = Field(default_factory=list)
    config: dict[str, Any] = Field(default_factory=dict)
