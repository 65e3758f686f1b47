from __future__ import annotations

from dataclasses import dataclass

from lobby_sync.domain.value_objects.enums import Presence

DEFAULT_PLAYER_NAME = "Player"


@dataclass(frozen=True, slots=True)
class PlayerItem:
    account_id: int
    display_name: str = DEFAULT_PLAYER_NAME
    avatar_url: str | None = None
    is_me: bool = False


@dataclass(frozen=True, slots=True)
class FriendItem:
    account_id: int
    display_name: str
    is_online: bool = False
    presence: Presence = Presence.OFFLINE
    status_text: str = ""
    avatar_url: str | None = None
