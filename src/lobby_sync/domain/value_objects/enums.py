from __future__ import annotations

from enum import StrEnum


class ReconnectState(StrEnum):
    CONNECTED = "connected"
    RECONNECTING = "reconnecting"
    EXHAUSTED_DECIDING = "exhausted_deciding"
    WAITING_INDEFINITELY = "waiting_indefinitely"
    NAVIGATED_TO_LOGIN = "navigated_to_login"


class HubEvent(StrEnum):
    CONNECTION_LOST = "connection.lost"
    RECONNECT_ATTEMPT = "connection.attempt"
    RECONNECT_SUCCEEDED = "connection.succeeded"
    RECONNECT_EXHAUSTED = "connection.exhausted"
    LOBBY_UPDATED = "lobby.updated"
    PLAYER_JOINED = "lobby.player_joined"
    PLAYER_LEFT = "lobby.player_left"
    CHAT_RECEIVED = "chat.received"
    CHAT_SEND_FAILED = "chat.send_failed"
    MATCH_STARTED = "match.started"


class Presence(StrEnum):
    ONLINE = "Online"
    OFFLINE = "Offline"


class SanctionKind(StrEnum):
    TEMPORARY = "temporary"
    PERMANENT = "permanent"


class ReportReason(StrEnum):
    CHEATING = "cheating"
    HARASSMENT = "harassment"
    OFFENSIVE_NAME = "offensive_name"
    SPAM = "spam"
    OTHER = "other"
