"""Event names used on the hub's Redis channels."""
from __future__ import annotations

# Hub -> client (user channel)
LOBBY_UPDATED = "lobby.updated"
PLAYER_JOINED = "lobby.player_joined"
PLAYER_LEFT = "lobby.player_left"
CHAT_MESSAGE = "chat.message"
CHAT_REJECTED = "chat.rejected"
MATCH_STARTED = "match.started"

# Client -> hub (command channel)
CHAT_SEND = "chat.send"
MATCH_START = "match.start"
LOBBY_LEAVE = "lobby.leave"
