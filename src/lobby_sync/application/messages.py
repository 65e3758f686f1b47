"""User-facing texts shown by the lobby controllers."""
from __future__ import annotations

LOBBY_TITLE = "Lobby"
CHAT_TITLE = "Chat"

SYSTEM_AUTHOR = "System"
UNKNOWN_AUTHOR = "?"
REMOTE_PLAYER_AUTHOR = "Player"
DEFAULT_DISPLAY_NAME = "Me"

NO_CONNECTION = "No connection."
NO_VALID_SESSION = "No valid session. Please sign in again."

CHAT_JOIN_FIRST = "Create or join a lobby first."
CHAT_QUEUED_OFFLINE = "No connection. Message queued."

RECONNECT_STATUS_START = "Reconnecting..."
RECONNECT_STATUS_ATTEMPT = "Reconnecting... attempt {attempt}"
RECONNECT_WAITING = "Offline. Waiting..."
RECONNECT_EXHAUSTED_QUESTION = (
    "Could not reconnect to the server.\n\n"
    "Do you want to keep waiting?\n\n"
    "Yes: stay here and keep trying.\n"
    "No: go back to sign in."
)

REPORT_SENT = "Report sent."
REPORT_COOLDOWN = "You already reported recently. Please wait before reporting again."
REPORT_SUSPENDED_UNTIL = "Report sent. The player was suspended until {ends_at}."
REPORT_SUSPENDED = "Report sent. The player was suspended."
REPORT_BANNED = "Report sent. The player was permanently banned."
REPORT_FAILED = "The report could not be sent."

INVITE_NO_CODE = "No lobby code available to invite."
INVITE_SENT = "Invite sent."
INVITE_FAILED = "The invite could not be sent."

START_MATCH_FAILED = "The match could not be started."


def fault_text(code: str, detail: str) -> str:
    return f"{code}: {detail}" if detail else code
