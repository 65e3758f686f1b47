from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID


@dataclass(frozen=True, slots=True)
class ChatLine:
    author: str
    text: str
    time: str


@dataclass(frozen=True, slots=True)
class PendingMessage:
    """A chat message whose delivery failed and is waiting for a resend."""

    client_msg_id: UUID
    token: str
    lobby_id: UUID
    text: str
    queued_at: datetime
