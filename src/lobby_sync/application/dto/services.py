"""Request/response contracts of the friends, report and profile services."""
from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import Base64Bytes, BaseModel, ConfigDict, Field

from lobby_sync.domain.value_objects.enums import ReportReason, SanctionKind


class FriendSummary(BaseModel):
    account_id: int
    username: str = ""
    display_name: str = ""
    avatar_url: str | None = None
    is_online: bool = False


class FriendRequestSummary(BaseModel):
    request_id: int
    from_account_id: int


class FriendsPage(BaseModel):
    friends: list[FriendSummary] = Field(default_factory=list)
    pending_incoming: list[FriendRequestSummary] = Field(default_factory=list)


class Profile(BaseModel):
    """Own account profile.

    ``avatar_bytes`` is optional on the wire; a missing value means
    "use the default avatar".
    """

    account_id: int
    display_name: str = ""
    email: str | None = None
    avatar_bytes: Base64Bytes | None = None


class ReportDraft(BaseModel):
    model_config = ConfigDict(frozen=True)

    reason: ReportReason
    comment: str = ""


class ReportRequest(BaseModel):
    model_config = ConfigDict(frozen=True)

    lobby_id: UUID
    target_account_id: int
    reason: ReportReason
    comment: str = ""


class ReportResult(BaseModel):
    report_id: int | None = None
    sanction_applied: bool = False
    sanction: SanctionKind | None = None
    sanction_ends_at: datetime | None = None
