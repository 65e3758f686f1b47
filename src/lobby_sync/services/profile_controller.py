from __future__ import annotations

import logging

from lobby_sync.application import messages
from lobby_sync.application.context import SessionContext
from lobby_sync.application.observable import ObservableValue
from lobby_sync.application.ports.services import ProfileService

logger = logging.getLogger(__name__)


class ProfileController:
    """Loads the local display name and avatar; ``avatar`` None means default."""

    def __init__(self, ctx: SessionContext, profile_service: ProfileService) -> None:
        self._ctx = ctx
        self._profile_service = profile_service
        self.avatar: ObservableValue[bytes | None] = ObservableValue(None)

    async def refresh(self) -> None:
        token = self._ctx.auth.token
        if not token.strip():
            self._ctx.ui(lambda: self._apply(messages.DEFAULT_DISPLAY_NAME, None))
            return

        try:
            profile = await self._profile_service.get_my_profile(token)
        except Exception:
            logger.warning("Refreshing profile failed, using default avatar", exc_info=True)
            fallback = self._ctx.state.my_display_name or messages.DEFAULT_DISPLAY_NAME
            self._ctx.ui(lambda: self._apply(fallback, None))
            return

        name = profile.display_name.strip() or messages.DEFAULT_DISPLAY_NAME
        avatar = profile.avatar_bytes or None
        self._ctx.ui(lambda: self._apply(name, avatar))

    def _apply(self, display_name: str, avatar: bytes | None) -> None:
        self._ctx.state.my_display_name = display_name
        self.avatar.set(avatar)
