from __future__ import annotations

from dataclasses import dataclass
from uuid import UUID


@dataclass(slots=True)
class RuntimeState:
    """Mutable session facts shared by the lobby controllers.

    Only the UI thread writes these fields, through the dispatcher.
    """

    current_lobby_id: UUID | None = None
    current_access_code: str = ""
    my_display_name: str = ""
    is_opening_match_window: bool = False
    is_navigating_to_login: bool = False
    is_auto_waiting_for_reconnect: bool = False

    @property
    def has_lobby(self) -> bool:
        return self.current_lobby_id is not None

    def clear_lobby(self) -> None:
        self.current_lobby_id = None
        self.current_access_code = ""
