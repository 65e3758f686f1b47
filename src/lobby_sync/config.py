from __future__ import annotations

from pydantic import ConfigDict
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    REDIS_URL: str = "redis://localhost:6379/0"

    HUB_CHANNEL_PREFIX: str = "lobby"
    HUB_COMMAND_CHANNEL: str = "lobby.commands"
    HUB_MAX_RECONNECT_ATTEMPTS: int = 5
    HUB_RECONNECT_BASE_DELAY: float = 1.0
    HUB_RECONNECT_MAX_DELAY: float = 30.0

    SERVICES_BASE_URL: str = "http://localhost:8000/api/v1"
    SERVICES_TIMEOUT: float = 10.0

    CHAT_RETRY_INTERVAL: float = 5.0
    CHAT_ECHO_WINDOW_SECONDS: float = 2.0
    CHAT_MAX_MESSAGE_LENGTH: int = 100

    RECONNECT_CYCLE_SECONDS: float = 5.0

    FRIENDS_REFRESH_SECONDS: float = 45.0
    FRIENDS_HEARTBEAT_SECONDS: float = 30.0

    REPORT_COOLDOWN_CODE: str = "REPORT_COOLDOWN"

    SESSION_TOKEN: str = ""
    ACCOUNT_ID: int = 0

    LOG_LEVEL: str = "INFO"

    def user_channel(self, account_id: int) -> str:
        return f"{self.HUB_CHANNEL_PREFIX}.user.{account_id}"

    model_config = ConfigDict(
        env_file=".env",
        extra="ignore",
    )


settings = Settings()
