from __future__ import annotations

from typing import Literal

from pydantic import ConfigDict
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    POSTGRES_USER: str
    POSTGRES_PASSWORD: str
    POSTGRES_DB: str
    DB_HOST: str = "localhost"
    DB_PORT: int = 5432

    DB_POOL_SIZE: int = 10
    DB_MAX_OVERFLOW: int = 20
    DB_POOL_RECYCLE: int = 300

    REDIS_URL: str = "redis://localhost:6379/0"

    JWT_SECRET: str = ""
    JWT_VERIFY_MODE: Literal["hs256", "jwks"] = "hs256"
    JWT_ALGORITHM: str = "HS256"
    JWKS_URL: str | None = None

    API_HOST: str = "0.0.0.0"
    API_PORT: int = 8000
    LOG_LEVEL: str = "INFO"
    SLOW_REQUEST_MS: float = 1000.0

    CORS_ORIGINS: list[str] = ["*"]

    WS_HEARTBEAT_SECONDS: int = 30

    # "local" broadcasts inside this process, "redis" relays through Pub/Sub
    # so that every API instance reaches its own sockets.
    FANOUT_BACKEND: Literal["local", "redis"] = "local"
    REDIS_PUBSUB_CHANNEL: str = "chat.fanout"

    MEMBER_EVENTS_STREAM: str = "community.members"
    MEMBER_EVENTS_GROUP: str = "community-chat"

    FCM_CREDENTIALS_FILE: str | None = None
    PUSH_TIMEOUT_SECONDS: float = 10.0
    PUSH_MULTICAST_BATCH: int = 500

    NOTIFY_WORKERS: int = 4
    DEAD_LETTER_LIMIT: int = 100

    PUBLIC_CHAT_DEFAULT_NAME: str = "My Connect"
    PUBLIC_CHAT_TITLE_SUFFIX: str = "Chat"
    NOTIFICATION_BODY_LIMIT: int = 100
    NOTIFICATION_LIST_LIMIT: int = 50
    MESSAGE_MAX_LENGTH: int = 4000

    @property
    def database_url(self) -> str:
        return (
            f"postgresql+asyncpg://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}"
            f"@{self.DB_HOST}:{self.DB_PORT}/{self.POSTGRES_DB}"
        )

    model_config = ConfigDict(
        env_file=".env",
        extra="ignore",
    )


settings = Settings()  # type: ignore[call-arg]
