from __future__ import annotations

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

    HTTP_HOST: str = "0.0.0.0"
    HTTP_PORT: int = 8000

    REDIS_URL: str = "redis://localhost:6379/0"

    JWT_SECRET: str = ""
    JWT_ALGORITHM: str = "HS256"

    CORS_ORIGINS: list[str] = ["*"]

    OUTBOX_POLL_INTERVAL: float = 1.0
    OUTBOX_BATCH_SIZE: int = 50
    OUTBOX_MAX_ATTEMPTS: int = 5

    # Redis Pub/Sub channel name = prefix + topic
    EVENTS_CHANNEL_PREFIX: str = "groupchat:"

    COLLABORATION_EVENTS_STREAM: str = "collaboration.events"
    COLLABORATION_EVENTS_GROUP: str = "groupchat"

    MEMBER_DIRECTORY_PREFIX: str = "groupchat:member:"
    RESOURCE_LINKS_PREFIX: str = "resource-links:"

    CREATE_CHANNELS_ONLY: bool = True
    DEFAULT_CHANNEL_NAME: str = "general"
    DEFAULT_CHANNEL_TOPIC: str = "Talk about everything"
    DEFAULT_CHANNEL_PURPOSE: str = "A channel for all members of the domain"

    MESSAGES_PAGE_LIMIT: int = 30
    ATTACHMENTS_PAGE_LIMIT: int = 10
    CONVERSATIONS_PAGE_LIMIT: int = 50

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
