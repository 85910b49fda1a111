from __future__ import annotations

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    app_name: str = "messenger"
    app_env: str = "development"

    database_url: str = "sqlite:///./messenger.db"

    HOST: str = "127.0.0.1"
    PORT: int = 5000

    # JWT
    JWT_SECRET: str = "change-me"
    JWT_ALGORITHM: str = "HS256"
    JWT_EXPIRE_MINUTES: int = 60

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FILE: str | None = None

    # Rate limits, keyed by client address
    LOGIN_RATE_LIMIT: int = 5
    LOGIN_RATE_WINDOW_SECONDS: int = 15 * 60
    MESSAGE_RATE_LIMIT: int = 10
    MESSAGE_RATE_WINDOW_SECONDS: int = 60
    TRUST_FORWARDED_FOR: bool = False

    # Store
    STORE_TIMEOUT_SECONDS: float = 5.0

    # Pagination
    DEFAULT_PAGE_LIMIT: int = 10
    MAX_PAGE_LIMIT: int = 100

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )


settings = Settings()
