# counselbook/core/config.py
from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Global application configuration.

    Values are loaded from environment variables (or a local `.env` file)
    at runtime and cover:
    - DB connection
    - Logging level
    - Internal/admin API key
    - Meeting link generation
    - Input length limits for free-text fields
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    APP_NAME: str = "Counselbook"
    APP_ENV: str = Field("local", description="Environment name: local/dev/stage/prod")

    DB_URL: str = Field(
        "sqlite+aiosqlite:///./counselbook.db",
        description="SQLAlchemy-compatible async database URL",
    )

    SQLITE_BUSY_TIMEOUT_SECONDS: float = Field(
        15.0,
        description="How long a SQLite connection waits for the write lock before failing.",
    )

    LOG_LEVEL: str = Field(
        "INFO",
        description="Root log level (DEBUG/INFO/WARNING/ERROR).",
    )

    INTERNAL_API_KEY: str | None = Field(
        default=None,
        description="API key required for hitting /internal (administrative) endpoints",
    )

    MEETING_LINK_BASE_URL: str = Field(
        "https://meet.jit.si/counselbook-meeting-",
        description=(
            "Prefix used to build a meeting link when a counselor accepts a "
            "request without supplying one. The request id is appended."
        ),
    )

    MAX_AGENDA_LENGTH: int = Field(
        default=2000,
        description="Maximum number of characters accepted for a meeting agenda.",
    )
    MAX_REASON_LENGTH: int = Field(
        default=1000,
        description="Maximum number of characters accepted for a rejection reason.",
    )


@lru_cache()
def get_settings() -> Settings:
    """
    Cached accessor for application settings.

    Settings are read and validated only once per process; tests that need
    different values should call `get_settings.cache_clear()`.
    """
    return Settings()
