"""Application configuration using Pydantic Settings."""

from functools import lru_cache
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Database
    DATABASE_URL: str
    AUTO_CREATE_TABLES: bool = True  # create_all on startup (no migrations)

    # ClubElo source (no trailing slash)
    CLUBELO_API_BASE: str = "http://api.clubelo.com"
    HTTP_TIMEOUT_SECONDS: float = 120.0  # Per attempt
    HTTP_MAX_RETRIES: int = 3
    RATING_SOURCE: str = "clubelo"  # Stored in the source column of fact rows

    # Import triggers (Authorization: Bearer <CRON_SECRET>)
    CRON_SECRET: str = ""

    # In-process scheduler (off by default; an external cron usually hits /api/cron/*)
    SCHEDULER_ENABLED: bool = False
    DAILY_IMPORT_HOUR_UTC: int = 6
    FIXTURES_IMPORT_HOUR_UTC: int = 7

    # Read API
    DEFAULT_PAGE_SIZE: int = 100
    MAX_PAGE_SIZE: int = 1000
    RATE_LIMIT_PER_MINUTE: str = "60/minute"

    # Runtime
    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "INFO"

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT.lower() == "production"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
