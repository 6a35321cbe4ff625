"""Client settings loaded from environment variables and .env file."""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_BASE_URL = "https://skillhub.club/api/v1"
DEFAULT_TIMEOUT = 30.0


class Settings(BaseSettings):
    """Settings read from SKILLHUB_* environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="SKILLHUB_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    token: str | None = None
    base_url: str = DEFAULT_BASE_URL
    timeout: float = DEFAULT_TIMEOUT


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
