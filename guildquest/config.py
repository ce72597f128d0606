"""Application configuration loaded from environment variables and .env file."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings.

    Values are loaded from environment variables first,
    then from a .env file in the project root as fallback.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
    )

    DATABASE_URL: str = "sqlite:///./guildquest.db"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # Calendar used to decide whether a character was already ticked today
    TIMEZONE: str = "UTC"

    # Effects created without an explicit duration last a week
    DEFAULT_EFFECT_DURATION: int = 7

    ACTIVITY_PAGE_SIZE: int = 20


settings = Settings()
