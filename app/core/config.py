"""
Application configuration using Pydantic Settings.

Loads configuration from environment variables (.env file).
"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Project Info
    PROJECT_NAME: str = "Somnus: nightly sleep quality scoring."
    VERSION: str = "0.1.0"

    DEBUG: bool = True
    LOG_LEVEL: str = "INFO"

    # Server
    HOST: str = "0.0.0.0"
    PORT: int = 8000

    # Mock history defaults
    HISTORY_DEFAULT_DAYS: int = 90
    HISTORY_DEFAULT_SEED: int = 20251218
    HISTORY_MAX_DAYS: int = 730

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=True, extra="ignore")


# Global settings instance
settings = Settings()
