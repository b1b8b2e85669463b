"""
Configuration settings for the Emergency SOS backend.

Uses Pydantic Settings for environment variable management.
"""

import os
from typing import List, Optional
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_EMERGENCY_MESSAGE = "緊急事態が発生しました。至急連絡してください。"


class Settings(BaseSettings):
    """Application settings."""

    # Environment
    ENV: str = Field(default="development")
    DEBUG: bool = Field(default=False)
    LOG_LEVEL: str = Field(default="INFO")

    # Logging Control
    ENABLE_FILE_LOGGING: bool = Field(default=True)
    ENABLE_REQUEST_LOGGING: bool = Field(default=True)

    # Application
    APP_NAME: str = Field(default="Matte Emergency SOS")
    VERSION: str = Field(default="1.0.0")

    # Server
    HOST: str = Field(default="0.0.0.0")
    PORT: int = Field(default=8000)

    # CORS: the mobile client and web views call from anywhere
    origins: List[str] = ["*"]

    REDIS_URL: str = Field(default="redis://localhost:6379/0")

    # Emergency SOS
    EMERGENCY_STORAGE_BACKEND: str = Field(default="memory")  # memory | redis
    EMERGENCY_KEY_PREFIX: str = Field(default="emergency")
    EMERGENCY_ALLOW_OVERWRITE: bool = Field(default=False)
    EMERGENCY_DEFAULT_MESSAGE: str = Field(default=DEFAULT_EMERGENCY_MESSAGE)

    # Content analysis collaborator
    CONTENT_ANALYSIS_URL: Optional[str] = Field(default=None)
    CONTENT_ANALYSIS_TIMEOUT: float = Field(default=20.0)

    # Sentry (Optional)
    SENTRY_DSN: Optional[str] = Field(default=None)
    SENTRY_ENVIRONMENT: str = Field(default="development")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )


# Create settings instance
settings = Settings()


def get_env_file() -> str:
    """Get the appropriate environment file based on ENV setting."""
    env_file = f".env.{settings.ENV}"
    if os.path.exists(env_file):
        return env_file
    return ".env"


# Update settings with environment-specific file
settings = Settings(_env_file=get_env_file())
