"""
Runtime configuration helpers for the feed service and its client.

Loads DATABASE_URL and other variables from the .env file located in the
project root.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Resolve the project root
BASE_DIR = Path(__file__).resolve().parents[1]

# Absolute path to .env
ENV_PATH = BASE_DIR / ".env"

# Load .env defaults without overriding environment variables provided by the platform
load_dotenv(dotenv_path=ENV_PATH, override=False)


class Settings(BaseSettings):
    # Required: must come from the environment or .env
    database_url: str = Field(..., alias="DATABASE_URL")

    # Optional fields
    app_name: str = Field(default="EduBridge Feed", alias="APP_NAME")
    api_version: str = Field(default="0.1.0", alias="API_VERSION")
    public_base_url: str = Field(default="https://edubridgepeople.com", alias="PUBLIC_BASE_URL")
    cors_origins: str | None = Field(default=None, alias="CORS_ORIGINS")

    # Uploaded post images
    media_root: Path = Field(default=Path("media"), alias="MEDIA_ROOT")
    media_base_url: str = Field(default="/media", alias="MEDIA_BASE_URL")
    max_upload_bytes: int = Field(default=5 * 1024 * 1024, alias="MAX_UPLOAD_BYTES")

    # Feed client
    feed_api_url: str = Field(default="http://localhost:8000", alias="FEED_API_URL")
    http_timeout: float = Field(default=15.0, alias="HTTP_TIMEOUT")
    link_preview_delay_ms: int = Field(default=500, alias="LINK_PREVIEW_DELAY_MS")
    report_email: str = Field(default="info@edubridgepeople.com", alias="REPORT_EMAIL")

    model_config = SettingsConfigDict(
        env_file=str(ENV_PATH),
        env_file_encoding="utf-8",
        extra="ignore"
    )


@lru_cache()
def get_settings() -> Settings:
    return Settings()


__all__ = ["Settings", "get_settings"]
