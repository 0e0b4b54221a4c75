"""
WildWatch - Configuration Management
Centralized configuration using pydantic-settings.
"""

from functools import lru_cache
from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict

from src.core.constants import NEARBY_RADIUS_MILES, PAGE_SIZE


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_env: str = "development"
    log_level: str = "INFO"

    # Database
    database_url: str = "sqlite:///./wildlifedata.db"
    db_echo: bool = False

    # Uploaded report photos
    images_dir: str = "./report-images"
    jpeg_quality: int = 90
    max_upload_bytes: int = 50 * 1024 * 1024

    # API Settings
    api_host: str = "0.0.0.0"
    api_port: int = 19005
    allowed_origins: List[str] = [
        "https://uwwildlife.com",
        "https://www.uwwildlife.com",
        "https://auth.uwwildlife.com",
        "https://www.auth.uwwildlife.com",
    ]

    # Report listing
    page_size: int = PAGE_SIZE

    # Proximity search
    nearby_radius_miles: float = NEARBY_RADIUS_MILES


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# Global settings instance
settings = get_settings()
