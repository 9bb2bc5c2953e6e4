"""
settings.py

Deployment settings for the storefront search & OTP service.

Values come from STOREFRONT_* environment variables.
"""

from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings."""

    api_title: str = "Storefront Search & OTP API"
    api_version: str = "1.0.0"

    # "development" echoes generated codes in API responses
    environment: str = "development"
    log_level: str = "INFO"

    host: str = "127.0.0.1"
    port: int = 8000
    cors_origins: list[str] = ["*"]

    # Data files; unset paths are skipped at startup
    catalog_csv: Optional[str] = None
    keywords_dir: Optional[str] = None

    # Search limits
    suggestion_limit: int = 8
    text_search_max_results: int = 100
    image_search_keyword_limit: int = 3
    image_search_max_results: int = 20

    model_config = SettingsConfigDict(env_prefix="STOREFRONT_")

    @property
    def is_development(self) -> bool:
        return self.environment.strip().lower() == "development"


settings = Settings()
