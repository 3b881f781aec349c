from functools import lru_cache
from typing import List, Optional
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Global settings for the Client Registry service.
    Values are read from the environment and from the .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Project
    project_name: str = "Client Registry API"
    api_v1_str: str = "/api/v1"
    debug: bool = False

    # Database
    database_url: str = "sqlite:///./clients.db"

    # CORS
    allowed_origins: List[str] = [
        "http://localhost:5173",
        "http://127.0.0.1:5173",
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ]

    # Geocoding provider
    geocoding_base_url: str = "https://maps.googleapis.com/maps/api/geocode"
    geocoding_api_key: Optional[str] = None
    geocoding_timeout_seconds: float = 10.0

    # Older records were looked up by email together with a blank SIN.
    email_lookup_requires_blank_sin: bool = False

    # Logging
    log_level: str = "INFO"
    log_file: Optional[str] = None


@lru_cache
def get_settings() -> Settings:
    """Return the cached global settings instance."""
    return Settings()


settings = get_settings()
