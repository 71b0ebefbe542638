"""Application configuration using Pydantic Settings."""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Application
    app_name: str = "OurArchive Stats"
    app_version: str = "0.1.0"
    debug: bool = False

    # Server
    host: str = "0.0.0.0"
    port: int = 8080

    # Firestore
    google_cloud_project: str | None = None
    firestore_database: str = "(default)"

    # Collection layout
    users_collection: str = "users"
    households_collection: str = "households"
    items_subcollection: str = "items"
    containers_collection: str = "containers"
    stats_collection: str = "public_stats"
    stats_document: str = "ourarchive"
    history_subcollection: str = "history"

    # Aggregation
    household_concurrency: int = Field(default=10, ge=1)
    scheduler_enabled: bool = True
    schedule_hour_utc: int = Field(default=0, ge=0, le=23)

    # Security
    cors_origins: list[str] = ["*"]

    # Observability
    sentry_dsn: str = ""
    otlp_endpoint: str = ""


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
