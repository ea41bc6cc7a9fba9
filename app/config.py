from __future__ import annotations

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Application
    app_name: str = "Relevance Search"
    app_version: str = "0.1.0"
    environment: str = "development"
    debug: bool = True
    log_level: str = "INFO"

    # Search data (unset paths fall back to fixtures/sample and configs/)
    search_people_path: str | None = None
    search_organizations_path: str | None = None
    search_lexicon_path: str | None = None

    # Security
    cors_origins: list[str] = []  # Empty by default for security

    # Server
    host: str = "0.0.0.0"
    port: int = 8000

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra="ignore")


settings = Settings()
