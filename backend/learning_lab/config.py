"""Application configuration using Pydantic Settings."""

import logging
from functools import lru_cache
from typing import Literal

from pydantic import computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Application
    app_name: str = "Liquid Learning Lab"
    environment: Literal["development", "staging", "production"] = "development"
    debug: bool = False
    log_level: str = "INFO"
    api_prefix: str = "/api"

    # CORS
    cors_origins: list[str] = ["http://localhost:5173"]

    # Storage
    # "memory" keeps everything in-process (lost on restart), "sql" uses the database below
    storage_backend: Literal["sql", "memory"] = "sql"

    # Database
    # If database_url_override is set (e.g., for Neon or a local SQLite file), it takes precedence
    database_url_override: str | None = None
    postgres_host: str = "localhost"
    postgres_port: int = 5432
    postgres_user: str = "learning_lab"
    postgres_password: str = ""
    postgres_db: str = "learning_lab"

    def _url_with_scheme(self, postgres_scheme: str, sqlite_scheme: str) -> str:
        """Override URL (or one built from the postgres_* parts) rewritten to the given drivers."""
        url = self.database_url_override or (
            f"postgresql://{self.postgres_user}:{self.postgres_password}"
            f"@{self.postgres_host}:{self.postgres_port}/{self.postgres_db}"
        )
        scheme, _, rest = url.partition("://")
        if scheme.startswith("postgres"):
            return f"{postgres_scheme}://{rest}"
        if scheme.startswith("sqlite"):
            return f"{sqlite_scheme}://{rest}"
        return url

    @computed_field
    @property
    def database_url(self) -> str:
        """Async URL for the application engine (asyncpg or aiosqlite)."""
        url = self._url_with_scheme("postgresql+asyncpg", "sqlite+aiosqlite")
        # asyncpg rejects libpq query params such as sslmode
        if url.startswith("postgresql+asyncpg://"):
            url = url.split("?")[0]
        return url

    @computed_field
    @property
    def database_url_sync(self) -> str:
        """Sync URL for Alembic migrations."""
        return self._url_with_scheme("postgresql", "sqlite")

    # Capability credentials - both optional, AI features fall back when unset
    anthropic_api_key: str | None = None
    openai_api_key: str | None = None

    # Text generation
    llm_model: str = "claude-sonnet-4-20250514"
    classifier_max_tokens: int = 150
    title_max_tokens: int = 30
    tutor_max_tokens: int = 500
    mindmap_max_tokens: int = 1000
    knowledge_test_max_tokens: int = 2000

    # Image + speech
    image_model: str = "dall-e-3"
    image_size: Literal["1024x1024", "1792x1024", "1024x1792"] = "1024x1024"
    image_quality: Literal["standard", "hd"] = "standard"
    tts_model: str = "tts-1-hd"
    tts_voice: str = "nova"

    # Every capability call is abandoned after this many seconds (no retries)
    capability_timeout_seconds: float = 30.0


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


def configure_logging(settings: Settings) -> None:
    """Configure root logging once at startup."""
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def sanitize_error(error: Exception, *, generic_message: str = "An internal error occurred.") -> str:
    """
    Return a user-safe error message.

    In development, returns the full exception string for debugging.
    In staging/production, returns a generic message to avoid leaking internals.
    """
    settings = get_settings()
    if settings.environment == "development":
        return str(error)
    return generic_message
