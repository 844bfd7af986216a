"""
Configuration management for the RAGOps service.

This module centralizes environment-driven configuration using Pydantic's
`BaseSettings`. All components consume the shared `settings` instance unless a
caller injects explicit values, which keeps tests independent of the process
environment.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Annotated, List, Optional

from pydantic import AnyUrl, Field, PositiveFloat, PositiveInt, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration sourced from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", case_sensitive=False, extra="ignore")

    # General application settings
    API_TITLE: str = "RAGOps API"
    API_VERSION: str = "0.1.0"
    DEBUG: bool = False
    ENVIRONMENT: str = Field("development", pattern=r"^(development|staging|production)$")
    BASE_DIR: Path = Field(default_factory=lambda: Path(__file__).resolve().parents[2])

    # Security: callers are authenticated upstream, the API only checks a shared key
    ADMIN_API_KEY: Optional[str] = None
    ALLOWED_ORIGINS: Annotated[List[str], NoDecode] = Field(default_factory=lambda: ["*"])

    # Database connections
    MONGODB_URL: AnyUrl = Field("mongodb://localhost:27017")
    MONGODB_DATABASE: str = "ragops"
    REDIS_URL: AnyUrl = Field("redis://localhost:6379/0")

    # Managed search-and-generation backend
    OPENAI_API_KEY: Optional[str] = None
    OPENAI_MODEL: str = "gpt-4o-mini"
    OPENAI_TIMEOUT_SECONDS: PositiveFloat = 60.0
    VECTOR_STORE_NAME: str = "Enterprise Docs"
    UPLOAD_POLL_INTERVAL_MS: PositiveInt = 5000
    BACKEND_RETRY_ATTEMPTS: PositiveInt = 3
    BACKEND_RETRY_BASE_DELAY_SECONDS: PositiveFloat = 1.0

    # Notion workspace integration
    NOTION_TOKEN: Optional[str] = None
    NOTION_API_URL: str = "https://api.notion.com/v1"
    NOTION_VERSION: str = "2022-06-28"
    NOTION_TIMEOUT_SECONDS: PositiveFloat = 30.0
    NOTION_RETRY_ATTEMPTS: PositiveInt = 5
    NOTION_RETRY_BASE_DELAY_SECONDS: PositiveFloat = 0.5

    # Sync defaults
    SYNC_ALL_MAX_PAGES: PositiveInt = 200
    SYNC_DATABASE_MAX_PAGES: PositiveInt = 500
    SYNC_PAGE_SIZE: int = Field(50, ge=1, le=100)
    DOCS_DIRECTORY: Path = Field(default_factory=lambda: Path("docs"))

    # Indexing
    INDEX_REDACT_PII: bool = False

    # Query cache
    QUERY_CACHE_TTL_SECONDS: PositiveInt = 24 * 60 * 60
    QUERY_CACHE_MIN_CONFIDENCE: float = Field(0.7, ge=0.0, le=1.0)

    # Monitoring / tracing
    ALERT_LATENCY_MS: PositiveInt = 5000
    DAILY_TOKEN_LIMIT: PositiveInt = 1_000_000
    OTEL_EXPORTER_OTLP_ENDPOINT: Optional[AnyUrl] = None
    OTEL_EXPORTER_OTLP_HEADERS: Optional[str] = None

    @field_validator("ALLOWED_ORIGINS", mode="before")
    def _split_origins(cls, value: str | List[str]) -> List[str]:
        if isinstance(value, str):
            return [origin.strip() for origin in value.split(",") if origin.strip()]
        return value


@lru_cache()
def get_settings() -> Settings:
    """Return a cached `Settings` instance."""

    return Settings()


# Singleton-style settings instance for modules that prefer direct access.
settings = get_settings()
