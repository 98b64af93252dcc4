"""Typed settings configuration - single source of truth."""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Database (in-memory repositories when unset)
    database_url: str | None = None

    # Expiry warning window (days before valid_to)
    expiry_warning_days: int = Field(30, ge=0)
    # Per document type overrides, e.g. {"a1_certificate": 14}
    expiry_warning_overrides: dict[str, int] = Field(default_factory=dict)

    # Due date assigned to newly instantiated requirements (days from creation)
    default_due_days: int = Field(14, ge=0)

    # Optimistic concurrency retries per transition
    max_transition_retries: int = Field(3, ge=0)

    # Scheduling trigger
    sweep_interval_seconds: int = Field(24 * 3600, gt=0)
    sweep_max_workers: int = Field(4, ge=1)

    def warning_days_for(self, document_type: str) -> int:
        """Expiry warning window for a document type."""
        return self.expiry_warning_overrides.get(document_type, self.expiry_warning_days)


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
