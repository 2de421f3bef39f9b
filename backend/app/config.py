"""Application configuration."""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Settings are loaded in this priority order (highest to lowest):
    1. Environment variables
    2. .env file (for local development)
    3. Default values

    List settings are given as JSON in the environment, e.g.
    ``AUDIT_BUBBLING_RULES='["OrderItem:Order"]'``.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # =========================================================================
    # Application
    # =========================================================================
    app_name: str = "Bubbling Audit API"
    debug: bool = False

    # =========================================================================
    # Database
    # =========================================================================
    database_url: str = Field(
        default="postgresql+asyncpg://localhost:5432/bubbling_audit",
        description="Async SQLAlchemy URL (sqlite+aiosqlite works for local runs)",
    )

    # =========================================================================
    # Audit trail
    # =========================================================================
    # Child->parent kinds whose changes bubble into the parent's
    # last_modified_with_dependents. Kinds are model class names.
    audit_bubbling_rules: list[str] = Field(
        default=["OrderItem:Order"],
        description="Bubbling edges as 'Child:Parent' strings",
    )
    # Reuse one timestamp for every flush of a transaction.
    audit_timestamp_per_transaction: bool = True

    # =========================================================================
    # CORS
    # =========================================================================
    cors_origins: list[str] = ["http://localhost:3000"]

    # =========================================================================
    # API Settings
    # =========================================================================
    api_v1_prefix: str = "/api/v1"


settings = Settings()
