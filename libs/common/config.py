from functools import lru_cache
from typing import Literal, Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Global application settings."""

    # Application
    ENVIRONMENT: Literal["local", "development", "production"] = "local"
    LOG_LEVEL: str = "INFO"

    # Bootstrap admin (see services.marketplace_service.seed_admin)
    ADMIN_EMAIL: str = "admin@knitkits.com"
    ADMIN_FIRST_NAME: str = "Admin"
    ADMIN_LAST_NAME: str = "User"
    ADMIN_PASSWORD: Optional[str] = None

    # Database
    DATABASE_URL: str
    DB_POOL_SIZE: int = 20
    DB_MAX_OVERFLOW: int = 10
    DB_POOL_TIMEOUT: int = 30
    DB_POOL_RECYCLE: int = 1800

    # Row-level security
    # Policy sets loaded into the in-process registry. "core" mirrors
    # migration 0002; "marketplace" adds the policies from 0003.
    RLS_POLICY_SETS: list[str] = ["core"]
    # On Postgres, also push the caller identity into the session so the
    # database's own auth.uid() policies apply.
    DB_ENFORCE_RLS: bool = False

    # Supabase
    # Placeholder keeps local/test runs working without a real secret.
    SUPABASE_JWT_SECRET: str = "test-jwt-secret"

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    @field_validator("DATABASE_URL")
    @classmethod
    def assemble_db_connection(cls, v: Optional[str]) -> str:
        if isinstance(v, str):
            if v.startswith("postgresql://"):
                return v.replace("postgresql://", "postgresql+psycopg://", 1)
        return v

    @field_validator("RLS_POLICY_SETS")
    @classmethod
    def validate_policy_sets(cls, v: list[str]) -> list[str]:
        known = {"core", "marketplace"}
        unknown = [name for name in v if name not in known]
        if unknown:
            raise ValueError(f"Unknown RLS policy sets: {', '.join(unknown)}")
        return v


@lru_cache
def get_settings() -> Settings:
    """
    Return the global settings instance, cached.
    """
    return Settings()
