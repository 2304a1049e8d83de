from functools import lru_cache
from typing import Literal, Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Global application settings."""

    # Application
    ENVIRONMENT: Literal["local", "development", "production", "test"] = "local"
    LOG_LEVEL: str = "INFO"
    SITE_NAME: str = "biomechanics.wav"
    CORS_ORIGINS: list[str] = ["http://localhost:3000"]

    # Database
    DATABASE_URL: str = "sqlite+aiosqlite:///./store.db"
    DB_POOL_SIZE: int = 10
    DB_MAX_OVERFLOW: int = 10
    DB_POOL_TIMEOUT: int = 30
    DB_POOL_RECYCLE: int = 1800

    # Auth / identity provider
    # Placeholder values keep local/test runs working without real credentials.
    AUTH_JWT_SECRET: str = "test-jwt-secret"
    ADMIN_ROLE_SOURCE: Literal["claims", "provider"] = "claims"
    ROLE_CACHE_TTL_SECONDS: int = 60
    IDENTITY_API_URL: str = "https://api.clerk.com/v1"
    IDENTITY_API_KEY: Optional[str] = None

    # Email (Resend HTTP API)
    RESEND_API_URL: str = "https://api.resend.com"
    RESEND_API_KEY: Optional[str] = None
    EMAIL_FROM: str = "ventas@biomechanics.cl"

    # Store
    PAYMENT_LINK_BASE_URL: str = "https://fintoc.me/tpp"
    PAYMENT_METHOD: str = "fintoc_tpp"
    YOGA_ADD_ON_CAP: int = 25

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    @field_validator("DATABASE_URL")
    @classmethod
    def assemble_db_connection(cls, v: Optional[str]) -> str:
        if isinstance(v, str):
            if v.startswith("postgresql://"):
                return v.replace("postgresql://", "postgresql+psycopg://", 1)
            if v.startswith("postgres://"):
                return v.replace("postgres://", "postgresql+psycopg://", 1)
            if v.startswith("sqlite://"):
                return v.replace("sqlite://", "sqlite+aiosqlite://", 1)
        return v

    @property
    def is_sqlite(self) -> bool:
        return self.DATABASE_URL.startswith("sqlite")


@lru_cache
def get_settings() -> Settings:
    """
    Return the global settings instance, cached.
    """
    return Settings()
