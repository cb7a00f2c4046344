# manage_backend/adapters/configuration/config.py

from datetime import timedelta
from logging import getLevelName
from typing import List, Optional, Union

from pydantic import ConfigDict, Field, PostgresDsn, field_validator
from pydantic_settings import BaseSettings

DEFAULT_ACCESS_TOKEN_EXPIRE_MINUTES = 30
DEFAULT_REFRESH_TOKEN_EXPIRE_HOURS = 720


class Settings(BaseSettings):
    """
    Process configuration.

    Built once by the application factory and handed to every component
    that needs it; nothing reads configuration from module globals.
    """

    # Logging
    LOG_LEVEL: str = "INFO"

    # Environment
    ENVIRONMENT: str = "development"  # "development", "production", "testing"
    DEBUG: bool = False

    # Database
    DB_DRIVER: str = "asyncpg"
    POSTGRES_USER: str = "postgres"
    POSTGRES_PASSWORD: str = "postgres"
    POSTGRES_DB: str = "manage"
    POSTGRES_HOST: str = "localhost"
    POSTGRES_PORT: int = 5432
    DATABASE_URL: Optional[PostgresDsn] = Field(None, validate_default=True)
    DB_CREATE_TABLES: bool = True

    # Auth
    SECRET_KEY: str
    ALGORITHM: str = "HS256"
    JWT_ISSUER: str = "manage-backend"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = DEFAULT_ACCESS_TOKEN_EXPIRE_MINUTES
    REFRESH_TOKEN_EXPIRE_HOURS: int = DEFAULT_REFRESH_TOKEN_EXPIRE_HOURS
    PASSWORD_SCHEMES: List[str] = ["bcrypt"]

    # Session store
    CACHE_BACKEND: str = "redis"  # "redis" or "memory"
    REDIS_URL: str = "redis://localhost:6379/0"
    REDIS_TIMEOUT_SECONDS: float = 2.0
    ACTIVE_MARKER_TTL_MINUTES: int = 30
    PERMISSION_CACHE_TTL_MINUTES: int = 60

    # CORS
    CORS_ORIGINS: List[str] = ["http://localhost:3000", "http://127.0.0.1:3000"]

    @field_validator("DATABASE_URL", mode="before")
    def assemble_db_url(cls, value, info):
        if value:
            return value

        data = info.data
        return PostgresDsn.build(
            scheme=f"postgresql+{data.get('DB_DRIVER', 'asyncpg')}",
            username=data["POSTGRES_USER"],
            password=data["POSTGRES_PASSWORD"],
            host=data["POSTGRES_HOST"],
            port=data["POSTGRES_PORT"],
            path=data["POSTGRES_DB"],
        )

    @field_validator("ACCESS_TOKEN_EXPIRE_MINUTES", mode="before")
    def default_access_lifetime(cls, v) -> int:
        """Unset or non-positive lifetimes fall back to 30 minutes."""
        if v in (None, "") or int(v) <= 0:
            return DEFAULT_ACCESS_TOKEN_EXPIRE_MINUTES
        return int(v)

    @field_validator("REFRESH_TOKEN_EXPIRE_HOURS", mode="before")
    def default_refresh_lifetime(cls, v) -> int:
        """Unset or non-positive lifetimes fall back to 720 hours."""
        if v in (None, "") or int(v) <= 0:
            return DEFAULT_REFRESH_TOKEN_EXPIRE_HOURS
        return int(v)

    @field_validator("CACHE_BACKEND", mode="before")
    def validate_cache_backend(cls, v: str) -> str:
        backend = str(v).lower()
        if backend not in ("redis", "memory"):
            raise ValueError(f"Invalid CACHE_BACKEND: {v!r}")
        return backend

    @field_validator("CORS_ORIGINS", mode="before")
    def assemble_cors_origins(cls, v: Union[str, List[str]]) -> List[str]:
        """
        A CSV string (e.g. 'a,b,c') becomes a list.
        A list or JSON value is returned as is.
        """
        if isinstance(v, str) and not v.startswith("["):
            return [origin.strip() for origin in v.split(",") if origin.strip()]
        if isinstance(v, (list, str)):
            return v
        raise ValueError(f"Invalid CORS_ORIGINS: {v!r}")

    @field_validator("LOG_LEVEL", mode="before")
    def validate_log_level(cls, v: str) -> str:
        """Ensure the value is a valid logging level."""
        lvl = v.upper()
        if not isinstance(getLevelName(lvl), int):
            raise ValueError(f"Invalid LOG_LEVEL: {v!r}")
        return lvl

    @property
    def access_token_lifetime(self) -> timedelta:
        return timedelta(minutes=self.ACCESS_TOKEN_EXPIRE_MINUTES)

    @property
    def refresh_token_lifetime(self) -> timedelta:
        return timedelta(hours=self.REFRESH_TOKEN_EXPIRE_HOURS)

    @property
    def active_marker_ttl(self) -> timedelta:
        return timedelta(minutes=self.ACTIVE_MARKER_TTL_MINUTES)

    @property
    def permission_cache_ttl(self) -> timedelta:
        return timedelta(minutes=self.PERMISSION_CACHE_TTL_MINUTES)

    @property
    def async_database_url(self) -> str:
        return str(self.DATABASE_URL)

    model_config = ConfigDict(env_file=".env", case_sensitive=True)
