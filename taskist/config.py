import os
from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field, SecretStr, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_PROJECT_ROOT = Path(__file__).resolve().parents[1]
DEV_SECRET = "dev-fallback"
DEFAULT_DATABASE_URL = "sqlite:///./data/tasks.db"
LOCAL_ORIGINS = (
    "http://localhost:5173",
    "http://127.0.0.1:5173",
    "http://localhost:3000",
)


def _resolve_env_file() -> str:
    local_override = _PROJECT_ROOT / ".env.local"
    if local_override.exists():
        return str(local_override)
    override = os.environ.get("TASKIST_ENV_FILE")
    if override:
        return override
    env_name = os.environ.get("ENV", "development").lower()
    candidate = _PROJECT_ROOT / f".env.{env_name}"
    if env_name not in {"", "development"} and candidate.exists():
        return str(candidate)
    return str(_PROJECT_ROOT / ".env")


class Settings(BaseSettings):
    """Central configuration loaded from environment variables or .env file."""

    model_config = SettingsConfigDict(
        env_file=_resolve_env_file(),
        env_file_encoding="utf-8",
        case_sensitive=False,
        populate_by_name=True,
        extra="ignore",
    )

    env: str = Field("development", alias="ENV")
    database_url: str = Field(DEFAULT_DATABASE_URL, alias="DATABASE_URL")
    jwt_secret: SecretStr = Field(SecretStr(DEV_SECRET), alias="JWT_SECRET")
    jwt_algorithm: str = Field("HS256", alias="JWT_ALGORITHM")
    token_expire_minutes: int = Field(120, ge=1, alias="TOKEN_EXPIRE_MINUTES")
    password_min_length: int = Field(6, ge=1, alias="PASSWORD_MIN_LENGTH")
    bcrypt_rounds: int = Field(10, ge=4, le=31, alias="BCRYPT_ROUNDS")
    cors_allow_origins: Optional[str] = Field(None, alias="CORS_ALLOW_ORIGINS")
    client_url: Optional[str] = Field(None, alias="CLIENT_URL")
    auto_create_tables: bool = Field(True, alias="AUTO_CREATE_TABLES")
    log_level: str = Field("INFO", alias="LOG_LEVEL")
    sql_log_level: Optional[str] = Field(None, alias="SQL_LOG_LEVEL")

    @field_validator("database_url")
    @classmethod
    def normalize_postgres_scheme(cls, value: str) -> str:
        # Hosted Postgres providers hand out the legacy "postgres://" scheme.
        if value.startswith("postgres://"):
            return "postgresql+psycopg2://" + value[len("postgres://") :]
        if value.startswith("postgresql://"):
            return "postgresql+psycopg2://" + value[len("postgresql://") :]
        return value

    @field_validator("log_level")
    @classmethod
    def upper_log_level(cls, value: str) -> str:
        return value.upper()

    @model_validator(mode="after")
    def require_production_secrets(self) -> "Settings":
        if not self.is_strict:
            return self

        missing: list[str] = []
        if self.jwt_secret.get_secret_value() in {DEV_SECRET, "changeme", ""}:
            missing.append("JWT_SECRET")
        if self.database_url == DEFAULT_DATABASE_URL:
            missing.append("DATABASE_URL")

        if missing:
            joined = ", ".join(sorted(missing))
            raise ValueError(f"Missing required settings for {self.env} environment: {joined}")
        return self

    @property
    def is_strict(self) -> bool:
        return self.env.lower() in {"production", "staging"}

    @property
    def debug(self) -> bool:
        return self.env.lower() in {"development", "test"}

    @property
    def is_sqlite(self) -> bool:
        return self.database_url.startswith("sqlite")

    def allowed_origins(self) -> list[str]:
        candidates: list[str] = []
        if self.cors_allow_origins:
            candidates.extend(
                origin.strip() for origin in self.cors_allow_origins.split(",") if origin.strip()
            )
        if self.client_url:
            candidates.append(self.client_url.rstrip("/"))
        if self.debug:
            candidates.extend(LOCAL_ORIGINS)
        return list(dict.fromkeys(candidates))


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return a cached Settings instance."""

    return Settings()
