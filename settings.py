# settings.py
from __future__ import annotations

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field


DEV_JWT_SECRET = "dev-secret-change-me"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
    )

    # -----------------------
    # Runtime
    # -----------------------
    ENV: str = "dev"
    LOG_LEVEL: str = "INFO"
    APP_VERSION: str = "1.0.0"

    # comma separated; "*" allows any origin
    CORS_ALLOW_ORIGINS: str = "*"

    # -----------------------
    # DB
    # -----------------------
    DATABASE_URL: str = ""
    DB_POOL_MAX: int = Field(default=10, ge=1)
    DB_STATEMENT_TIMEOUT_MS: int = Field(default=5000, ge=100)

    # -----------------------
    # JWT
    # -----------------------
    JWT_SECRET: str = Field(default=DEV_JWT_SECRET, min_length=16)
    JWT_ALG: str = Field(default="HS256")
    JWT_ACCESS_MINUTES: int = Field(default=60)

    # -----------------------
    # Listings
    # -----------------------
    DEFAULT_PAGE_SIZE: int = Field(default=10, ge=1)
    MAX_PAGE_SIZE: int = Field(default=100, ge=1)


settings = Settings()


def _is_strict_env(env: str) -> bool:
    return (env or "").strip().lower() in {"staging", "prod", "production"}


def validate_env_settings() -> None:
    """
    Fail fast in staging/prod when required secrets are missing or left at
    their development defaults. Dev runs with whatever is set.
    """
    env = (settings.ENV or "dev").strip().lower()
    if not _is_strict_env(env):
        return

    missing: list[str] = []
    if not (settings.DATABASE_URL or "").strip():
        missing.append("DATABASE_URL")
    if (settings.JWT_SECRET or "") == DEV_JWT_SECRET or len(settings.JWT_SECRET or "") < 32:
        missing.append("JWT_SECRET")

    if missing:
        raise RuntimeError(
            f"Settings validation failed for ENV={env}. "
            "Missing or insecure: " + ", ".join(sorted(missing))
        )


def cors_origins() -> list[str]:
    raw = settings.CORS_ALLOW_ORIGINS or ""
    return [o.strip() for o in raw.split(",") if o.strip()]
