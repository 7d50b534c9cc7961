"""
Centralised application settings loaded from environment / .env file.

Uses pydantic-settings so every value can be overridden via env vars
or the .env file at the project root.
"""

from __future__ import annotations

import json
import logging
from typing import Annotated

from pydantic import SecretStr, field_validator
from pydantic_settings import BaseSettings, NoDecode

logger = logging.getLogger(__name__)

_DEFAULT_SESSION_SECRET = "CHANGE-ME-TO-A-RANDOM-64-CHAR-HEX-STRING-IN-PRODUCTION"


class Settings(BaseSettings):
    # ── Project ──────────────────────────────────────────────────────
    PROJECT_NAME: str = "RestoPOS"
    VERSION: str = "1.0.0"
    API_PREFIX: str = "/api"

    # ── Credential store ────────────────────────────────────────────
    # URL locates the store, API key authenticates to it. Both are
    # optional at startup; without them every store call fails per request.
    DATABASE_URL: str | None = None
    DATABASE_API_KEY: SecretStr | None = None
    CREATE_TABLES_ON_STARTUP: bool = True

    # ── Session cookie (signed JWT) ─────────────────────────────────
    SESSION_SECRET: SecretStr = SecretStr(_DEFAULT_SESSION_SECRET)
    SESSION_ALGORITHM: str = "HS256"
    SESSION_COOKIE_NAME: str = "pos_user"
    SESSION_MAX_AGE_DAYS: int = 30
    COOKIE_SECURE: bool = False  # Set True in HTTPS production

    # ── Passwords ───────────────────────────────────────────────────
    BCRYPT_ROUNDS: int = 10

    # ── Access control ──────────────────────────────────────────────
    # Off by default: the account admin API is reachable without a session.
    ADMIN_API_REQUIRES_OWNER: bool = False

    # ── Rate limiting (slowapi) ─────────────────────────────────────
    RATE_LIMIT_ENABLED: bool = True
    LOGIN_RATE_LIMIT: str = "5/minute"

    # ── Customer order links ────────────────────────────────────────
    PUBLIC_BASE_URL: str = "https://my-restaurant-app-phi.vercel.app"
    TAKEAWAY_BASE_URL: str = "https://phang-khon-chicken.vercel.app"
    TAKEAWAY_DEFAULT_TABLE_ID: int = 9

    # ── CORS ─────────────────────────────────────────────────────────
    # Comma-separated or a JSON list.
    CORS_ORIGINS: Annotated[list[str], NoDecode] = [
        "http://localhost",
        "http://localhost:3000",
        "http://localhost:8000",
        "http://127.0.0.1",
        "http://127.0.0.1:8000",
    ]

    @field_validator("CORS_ORIGINS", mode="before")
    @classmethod
    def _parse_cors(cls, v: object) -> list[str]:
        if isinstance(v, str):
            if v.strip().startswith("["):
                return json.loads(v)
            return [o.strip() for o in v.split(",") if o.strip()]
        return v  # type: ignore[return-value]

    @field_validator("DATABASE_URL")
    @classmethod
    def _strip_database_url(cls, v: str | None) -> str | None:
        if v is None or not v.strip():
            return None
        return v.strip()

    @field_validator("PUBLIC_BASE_URL", "TAKEAWAY_BASE_URL")
    @classmethod
    def _validate_base_url(cls, v: str) -> str:
        s = v.strip().rstrip("/")
        if not (s.startswith("http://") or s.startswith("https://")):
            raise ValueError("Base URLs must use http or https")
        return s

    @field_validator("SESSION_MAX_AGE_DAYS")
    @classmethod
    def _validate_max_age(cls, v: int) -> int:
        if v < 1 or v > 365:
            raise ValueError("SESSION_MAX_AGE_DAYS must be between 1 and 365")
        return v

    @field_validator("BCRYPT_ROUNDS")
    @classmethod
    def _validate_rounds(cls, v: int) -> int:
        if v < 4 or v > 31:
            raise ValueError("BCRYPT_ROUNDS must be between 4 and 31")
        return v

    # ── Logging ──────────────────────────────────────────────────────
    LOG_LEVEL: str = "INFO"

    # ── First owner (seeded on startup when set) ────────────────────
    FIRST_OWNER_USERID: str | None = None
    FIRST_OWNER_PASSWORD: SecretStr | None = None
    FIRST_OWNER_NAME: str = "Owner"

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": True,
        "extra": "ignore",
    }


settings = Settings()

if settings.DATABASE_URL is None or settings.DATABASE_API_KEY is None:
    logger.critical(
        "Missing credential store configuration (DATABASE_URL / DATABASE_API_KEY); "
        "store calls will fail at request time"
    )

if settings.SESSION_SECRET.get_secret_value() == _DEFAULT_SESSION_SECRET:
    logger.warning(
        "⚠️  WARNING: You are running with the default INSECURE session secret! "
        "Update SESSION_SECRET in your .env file immediately."
    )
