"""Configuration centralisée (backend core) avec validation minimale.

Toute la configuration vient de l'environnement ; `AppSettings.load()` est le
seul point de lecture, y compris pour l'URL de base utilisée par les
migrations.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from urllib.parse import quote_plus


def env_flag(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return int(raw)


def _first_env(*names: str) -> str | None:
    for name in names:
        value = (os.getenv(name) or "").strip()
        if value:
            return value
    return None


def _database_url() -> str:
    """`DATABASE_URL` tel quel, sinon assemblé depuis POSTGRES_* / DB_* (base `comptaci`)."""

    explicit = _first_env("DATABASE_URL")
    if explicit:
        return explicit

    user = quote_plus(_first_env("POSTGRES_USER", "DB_USER") or "postgres")
    password = _first_env("POSTGRES_PASSWORD", "DB_PASSWORD")
    credentials = f"{user}:{quote_plus(password)}" if password is not None else user
    host = _first_env("DB_HOST", "POSTGRES_HOST") or "localhost"
    port = _first_env("DB_PORT", "POSTGRES_PORT") or "5432"
    database = _first_env("POSTGRES_DB", "DB_NAME") or "comptaci"
    return f"postgresql+psycopg2://{credentials}@{host}:{port}/{database}"


def _csv_env(*names: str) -> list[str]:
    raw = _first_env(*names) or ""
    return [entry.strip() for entry in raw.split(",") if entry.strip()]


@dataclass(frozen=True)
class AppSettings:
    app_env: str = "development"
    database_url: str = ""
    db_pool_size: int = 10
    db_pool_max_overflow: int = 20
    sql_echo: bool = False
    cors_allowed_origins: list[str] = None
    jwt_secret_keys: list[str] = None
    jwt_expire_minutes: int = 120
    password_hash_iterations: int = 390_000

    @property
    def is_production(self) -> bool:
        return self.app_env in {"prod", "production", "staging"}

    @staticmethod
    def load() -> "AppSettings":
        return AppSettings(
            app_env=(_first_env("APP_ENV", "ENV") or "development").lower(),
            database_url=_database_url(),
            db_pool_size=_int_env("DB_POOL_SIZE", 10),
            db_pool_max_overflow=_int_env("DB_POOL_MAX_OVERFLOW", 20),
            sql_echo=env_flag("SQL_ECHO"),
            cors_allowed_origins=_csv_env("CORS_ALLOWED_ORIGINS"),
            jwt_secret_keys=_csv_env("JWT_SECRET_KEYS", "JWT_SECRET_KEY"),
            jwt_expire_minutes=_int_env("JWT_ACCESS_TOKEN_EXPIRE_MINUTES", 120),
            password_hash_iterations=_int_env("PASSWORD_HASH_ITERATIONS", 390_000),
        )
