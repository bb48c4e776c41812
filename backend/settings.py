"""Réglages propres à l'API (journalisation, tolérance du secret JWT de dev)."""

from __future__ import annotations

import os
from dataclasses import dataclass, fields

from core.settings import AppSettings, env_flag

_INSECURE_ENVS = {"development", "dev", "test"}


@dataclass(frozen=True)
class Settings(AppSettings):
    allow_insecure_jwt_default: bool = False
    log_level: str = "INFO"

    @classmethod
    def load(cls) -> "Settings":
        base = AppSettings.load()
        allow_insecure = env_flag("ALLOW_INSECURE_JWT_DEFAULT") or base.app_env in _INSECURE_ENVS
        return cls(
            **{item.name: getattr(base, item.name) for item in fields(base)},
            allow_insecure_jwt_default=allow_insecure,
            log_level=os.getenv("LOG_LEVEL", "INFO").strip().upper() or "INFO",
        )
