# config.py

"""Settings for TaskFlow, read from the environment (and a local .env file)."""

from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv

load_dotenv(override=False)

ENV_PREFIX = "TASKFLOW"


def _k(suffix: str) -> str:
    return f"{ENV_PREFIX}_{suffix}"


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None or v.strip() == "" else v


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        return default


@dataclass(frozen=True)
class Settings:
    database_url: str
    log_level: str

    # toast lifetimes
    success_notice_seconds: float
    error_notice_seconds: float

    allow_subtask_drag: bool

    @staticmethod
    def from_env() -> "Settings":
        return Settings(
            database_url=_env("DATABASE_URL", "sqlite:///taskflow.db"),
            log_level=_env(_k("LOG_LEVEL"), "INFO").upper(),
            success_notice_seconds=_env_float(_k("SUCCESS_NOTICE_SECONDS"), 3.0),
            error_notice_seconds=_env_float(_k("ERROR_NOTICE_SECONDS"), 5.0),
            allow_subtask_drag=_env_bool(_k("ALLOW_SUBTASK_DRAG"), False),
        )


SETTINGS = Settings.from_env()


def get_settings() -> Settings:
    return SETTINGS
