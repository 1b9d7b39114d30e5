from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Literal

AppEnv = Literal["dev", "test", "prod"]
LogLevel = Literal["debug", "info", "warning", "error"]

_TRUTHY = ("1", "true", "yes", "on")
_FALSY = ("0", "false", "no", "off", "")


def _getenv(name: str, default: str) -> str:
    return os.environ.get(name, default).strip()


@dataclass(frozen=True)
class Settings:
    app_env: AppEnv
    log_level: LogLevel
    log_json: bool
    session_cookie_name: str
    session_ttl_sec: int

    @property
    def is_dev(self) -> bool:
        return self.app_env == "dev"

    @property
    def is_test(self) -> bool:
        return self.app_env == "test"

    @property
    def is_prod(self) -> bool:
        return self.app_env == "prod"


def load_settings() -> Settings:
    app_env_raw = _getenv("APP_ENV", "dev").lower()
    log_level_raw = _getenv("LOG_LEVEL", "info").lower()
    log_json_raw = _getenv("LOG_JSON", "false").lower()
    cookie_name = _getenv("SESSION_COOKIE_NAME", "SESSION")
    ttl_raw = _getenv("SESSION_TTL_SEC", "1800")

    if app_env_raw not in ("dev", "test", "prod"):
        raise ValueError(f"APP_ENV must be dev|test|prod (got {app_env_raw!r})")

    if log_level_raw not in ("debug", "info", "warning", "error"):
        raise ValueError(
            f"LOG_LEVEL must be debug|info|warning|error (got {log_level_raw!r})"
        )

    if log_json_raw in _TRUTHY:
        log_json = True
    elif log_json_raw in _FALSY:
        log_json = False
    else:
        raise ValueError(f"LOG_JSON must be a boolean (got {log_json_raw!r})")

    if not cookie_name:
        raise ValueError("SESSION_COOKIE_NAME must not be empty")

    try:
        session_ttl_sec = int(ttl_raw)
    except ValueError:
        raise ValueError(
            f"SESSION_TTL_SEC must be an integer (got {ttl_raw!r})"
        ) from None
    if session_ttl_sec <= 0:
        raise ValueError(f"SESSION_TTL_SEC must be positive (got {session_ttl_sec})")

    return Settings(  # type: ignore[arg-type]
        app_env=app_env_raw,
        log_level=log_level_raw,
        log_json=log_json,
        session_cookie_name=cookie_name,
        session_ttl_sec=session_ttl_sec,
    )


SETTINGS = load_settings()
