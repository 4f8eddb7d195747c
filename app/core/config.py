from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Literal

AppEnv = Literal["dev", "test", "prod"]
LogLevel = Literal["debug", "info", "warning", "error"]

_TRUTHY = ("1", "true", "yes", "on")
_FALSY = ("", "0", "false", "no", "off")


def _getenv(name: str, default: str) -> str:
    return os.environ.get(name, default).strip()


@dataclass(frozen=True)
class Settings:
    app_env: AppEnv
    log_level: LogLevel
    log_json: bool
    port: int
    database_url: str | None
    redis_url: str | None
    review_session_ttl_seconds: int = 3600
    db_pool_size: int = 5
    jwt_issuer: str = "auth-service"
    # PEM public key of the identity provider; None = ephemeral dev key
    jwt_public_key_file: str | None = None

    @property
    def is_dev(self) -> bool:
        return self.app_env == "dev"

    @property
    def is_test(self) -> bool:
        return self.app_env == "test"

    @property
    def is_prod(self) -> bool:
        return self.app_env == "prod"


def _parse_bool(name: str, raw: str) -> bool:
    value = raw.lower()
    if value in _TRUTHY:
        return True
    if value in _FALSY:
        return False
    raise ValueError(f"{name} must be a boolean (got {raw!r})")


def _parse_int(name: str, raw: str) -> int:
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer (got {raw!r})") from None


def _parse_positive_int(name: str, raw: str) -> int:
    value = _parse_int(name, raw)
    if value <= 0:
        raise ValueError(f"{name} must be positive (got {value})")
    return value


def load_settings() -> Settings:
    app_env_raw = _getenv("APP_ENV", "dev").lower()
    log_level_raw = _getenv("LOG_LEVEL", "info").lower()

    if app_env_raw not in ("dev", "test", "prod"):
        raise ValueError(f"APP_ENV must be dev|test|prod (got {app_env_raw!r})")

    if log_level_raw not in ("debug", "info", "warning", "error"):
        raise ValueError(
            f"LOG_LEVEL must be debug|info|warning|error (got {log_level_raw!r})"
        )

    log_json = _parse_bool("LOG_JSON", _getenv("LOG_JSON", "false"))
    port = _parse_int("PORT", _getenv("PORT", "8000"))

    ttl = _parse_positive_int(
        "REVIEW_SESSION_TTL_SECONDS", _getenv("REVIEW_SESSION_TTL_SECONDS", "3600")
    )
    db_pool_size = _parse_positive_int("DB_POOL_SIZE", _getenv("DB_POOL_SIZE", "5"))

    jwt_issuer = _getenv("JWT_ISSUER", "auth-service")
    if not jwt_issuer:
        raise ValueError("JWT_ISSUER must not be empty")
    jwt_public_key_file = _getenv("JWT_PUBLIC_KEY_FILE", "") or None

    database_url = _getenv("DATABASE_URL", "") or None
    redis_url = _getenv("REDIS_URL", "") or None

    return Settings(  # type: ignore[arg-type]
        app_env=app_env_raw,
        log_level=log_level_raw,
        log_json=log_json,
        port=port,
        database_url=database_url,
        redis_url=redis_url,
        review_session_ttl_seconds=ttl,
        db_pool_size=db_pool_size,
        jwt_issuer=jwt_issuer,
        jwt_public_key_file=jwt_public_key_file,
    )


SETTINGS = load_settings()
