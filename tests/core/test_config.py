from __future__ import annotations

import pytest

from app.core.config import AppEnv, Settings, load_settings

# ---- valid values ----


def test_load_settings_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in (
        "APP_ENV",
        "LOG_LEVEL",
        "LOG_JSON",
        "PORT",
        "DATABASE_URL",
        "REDIS_URL",
        "REVIEW_SESSION_TTL_SECONDS",
        "DB_POOL_SIZE",
        "JWT_ISSUER",
        "JWT_PUBLIC_KEY_FILE",
    ):
        monkeypatch.delenv(name, raising=False)
    settings = load_settings()
    assert settings.app_env == "dev"
    assert settings.log_level == "info"
    assert settings.log_json is False
    assert settings.port == 8000
    assert settings.database_url is None
    assert settings.redis_url is None
    assert settings.review_session_ttl_seconds == 3600
    assert settings.db_pool_size == 5
    assert settings.jwt_issuer == "auth-service"
    assert settings.jwt_public_key_file is None


def test_load_settings_respects_env_vars(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("APP_ENV", "prod")
    monkeypatch.setenv("LOG_LEVEL", "error")
    monkeypatch.setenv("LOG_JSON", "true")
    monkeypatch.setenv("PORT", "9000")
    monkeypatch.setenv("REVIEW_SESSION_TTL_SECONDS", "600")
    monkeypatch.setenv("REDIS_URL", "redis://cache:6379/0")
    monkeypatch.setenv("DB_POOL_SIZE", "12")
    monkeypatch.setenv("JWT_ISSUER", "https://id.example.edu")
    monkeypatch.setenv("JWT_PUBLIC_KEY_FILE", "/run/secrets/jwt.pem")
    settings = load_settings()
    assert settings.app_env == "prod"
    assert settings.log_level == "error"
    assert settings.log_json is True
    assert settings.port == 9000
    assert settings.review_session_ttl_seconds == 600
    assert settings.redis_url == "redis://cache:6379/0"
    assert settings.db_pool_size == 12
    assert settings.jwt_issuer == "https://id.example.edu"
    assert settings.jwt_public_key_file == "/run/secrets/jwt.pem"


def test_load_settings_normalizes_case(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("APP_ENV", "PROD")
    monkeypatch.setenv("LOG_LEVEL", "DEBUG")
    monkeypatch.setenv("LOG_JSON", "Yes")
    settings = load_settings()
    assert settings.app_env == "prod"
    assert settings.log_level == "debug"
    assert settings.log_json is True


def test_load_settings_strips_whitespace(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("APP_ENV", "  test  ")
    monkeypatch.setenv("LOG_LEVEL", "  warning  ")
    settings = load_settings()
    assert settings.app_env == "test"
    assert settings.log_level == "warning"


def test_blank_database_url_means_not_configured(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    monkeypatch.setenv("DATABASE_URL", "   ")
    assert load_settings().database_url is None


# ---- invalid values ----


@pytest.mark.parametrize(
    "name,value,message",
    [
        ("APP_ENV", "staging", "APP_ENV must be dev|test|prod"),
        ("APP_ENV", "", "APP_ENV must be dev|test|prod"),
        ("LOG_LEVEL", "verbose", "LOG_LEVEL must be debug|info|warning|error"),
        ("LOG_LEVEL", "", "LOG_LEVEL must be debug|info|warning|error"),
        ("LOG_JSON", "maybe", "LOG_JSON must be a boolean"),
        ("PORT", "eighty", "PORT must be an integer"),
        ("REVIEW_SESSION_TTL_SECONDS", "soon", "REVIEW_SESSION_TTL_SECONDS must be an integer"),
        ("REVIEW_SESSION_TTL_SECONDS", "0", "REVIEW_SESSION_TTL_SECONDS must be positive"),
        ("DB_POOL_SIZE", "-1", "DB_POOL_SIZE must be positive"),
        ("JWT_ISSUER", "  ", "JWT_ISSUER must not be empty"),
    ],
    ids=[
        "env-unknown",
        "env-empty",
        "level-unknown",
        "level-empty",
        "json-not-bool",
        "port-not-int",
        "ttl-not-int",
        "ttl-zero",
        "pool-negative",
        "issuer-blank",
    ],
)
def test_load_settings_rejects_invalid_values(
    monkeypatch: pytest.MonkeyPatch, name: str, value: str, message: str
) -> None:
    monkeypatch.setenv("APP_ENV", "dev")
    monkeypatch.setenv("LOG_LEVEL", "info")
    monkeypatch.setenv(name, value)
    with pytest.raises(ValueError, match=message):
        load_settings()


# ---- Settings properties ----


def _make_settings(app_env: AppEnv = "dev") -> Settings:
    return Settings(  # type: ignore[arg-type]
        app_env=app_env,
        log_level="info",
        log_json=False,
        port=8000,
        database_url=None,
        redis_url=None,
    )


def test_settings_is_dev() -> None:
    s = _make_settings("dev")
    assert s.is_dev is True
    assert s.is_test is False
    assert s.is_prod is False


def test_settings_is_prod() -> None:
    s = _make_settings("prod")
    assert s.is_dev is False
    assert s.is_test is False
    assert s.is_prod is True


def test_settings_ttl_defaults_to_one_hour() -> None:
    assert _make_settings().review_session_ttl_seconds == 3600


def test_settings_is_frozen() -> None:
    s = _make_settings()
    with pytest.raises(AttributeError):
        s.app_env = "prod"  # type: ignore[misc]
