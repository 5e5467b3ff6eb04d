"""Configuration tests — required settings fail at startup, not per request."""

import pytest
from pydantic import ValidationError

from tasktracker.config import Settings
from tasktracker.main import create_app


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in (
        "TASKTRACKER_DATABASE_URL",
        "TASKTRACKER_JWT_SECRET",
        "TASKTRACKER_ENVIRONMENT",
    ):
        monkeypatch.delenv(name, raising=False)


def test_missing_secret_is_fatal():
    with pytest.raises(ValidationError):
        Settings(database_url="sqlite+aiosqlite://")


def test_missing_database_url_is_fatal():
    with pytest.raises(ValidationError):
        Settings(jwt_secret="x" * 40)


def test_empty_secret_rejected():
    with pytest.raises(ValidationError):
        Settings(database_url="sqlite+aiosqlite://", jwt_secret="")


def test_short_secret_rejected_outside_development():
    with pytest.raises(ValidationError):
        Settings(
            database_url="sqlite+aiosqlite://",
            jwt_secret="short",
            environment="production",
        )


def test_settings_from_environment(monkeypatch):
    monkeypatch.setenv("TASKTRACKER_DATABASE_URL", "sqlite+aiosqlite://")
    monkeypatch.setenv("TASKTRACKER_JWT_SECRET", "env-secret")
    monkeypatch.setenv("TASKTRACKER_ACCESS_TOKEN_EXPIRE_MINUTES", "15")
    settings = Settings()
    assert settings.access_token_expire_minutes == 15
    assert settings.jwt_secret.get_secret_value() == "env-secret"


def test_secret_hidden_from_repr():
    settings = Settings(database_url="sqlite+aiosqlite://", jwt_secret="hunter2-secret")
    assert "hunter2-secret" not in repr(settings)


def test_create_app_without_config_fails():
    with pytest.raises(ValidationError):
        create_app()
