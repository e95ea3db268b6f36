from pathlib import Path

import pytest

from config import (
    INSECURE_DEFAULT_SECRET,
    ConfigurationError,
    InsecureConfigurationError,
    Settings,
    get_settings,
)
from db import create_store
from db.memory import InMemoryStore
from db.relational import RelationalStore

ENV_VARS = [
    "APP_ENV",
    "JWT_SECRET",
    "ACCESS_TOKEN_EXPIRE_MINUTES",
    "STORAGE_BACKEND",
    "DATABASE_URL",
    "CORS_ORIGINS",
    "LOG_LEVEL",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def test_development_defaults_warn(caplog):
    with caplog.at_level("WARNING"):
        settings = get_settings()
    assert settings.jwt_secret == INSECURE_DEFAULT_SECRET
    assert settings.storage_backend == "memory"
    assert "insecure default secret" in caplog.text


def test_production_refuses_default_secret(monkeypatch):
    monkeypatch.setenv("APP_ENV", "production")
    with pytest.raises(InsecureConfigurationError):
        get_settings()


def test_production_requires_database_url(monkeypatch):
    monkeypatch.setenv("APP_ENV", "production")
    monkeypatch.setenv("JWT_SECRET", "a-real-secret")
    monkeypatch.setenv("STORAGE_BACKEND", "relational")
    with pytest.raises(InsecureConfigurationError, match="DATABASE_URL"):
        get_settings()

    monkeypatch.setenv("DATABASE_URL", "sqlite://")
    settings = get_settings()
    assert settings.resolved_database_url() == "sqlite://"


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("JWT_SECRET", "s3cret")
    monkeypatch.setenv("ACCESS_TOKEN_EXPIRE_MINUTES", "0")
    monkeypatch.setenv("CORS_ORIGINS", "http://a.test, http://b.test")
    settings = get_settings()
    assert settings.jwt_secret == "s3cret"
    assert settings.access_token_expire_minutes == 0
    assert settings.cors_origins == ["http://a.test", "http://b.test"]


def test_unknown_backend_rejected():
    with pytest.raises(InsecureConfigurationError):
        Settings(storage_backend="redis").check()


def test_create_store_by_backend():
    assert isinstance(create_store(Settings(storage_backend="memory")), InMemoryStore)
    store = create_store(Settings(storage_backend="relational", database_url="sqlite://"))
    assert isinstance(store, RelationalStore)
    assert store.ping()


@pytest.mark.parametrize("secret", ["change-me", "changeme", "secret"])
def test_production_refuses_placeholder_secret(monkeypatch, secret):
    monkeypatch.setenv("APP_ENV", "production")
    monkeypatch.setenv("JWT_SECRET", secret)
    with pytest.raises(InsecureConfigurationError, match="JWT_SECRET"):
        get_settings()


def test_env_example_does_not_ship_a_usable_secret():
    path = Path(__file__).resolve().parent.parent / ".env.example"
    values = dict(
        line.split("=", 1) for line in path.read_text().splitlines() if line and not line.startswith("#")
    )
    assert values["JWT_SECRET"].strip() == ""


@pytest.mark.parametrize("value", ["abc", "", "1.5"])
def test_malformed_expiry_is_a_configuration_error(monkeypatch, value):
    monkeypatch.setenv("JWT_SECRET", "a-real-secret")
    monkeypatch.setenv("ACCESS_TOKEN_EXPIRE_MINUTES", value)
    with pytest.raises(ConfigurationError, match="ACCESS_TOKEN_EXPIRE_MINUTES"):
        get_settings()
