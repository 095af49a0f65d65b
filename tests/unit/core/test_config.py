"""Unit tests for configuration selection and validation."""

from __future__ import annotations

import pytest

from griya_auth.core.config import (
    INSECURE_JWT_SECRET,
    DevelopmentConfig,
    ProductionConfig,
    TestingConfig,
    env_bool,
    env_int,
    get_config,
    validate_config,
)
from griya_auth.services.auth.dto import AuthSettings


def _as_dict(cls) -> dict:
    return {k: getattr(cls, k) for k in dir(cls) if k.isupper()}


@pytest.mark.parametrize(
    ("env", "expected"),
    [("testing", TestingConfig), ("production", ProductionConfig), ("bogus", DevelopmentConfig)],
)
def test_get_config_from_app_env(monkeypatch, env, expected):
    monkeypatch.setenv("APP_ENV", env)
    assert get_config() is expected


def test_env_helpers(monkeypatch):
    monkeypatch.setenv("FLAG_ON", "Yes")
    monkeypatch.setenv("SOME_INT", "42")
    monkeypatch.setenv("BLANK_INT", " ")

    assert env_bool("FLAG_ON") is True
    assert env_bool("FLAG_MISSING", default=True) is True
    assert env_int("SOME_INT", 1) == 42
    assert env_int("BLANK_INT", 7) == 7


def test_production_rejects_placeholder_secret():
    config = _as_dict(ProductionConfig)
    config["JWT_SECRET_KEY"] = INSECURE_JWT_SECRET

    with pytest.raises(RuntimeError, match="JWT_SECRET_KEY"):
        validate_config(config)

    config["JWT_SECRET_KEY"] = "a-real-production-secret-of-good-length"
    validate_config(config)


def test_lockout_settings_must_be_positive():
    config = _as_dict(TestingConfig)
    config["AUTH_LOCKOUT_THRESHOLD"] = 0

    with pytest.raises(RuntimeError, match="AUTH_LOCKOUT_THRESHOLD"):
        validate_config(config)


def test_auth_settings_defaults_match_config():
    settings = AuthSettings.from_config(_as_dict(TestingConfig))

    assert settings == AuthSettings()
