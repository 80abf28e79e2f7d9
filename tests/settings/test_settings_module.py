from __future__ import annotations

import pytest

from config import get_settings_module


def test_defaults_to_development(monkeypatch):
    monkeypatch.delenv("APP_ENV", raising=False)
    assert get_settings_module() == "config.development"


@pytest.mark.parametrize(
    "env, module",
    [("prod", "config.production"), ("Production", "config.production"), (" test ", "config.testing"), ("dev", "config.development")],
)
def test_app_env_aliases(monkeypatch, env, module):
    monkeypatch.setenv("APP_ENV", env)
    assert get_settings_module() == module


def test_explicit_env_wins_over_app_env(monkeypatch):
    monkeypatch.setenv("APP_ENV", "production")
    assert get_settings_module("testing") == "config.testing"


def test_unknown_env_is_an_error(monkeypatch):
    monkeypatch.setenv("APP_ENV", "staging")
    with pytest.raises(ValueError, match="staging"):
        get_settings_module()
