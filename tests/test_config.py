"""
Tests for env-driven configuration.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from backend_walletscore.config import get_settings, load_settings
from backend_walletscore.config import env
from backend_walletscore.core.exceptions import ConfigError


def test_defaults():
    settings = load_settings()
    assert settings.chain == "algorand"
    assert settings.price_chain_id == "algorand"
    assert settings.native_price_id == "coingecko:algorand"
    assert settings.search_width_hours == 6
    assert settings.get_hold_tokens_balances is True
    assert settings.weight_table_path == env.DEFAULT_WEIGHT_TABLE_PATH


def test_env_overrides(monkeypatch, tmp_path):
    weights = tmp_path / "w.json"
    monkeypatch.setenv("WALLETSCORE_CHAIN", " Algorand ")
    monkeypatch.setenv("PRICE_SEARCH_WIDTH_HOURS", "12")
    monkeypatch.setenv("WEIGHT_TABLE_PATH", str(weights))
    monkeypatch.setenv("GET_HOLD_TOKENS_BALANCES", "off")

    settings = load_settings()

    assert settings.chain == "algorand"
    assert settings.search_width_hours == 12
    assert settings.weight_table_path == Path(weights)
    assert settings.get_hold_tokens_balances is False


@pytest.mark.parametrize("value", ["six", "-1", "1.5"])
def test_invalid_search_width(monkeypatch, value):
    monkeypatch.setenv("PRICE_SEARCH_WIDTH_HOURS", value)
    with pytest.raises(ConfigError):
        env.get_price_search_width_hours()


def test_invalid_boolean(monkeypatch):
    monkeypatch.setenv("GET_HOLD_TOKENS_BALANCES", "maybe")
    with pytest.raises(ConfigError) as exc_info:
        env.get_hold_tokens_balances()
    assert exc_info.value.details["value"] == "maybe"


def test_unknown_chain_price_ids():
    assert env.get_price_chain_id("newchain") == "newchain"
    assert env.get_native_price_id("newchain") is None


def test_get_settings_is_cached(monkeypatch):
    first = get_settings()
    monkeypatch.setenv("PRICE_SEARCH_WIDTH_HOURS", "48")
    assert get_settings() is first
    get_settings.cache_clear()
    assert get_settings().search_width_hours == 48
