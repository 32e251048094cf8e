"""
Pytest fixtures for WalletScore tests. Fixed evaluation time and isolated env.
"""

from __future__ import annotations

import pytest

from backend_walletscore.stats_engine.models import AccountSnapshot, Transaction

# 2024-06-15T00:00:00Z
NOW = 1718409600
DAY = 86400
ADDRESS = "ALGOWALLETADDRESSEXAMPLE7Q4M2XJ3Y5N6P7R8S9T0UVWXYZABCDEFGH"

_ENV_VARS = (
    "WALLETSCORE_CHAIN",
    "PRICE_SEARCH_WIDTH_HOURS",
    "WEIGHT_TABLE_PATH",
    "GET_HOLD_TOKENS_BALANCES",
)


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch):
    """Drop WalletScore env vars and the cached settings around every test."""
    from backend_walletscore.config import get_settings

    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def example_transactions():
    """now-90d (+10), now-30d (+20), now (+5), deliberately out of order."""
    return [
        Transaction(id="tx-now", timestamp=NOW, amount=5),
        Transaction(id="tx-90d", timestamp=NOW - 90 * DAY, amount=10),
        Transaction(id="tx-30d", timestamp=NOW - 30 * DAY, amount=20),
    ]


@pytest.fixture
def empty_account():
    return AccountSnapshot(address=ADDRESS)
