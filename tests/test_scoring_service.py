"""
Tests for WalletScoringService: fetch -> stats -> score, with in-memory sources.
"""

from __future__ import annotations

import asyncio
from decimal import Decimal
from pathlib import Path
from unittest.mock import AsyncMock

import pytest

from backend_walletscore.config import Settings
from backend_walletscore.core.exceptions import ConfigError, DataUnavailableError
from backend_walletscore.scoring_service import (
    WalletScoringService,
    WalletStatsRequest,
)
from backend_walletscore.stats_engine.models import AccountSnapshot, TokenHolding
from backend_walletscore.stats_engine.normalizer import WeightTable
from backend_walletscore.stats_engine.sources import (
    PriceLookup,
    StaticPriceLookup,
    StaticWalletDataSource,
    WalletDataSource,
)

from conftest import ADDRESS, NOW

SETTINGS = Settings(
    chain="algorand",
    price_chain_id="algorand",
    native_price_id="coingecko:algorand",
    search_width_hours=6,
    weight_table_path=Path("unused.json"),
    get_hold_tokens_balances=True,
)

WEIGHTS = WeightTable.from_mapping({
    "total_transactions": {"weight": 1, "min": 0, "max": 10},
    "wallet_age": {"weight": 3, "min": 0, "max": 4},
    "hold_tokens_value_usd": {"weight": 0, "min": 0, "max": 1000},
})


@pytest.fixture
def account():
    return AccountSnapshot(
        address=ADDRESS,
        native_balance=Decimal("40"),
        assets=(TokenHolding(token_id="31566704", quantity=100),),
    )


@pytest.fixture
def service(account, example_transactions):
    return WalletScoringService(
        StaticWalletDataSource({ADDRESS: (account, example_transactions)}),
        StaticPriceLookup({"coingecko:algorand": "0.25", "algorand:31566704": "1.5"}),
        WEIGHTS,
        settings=SETTINGS,
    )


def test_static_sources_satisfy_protocols():
    assert isinstance(StaticWalletDataSource({}), WalletDataSource)
    assert isinstance(StaticPriceLookup({}), PriceLookup)


def test_get_wallet_score_end_to_end(service):
    result = asyncio.run(service.get_wallet_score(WalletStatsRequest(address=ADDRESS), now=NOW))

    assert result.address == ADDRESS
    assert result.stats.transaction_stats.total_transactions == 3
    assert result.stats.native_balance_stats.native_balance_usd == Decimal(10)
    assert result.stats.token_balance_stats.hold_tokens_value_usd == Decimal(150)
    # (0.3 * 1 + 0.5 * 3 + 0.15 * 0) / 4
    assert result.score.normalized_score == pytest.approx(0.45)
    assert result.minted_score == 4500


def test_score_is_deterministic(service):
    request = WalletStatsRequest(address=ADDRESS)
    first = asyncio.run(service.get_wallet_score(request, now=NOW))
    second = asyncio.run(service.get_wallet_score(request, now=NOW))
    assert first.minted_score == second.minted_score
    assert first.stats == second.stats


def test_request_can_disable_token_valuation(service):
    request = WalletStatsRequest(address=ADDRESS, get_hold_tokens_balances=False)
    stats = asyncio.run(service.get_wallet_stats(request, now=NOW))
    assert stats.token_balances == ()
    assert stats.token_holding_stats.tokens_holding == 1


def test_request_overrides_search_width(account, example_transactions):
    lookup = AsyncMock()
    lookup.price_of.return_value = None
    service = WalletScoringService(
        StaticWalletDataSource({ADDRESS: (account, example_transactions)}),
        lookup,
        WEIGHTS,
        settings=SETTINGS,
    )
    asyncio.run(
        service.get_wallet_stats(WalletStatsRequest(address=ADDRESS, search_width_hours=24), now=NOW)
    )
    lookup.price_of.assert_any_await("algorand:31566704", 24)


def test_unknown_address_propagates(service):
    with pytest.raises(DataUnavailableError) as exc_info:
        asyncio.run(service.get_wallet_score(WalletStatsRequest(address="UNKNOWN"), now=NOW))
    assert exc_info.value.details["address"] == "UNKNOWN"


def test_fetch_failure_skips_price_lookup():
    source = AsyncMock()
    source.fetch.side_effect = TimeoutError("node timeout")
    lookup = AsyncMock()
    service = WalletScoringService(source, lookup, WEIGHTS, settings=SETTINGS)

    with pytest.raises(TimeoutError):
        asyncio.run(service.get_wallet_score(WalletStatsRequest(address=ADDRESS), now=NOW))
    lookup.price_of.assert_not_awaited()


def test_unregistered_chain_raises():
    settings = Settings(
        chain="dogechain",
        price_chain_id="dogechain",
        native_price_id=None,
        search_width_hours=6,
        weight_table_path=Path("unused.json"),
        get_hold_tokens_balances=True,
    )
    with pytest.raises(ConfigError) as exc_info:
        WalletScoringService(StaticWalletDataSource({}), StaticPriceLookup({}), WEIGHTS, settings=settings)
    assert exc_info.value.details["chain"] == "dogechain"


def test_to_dict_includes_descriptions_and_minted_score(service):
    result = asyncio.run(service.get_wallet_score(WalletStatsRequest(address=ADDRESS), now=NOW))
    out = result.to_dict()

    assert out["minted_score"] == 4500
    assert out["stats"]["total_transactions"] == 3
    assert out["stats_descriptions"]["wallet_turnover"]["unit"] == "ALGO"
    assert "turnover_intervals" not in out["stats_descriptions"]
