"""
Wallet scoring service: fetch -> extract -> normalize -> quantize.

Owns the only awaits in the pipeline (account/transaction fetch and the
price batch), so a cancellation can only land between stages. Signing
and persistence of the result belong to the caller.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from backend_walletscore.config import Settings, get_settings
from backend_walletscore.core.exceptions import ConfigError
from backend_walletscore.stats_engine.descriptors import descriptors_as_dict
from backend_walletscore.stats_engine.extractor import (
    ExtractionOptions,
    compute_statistics_async,
)
from backend_walletscore.stats_engine.models import (
    STATS_VARIANTS,
    ScoreResult,
    StatsVariant,
    WalletStatistics,
)
from backend_walletscore.stats_engine.normalizer import WeightTable, score
from backend_walletscore.stats_engine.sources import PriceLookup, WalletDataSource
from backend_walletscore.walletscore_logging import bind_wallet


@dataclass(frozen=True)
class WalletStatsRequest:
    """
    Scoring request for one address. None fields fall back to settings.
    """

    address: str
    get_hold_tokens_balances: bool | None = None
    search_width_hours: int | None = None


@dataclass(frozen=True)
class WalletScore:
    address: str
    stats: WalletStatistics
    score: ScoreResult

    @property
    def minted_score(self) -> int:
        """The uint16 value a signer embeds in the payload."""
        return self.score.quantized_score

    def to_dict(self) -> dict[str, Any]:
        return {
            "address": self.address,
            "stats": self.stats.to_dict(),
            "stats_descriptions": descriptors_as_dict(self.stats.variant),
            "score": self.score.normalized_score,
            "minted_score": self.minted_score,
        }


class WalletScoringService:
    """
    Scores wallets of one chain.

    Args:
        data_source: Chain client implementing WalletDataSource.
        price_lookup: Price oracle implementing PriceLookup.
        weight_table: Validated weight/calibration table for the chain.
        settings: Defaults for chain, price ids and valuation switches.
        variant: Statistics variant; defaults to the one registered for settings.chain.
    """

    def __init__(
        self,
        data_source: WalletDataSource,
        price_lookup: PriceLookup,
        weight_table: WeightTable,
        *,
        settings: Settings | None = None,
        variant: StatsVariant | None = None,
    ) -> None:
        self._data_source = data_source
        self._price_lookup = price_lookup
        self._weight_table = weight_table
        self._settings = settings or get_settings()
        self._variant = variant or STATS_VARIANTS.get(self._settings.chain)
        if self._variant is None:
            raise ConfigError(
                "no statistics variant registered for chain",
                chain=self._settings.chain,
            )

    def _options(self, request: WalletStatsRequest, now: int | None) -> ExtractionOptions:
        s = self._settings
        return ExtractionOptions(
            now=now,
            variant=self._variant,
            get_hold_tokens_balances=(
                s.get_hold_tokens_balances
                if request.get_hold_tokens_balances is None
                else request.get_hold_tokens_balances
            ),
            search_width_hours=(
                s.search_width_hours
                if request.search_width_hours is None
                else request.search_width_hours
            ),
            price_chain_id=s.price_chain_id,
            native_price_id=s.native_price_id,
        )

    async def get_wallet_stats(
        self,
        request: WalletStatsRequest,
        *,
        now: int | None = None,
    ) -> WalletStatistics:
        """Fetch wallet data and build its statistics. Fetch errors propagate unchanged."""
        log = bind_wallet(request.address)
        try:
            account, transactions = await self._data_source.fetch(request.address)
        except Exception as exc:
            log.warning("wallet_fetch_failed", error=str(exc), error_type=type(exc).__name__)
            raise
        return await compute_statistics_async(
            account,
            transactions,
            self._price_lookup,
            options=self._options(request, now),
        )

    async def get_wallet_score(
        self,
        request: WalletStatsRequest,
        *,
        now: int | None = None,
    ) -> WalletScore:
        """Statistics plus normalized and quantized score for request.address."""
        stats = await self.get_wallet_stats(request, now=now)
        result = score(stats, self._weight_table)
        bind_wallet(request.address).info(
            "wallet_score_computed",
            normalized_score=result.normalized_score,
            quantized_score=result.quantized_score,
            no_data=stats.no_data,
        )
        return WalletScore(address=request.address, stats=stats, score=result)
