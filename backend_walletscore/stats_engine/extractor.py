"""
Stats extraction: raw account, transactions and holdings to WalletStatistics.

Composes the interval analyzer and the token valuator with account-level
fields. Each capability trait is built only when the requested variant
declares it, so one extractor serves every chain shape.

compute_statistics is pure (prices are passed in); compute_statistics_async
first resolves the needed prices through a PriceLookup, once per distinct
token id, then delegates.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal
from typing import Callable, Iterable, Mapping

from backend_walletscore.stats_engine.intervals import IntervalAnalysis, analyze_intervals
from backend_walletscore.stats_engine.models import (
    ALGORAND_STATS,
    ZERO,
    AccountSnapshot,
    Capability,
    ContractStats,
    NativeBalanceStats,
    StatsVariant,
    TokenBalanceStats,
    TokenHolding,
    TokenHoldingStats,
    Transaction,
    TransactionStats,
    TransactionType,
    WalletStatistics,
    to_decimal,
)
from backend_walletscore.stats_engine.sources import PriceLookup
from backend_walletscore.stats_engine.valuation import (
    chain_token_id,
    fetch_token_prices,
    prepare_holdings,
    valuate_holdings,
)
from backend_walletscore.walletscore_logging import get_logger

logger = get_logger(__name__)

SECONDS_PER_DAY = 86400
LAST_MONTH_DAYS = 30
LAST_YEAR_DAYS = 365
DEFAULT_SEARCH_WIDTH_HOURS = 6

ContractCreateDetector = Callable[[Transaction], bool]


def is_contract_creation(tx: Transaction) -> bool:
    """Default detector: the chain client tagged the transaction as contract-create."""
    return tx.type is TransactionType.CONTRACT_CREATE


@dataclass(frozen=True)
class ExtractionOptions:
    """Per-request knobs for compute_statistics."""

    now: int | None = None
    """Evaluation time (epoch seconds); None means current time."""
    variant: StatsVariant = ALGORAND_STATS
    get_hold_tokens_balances: bool = True
    """When False, holdings are counted but not valued (empty valuation set)."""
    search_width_hours: int = DEFAULT_SEARCH_WIDTH_HOURS
    """Price staleness tolerance passed to the price lookup."""
    price_chain_id: str | None = None
    native_price_id: str | None = None
    """Price-feed id of the native coin, e.g. "coingecko:algorand"."""
    contract_create_detector: ContractCreateDetector = is_contract_creation

    def evaluation_time(self) -> int:
        return int(self.now) if self.now is not None else int(time.time())


def months_between(start_ts: int, end_ts: int) -> int:
    """
    Whole calendar months elapsed from start_ts to end_ts (UTC).

    A month counts once the same day-of-month and time are reached; when the
    start day does not exist in the end month (Jan 31 -> Feb 28) the month is
    not yet complete. Returns 0 when end_ts <= start_ts.
    """
    if end_ts <= start_ts:
        return 0
    start = datetime.fromtimestamp(start_ts, tz=timezone.utc)
    end = datetime.fromtimestamp(end_ts, tz=timezone.utc)
    months = (end.year - start.year) * 12 + (end.month - start.month)
    if (end.day, end.time()) < (start.day, start.time()):
        months -= 1
    return max(months, 0)


def _first_activity(account: AccountSnapshot, analysis: IntervalAnalysis) -> int | None:
    candidates: list[int] = []
    if account.first_activity is not None:
        candidates.append(int(account.first_activity))
    if analysis.transactions:
        candidates.append(analysis.transactions[0].timestamp)
    return min(candidates) if candidates else None


def _window_stats(
    transactions: Iterable[Transaction],
    cutoff: int,
    now: int,
) -> tuple[int, Decimal]:
    """(count of txs in [cutoff, now], net signed amount of non-rejected ones)."""
    count = 0
    net = ZERO
    for tx in transactions:
        if tx.timestamp < cutoff or tx.timestamp > now:
            continue
        count += 1
        if not tx.rejected:
            net += tx.amount
    return count, net


def build_transaction_stats(
    account: AccountSnapshot,
    analysis: IntervalAnalysis,
    now: int,
) -> TransactionStats:
    txs = analysis.transactions
    first = _first_activity(account, analysis)
    wallet_age = months_between(first, now) if first is not None else 0
    time_from_last = months_between(txs[-1].timestamp, now) if txs else 0

    last_month_count, last_month_change = _window_stats(
        txs, now - LAST_MONTH_DAYS * SECONDS_PER_DAY, now
    )
    last_year_count, last_year_change = _window_stats(
        txs, now - LAST_YEAR_DAYS * SECONDS_PER_DAY, now
    )
    turnover = sum((abs(tx.amount) for tx in txs if not tx.rejected), ZERO)

    return TransactionStats(
        wallet_age=wallet_age,
        total_transactions=len(txs),
        total_rejected_transactions=sum(1 for tx in txs if tx.rejected),
        average_transaction_time=analysis.gaps.average_hours,
        max_transaction_time=analysis.gaps.max_hours,
        min_transaction_time=analysis.gaps.min_hours,
        wallet_turnover=turnover,
        balance_change_in_last_month=last_month_change,
        balance_change_in_last_year=last_year_change,
        time_from_last_transaction=time_from_last,
        last_month_transactions=last_month_count,
        last_year_transactions=last_year_count,
        turnover_intervals=analysis.buckets,
    )


def build_native_balance_stats(
    account: AccountSnapshot,
    prices: Mapping[str, Decimal | None],
    native_price_id: str | None,
) -> NativeBalanceStats:
    price = prices.get(native_price_id) if native_price_id else None
    usd = ZERO
    if price is not None:
        usd = account.native_balance * to_decimal(price, field_name="price")
    return NativeBalanceStats(
        native_balance=account.native_balance,
        native_balance_usd=usd,
    )


def count_deployed_contracts(
    account: AccountSnapshot,
    transactions: Iterable[Transaction],
    detector: ContractCreateDetector,
) -> int:
    """
    Contract-creation transactions found by detector. The account's own
    created_contracts count wins when it is larger (truncated history).
    """
    detected = sum(1 for tx in transactions if detector(tx))
    return max(detected, account.created_contracts)


def compute_statistics(
    account: AccountSnapshot,
    transactions: Iterable[Transaction],
    holdings: Iterable[TokenHolding] | None = None,
    options: ExtractionOptions | None = None,
    *,
    prices: Mapping[str, Decimal | None] | None = None,
) -> WalletStatistics:
    """
    Build the canonical statistics record for one wallet.

    Args:
        account: Account snapshot from the chain client.
        transactions: Wallet transactions in any order.
        holdings: Token holdings; defaults to account.assets.
        options: Evaluation time, variant and valuation switches.
        prices: Pre-fetched prices keyed by chain-qualified id (native coin included).

    Returns:
        WalletStatistics with only the variant's capability traits populated.

    Raises:
        InvalidTransactionError: bad transaction timestamps.
        InvalidTokenQuantityError: negative holding quantity.
    """
    options = options or ExtractionOptions()
    prices = prices or {}
    variant = options.variant
    now = options.evaluation_time()
    held = prepare_holdings(account.assets if holdings is None else holdings)
    analysis = analyze_intervals(transactions)

    native_stats = None
    token_balance_stats = None
    transaction_stats = None
    token_holding_stats = None
    contract_stats = None

    if variant.has(Capability.NATIVE_BALANCE):
        native_stats = build_native_balance_stats(account, prices, options.native_price_id)
    if variant.has(Capability.TOKEN_BALANCES):
        valuations = (
            valuate_holdings(held, prices, price_chain_id=options.price_chain_id)
            if options.get_hold_tokens_balances
            else []
        )
        token_balance_stats = TokenBalanceStats(token_balances=tuple(valuations))
    if variant.has(Capability.TRANSACTIONS):
        transaction_stats = build_transaction_stats(account, analysis, now)
    if variant.has(Capability.TOKEN_HOLDINGS):
        token_holding_stats = TokenHoldingStats(tokens_holding=len(held))
    if variant.has(Capability.CONTRACTS):
        contract_stats = ContractStats(
            deployed_contracts=count_deployed_contracts(
                account, analysis.transactions, options.contract_create_detector
            )
        )

    no_data = not analysis.transactions and account.native_balance == 0 and not held
    stats = WalletStatistics(
        address=account.address,
        variant=variant,
        no_data=no_data,
        native_balance_stats=native_stats,
        token_balance_stats=token_balance_stats,
        transaction_stats=transaction_stats,
        token_holding_stats=token_holding_stats,
        contract_stats=contract_stats,
    )
    logger.info(
        "wallet_stats_computed",
        wallet_id=account.address,
        variant=variant.name,
        tx_count=len(analysis.transactions),
        tokens_holding=len(held),
        no_data=no_data,
    )
    return stats


def price_ids_for(
    account: AccountSnapshot,
    holdings: Iterable[TokenHolding] | None,
    options: ExtractionOptions,
) -> list[str]:
    """Distinct price-feed ids compute_statistics will read for this request."""
    ids: list[str] = []
    variant = options.variant
    if variant.has(Capability.NATIVE_BALANCE) and options.native_price_id:
        ids.append(options.native_price_id)
    if variant.has(Capability.TOKEN_BALANCES) and options.get_hold_tokens_balances:
        held = prepare_holdings(account.assets if holdings is None else holdings)
        ids.extend(chain_token_id(options.price_chain_id, h.token_id) for h in held)
    return list(dict.fromkeys(ids))


async def compute_statistics_async(
    account: AccountSnapshot,
    transactions: Iterable[Transaction],
    price_lookup: PriceLookup,
    holdings: Iterable[TokenHolding] | None = None,
    options: ExtractionOptions | None = None,
) -> WalletStatistics:
    """Resolve prices through price_lookup (one batch per request), then compute_statistics."""
    options = options or ExtractionOptions()
    holdings = list(account.assets if holdings is None else holdings)
    prices = await fetch_token_prices(
        price_lookup,
        price_ids_for(account, holdings, options),
        options.search_width_hours,
    )
    return compute_statistics(account, transactions, holdings, options, prices=prices)
