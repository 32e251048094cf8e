"""
Token balance valuation: held quantities joined with external prices.

Policy for missing prices: a holding whose price is not found within the
tolerance window is still emitted, with unit_price None and total_value 0.
Holdings are never dropped for lack of a price and no value is invented.
"""

from __future__ import annotations

import asyncio
from decimal import Decimal
from typing import Iterable, Mapping

from backend_walletscore.core.exceptions import InvalidTokenQuantityError
from backend_walletscore.stats_engine.models import (
    ZERO,
    TokenBalanceValuation,
    TokenHolding,
    to_decimal,
)
from backend_walletscore.stats_engine.sources import PriceLookup
from backend_walletscore.walletscore_logging import get_logger

logger = get_logger(__name__)


def chain_token_id(price_chain_id: str | None, token_id: str) -> str:
    """Price-feed key for a token: "<chain>:<token>", or the bare id without a chain prefix."""
    if not price_chain_id:
        return token_id
    return f"{price_chain_id}:{token_id}"


def prepare_holdings(holdings: Iterable[TokenHolding]) -> list[TokenHolding]:
    """
    Validate and filter holdings before valuation.

    Negative quantities raise InvalidTokenQuantityError; zero quantities are
    dropped; repeated token ids keep the first occurrence.
    """
    seen: set[str] = set()
    out: list[TokenHolding] = []
    for holding in holdings:
        if holding.quantity < 0:
            raise InvalidTokenQuantityError(
                "token quantity must be non-negative",
                token_id=holding.token_id,
                quantity=str(holding.quantity),
            )
        if holding.quantity == 0 or holding.token_id in seen:
            continue
        seen.add(holding.token_id)
        out.append(holding)
    return out


async def fetch_token_prices(
    price_lookup: PriceLookup,
    token_ids: Iterable[str],
    tolerance_hours: int,
) -> dict[str, Decimal | None]:
    """
    Look up prices once per distinct token id, concurrently.

    Lookup errors propagate to the caller; no retries here.
    """
    distinct = list(dict.fromkeys(token_ids))
    if not distinct:
        return {}
    results = await asyncio.gather(
        *(price_lookup.price_of(token_id, tolerance_hours) for token_id in distinct)
    )
    prices = dict(zip(distinct, results))
    logger.debug(
        "token_prices_fetched",
        requested=len(distinct),
        priced=sum(1 for p in results if p is not None),
        tolerance_hours=tolerance_hours,
    )
    return prices


def valuate_holdings(
    holdings: Iterable[TokenHolding],
    prices: Mapping[str, Decimal | None],
    *,
    price_chain_id: str | None = None,
) -> list[TokenBalanceValuation]:
    """
    Join holdings with prices into one valuation per surviving holding.

    Args:
        holdings: Raw holdings; see prepare_holdings for filtering rules.
        prices: Chain-qualified token id -> unit price (None or missing = no price).
        price_chain_id: Prefix used to build chain-qualified ids.

    Returns:
        Valuations in input order.
    """
    valuations: list[TokenBalanceValuation] = []
    for holding in prepare_holdings(holdings):
        key = chain_token_id(price_chain_id, holding.token_id)
        price = prices.get(key)
        if price is None:
            logger.debug("token_price_missing", token_id=key)
            total = ZERO
        else:
            price = to_decimal(price, field_name="price")
            total = holding.quantity * price
        valuations.append(
            TokenBalanceValuation(
                token_id=holding.token_id,
                chain_token_id=key,
                quantity=holding.quantity,
                unit_price=price,
                total_value=total,
            )
        )
    return valuations


def hold_tokens_value_usd(valuations: Iterable[TokenBalanceValuation]) -> Decimal:
    """Sum of total_value; unpriced valuations contribute 0."""
    return sum((v.total_value for v in valuations), ZERO)
