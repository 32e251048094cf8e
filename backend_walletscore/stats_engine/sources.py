"""
Capability interfaces for external collaborators.

Chain clients and price oracles are not part of this package; they are
reached through these async protocols. In-memory implementations are
provided for offline tools and tests.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any, Mapping, Protocol, runtime_checkable

from backend_walletscore.core.exceptions import DataUnavailableError
from backend_walletscore.stats_engine.models import AccountSnapshot, Transaction, to_decimal


@runtime_checkable
class WalletDataSource(Protocol):
    async def fetch(self, address: str) -> tuple[AccountSnapshot, list[Transaction]]:
        """
        Fetch account snapshot and transaction history for address.
        Raises DataUnavailableError when the address is unknown to the chain.
        """
        ...


@runtime_checkable
class PriceLookup(Protocol):
    async def price_of(self, token_id: str, tolerance_hours: int) -> Decimal | None:
        """
        USD price for a chain-qualified token id (e.g. "algorand:31566704"),
        or None when no price exists within tolerance_hours of now.
        """
        ...


class StaticWalletDataSource:
    """WalletDataSource over pre-loaded wallet dumps keyed by address."""

    def __init__(
        self,
        wallets: Mapping[str, tuple[AccountSnapshot, list[Transaction]]],
    ) -> None:
        self._wallets = dict(wallets)

    async def fetch(self, address: str) -> tuple[AccountSnapshot, list[Transaction]]:
        try:
            account, transactions = self._wallets[address]
        except KeyError:
            raise DataUnavailableError("address unknown to data source", address=address) from None
        return account, list(transactions)


class StaticPriceLookup:
    """PriceLookup over a fixed price table; tolerance is ignored (prices are a snapshot)."""

    def __init__(self, prices: Mapping[str, Any]) -> None:
        self._prices: dict[str, Decimal] = {
            token_id: to_decimal(price, field_name="price")
            for token_id, price in prices.items()
            if price is not None
        }

    async def price_of(self, token_id: str, tolerance_hours: int) -> Decimal | None:
        return self._prices.get(token_id)
