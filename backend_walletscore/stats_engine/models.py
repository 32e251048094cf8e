"""
Data models for stats engine input and output.

Inputs (AccountSnapshot, Transaction, TokenHolding) are built by chain
clients; outputs (IntervalBucket, TokenBalanceValuation, WalletStatistics,
ScoreResult) are handed to signing, persistence and presentation layers,
which key off the to_dict() field names. Amounts are Decimal so sums are exact.

A chain's statistics are a base record plus optional capability traits;
StatsVariant names which traits a chain produces.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any

from backend_walletscore.core.exceptions import (
    InvalidAccountError,
    InvalidTokenQuantityError,
    InvalidTransactionError,
    WalletScoreError,
)

ZERO = Decimal(0)


def to_decimal(
    value: Any,
    *,
    field_name: str = "amount",
    error_cls: type[WalletScoreError] = WalletScoreError,
) -> Decimal:
    """Coerce int/float/str/Decimal to a finite Decimal; floats go through repr() to avoid binary noise."""
    if value is None or isinstance(value, bool):
        raise error_cls(f"{field_name} is not a number", field=field_name, value=value)
    try:
        if isinstance(value, Decimal):
            result = value
        elif isinstance(value, float):
            result = Decimal(repr(value))
        else:
            result = Decimal(value)
    except (InvalidOperation, TypeError, ValueError):
        raise error_cls(
            f"{field_name} is not a number", field=field_name, value=value
        ) from None
    if not result.is_finite():
        raise error_cls(f"{field_name} must be finite", field=field_name, value=str(value))
    return result


class TransactionType(str, Enum):
    TRANSFER = "transfer"
    CONTRACT_CALL = "contract-call"
    CONTRACT_CREATE = "contract-create"
    OTHER = "other"

    @classmethod
    def parse(cls, value: Any) -> "TransactionType":
        """Map a raw type tag to a TransactionType; unknown tags become OTHER."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return cls.OTHER


class Capability(str, Enum):
    """Optional statistic groups a chain's statistics variant may populate."""

    NATIVE_BALANCE = "native_balance"
    TOKEN_BALANCES = "token_balances"
    TRANSACTIONS = "transactions"
    TOKEN_HOLDINGS = "token_holdings"
    CONTRACTS = "contracts"


# Canonical trait order; scoring and descriptors always walk traits in this order.
CAPABILITY_ORDER: tuple[Capability, ...] = tuple(Capability)


@dataclass(frozen=True)
class TokenHolding:
    """Raw token/asset quantity held by the wallet."""

    token_id: str
    quantity: Decimal

    def __post_init__(self) -> None:
        object.__setattr__(self, "token_id", str(self.token_id))
        quantity = to_decimal(
            self.quantity,
            field_name="quantity",
            error_cls=InvalidTokenQuantityError,
        )
        object.__setattr__(self, "quantity", quantity)

    @classmethod
    def from_dict(cls, item: dict[str, Any]) -> "TokenHolding":
        return cls(
            token_id=item.get("token_id") or item.get("asset_id"),
            quantity=item.get("quantity", item.get("amount", 0)),
        )


@dataclass(frozen=True)
class AccountSnapshot:
    """
    Account-level state of a wallet at fetch time.

    first_activity is the chain's own notion of account creation (epoch seconds);
    None when the chain does not report it.
    """

    address: str
    native_balance: Decimal = ZERO
    first_activity: int | None = None
    created_contracts: int = 0
    """Contract-creation transactions reported by the chain for this account."""
    assets: tuple[TokenHolding, ...] = ()

    def __post_init__(self) -> None:
        balance = to_decimal(
            self.native_balance,
            field_name="native_balance",
            error_cls=InvalidAccountError,
        )
        if balance < 0:
            raise InvalidAccountError(
                "native balance must be non-negative",
                address=self.address,
                native_balance=str(balance),
            )
        if self.created_contracts < 0:
            raise InvalidAccountError(
                "created contract count must be non-negative",
                address=self.address,
                created_contracts=self.created_contracts,
            )
        object.__setattr__(self, "native_balance", balance)
        object.__setattr__(self, "assets", tuple(self.assets))

    @classmethod
    def from_dict(cls, item: dict[str, Any]) -> "AccountSnapshot":
        first = item.get("first_activity")
        return cls(
            address=item["address"],
            native_balance=item.get("native_balance", 0),
            first_activity=int(first) if first is not None else None,
            created_contracts=int(item.get("created_contracts") or 0),
            assets=tuple(TokenHolding.from_dict(a) for a in item.get("assets") or ()),
        )


@dataclass(frozen=True)
class Transaction:
    """
    One wallet transaction.

    amount is signed relative to the wallet (incoming > 0, outgoing < 0), in
    native units. timestamp is validated by the interval analyzer, not here,
    so raw values from the chain client can be passed through.
    """

    id: str
    timestamp: Any
    amount: Decimal = ZERO
    rejected: bool = False
    type: TransactionType = TransactionType.TRANSFER

    def __post_init__(self) -> None:
        object.__setattr__(self, "id", str(self.id))
        amount = to_decimal(self.amount, error_cls=InvalidTransactionError)
        object.__setattr__(self, "amount", amount)
        object.__setattr__(self, "rejected", bool(self.rejected))
        object.__setattr__(self, "type", TransactionType.parse(self.type))

    @classmethod
    def from_dict(cls, item: dict[str, Any]) -> "Transaction":
        return cls(
            id=item["id"],
            timestamp=item.get("timestamp"),
            amount=item.get("amount", 0),
            rejected=bool(item.get("rejected", False)),
            type=item.get("type", TransactionType.TRANSFER),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "timestamp": self.timestamp,
            "amount": str(self.amount),
            "rejected": self.rejected,
            "type": self.type.value,
        }


@dataclass(frozen=True)
class IntervalBucket:
    """Aggregated activity for one calendar month [start_date, end_date)."""

    start_date: datetime
    end_date: datetime
    tx_count: int
    turnover: Decimal
    """Sum of absolute amounts of non-rejected transactions in the bucket."""
    average_gap_hours: float
    """Mean gap between adjacent transactions inside the bucket; 0 with fewer than two."""

    def to_dict(self) -> dict[str, Any]:
        return {
            "start_date": self.start_date.isoformat(),
            "end_date": self.end_date.isoformat(),
            "tx_count": self.tx_count,
            "turnover": str(self.turnover),
            "average_gap_hours": self.average_gap_hours,
        }


@dataclass(frozen=True)
class TokenBalanceValuation:
    """A held token joined with its price; unit_price None when no price was found."""

    token_id: str
    chain_token_id: str
    quantity: Decimal
    unit_price: Decimal | None
    total_value: Decimal

    def to_dict(self) -> dict[str, Any]:
        return {
            "token_id": self.token_id,
            "chain_token_id": self.chain_token_id,
            "quantity": str(self.quantity),
            "unit_price": str(self.unit_price) if self.unit_price is not None else None,
            "total_value": str(self.total_value),
        }


# --- Capability traits ---


@dataclass(frozen=True)
class NativeBalanceStats:
    native_balance: Decimal
    native_balance_usd: Decimal

    def scalar_stats(self) -> list[tuple[str, Any]]:
        return [
            ("native_balance", self.native_balance),
            ("native_balance_usd", self.native_balance_usd),
        ]


@dataclass(frozen=True)
class TokenBalanceStats:
    token_balances: tuple[TokenBalanceValuation, ...] = ()

    @property
    def hold_tokens_value_usd(self) -> Decimal:
        """Total value of valued holdings; unpriced holdings contribute 0."""
        return sum((v.total_value for v in self.token_balances), ZERO)

    def scalar_stats(self) -> list[tuple[str, Any]]:
        return [("hold_tokens_value_usd", self.hold_tokens_value_usd)]


@dataclass(frozen=True)
class TransactionStats:
    wallet_age: int
    """Whole months since first activity."""
    total_transactions: int
    total_rejected_transactions: int
    average_transaction_time: float
    """Hours between adjacent transactions."""
    max_transaction_time: float
    min_transaction_time: float
    wallet_turnover: Decimal
    balance_change_in_last_month: Decimal
    balance_change_in_last_year: Decimal
    time_from_last_transaction: int
    """Whole months since the newest transaction."""
    last_month_transactions: int
    last_year_transactions: int
    turnover_intervals: tuple[IntervalBucket, ...] = ()

    @property
    def transactions_per_month(self) -> float:
        if self.wallet_age == 0:
            return 0.0
        return self.total_transactions / self.wallet_age

    def scalar_stats(self) -> list[tuple[str, Any]]:
        return [
            ("wallet_age", self.wallet_age),
            ("total_transactions", self.total_transactions),
            ("total_rejected_transactions", self.total_rejected_transactions),
            ("average_transaction_time", self.average_transaction_time),
            ("max_transaction_time", self.max_transaction_time),
            ("min_transaction_time", self.min_transaction_time),
            ("wallet_turnover", self.wallet_turnover),
            ("balance_change_in_last_month", self.balance_change_in_last_month),
            ("balance_change_in_last_year", self.balance_change_in_last_year),
            ("time_from_last_transaction", self.time_from_last_transaction),
            ("last_month_transactions", self.last_month_transactions),
            ("last_year_transactions", self.last_year_transactions),
            ("transactions_per_month", self.transactions_per_month),
        ]


@dataclass(frozen=True)
class TokenHoldingStats:
    tokens_holding: int

    def scalar_stats(self) -> list[tuple[str, Any]]:
        return [("tokens_holding", self.tokens_holding)]


@dataclass(frozen=True)
class ContractStats:
    deployed_contracts: int

    def scalar_stats(self) -> list[tuple[str, Any]]:
        return [("deployed_contracts", self.deployed_contracts)]


@dataclass(frozen=True)
class StatsVariant:
    """
    A chain-specific statistics shape: which capability traits it populates,
    the ticker its native amounts are shown in, and extra descriptor names
    hidden from flat display.
    """

    name: str
    capabilities: frozenset[Capability]
    native_unit: str = "native"
    excluded_descriptors: frozenset[str] = frozenset()

    def has(self, capability: Capability) -> bool:
        return capability in self.capabilities


ALGORAND_STATS = StatsVariant(
    name="algorand",
    capabilities=frozenset(Capability),
    native_unit="ALGO",
)

STATS_VARIANTS: dict[str, StatsVariant] = {
    ALGORAND_STATS.name: ALGORAND_STATS,
}

_TRAIT_ATTRS: tuple[tuple[Capability, str], ...] = (
    (Capability.NATIVE_BALANCE, "native_balance_stats"),
    (Capability.TOKEN_BALANCES, "token_balance_stats"),
    (Capability.TRANSACTIONS, "transaction_stats"),
    (Capability.TOKEN_HOLDINGS, "token_holding_stats"),
    (Capability.CONTRACTS, "contract_stats"),
)


@dataclass(frozen=True)
class WalletStatistics:
    """
    Canonical statistics record for one wallet.

    Traits not produced by the variant are None and contribute nothing to
    scoring or descriptors.
    """

    address: str
    variant: StatsVariant
    no_data: bool = False
    native_balance_stats: NativeBalanceStats | None = None
    token_balance_stats: TokenBalanceStats | None = None
    transaction_stats: TransactionStats | None = None
    token_holding_stats: TokenHoldingStats | None = None
    contract_stats: ContractStats | None = None

    def traits(self) -> list[tuple[Capability, Any]]:
        """Present traits in canonical order."""
        out: list[tuple[Capability, Any]] = []
        for capability, attr in _TRAIT_ATTRS:
            trait = getattr(self, attr)
            if trait is not None:
                out.append((capability, trait))
        return out

    def scalar_stats(self) -> list[tuple[str, Any]]:
        """Flat (name, value) pairs over present traits, in canonical order."""
        out: list[tuple[str, Any]] = []
        for _, trait in self.traits():
            out.extend(trait.scalar_stats())
        return out

    def stat(self, name: str) -> Any:
        """Value of a scalar statistic by name; None when its trait is absent."""
        for stat_name, value in self.scalar_stats():
            if stat_name == name:
                return value
        return None

    @property
    def turnover_intervals(self) -> tuple[IntervalBucket, ...]:
        if self.transaction_stats is None:
            return ()
        return self.transaction_stats.turnover_intervals

    @property
    def token_balances(self) -> tuple[TokenBalanceValuation, ...]:
        if self.token_balance_stats is None:
            return ()
        return self.token_balance_stats.token_balances

    def to_dict(self) -> dict[str, Any]:
        """Flat JSON-serializable record; Decimals rendered as strings."""
        out: dict[str, Any] = {
            "address": self.address,
            "variant": self.variant.name,
            "no_data": self.no_data,
        }
        for name, value in self.scalar_stats():
            out[name] = str(value) if isinstance(value, Decimal) else value
        if self.transaction_stats is not None:
            out["turnover_intervals"] = [b.to_dict() for b in self.turnover_intervals]
        if self.token_balance_stats is not None:
            out["token_balances"] = [v.to_dict() for v in self.token_balances]
        return out


@dataclass(frozen=True)
class ScoreResult:
    normalized_score: float
    """Weighted, calibrated score in [0, 1]."""
    quantized_score: int
    """round_half_up(normalized_score * 10000), clamped to [0, 10000]."""

    def to_dict(self) -> dict[str, Any]:
        return {
            "normalized_score": self.normalized_score,
            "quantized_score": self.quantized_score,
        }
