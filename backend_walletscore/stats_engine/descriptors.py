"""
Declarative metadata for wallet statistics.

Each statistic is described once here (label, description, unit) under
its capability group. descriptors_for() assembles the table for a
statistics variant from the groups it populates, minus the names not
meant for flat display. Results are cached per variant and read-only.
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from types import MappingProxyType
from typing import Any, Mapping

from backend_walletscore.stats_engine.models import CAPABILITY_ORDER, Capability, StatsVariant

# Placeholder unit replaced by the variant's native ticker (e.g. ALGO).
NATIVE_UNIT = "native"

# Never shown as flat stats: raw collections and flags.
ALWAYS_EXCLUDED = frozenset({"token_balances", "turnover_intervals", "no_data"})


@dataclass(frozen=True)
class StatDescriptor:
    label: str
    description: str
    unit: str
    group: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "label": self.label,
            "description": self.description,
            "unit": self.unit,
            "group": self.group,
        }


# name -> (label, description, unit), grouped by capability
_FIELDS: dict[Capability, tuple[tuple[str, str, str, str], ...]] = {
    Capability.NATIVE_BALANCE: (
        ("native_balance", "Native balance", "Wallet native token balance", NATIVE_UNIT),
        ("native_balance_usd", "Native balance (USD)", "Wallet native token balance", "USD"),
    ),
    Capability.TOKEN_BALANCES: (
        ("hold_tokens_value_usd", "Hold tokens value", "Wallet hold tokens total balance", "USD"),
        ("token_balances", "Token balances", "Hold tokens balances", "collection"),
    ),
    Capability.TRANSACTIONS: (
        ("wallet_age", "Wallet age", "Wallet age", "months"),
        ("total_transactions", "Total transactions", "Total transactions on wallet", "number"),
        (
            "total_rejected_transactions",
            "Rejected transactions",
            "Total rejected transactions on wallet",
            "number",
        ),
        (
            "average_transaction_time",
            "Average transaction time",
            "Average time interval between transactions",
            "hours",
        ),
        (
            "max_transaction_time",
            "Max transaction time",
            "Maximum time interval between transactions",
            "hours",
        ),
        (
            "min_transaction_time",
            "Min transaction time",
            "Minimal time interval between transactions",
            "hours",
        ),
        ("wallet_turnover", "Wallet turnover", "The movement of funds on the wallet", NATIVE_UNIT),
        (
            "balance_change_in_last_month",
            "Balance change (month)",
            "The balance change value in the last month",
            NATIVE_UNIT,
        ),
        (
            "balance_change_in_last_year",
            "Balance change (year)",
            "The balance change value in the last year",
            NATIVE_UNIT,
        ),
        (
            "time_from_last_transaction",
            "Time from last transaction",
            "Time since last transaction",
            "months",
        ),
        ("last_month_transactions", "Last month transactions", "Last month transactions", "number"),
        (
            "last_year_transactions",
            "Last year transactions",
            "Last year transactions on wallet",
            "number",
        ),
        (
            "transactions_per_month",
            "Transactions per month",
            "Average transaction per months",
            "number",
        ),
        ("turnover_intervals", "Turnover intervals", "Monthly turnover buckets", "collection"),
    ),
    Capability.TOKEN_HOLDINGS: (
        ("tokens_holding", "Tokens holding", "Value of all holding tokens", "number"),
    ),
    Capability.CONTRACTS: (
        ("deployed_contracts", "Deployed contracts", "Amount of deployed smart-contracts", "number"),
    ),
}


def declared_stat_names(capability: Capability) -> tuple[str, ...]:
    """Every statistic name declared for a capability group, collections included."""
    return tuple(name for name, *_ in _FIELDS[capability])


@lru_cache(maxsize=None)
def descriptors_for(variant: StatsVariant) -> Mapping[str, StatDescriptor]:
    """
    Descriptor table for a statistics variant.

    Walks the variant's capability groups in canonical order and skips
    ALWAYS_EXCLUDED plus the variant's own excluded_descriptors.
    """
    excluded = ALWAYS_EXCLUDED | variant.excluded_descriptors
    table: dict[str, StatDescriptor] = {}
    for capability in CAPABILITY_ORDER:
        if not variant.has(capability):
            continue
        for name, label, description, unit in _FIELDS[capability]:
            if name in excluded:
                continue
            table[name] = StatDescriptor(
                label=label,
                description=description,
                unit=variant.native_unit if unit == NATIVE_UNIT else unit,
                group=capability.value,
            )
    return MappingProxyType(table)


def descriptors_as_dict(variant: StatsVariant) -> dict[str, dict[str, Any]]:
    """JSON-ready form of descriptors_for(variant)."""
    return {name: d.to_dict() for name, d in descriptors_for(variant).items()}
