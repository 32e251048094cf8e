"""
Core utilities — shared exceptions and cross-cutting concerns.

Provides the typed error hierarchy used by the stats engine, the scoring
service and the offline tools.
"""

from backend_walletscore.core.exceptions import (  # noqa: F401
    ConfigError,
    DataUnavailableError,
    InvalidAccountError,
    InvalidTokenQuantityError,
    InvalidTransactionError,
    InvalidWeightTableError,
    ScoringError,
    WalletScoreError,
)

__all__ = [
    "ConfigError",
    "DataUnavailableError",
    "InvalidAccountError",
    "InvalidTokenQuantityError",
    "InvalidTransactionError",
    "InvalidWeightTableError",
    "ScoringError",
    "WalletScoreError",
]
