"""
Application-level exceptions.

Every error the engine can detect on its own input derives from
WalletScoreError and carries a stable error_code plus a details dict,
so API and worker layers can report them without string matching.
"""

from __future__ import annotations

from typing import Any


class WalletScoreError(Exception):
    """Base class for all wallet statistics and scoring errors."""

    error_code = "WALLET_SCORE_ERROR"

    def __init__(self, message: str, **details: Any) -> None:
        super().__init__(message)
        self.message = message
        self.details: dict[str, Any] = details

    def to_dict(self) -> dict[str, Any]:
        return {
            "error_code": self.error_code,
            "message": self.message,
            "details": self.details,
        }


class InvalidTransactionError(WalletScoreError):
    """Transaction timestamp missing, unparseable, negative or out of order."""

    error_code = "INVALID_TRANSACTION"


class InvalidTokenQuantityError(WalletScoreError):
    """A token holding with a negative quantity reached the valuator."""

    error_code = "INVALID_TOKEN_QUANTITY"


class InvalidAccountError(WalletScoreError):
    """Account snapshot with a negative balance or contract count."""

    error_code = "INVALID_ACCOUNT"


class InvalidWeightTableError(WalletScoreError):
    """Negative weight, min > max, or malformed weight table."""

    error_code = "INVALID_WEIGHT_TABLE"


class ScoringError(WalletScoreError):
    """Normalized score cannot be quantized (e.g. NaN)."""

    error_code = "SCORING_ERROR"


class DataUnavailableError(WalletScoreError):
    """Address unknown to the chain or data source unreachable."""

    error_code = "DATA_UNAVAILABLE"


class ConfigError(WalletScoreError):
    """Invalid environment or settings value."""

    error_code = "CONFIG_ERROR"
