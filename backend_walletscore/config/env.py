"""
Environment variable loading and validation for WalletScore.

- WALLETSCORE_CHAIN: chain whose statistics variant is produced (default: algorand)
- PRICE_SEARCH_WIDTH_HOURS: price staleness tolerance in hours (default: 6)
- WEIGHT_TABLE_PATH: JSON weight/calibration table for the chain
- GET_HOLD_TOKENS_BALANCES: value token holdings via the price feed (default: on)
- Loads .env from project root when available.
"""

from __future__ import annotations

import os
from pathlib import Path

from dotenv import load_dotenv

from backend_walletscore.core.exceptions import ConfigError

# Project root: config is backend_walletscore/config/, root is 2 levels up
_CONFIG_DIR = Path(__file__).resolve().parent
_BACKEND_DIR = _CONFIG_DIR.parent
_ROOT = _BACKEND_DIR.parent
_ENV_PATH = _ROOT / ".env"

DEFAULT_CHAIN = "algorand"
DEFAULT_SEARCH_WIDTH_HOURS = 6
DEFAULT_WEIGHT_TABLE_PATH = _ROOT / "weights.example.json"

# Price-feed prefixes per chain; token ids are looked up as "<prefix>:<asset id>"
PRICE_CHAIN_IDS = {
    "algorand": "algorand",
}
# Native coin price ids per chain
NATIVE_PRICE_IDS = {
    "algorand": "coingecko:algorand",
}

_TRUE_VALUES = ("1", "true", "yes", "on")
_FALSE_VALUES = ("0", "false", "no", "off")


def load_walletscore_env() -> None:
    """Load .env from project root. Safe to call multiple times."""
    load_dotenv(_ENV_PATH)


def get_chain() -> str:
    """Return WALLETSCORE_CHAIN from env, lowercased. Default: algorand."""
    load_walletscore_env()
    return (os.getenv("WALLETSCORE_CHAIN") or DEFAULT_CHAIN).strip().lower()


def get_price_search_width_hours() -> int:
    """
    Return PRICE_SEARCH_WIDTH_HOURS from env.
    Raises ConfigError when the value is not a non-negative integer.
    """
    load_walletscore_env()
    raw = (os.getenv("PRICE_SEARCH_WIDTH_HOURS") or "").strip()
    if not raw:
        return DEFAULT_SEARCH_WIDTH_HOURS
    try:
        hours = int(raw)
    except ValueError:
        raise ConfigError(
            "PRICE_SEARCH_WIDTH_HOURS must be an integer",
            value=raw,
        ) from None
    if hours < 0:
        raise ConfigError("PRICE_SEARCH_WIDTH_HOURS must be >= 0", value=hours)
    return hours


def get_weight_table_path() -> Path:
    """Return WEIGHT_TABLE_PATH from env, or the example table shipped at project root."""
    load_walletscore_env()
    raw = (os.getenv("WEIGHT_TABLE_PATH") or "").strip()
    return Path(raw) if raw else DEFAULT_WEIGHT_TABLE_PATH


def get_hold_tokens_balances() -> bool:
    """Return GET_HOLD_TOKENS_BALANCES from env (default: True)."""
    load_walletscore_env()
    raw = (os.getenv("GET_HOLD_TOKENS_BALANCES") or "").strip().lower()
    if not raw or raw in _TRUE_VALUES:
        return True
    if raw in _FALSE_VALUES:
        return False
    raise ConfigError("GET_HOLD_TOKENS_BALANCES must be a boolean", value=raw)


def get_price_chain_id(chain: str) -> str:
    """Price-feed prefix for chain; falls back to the chain name itself."""
    return PRICE_CHAIN_IDS.get(chain, chain)


def get_native_price_id(chain: str) -> str | None:
    """Price-feed id of the chain's native coin; None when unknown."""
    return NATIVE_PRICE_IDS.get(chain)
