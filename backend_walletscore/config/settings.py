"""
Application settings.

Collects the env getters into one immutable Settings object so the
scoring service and tools share a single view of configuration.
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

from backend_walletscore.config import env


@dataclass(frozen=True)
class Settings:
    chain: str
    price_chain_id: str
    native_price_id: str | None
    search_width_hours: int
    weight_table_path: Path
    get_hold_tokens_balances: bool


def load_settings() -> Settings:
    """Read settings from the environment (and .env) without caching."""
    chain = env.get_chain()
    return Settings(
        chain=chain,
        price_chain_id=env.get_price_chain_id(chain),
        native_price_id=env.get_native_price_id(chain),
        search_width_hours=env.get_price_search_width_hours(),
        weight_table_path=env.get_weight_table_path(),
        get_hold_tokens_balances=env.get_hold_tokens_balances(),
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Return the current application settings.

    Cached for the process; call get_settings.cache_clear() after changing env in tests.
    """
    return load_settings()
