#!/usr/bin/env python3
"""
Score one wallet from an offline JSON dump and print the result.

Input file layout:
  {
    "account": {"address": "...", "native_balance": "12.5", "first_activity": 1650000000,
                "created_contracts": 0, "assets": [{"token_id": "31566704", "quantity": "100"}]},
    "transactions": [{"id": "tx1", "timestamp": 1650000000, "amount": "-1.5",
                      "rejected": false, "type": "transfer"}],
    "prices": {"coingecko:algorand": "0.18", "algorand:31566704": "1.0"}
  }

Usage:
  python -m backend_walletscore.tools.score_wallet --input wallet.json [--weights weights.json] [--now EPOCH]

Env: WALLETSCORE_CHAIN, PRICE_SEARCH_WIDTH_HOURS, WEIGHT_TABLE_PATH, GET_HOLD_TOKENS_BALANCES.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from decimal import Decimal
from pathlib import Path
from typing import Any

from backend_walletscore.config import get_settings
from backend_walletscore.core.exceptions import WalletScoreError
from backend_walletscore.scoring_service import WalletScoringService, WalletStatsRequest
from backend_walletscore.stats_engine.models import AccountSnapshot, Transaction
from backend_walletscore.stats_engine.normalizer import load_weight_table
from backend_walletscore.stats_engine.sources import StaticPriceLookup, StaticWalletDataSource
from backend_walletscore.walletscore_logging import get_logger

logger = get_logger(__name__)


def load_wallet_dump(path: Path) -> tuple[AccountSnapshot, list[Transaction], dict[str, Any]]:
    """Parse a wallet dump file into (account, transactions, prices)."""
    with open(path, encoding="utf-8") as f:
        data = json.load(f)
    account = AccountSnapshot.from_dict(data["account"])
    transactions = [Transaction.from_dict(t) for t in data.get("transactions") or []]
    prices = dict(data.get("prices") or {})
    return account, transactions, prices


def _json_default(value: Any) -> Any:
    if isinstance(value, Decimal):
        return str(value)
    raise TypeError(f"not JSON serializable: {type(value).__name__}")


async def run(
    input_path: Path,
    weights_path: Path | None = None,
    now: int | None = None,
    hold_tokens: bool | None = None,
) -> dict[str, Any]:
    settings = get_settings()
    account, transactions, prices = load_wallet_dump(input_path)
    table = load_weight_table(weights_path or settings.weight_table_path)
    service = WalletScoringService(
        StaticWalletDataSource({account.address: (account, transactions)}),
        StaticPriceLookup(prices),
        table,
        settings=settings,
    )
    result = await service.get_wallet_score(
        WalletStatsRequest(address=account.address, get_hold_tokens_balances=hold_tokens),
        now=now,
    )
    return result.to_dict()


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        description="Compute wallet statistics and score from an offline JSON dump",
    )
    parser.add_argument("--input", required=True, type=Path, help="Wallet dump JSON file")
    parser.add_argument("--weights", type=Path, default=None, help="Weight table JSON (default: WEIGHT_TABLE_PATH)")
    parser.add_argument("--now", type=int, default=None, help="Evaluation time, epoch seconds (default: now)")
    parser.add_argument(
        "--no-hold-tokens",
        action="store_true",
        help="Skip token valuation (holdings are still counted)",
    )
    args = parser.parse_args(argv)

    try:
        out = asyncio.run(
            run(
                args.input,
                args.weights,
                args.now,
                hold_tokens=False if args.no_hold_tokens else None,
            )
        )
    except WalletScoreError as exc:
        logger.error("score_wallet_failed", **exc.to_dict())
        print(json.dumps(exc.to_dict(), default=str), file=sys.stderr)
        return 1
    print(json.dumps(out, indent=2, default=_json_default))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
