"""
Interval analysis over a wallet's transaction history.

Orders transactions deterministically by (timestamp, id), derives the
gaps between adjacent transactions in hours, and partitions the observed
span into calendar-month buckets with transaction count and turnover.
Months without activity are still emitted as empty buckets.
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Iterable

from backend_walletscore.core.exceptions import InvalidTransactionError
from backend_walletscore.stats_engine.models import ZERO, IntervalBucket, Transaction
from backend_walletscore.walletscore_logging import get_logger

logger = get_logger(__name__)

SECONDS_PER_HOUR = 3600
# 9999-11-30T23:59:59Z; the bucket after it must still fit in a datetime
MAX_TIMESTAMP = 253399622399


@dataclass(frozen=True)
class GapStats:
    average_hours: float = 0.0
    min_hours: float = 0.0
    max_hours: float = 0.0


@dataclass(frozen=True)
class IntervalAnalysis:
    transactions: tuple[Transaction, ...]
    """Input transactions sorted by (timestamp, id), timestamps as int epoch seconds."""
    gaps: GapStats
    buckets: tuple[IntervalBucket, ...]

    @property
    def turnover(self) -> Decimal:
        return sum((b.turnover for b in self.buckets), ZERO)


def parse_timestamp(value: Any, tx_id: str = "") -> int:
    """
    Coerce a transaction timestamp to int epoch seconds.

    Accepts ints, integral floats, numeric strings and datetimes (naive
    datetimes are taken as UTC). Raises InvalidTransactionError otherwise.
    """
    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        ts = int(value.timestamp())
    elif isinstance(value, bool) or value is None:
        raise InvalidTransactionError(
            "transaction timestamp is missing", tx_id=tx_id, timestamp=value
        )
    elif isinstance(value, int):
        ts = value
    else:
        try:
            parsed = float(value)
            ts = int(parsed)
        except (TypeError, ValueError, OverflowError):
            raise InvalidTransactionError(
                "transaction timestamp is not parseable",
                tx_id=tx_id,
                timestamp=str(value),
            ) from None
        if parsed != ts:
            raise InvalidTransactionError(
                "transaction timestamp is not a whole number of seconds",
                tx_id=tx_id,
                timestamp=str(value),
            )
    if ts < 0:
        raise InvalidTransactionError(
            "transaction timestamp is negative", tx_id=tx_id, timestamp=ts
        )
    if ts > MAX_TIMESTAMP:
        raise InvalidTransactionError(
            "transaction timestamp is out of range", tx_id=tx_id, timestamp=ts
        )
    return ts


def sort_transactions(transactions: Iterable[Transaction]) -> list[Transaction]:
    """Return transactions with parsed timestamps, ordered by (timestamp, id)."""
    normalized: list[Transaction] = []
    for tx in transactions:
        ts = parse_timestamp(tx.timestamp, tx.id)
        if type(tx.timestamp) is not int or tx.timestamp != ts:
            tx = replace(tx, timestamp=ts)
        normalized.append(tx)
    ordered = sorted(normalized, key=lambda t: (t.timestamp, t.id))
    for prev, cur in zip(ordered, ordered[1:]):
        if cur.timestamp < prev.timestamp:
            raise InvalidTransactionError(
                "transaction timestamps are not monotonic after sort",
                tx_id=cur.id,
                previous_tx_id=prev.id,
            )
    return ordered


def gap_statistics(ordered: list[Transaction]) -> GapStats:
    """
    Average/min/max gap in hours between adjacent sorted transactions.
    Fewer than two transactions gives all zeros.
    """
    if len(ordered) < 2:
        return GapStats()
    gaps = [
        (cur.timestamp - prev.timestamp) / SECONDS_PER_HOUR
        for prev, cur in zip(ordered, ordered[1:])
    ]
    return GapStats(
        average_hours=sum(gaps) / len(gaps),
        min_hours=min(gaps),
        max_hours=max(gaps),
    )


def month_start(ts: int) -> datetime:
    """First instant (UTC) of the calendar month containing ts."""
    dt = datetime.fromtimestamp(ts, tz=timezone.utc)
    return dt.replace(day=1, hour=0, minute=0, second=0, microsecond=0)


def _next_month(dt: datetime) -> datetime:
    if dt.month == 12:
        return dt.replace(year=dt.year + 1, month=1)
    return dt.replace(month=dt.month + 1)


def bucket_by_month(ordered: list[Transaction]) -> list[IntervalBucket]:
    """
    Monthly buckets from the first to the last transaction's month, inclusive.

    Turnover counts absolute amounts of non-rejected transactions only;
    rejected ones still count toward tx_count.
    """
    if not ordered:
        return []
    by_month: dict[datetime, list[Transaction]] = defaultdict(list)
    for tx in ordered:
        by_month[month_start(tx.timestamp)].append(tx)

    buckets: list[IntervalBucket] = []
    current = month_start(ordered[0].timestamp)
    last = month_start(ordered[-1].timestamp)
    while current <= last:
        end = _next_month(current)
        txs = by_month.get(current, [])
        turnover = sum((abs(tx.amount) for tx in txs if not tx.rejected), ZERO)
        buckets.append(
            IntervalBucket(
                start_date=current,
                end_date=end,
                tx_count=len(txs),
                turnover=turnover,
                average_gap_hours=gap_statistics(txs).average_hours,
            )
        )
        current = end
    return buckets


def analyze_intervals(transactions: Iterable[Transaction]) -> IntervalAnalysis:
    """
    Sort transactions and derive gap statistics and monthly buckets.

    Args:
        transactions: Wallet transactions in any order.

    Returns:
        IntervalAnalysis with the sorted transactions, gap stats in hours,
        and contiguous ascending monthly buckets (empty when no transactions).

    Raises:
        InvalidTransactionError: a timestamp is missing, unparseable or negative.
    """
    ordered = sort_transactions(transactions)
    gaps = gap_statistics(ordered)
    buckets = bucket_by_month(ordered)
    if ordered:
        logger.debug(
            "intervals_analyzed",
            tx_count=len(ordered),
            bucket_count=len(buckets),
            average_gap_hours=round(gaps.average_hours, 4),
        )
    return IntervalAnalysis(
        transactions=tuple(ordered),
        gaps=gaps,
        buckets=tuple(buckets),
    )
