"""
Stats engine package — wallet statistics extraction and scoring.

Consumes account snapshots, transactions and token holdings, produces a
canonical WalletStatistics record, and maps it to a normalized and a
quantized score through an external weight/calibration table.
"""

from backend_walletscore.stats_engine.descriptors import (
    StatDescriptor,
    descriptors_for,
)
from backend_walletscore.stats_engine.extractor import (
    ExtractionOptions,
    compute_statistics,
    compute_statistics_async,
)
from backend_walletscore.stats_engine.intervals import (
    IntervalAnalysis,
    analyze_intervals,
)
from backend_walletscore.stats_engine.models import (
    ALGORAND_STATS,
    AccountSnapshot,
    Capability,
    IntervalBucket,
    ScoreResult,
    StatsVariant,
    TokenBalanceValuation,
    TokenHolding,
    Transaction,
    TransactionType,
    WalletStatistics,
)
from backend_walletscore.stats_engine.normalizer import (
    WeightEntry,
    WeightTable,
    load_weight_table,
    normalize,
    score,
)
from backend_walletscore.stats_engine.quantizer import quantize_score
from backend_walletscore.stats_engine.sources import PriceLookup, WalletDataSource
from backend_walletscore.stats_engine.valuation import valuate_holdings

__all__ = [
    "StatDescriptor",
    "descriptors_for",
    "ExtractionOptions",
    "compute_statistics",
    "compute_statistics_async",
    "IntervalAnalysis",
    "analyze_intervals",
    "ALGORAND_STATS",
    "AccountSnapshot",
    "Capability",
    "IntervalBucket",
    "ScoreResult",
    "StatsVariant",
    "TokenBalanceValuation",
    "TokenHolding",
    "Transaction",
    "TransactionType",
    "WalletStatistics",
    "WeightEntry",
    "WeightTable",
    "load_weight_table",
    "normalize",
    "score",
    "quantize_score",
    "PriceLookup",
    "WalletDataSource",
    "valuate_holdings",
]
