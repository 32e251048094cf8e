"""
Score normalization: WalletStatistics + weight/calibration table -> [0, 1].

Each configured statistic is clamped to its calibration range, rescaled
linearly to [0, 1], and weighted. The normalized score is the weighted
mean over statistics the record actually carries; statistics of absent
capability traits add neither a contribution nor a weight.

Weight tables are external, per-chain configuration and are validated
with pydantic when loaded.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType
from typing import Any, Mapping

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from backend_walletscore.core.exceptions import InvalidWeightTableError
from backend_walletscore.stats_engine.models import ScoreResult, WalletStatistics
from backend_walletscore.stats_engine.quantizer import quantize_score
from backend_walletscore.walletscore_logging import get_logger

logger = get_logger(__name__)


class WeightEntry(BaseModel):
    """Weight and calibration range for one statistic."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    weight: float = Field(ge=0, allow_inf_nan=False)
    min: float = Field(allow_inf_nan=False)
    max: float = Field(allow_inf_nan=False)

    @model_validator(mode="after")
    def _check_range(self) -> "WeightEntry":
        if self.min > self.max:
            raise ValueError(f"calibration min ({self.min}) is greater than max ({self.max})")
        return self

    def calibrate(self, value: float) -> float:
        """Clamp value to [min, max] and rescale to [0, 1]; 0 for a degenerate range."""
        if self.max == self.min:
            return 0.0
        clamped = min(max(value, self.min), self.max)
        return (clamped - self.min) / (self.max - self.min)


class WeightTable:
    """Read-only mapping of statistic name -> WeightEntry."""

    def __init__(self, entries: Mapping[str, WeightEntry]) -> None:
        self._entries = MappingProxyType(dict(entries))

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> "WeightTable":
        """
        Build from {name: {weight, min, max}}.

        Raises:
            InvalidWeightTableError: negative weight, min > max, non-finite or
                missing values, or unknown keys in an entry.
        """
        if not isinstance(raw, Mapping):
            raise InvalidWeightTableError("weight table must be a mapping", type=type(raw).__name__)
        entries: dict[str, WeightEntry] = {}
        for name, value in raw.items():
            if isinstance(value, WeightEntry):
                entries[str(name)] = value
                continue
            try:
                entries[str(name)] = WeightEntry.model_validate(value)
            except ValidationError as exc:
                raise InvalidWeightTableError(
                    f"invalid weight table entry for {name!r}",
                    statistic=str(name),
                    errors=[e["msg"] for e in exc.errors()],
                ) from exc
        return cls(entries)

    @property
    def entries(self) -> Mapping[str, WeightEntry]:
        return self._entries

    def __contains__(self, name: object) -> bool:
        return name in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, name: str) -> WeightEntry | None:
        return self._entries.get(name)

    def to_dict(self) -> dict[str, dict[str, float]]:
        return {name: entry.model_dump() for name, entry in self._entries.items()}


def load_weight_table(path: str | Path) -> WeightTable:
    """Load a JSON weight table from disk. Missing files raise OSError unchanged."""
    path = Path(path)
    with open(path, encoding="utf-8") as f:
        try:
            raw = json.load(f)
        except json.JSONDecodeError as exc:
            raise InvalidWeightTableError(
                "weight table is not valid JSON", path=str(path), error=str(exc)
            ) from exc
    table = WeightTable.from_mapping(raw)
    logger.info("weight_table_loaded", path=str(path), statistics=len(table))
    return table


@dataclass(frozen=True)
class WeightedTerm:
    """One statistic's share of the normalized score, for breakdowns."""

    name: str
    raw_value: float
    calibrated: float
    weight: float

    @property
    def contribution(self) -> float:
        return self.calibrated * self.weight

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "raw_value": self.raw_value,
            "calibrated": self.calibrated,
            "weight": self.weight,
            "contribution": self.contribution,
        }


def weighted_terms(statistics: WalletStatistics, table: WeightTable) -> list[WeightedTerm]:
    """Terms for every configured statistic present on the record, in canonical stat order."""
    terms: list[WeightedTerm] = []
    for name, value in statistics.scalar_stats():
        entry = table.get(name)
        if entry is None:
            continue
        raw = float(value)
        terms.append(
            WeightedTerm(
                name=name,
                raw_value=raw,
                calibrated=entry.calibrate(raw),
                weight=entry.weight,
            )
        )
    return terms


def normalize(statistics: WalletStatistics, table: WeightTable) -> float:
    """Weighted mean of calibrated statistics; 0 when the applicable weight sum is 0."""
    terms = weighted_terms(statistics, table)
    weight_sum = sum(t.weight for t in terms)
    if weight_sum == 0:
        return 0.0
    return sum(t.contribution for t in terms) / weight_sum


def score(statistics: WalletStatistics, table: WeightTable) -> ScoreResult:
    """Normalize and quantize a statistics record."""
    normalized = normalize(statistics, table)
    quantized = quantize_score(normalized)
    logger.debug(
        "wallet_score_normalized",
        wallet_id=statistics.address,
        normalized_score=normalized,
        quantized_score=quantized,
    )
    return ScoreResult(normalized_score=normalized, quantized_score=quantized)
