"""
Fixed-point score quantization.

The quantized score is embedded in a signed payload, so computation and
verification must agree bit for bit: the float's exact binary value is
scaled and rounded half-up, never banker's rounding.
"""

from __future__ import annotations

import math
from decimal import ROUND_HALF_UP, Decimal

from backend_walletscore.core.exceptions import ScoringError

SCORE_SCALE = 10000
UINT16_MAX = 0xFFFF


def quantize_score(normalized_score: float) -> int:
    """
    Return clamp(round_half_up(normalized_score * 10000), 0, 10000).

    Raises:
        ScoringError: normalized_score is NaN.
    """
    value = float(normalized_score)
    if math.isnan(value):
        raise ScoringError("normalized score is NaN")
    if value <= 0:
        return 0
    if value >= 1:
        return SCORE_SCALE
    scaled = (Decimal(value) * SCORE_SCALE).quantize(Decimal(1), rounding=ROUND_HALF_UP)
    return max(0, min(SCORE_SCALE, int(scaled)))


def dequantize_score(quantized_score: int) -> float:
    """Inverse mapping used by verifiers: quantized / 10000."""
    if not 0 <= quantized_score <= UINT16_MAX:
        raise ScoringError("quantized score out of uint16 range", quantized_score=quantized_score)
    return quantized_score / SCORE_SCALE
