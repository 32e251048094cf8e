"""
Tests for fixed-point score quantization (round half up, clamp to [0, 10000]).
"""

from __future__ import annotations

import math
import random

import pytest

from backend_walletscore.core.exceptions import ScoringError
from backend_walletscore.stats_engine.quantizer import (
    SCORE_SCALE,
    dequantize_score,
    quantize_score,
)


@pytest.mark.parametrize(
    "normalized, expected",
    [
        (0.0, 0),
        (1.0, 10000),
        (0.5, 5000),
        (0.7321, 7321),
        (1.0000000001, 10000),
        (-1e-12, 0),
        (float("inf"), 10000),
    ],
)
def test_quantize_basic(normalized, expected):
    assert quantize_score(normalized) == expected


@pytest.mark.parametrize(
    "normalized, expected",
    [
        # binary values sit just above or below the decimal half
        (0.00005, 1),
        (0.12345, 1235),
        (0.00025, 3),
        (0.00015, 1),
        (0.45, 4500),
    ],
)
def test_quantize_rounds_exact_binary_value(normalized, expected):
    assert quantize_score(normalized) == expected


def test_quantize_matches_float_half_up():
    rng = random.Random(17)
    for _ in range(2000):
        value = rng.random()
        assert quantize_score(value) == min(SCORE_SCALE, math.floor(value * SCORE_SCALE + 0.5))


def test_quantize_nan_raises():
    with pytest.raises(ScoringError):
        quantize_score(float("nan"))


def test_quantize_is_monotonic():
    rng = random.Random(11)
    values = sorted(rng.random() for _ in range(2000))
    quantized = [quantize_score(v) for v in values]
    assert quantized == sorted(quantized)


def test_quantize_approximates_input():
    rng = random.Random(3)
    for _ in range(2000):
        value = rng.random()
        assert abs(quantize_score(value) / SCORE_SCALE - value) <= 0.0001


def test_quantized_score_fits_uint16():
    assert 0 <= quantize_score(0.999999) <= 0xFFFF


def test_dequantize():
    assert dequantize_score(7321) == pytest.approx(0.7321)
    with pytest.raises(ScoringError):
        dequantize_score(70000)
