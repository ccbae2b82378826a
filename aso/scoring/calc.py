"""ASO_Scores - Normalization primitives shared by every scorer.

All functions are pure and map raw statistics onto the 1-10 scale.
Callers must never pass ``min == max``; that range is undefined.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import Sequence


def round2(value: float) -> float:
    """Round to 2 decimals, halves away from zero."""
    return float(Decimal(repr(value)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


def _clamp(min_: float, max_: float, value: float) -> float:
    return max(min_, min(max_, value))


def score(min_: float, max_: float, value: float) -> float:
    """Linear score: ``min_`` -> 1, ``max_`` -> 10."""
    value = _clamp(min_, max_, value)
    return round2(1 + 9 * (value - min_) / (max_ - min_))


def z_score(max_: float, value: float) -> float:
    """Zero based score."""
    return score(0, max_, value)


def i_score(min_: float, max_: float, value: float) -> float:
    """Inverted score: ``min_`` -> 10, ``max_`` -> 1."""
    value = _clamp(min_, max_, value)
    return round2(1 + 9 * (max_ - value) / (max_ - min_))


def iz_score(max_: float, value: float) -> float:
    """Inverted, zero based score."""
    return i_score(0, max_, value)


def aggregate(weights: Sequence[float], values: Sequence[float]) -> float:
    """Weighted sum of 1-10 scores, rescaled back onto 1-10.

    The weighted sum is bounded by ``sum(weights)`` (all ones) and
    ``10 * sum(weights)`` (all tens), so it is scored against that range.
    """
    if len(weights) != len(values):
        raise ValueError("weights and values must have the same length")
    if not weights:
        raise ValueError("at least one weight is required")

    total = sum(w * v for w, v in zip(weights, values))
    weight_sum = sum(weights)
    return score(weight_sum, weight_sum * 10, total)
