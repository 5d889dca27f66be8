"""
Coefficient Range Mapper - Maps bucketed coefficient vectors onto a domain
"""
import math
from typing import List, Sequence, Tuple

from ..errors import ValidationError
from ..models.market import Domain
from ..models.trade import Range

MAX_COEFFICIENTS = 8


def to_ranges(coefficients: Sequence[float], domain: Domain) -> List[Tuple[Range, float]]:
    """
    Split the domain into len(coefficients) equal-width buckets and pair
    each bucket with its normalized weight.

    weight_i = c_i / sum(c). Mixed signs are allowed, so individual weights
    may fall outside [0, 1] while still summing to 1. A zero sum yields
    all-zero weights.
    """
    if not coefficients:
        return []

    values = as_finite(coefficients)
    total = sum(values)
    width = domain.width / len(values)

    buckets = []
    for i, value in enumerate(values):
        lo = domain.min + i * width
        # Last edge pinned to the domain bound
        hi = domain.max if i == len(values) - 1 else domain.min + (i + 1) * width
        weight = value / total if total != 0 else 0.0
        buckets.append((Range(lo=lo, hi=hi), weight))
    return buckets


def weighted_ranges(coefficients: Sequence[float], domain: Domain) -> List[Range]:
    """
    Buckets whose own coefficient is positive, in ascending order.

    Entries that are not finite numbers count as 0, so a stray value leaves
    the remaining buckets usable.
    """
    values = [_or_zero(value) for value in coefficients]
    return [bucket for (bucket, _), value in zip(to_ranges(values, domain), values) if value > 0]


def normalize_alpha(
    weights: Sequence[float],
    size: int = MAX_COEFFICIENTS,
    epsilon: float = 1e-8,
) -> List[float]:
    """
    Fixed-size, strictly positive weight vector summing to 1.

    Pads or truncates to `size`, maps negative and non-finite entries to 0
    and floors every entry at `epsilon` before normalizing.
    """
    padded = []
    for i in range(size):
        value = weights[i] if i < len(weights) else 0.0
        try:
            value = float(value)
        except (TypeError, ValueError):
            value = 0.0
        padded.append(max(value, 0.0) if math.isfinite(value) else 0.0)

    adjusted = [epsilon if value <= epsilon else value for value in padded]
    total = sum(adjusted)
    if total <= 0:
        return [1.0 / size] * size
    return [value / total for value in adjusted]


def as_finite(coefficients: Sequence[float]) -> List[float]:
    values = []
    for value in coefficients:
        if isinstance(value, bool):
            raise ValidationError("Coefficients must be numeric")
        try:
            number = float(value)
        except (TypeError, ValueError):
            raise ValidationError("Coefficients must be numeric")
        if not math.isfinite(number):
            raise ValidationError("Coefficients must be finite")
        values.append(number)
    return values


def _or_zero(value) -> float:
    if isinstance(value, bool):
        return 0.0
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    return number if math.isfinite(number) else 0.0
