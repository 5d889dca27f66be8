"""
Stats Calculator - Trapezoidal moments and integrals of a discretized density

Skew and kurtosis are not derived here. Callers carry them forward and
apply their own adjustment.
"""
from typing import List, Tuple

import numpy as np

from ..models.market import Density, PdfPoint
from ..models.trade import Range


def _arrays(density: Density) -> Tuple[np.ndarray, np.ndarray]:
    xs = np.fromiter((p.x for p in density), dtype=float, count=len(density))
    ys = np.fromiter((p.y for p in density), dtype=float, count=len(density))
    return xs, ys


def segment_weights(xs: np.ndarray, ys: np.ndarray) -> np.ndarray:
    """Trapezoid mass of each segment: dx * (y_i + y_{i+1}) / 2."""
    return np.diff(xs) * (ys[:-1] + ys[1:]) / 2


def node_weights(xs: np.ndarray) -> np.ndarray:
    """
    Per-point trapezoid weights, so that sum(node_weights * ys) equals the
    trapezoid integral of ys.
    """
    weights = np.zeros_like(xs)
    if len(xs) < 2:
        return weights
    dx = np.diff(xs)
    weights[:-1] += dx / 2
    weights[1:] += dx / 2
    return weights


def moments(density: Density) -> Tuple[float, float]:
    """
    Mean and variance of the density using segment midpoints and
    trapezoid weights. A zero-mass density reports (0, 0).
    """
    if len(density) < 2:
        return 0.0, 0.0

    xs, ys = _arrays(density)
    weights = segment_weights(xs, ys)
    total = float(weights.sum())
    if total == 0:
        return 0.0, 0.0

    midpoints = (xs[:-1] + xs[1:]) / 2
    mean = float((midpoints * weights).sum() / total)
    variance = float((((midpoints - mean) ** 2) * weights).sum() / total)
    return mean, variance


def total_mass(density: Density) -> float:
    """Trapezoid integral over the whole density."""
    if len(density) < 2:
        return 0.0
    xs, ys = _arrays(density)
    return float(segment_weights(xs, ys).sum())


def pdf_to_cdf(density: Density) -> List[PdfPoint]:
    """Running trapezoid integral; the first point is always 0."""
    if not density:
        return []
    xs, ys = _arrays(density)
    cumulative = np.concatenate(([0.0], np.cumsum(segment_weights(xs, ys))))
    return [PdfPoint(x=float(x), y=float(c)) for x, c in zip(xs, cumulative)]


def mass_in_range(density: Density, range_: Range) -> float:
    """
    Trapezoid mass between range.lo and range.hi, clipping partially
    covered segments and interpolating y linearly at the cut points.
    """
    mass = 0.0
    for left, right in zip(density, density[1:]):
        if right.x < range_.lo or left.x > range_.hi:
            continue
        dx_segment = right.x - left.x
        if dx_segment <= 0:
            continue

        start = max(left.x, range_.lo)
        end = min(right.x, range_.hi)
        slope = (right.y - left.y) / dx_segment
        start_y = left.y + slope * (start - left.x)
        end_y = left.y + slope * (end - left.x)
        mass += (start_y + end_y) / 2 * (end - start)
    return mass
