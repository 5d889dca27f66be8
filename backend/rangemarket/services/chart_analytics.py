"""
Chart Analytics - Read-only queries over a discretized density
"""
from ..models.market import Density
from ..models.trade import LiquidityDepth, Range

DEPTH_TOLERANCE = 0.5
THIN_RATIO = 0.5
THICK_RATIO = 1.5


def cumulative_probability(density: Density, range_: Range) -> float:
    """Trapezoid integral over the points with x inside the range."""
    inside = [p for p in density if range_.lo <= p.x <= range_.hi]
    total = 0.0
    for left, right in zip(inside, inside[1:]):
        total += (right.x - left.x) * (left.y + right.y) / 2
    return total


def find_mode(density: Density) -> float:
    """x of the highest point; ties go to the lowest x. Empty density -> 0."""
    if not density:
        return 0.0
    best = density[0]
    for point in density[1:]:
        if point.y > best.y:
            best = point
    return best.x


def liquidity_depth(
    density: Density,
    x: float,
    tolerance: float = DEPTH_TOLERANCE,
) -> LiquidityDepth:
    """
    Classify the density at x against the curve's average density.

    Uses the nearest point within `tolerance`; without one the depth is
    reported as moderate.
    """
    candidates = [p for p in density if abs(p.x - x) < tolerance]
    if not candidates:
        return LiquidityDepth.MODERATE
    point = min(candidates, key=lambda p: abs(p.x - x))

    average = sum(p.y for p in density) / len(density)
    if average <= 0:
        return LiquidityDepth.MODERATE

    ratio = point.y / average
    if ratio < THIN_RATIO:
        return LiquidityDepth.THIN
    if ratio > THICK_RATIO:
        return LiquidityDepth.THICK
    return LiquidityDepth.MODERATE
