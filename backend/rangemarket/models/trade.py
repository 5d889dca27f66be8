"""
Trade Models for the Range Market Pricing Core
"""
import math
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Sequence

from .market import Density, Domain, MarketStats


class TradeSide(str, Enum):
    BUY = "buy"
    SELL = "sell"


class LiquidityDepth(str, Enum):
    """Density at a point relative to the curve's average density."""
    THIN = "thin"
    MODERATE = "moderate"
    THICK = "thick"


@dataclass(frozen=True)
class Range:
    """Closed outcome interval [lo, hi] with lo < hi."""
    lo: float
    hi: float

    def contains(self, x: float) -> bool:
        return self.lo <= x <= self.hi

    @property
    def width(self) -> float:
        return self.hi - self.lo

    @classmethod
    def clamped(cls, lo: float, hi: float, domain: Domain) -> Optional['Range']:
        """
        Sort the endpoints, clamp them into the domain and return the range,
        or None when the result is degenerate.
        """
        if not (math.isfinite(lo) and math.isfinite(hi)):
            return None
        low = max(domain.min, min(lo, hi))
        high = min(domain.max, max(lo, hi))
        if high <= low:
            return None
        return cls(lo=low, hi=high)

    @classmethod
    def full(cls, domain: Domain) -> 'Range':
        return cls(lo=domain.min, hi=domain.max)

    def to_list(self) -> List[float]:
        return [self.lo, self.hi]


def sanitize_ranges(candidates: Sequence, domain: Domain) -> List[Range]:
    """
    Keep the candidates that are pairs of numbers, clamp them into the
    domain and drop the degenerate ones.
    """
    ranges = []
    for candidate in candidates or []:
        if isinstance(candidate, Range):
            candidate = candidate.to_list()
        if not isinstance(candidate, (list, tuple)) or len(candidate) != 2:
            continue
        if not all(isinstance(v, (int, float)) and not isinstance(v, bool) for v in candidate):
            continue
        clamped = Range.clamped(float(candidate[0]), float(candidate[1]), domain)
        if clamped is not None:
            ranges.append(clamped)
    return ranges


@dataclass(frozen=True)
class TradeRequest:
    """A trade to evaluate against one market snapshot."""
    side: TradeSide
    ranges: List[Range] = field(default_factory=list)
    notional_usd: float = 0.0

    def __post_init__(self):
        if isinstance(self.side, str):
            object.__setattr__(self, 'side', TradeSide(self.side))


@dataclass(frozen=True)
class ImpliedShift:
    delta_mean: float
    delta_variance: float

    def to_dict(self) -> dict:
        return {
            'deltaMean': self.delta_mean,
            'deltaVariance': self.delta_variance,
        }


@dataclass(frozen=True)
class TradeResult:
    """
    Outcome of a simulated trade. Derived only, never persisted by the core.
    """
    delta_mass: float
    cost_usd: float
    fee_usd: float
    new_density: Density
    new_stats: MarketStats
    implied_shift: ImpliedShift

    # Kept for reporting; not part of the wire result
    slippage_factor: float = 1.0
    ranges: List[Range] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            'deltaMass': self.delta_mass,
            'costUSD': self.cost_usd,
            'feeUSD': self.fee_usd,
            'newPdf': [p.to_dict() for p in self.new_density],
            'newStats': self.new_stats.to_dict(),
            'impliedShift': self.implied_shift.to_dict(),
        }
