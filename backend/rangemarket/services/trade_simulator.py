"""
Trade Simulator - Projects the "ghost" density and prices a range trade
"""
import math
from dataclasses import dataclass
from typing import List, Optional, Sequence

import numpy as np
from loguru import logger

from ..errors import ValidationError
from ..models.market import Density, Domain, MarketStats, PdfPoint
from ..models.trade import ImpliedShift, Range, TradeResult, TradeSide, sanitize_ranges
from .stats_service import moments, node_weights


@dataclass
class PricingConfig:
    """
    Heuristic pricing constants. None of these are calibrated to external
    liquidity; they exist to keep behaviour reproducible.
    """
    mass_scale: float = 10000.0  # Notional USD per unit of moved mass
    slippage_coefficient: float = 0.5  # slippage = 1 + |delta_mass| * coefficient
    fee_rate: float = 0.003  # 0.3% of slippage-adjusted cost
    skew_nudge: float = 0.1  # skew += delta_mass * nudge
    default_domain_min: float = 0.0
    default_domain_max: float = 100.0

    @property
    def default_domain(self) -> Domain:
        return Domain(min=self.default_domain_min, max=self.default_domain_max)


class TradeSimulator:
    """
    Simulates how a buy or sell reshapes a density inside outcome ranges.

    Pricing:
    - delta_mass = ±notional / mass_scale
    - slippage_factor = 1 + |delta_mass| * slippage_coefficient
    - buys pay notional * slippage, sells receive notional / slippage
    - fee = raw cost * fee_rate, cost = raw cost + fee

    Redistribution moves mass between the union of the ranges and its
    complement. The trapezoid integral is conserved only until one side
    clips at zero; higher moments are not recomputed.
    """

    def __init__(self, config: Optional[PricingConfig] = None):
        self.config = config or PricingConfig()

    def project(
        self,
        density: Density,
        ranges: Sequence[Range],
        domain: Domain,
        side: TradeSide,
        notional_usd: float,
        prior_stats: MarketStats,
    ) -> TradeResult:
        """
        Price a trade and build the projected density.

        Args:
            density: Current discretized density (not modified)
            ranges: Target ranges; empty means the whole domain
            domain: Domain owning the density and the ranges
            side: buy or sell
            notional_usd: Trade size before slippage and fees
            prior_stats: Market stats the implied shift is measured against

        Returns:
            TradeResult with cost, fee, new density and new stats
        """
        side = TradeSide(side)
        if notional_usd is None or not math.isfinite(notional_usd) or notional_usd < 0:
            raise ValidationError(f"Notional must be a non-negative number, got {notional_usd}")

        working_ranges = sanitize_ranges(ranges, domain) or [Range.full(domain)]

        base_delta_mass = notional_usd / self.config.mass_scale
        delta_mass = base_delta_mass if side == TradeSide.BUY else -base_delta_mass

        slippage_factor = self.slippage_factor(delta_mass)
        if side == TradeSide.BUY:
            raw_cost = notional_usd * slippage_factor
        else:
            raw_cost = notional_usd / slippage_factor
        fee_usd = raw_cost * self.config.fee_rate
        cost_usd = raw_cost + fee_usd

        new_density = self.redistribute(density, working_ranges, side, abs(delta_mass))

        new_mean, new_variance = moments(new_density)
        new_stats = MarketStats(
            mean=new_mean,
            variance=new_variance,
            skew=prior_stats.skew + delta_mass * self.config.skew_nudge,
            kurtosis=prior_stats.kurtosis,
        )

        logger.debug(
            f"Projected {side.value} ${notional_usd:,.2f} over {len(working_ranges)} range(s): "
            f"delta_mass={delta_mass:.4f}, cost=${cost_usd:,.2f}, fee=${fee_usd:,.2f}"
        )

        return TradeResult(
            delta_mass=delta_mass,
            cost_usd=cost_usd,
            fee_usd=fee_usd,
            new_density=new_density,
            new_stats=new_stats,
            implied_shift=ImpliedShift(
                delta_mean=new_mean - prior_stats.mean,
                delta_variance=new_variance - prior_stats.variance,
            ),
            slippage_factor=slippage_factor,
            ranges=working_ranges,
        )

    def slippage_factor(self, delta_mass: float) -> float:
        return 1 + abs(delta_mass) * self.config.slippage_coefficient

    def redistribute(
        self,
        density: Density,
        ranges: Sequence[Range],
        side: TradeSide,
        amount: float,
    ) -> List[PdfPoint]:
        """
        Shift `amount` of trapezoid mass into (buy) or out of (sell) the
        union of the ranges.

        buy:  in-range points gain amount * k each, complement points lose
              amount in proportion to their own density, clipped at 0.
        sell: in-range points lose amount * k each, clipped at 0, complement
              points gain amount in proportion to their own density.

        k = 1 / sum of in-range node weights. The integral is only conserved
        while neither side clips; a whole-domain range has no complement, so
        the curve simply rises or falls.
        """
        if amount <= 0 or len(density) < 2:
            return list(density)

        xs = np.array([p.x for p in density], dtype=float)
        ys = np.array([p.y for p in density], dtype=float)
        weights = node_weights(xs)

        in_range = np.zeros(len(xs), dtype=bool)
        for r in ranges:
            in_range |= (xs >= r.lo) & (xs <= r.hi)
        outside = ~in_range

        range_weight = float(weights[in_range].sum())
        if range_weight <= 0:
            return list(density)
        per_point = amount / range_weight

        outside_mass = float((ys[outside] * weights[outside]).sum())
        outside_weight = float(weights[outside].sum())

        new_ys = ys.copy()
        if side == TradeSide.BUY:
            new_ys[in_range] = ys[in_range] + per_point
            if outside_mass > 0:
                new_ys[outside] = np.maximum(ys[outside] * (1 - amount / outside_mass), 0.0)
        else:
            new_ys[in_range] = np.maximum(ys[in_range] - per_point, 0.0)
            if outside_mass > 0:
                new_ys[outside] = ys[outside] * (1 + amount / outside_mass)
            elif outside_weight > 0:
                new_ys[outside] = ys[outside] + amount / outside_weight

        return [PdfPoint(x=float(x), y=float(y)) for x, y in zip(xs, new_ys)]
