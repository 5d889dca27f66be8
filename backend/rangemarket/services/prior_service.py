"""
Prior Evaluator - Discretizes analytic prior densities over a bounded domain
"""
import math
from dataclasses import dataclass
from typing import Optional

import numpy as np

from ..errors import InvalidParameter
from ..models.market import (
    BetaPrior,
    Density,
    Domain,
    LognormalPrior,
    NormalPrior,
    PdfPoint,
    PriorSpec,
    UniformPrior,
)


@dataclass
class PriorConfig:
    """Configuration for prior discretization."""
    resolution: int = 200  # Points per density


class PriorEvaluator:
    """
    Turns a PriorSpec into an ordered point sequence.

    Points are equally spaced over [domain.min, domain.max] inclusive.
    No renormalization is applied; only variance/sigma/alpha/beta are
    validated.
    """

    def __init__(self, config: Optional[PriorConfig] = None):
        self.config = config or PriorConfig()

    def evaluate(
        self,
        prior: PriorSpec,
        domain: Domain,
        resolution: Optional[int] = None,
    ) -> Density:
        if resolution is None:
            resolution = self.config.resolution
        if resolution < 2:
            raise InvalidParameter(f"Resolution must be at least 2, got {resolution}")

        xs = np.linspace(domain.min, domain.max, resolution)

        if isinstance(prior, NormalPrior):
            ys = self._normal(xs, prior)
        elif isinstance(prior, LognormalPrior):
            ys = self._lognormal(xs, prior)
        elif isinstance(prior, BetaPrior):
            ys = self._beta(xs, prior, domain)
        elif isinstance(prior, UniformPrior):
            ys = np.full_like(xs, 1.0 / domain.width)
        else:
            raise InvalidParameter(f"Unsupported prior: {type(prior).__name__}")

        return [PdfPoint(x=float(x), y=float(y)) for x, y in zip(xs, ys)]

    def _normal(self, xs: np.ndarray, prior: NormalPrior) -> np.ndarray:
        if not prior.variance > 0:
            raise InvalidParameter(f"Normal prior requires variance > 0, got {prior.variance}")
        z2 = (xs - prior.mean) ** 2 / (2 * prior.variance)
        return np.exp(-z2) / math.sqrt(2 * math.pi * prior.variance)

    def _lognormal(self, xs: np.ndarray, prior: LognormalPrior) -> np.ndarray:
        if not prior.sigma > 0:
            raise InvalidParameter(f"Lognormal prior requires sigma > 0, got {prior.sigma}")
        ys = np.zeros_like(xs)
        # Support is (0, inf); non-positive x stays at zero density
        positive = xs > 0
        x = xs[positive]
        z2 = (np.log(x) - prior.mu) ** 2 / (2 * prior.sigma ** 2)
        ys[positive] = np.exp(-z2) / (x * prior.sigma * math.sqrt(2 * math.pi))
        return ys

    def _beta(self, xs: np.ndarray, prior: BetaPrior, domain: Domain) -> np.ndarray:
        a, b = prior.alpha, prior.beta
        if not (a > 0 and b > 0):
            raise InvalidParameter(f"Beta prior requires alpha > 0 and beta > 0, got ({a}, {b})")

        log_beta_fn = math.lgamma(a) + math.lgamma(b) - math.lgamma(a + b)
        ys = np.empty_like(xs)
        for i, x in enumerate(xs):
            u = min(1.0, max(0.0, (x - domain.min) / domain.width))
            ys[i] = _beta_kernel(u, a, b, log_beta_fn) / domain.width
        return ys


def _beta_kernel(u: float, a: float, b: float, log_beta_fn: float) -> float:
    """u^(a-1) (1-u)^(b-1) / B(a, b), with infinite endpoints reported as 0."""
    if u <= 0.0:
        if a < 1:
            return 0.0
        return math.exp(-log_beta_fn) if a == 1 else 0.0
    if u >= 1.0:
        if b < 1:
            return 0.0
        return math.exp(-log_beta_fn) if b == 1 else 0.0
    return math.exp((a - 1) * math.log(u) + (b - 1) * math.log1p(-u) - log_beta_fn)
