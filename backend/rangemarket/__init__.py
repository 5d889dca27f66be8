"""
Range Market Pricing Engine

Pricing core for a range-based prediction market:
- Discretizes an analytic prior over a bounded outcome domain
- Projects how a buy/sell of a given notional reshapes the density ("ghost curve")
- Prices the trade with a heuristic slippage model and a flat fee
- Reports moments and read-only curve analytics

The core is pure: no shared state, no caching, no I/O. Storage and
on-chain registration are injected collaborators.
"""

from .services import (
    MarketService,
    PriorEvaluator,
    TradeSimulator,
)
from .api import router

__all__ = [
    'MarketService',
    'PriorEvaluator',
    'TradeSimulator',
    'router',
]
