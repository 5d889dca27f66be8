"""
Range Market Data Models
"""
from .market import (
    Domain, PdfPoint, Density, PriorKind, PriorSpec,
    NormalPrior, LognormalPrior, BetaPrior, UniformPrior,
    MarketStats, Market, StoredMarket,
)
from .trade import (
    TradeSide, LiquidityDepth, Range, TradeRequest, TradeResult,
    ImpliedShift, sanitize_ranges,
)

__all__ = [
    'Domain', 'PdfPoint', 'Density', 'PriorKind', 'PriorSpec',
    'NormalPrior', 'LognormalPrior', 'BetaPrior', 'UniformPrior',
    'MarketStats', 'Market', 'StoredMarket',
    'TradeSide', 'LiquidityDepth', 'Range', 'TradeRequest', 'TradeResult',
    'ImpliedShift', 'sanitize_ranges',
]
