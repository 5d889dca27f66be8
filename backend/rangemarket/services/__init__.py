"""
Range Market Services
"""
from .prior_service import PriorEvaluator, PriorConfig
from .trade_simulator import TradeSimulator, PricingConfig
from .market_repository import MarketRepository, InMemoryMarketRepository, JsonMarketRepository
from .market_gateway import MarketGateway, HttpMarketGateway, GatewayConfig, GatewayResult
from .market_service import MarketService

__all__ = [
    'PriorEvaluator',
    'PriorConfig',
    'TradeSimulator',
    'PricingConfig',
    'MarketRepository',
    'InMemoryMarketRepository',
    'JsonMarketRepository',
    'MarketGateway',
    'HttpMarketGateway',
    'GatewayConfig',
    'GatewayResult',
    'MarketService',
]
