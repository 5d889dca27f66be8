"""
Shared fixtures and fakes for unit tests.
"""
from typing import List, Optional

import pytest

from rangemarket.models import Domain, MarketStats, NormalPrior, UniformPrior
from rangemarket.services import GatewayResult, InMemoryMarketRepository, MarketGateway, PriorEvaluator


class FakeGateway(MarketGateway):
    """Records registrations and answers with a canned result."""

    def __init__(self, result: Optional[GatewayResult] = None):
        self.result = result or GatewayResult(success=True, tx="5igNaTuRe")
        self.calls: List[tuple] = []
        self.closed = False

    async def register_market(self, alpha, expiry_seconds):
        self.calls.append((list(alpha), expiry_seconds))
        return self.result

    async def close(self):
        self.closed = True


@pytest.fixture
def domain() -> Domain:
    return Domain(min=0.0, max=100.0)


@pytest.fixture
def uniform_density(domain):
    return PriorEvaluator().evaluate(UniformPrior(), domain)


@pytest.fixture
def normal_density(domain):
    return PriorEvaluator().evaluate(NormalPrior(mean=50.0, variance=225.0), domain)


@pytest.fixture
def uniform_stats() -> MarketStats:
    return MarketStats(mean=50.0, variance=833.33, skew=0.0, kurtosis=3.0)


@pytest.fixture
def fake_gateway() -> FakeGateway:
    return FakeGateway()


@pytest.fixture
def repository() -> InMemoryMarketRepository:
    return InMemoryMarketRepository()


@pytest.fixture
def failing_gateway() -> FakeGateway:
    return FakeGateway(GatewayResult(
        success=False,
        error="Transaction simulation failed",
        logs=["Program log: alpha sum out of tolerance"],
    ))
