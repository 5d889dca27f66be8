"""
Tests for market and trade models
"""
import pytest

from rangemarket.errors import InvalidParameter
from rangemarket.models import (
    BetaPrior,
    Domain,
    LognormalPrior,
    Market,
    NormalPrior,
    PriorSpec,
    Range,
    StoredMarket,
    TradeRequest,
    TradeSide,
    UniformPrior,
    sanitize_ranges,
)
from rangemarket.services.market_repository import SEED_MARKET_DATA


class TestDomain:

    def test_width(self):
        assert Domain(min=-40, max=60).width == 100

    def test_degenerate_rejected(self):
        with pytest.raises(InvalidParameter):
            Domain(min=5, max=5)

    def test_inverted_rejected(self):
        with pytest.raises(InvalidParameter):
            Domain(min=10, max=0)

    def test_infinite_rejected(self):
        with pytest.raises(InvalidParameter):
            Domain(min=0, max=float("inf"))


class TestPriorSpec:

    @pytest.mark.parametrize("data, expected", [
        ({'kind': 'normal', 'params': {'mean': 2.5, 'variance': 0.8}}, NormalPrior(mean=2.5, variance=0.8)),
        ({'kind': 'lognormal', 'params': {'mu': 8.2, 'sigma': 0.5}}, LognormalPrior(mu=8.2, sigma=0.5)),
        ({'kind': 'beta', 'params': {'alpha': 5, 'beta': 2}}, BetaPrior(alpha=5, beta=2)),
        ({'kind': 'uniform', 'params': {}}, UniformPrior()),
    ])
    def test_from_dict(self, data, expected):
        assert PriorSpec.from_dict(data) == expected

    def test_round_trip_shape(self):
        assert NormalPrior(mean=1, variance=2).to_dict() == {
            'kind': 'normal', 'params': {'mean': 1, 'variance': 2},
        }

    def test_unknown_kind(self):
        with pytest.raises(InvalidParameter):
            PriorSpec.from_dict({'kind': 'gamma', 'params': {}})

    def test_missing_param(self):
        with pytest.raises(InvalidParameter):
            PriorSpec.from_dict({'kind': 'normal', 'params': {'mean': 1}})

    def test_non_numeric_param(self):
        with pytest.raises(InvalidParameter):
            PriorSpec.from_dict({'kind': 'beta', 'params': {'alpha': 'a', 'beta': 2}})


class TestMarket:

    def test_seed_wire_keys(self):
        market = Market.from_dict(SEED_MARKET_DATA[0])
        payload = market.to_dict()
        assert payload['liquidityUSD'] == 125000
        assert payload['vol24hUSD'] == 8500
        assert payload['resolvesAt'] == '2025-12-31T23:59:59Z'
        assert payload['prior'] == {'kind': 'lognormal', 'params': {'mu': 8.2, 'sigma': 0.5}}

    def test_stored_market_round_trip(self):
        data = dict(SEED_MARKET_DATA[4])
        data.update({
            'coefficients': [1, 2],
            'ranges': [[0, 50], [50, 100]],
            'expiry': '2030-01-01T00:00:00.000Z',
            'createdAt': '2023-11-14T22:13:20.000Z',
            'txSignature': 'abc',
        })
        stored = StoredMarket.from_dict(data)
        assert stored.ranges == [(0.0, 50.0), (50.0, 100.0)]
        assert stored.tx_signature == 'abc'
        assert StoredMarket.from_dict(stored.to_dict()) == stored


class TestRange:

    def test_clamped_sorts_and_clamps(self, domain):
        assert Range.clamped(80, -10, domain) == Range(lo=0, hi=80)

    def test_clamped_outside_domain(self, domain):
        assert Range.clamped(100, 150, domain) is None

    def test_clamped_non_finite(self, domain):
        assert Range.clamped(float("nan"), 10, domain) is None

    def test_contains_is_inclusive(self):
        r = Range(lo=10, hi=20)
        assert r.contains(10) and r.contains(20)
        assert not r.contains(20.0001)

    def test_sanitize_skips_malformed(self, domain):
        candidates = [[10, 20], "bad", [1], [True, 5], [30, 30], (40, 50), [None, 3], Range(lo=60, hi=70)]
        assert sanitize_ranges(candidates, domain) == [
            Range(lo=10, hi=20), Range(lo=40, hi=50), Range(lo=60, hi=70),
        ]

    def test_sanitize_none(self, domain):
        assert sanitize_ranges(None, domain) == []


class TestTradeRequest:

    def test_side_coerced(self):
        assert TradeRequest(side="sell").side == TradeSide.SELL

    def test_invalid_side(self):
        with pytest.raises(ValueError):
            TradeRequest(side="hold")
