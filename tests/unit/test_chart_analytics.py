"""
Tests for read-only curve analytics
"""
import pytest

from rangemarket.models import LiquidityDepth, PdfPoint, Range, UniformPrior
from rangemarket.services import PriorEvaluator
from rangemarket.services.chart_analytics import cumulative_probability, find_mode, liquidity_depth


def _points(pairs):
    return [PdfPoint(x=x, y=y) for x, y in pairs]


class TestFindMode:

    def test_peak(self):
        assert find_mode(_points([(0, 1), (1, 5), (2, 2)])) == 1

    def test_tie_goes_to_lowest_x(self):
        assert find_mode(_points([(0, 1), (1, 1), (2, 0.5)])) == 0

    def test_empty(self):
        assert find_mode([]) == 0.0

    def test_normal_mode_near_mean(self, normal_density):
        assert find_mode(normal_density) == pytest.approx(50.0, abs=0.5)


class TestCumulativeProbability:

    def test_inner_window(self, domain):
        density = PriorEvaluator().evaluate(UniformPrior(), domain, resolution=5)
        assert cumulative_probability(density, Range(lo=25, hi=75)) == pytest.approx(0.5)

    def test_whole_domain(self, uniform_density):
        assert cumulative_probability(uniform_density, Range(lo=0, hi=100)) == pytest.approx(1.0)

    def test_monotone_in_window(self, normal_density):
        widths = [5, 10, 20, 40, 50]
        masses = [cumulative_probability(normal_density, Range(lo=50 - w, hi=50 + w)) for w in widths]
        assert masses == sorted(masses)
        assert all(0.0 <= m <= 1.0 + 1e-9 for m in masses)

    def test_window_without_points(self, domain):
        density = PriorEvaluator().evaluate(UniformPrior(), domain, resolution=5)
        assert cumulative_probability(density, Range(lo=10, hi=20)) == 0.0


class TestLiquidityDepth:

    DENSITY = _points([(0, 0.5), (1, 1.0), (2, 4.5)])

    def test_thin(self):
        assert liquidity_depth(self.DENSITY, 0) == LiquidityDepth.THIN

    def test_moderate_on_boundary(self):
        # ratio 0.5 is not below the thin threshold
        assert liquidity_depth(self.DENSITY, 1) == LiquidityDepth.MODERATE

    def test_thick(self):
        assert liquidity_depth(self.DENSITY, 2) == LiquidityDepth.THICK

    def test_no_point_within_tolerance(self):
        assert liquidity_depth(self.DENSITY, 10) == LiquidityDepth.MODERATE

    def test_nearest_point_wins(self):
        assert liquidity_depth(self.DENSITY, 1.7, tolerance=1.0) == LiquidityDepth.THICK

    def test_flat_zero_density(self):
        assert liquidity_depth(_points([(0, 0), (1, 0)]), 0) == LiquidityDepth.MODERATE
