"""
Market Service - Trade evaluation and market creation seeding
"""
import math
import re
import time
from datetime import datetime, timezone
from typing import Any, Callable, List, Optional, Sequence

from loguru import logger

from ..errors import NotFound, UpstreamFailure, ValidationError
from ..models.market import Density, Market, MarketStats, StoredMarket, UniformPrior
from ..models.trade import (
    LiquidityDepth,
    Range,
    TradeRequest,
    TradeResult,
    TradeSide,
    sanitize_ranges,
)
from .chart_analytics import cumulative_probability, find_mode, liquidity_depth
from .coefficient_mapper import MAX_COEFFICIENTS, as_finite, normalize_alpha, weighted_ranges
from .market_gateway import MarketGateway
from .market_repository import MarketRepository
from .prior_service import PriorEvaluator
from .trade_simulator import TradeSimulator


_BASE36 = "0123456789abcdefghijklmnopqrstuvwxyz"


def slugify(text: str) -> str:
    slug = re.sub(r"[^a-z0-9]+", "-", text.lower()).strip("-")
    return slug or "market"


def to_base36(value: int) -> str:
    if value == 0:
        return "0"
    digits = []
    while value:
        value, remainder = divmod(value, 36)
        digits.append(_BASE36[remainder])
    return "".join(reversed(digits))


def parse_expiry(expiry: str) -> datetime:
    """Parse an ISO datetime; naive values are taken as UTC."""
    if not isinstance(expiry, str) or not expiry.strip():
        raise ValidationError("Expiry must be an ISO datetime")
    try:
        parsed = datetime.fromisoformat(expiry.strip().replace('Z', '+00:00'))
    except ValueError:
        raise ValidationError(f"Expiry is not a valid ISO datetime: {expiry!r}")
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


class MarketService:
    """
    Route-facing facade over the pricing core.

    Holds only collaborators (repository, gateway, evaluators); every
    computation builds fresh data from the market snapshot it reads.
    """

    def __init__(
        self,
        repository: MarketRepository,
        gateway: MarketGateway,
        prior_evaluator: Optional[PriorEvaluator] = None,
        simulator: Optional[TradeSimulator] = None,
        max_coefficients: int = MAX_COEFFICIENTS,
        clock: Callable[[], float] = time.time,
    ):
        self.repository = repository
        self.gateway = gateway
        self.prior_evaluator = prior_evaluator or PriorEvaluator()
        self.simulator = simulator or TradeSimulator()
        self.max_coefficients = max_coefficients
        self.clock = clock

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    async def list_markets(self) -> List[Market]:
        return await self.repository.list_markets()

    async def get_market(self, market_id: str) -> Market:
        market = await self.repository.get_market(market_id)
        if market is None:
            raise NotFound(market_id)
        return market

    def market_density(self, market: Market) -> Density:
        return self.prior_evaluator.evaluate(market.prior, market.domain)

    # ------------------------------------------------------------------
    # Trade evaluation
    # ------------------------------------------------------------------

    def resolve_ranges(
        self,
        market: Market,
        ranges: Optional[Sequence[Any]] = None,
        range_: Optional[Sequence[Any]] = None,
        coefficients: Optional[Sequence[Any]] = None,
    ) -> List[Range]:
        """
        Working ranges for a trade, first non-empty of: explicit ranges,
        the single explicit range, positive-weight coefficient buckets, the
        whole domain.
        """
        explicit = sanitize_ranges(ranges or [], market.domain)
        if explicit:
            return explicit

        if range_ is not None:
            single = sanitize_ranges([range_], market.domain)
            if single:
                return single

        if coefficients:
            buckets = weighted_ranges(coefficients, market.domain)
            if buckets:
                return buckets

        return [Range.full(market.domain)]

    async def evaluate_trade(
        self,
        market_id: str,
        side: str,
        notional_usd: float = 0.0,
        ranges: Optional[Sequence[Any]] = None,
        range_: Optional[Sequence[Any]] = None,
        coefficients: Optional[Sequence[Any]] = None,
    ) -> TradeResult:
        try:
            trade_side = TradeSide(side)
        except ValueError:
            raise ValidationError(f"Side must be 'buy' or 'sell', got {side!r}")

        market = await self.get_market(market_id)
        request = TradeRequest(
            side=trade_side,
            ranges=self.resolve_ranges(market, ranges, range_, coefficients),
            notional_usd=notional_usd,
        )

        return self.simulator.project(
            density=self.market_density(market),
            ranges=request.ranges,
            domain=market.domain,
            side=request.side,
            notional_usd=request.notional_usd,
            prior_stats=market.stats,
        )

    # ------------------------------------------------------------------
    # Analytics
    # ------------------------------------------------------------------

    async def analytics(
        self,
        market_id: str,
        range_: Optional[Sequence[Any]] = None,
        x: Optional[float] = None,
    ) -> dict:
        market = await self.get_market(market_id)
        density = self.market_density(market)

        result = {'mode': find_mode(density)}
        if range_ is not None:
            window = sanitize_ranges([range_], market.domain)
            result['cumulativeProbability'] = (
                cumulative_probability(density, window[0]) if window else 0.0
            )
        if x is not None:
            depth: LiquidityDepth = liquidity_depth(density, x)
            result['liquidityDepth'] = depth.value
        return result

    # ------------------------------------------------------------------
    # Market creation
    # ------------------------------------------------------------------

    async def create_market(
        self,
        title: Optional[str],
        unit: Optional[str],
        category: Optional[str],
        expiry: Optional[str],
        coefficients: Optional[Sequence[Any]],
        description: Optional[str] = None,
        ranges: Optional[Sequence[Any]] = None,
    ) -> StoredMarket:
        """
        Validate a creation request, register it through the gateway and
        store the seeded market projection.

        Raises:
            ValidationError: missing fields, bad coefficients or expiry
            UpstreamFailure: the gateway reported a failure
        """
        if not title or not unit or not category or not expiry:
            raise ValidationError("Missing required fields")

        if not isinstance(coefficients, (list, tuple)) or len(coefficients) == 0:
            raise ValidationError("Provide at least one coefficient")
        weights = as_finite(coefficients)

        expiry_at = parse_expiry(expiry)
        expiry_seconds = math.floor(expiry_at.timestamp())
        if expiry_seconds <= math.floor(self.clock()):
            raise ValidationError("Expiry must be in the future")

        domain = self.simulator.config.default_domain
        sanitized = sanitize_ranges(ranges or [], domain)
        stored_ranges = sanitized or weighted_ranges(weights, domain)

        alpha = normalize_alpha(weights, self.max_coefficients)
        result = await self.gateway.register_market(alpha, expiry_seconds)
        if not result.success:
            logger.warning(f"Market registration failed for {title!r}: {result.error}")
            raise UpstreamFailure(result.error or "On-chain transaction failed", logs=result.logs)

        now_ms = int(self.clock() * 1000)
        created_at = datetime.fromtimestamp(now_ms / 1000, tz=timezone.utc)
        market = StoredMarket(
            id=f"{slugify(title)}-{to_base36(now_ms)}",
            title=title,
            unit=unit,
            category=category,
            domain=domain,
            prior=UniformPrior(),
            stats=MarketStats(
                mean=(domain.min + domain.max) / 2,
                variance=domain.width ** 2 / 12,
                skew=0.0,
                kurtosis=3.0,
            ),
            resolves_at=_iso(expiry_at),
            description=description,
            coefficients=weights,
            ranges=[(r.lo, r.hi) for r in stored_ranges],
            expiry=_iso(expiry_at),
            created_at=_iso(created_at),
            tx_signature=result.tx,
        )

        await self.repository.append_market(market)
        logger.info(f"Created market {market.id} with {len(weights)} coefficient(s), tx={result.tx}")
        return market


def _iso(moment: datetime) -> str:
    return moment.astimezone(timezone.utc).isoformat(timespec='milliseconds').replace('+00:00', 'Z')
