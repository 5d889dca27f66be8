"""
API Routes for the Range Market Engine
"""
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, HTTPException, Request
from pydantic import BaseModel, ConfigDict, Field
from loguru import logger

from ..errors import (
    InvalidParameter,
    MarketDomainError,
    NotFound,
    UnexpectedFailure,
    UpstreamFailure,
    ValidationError,
)
from ..services.stats_service import pdf_to_cdf

router = APIRouter(tags=["markets"])


# ============================================================================
# Request/Response Models
# ============================================================================

class TradeRequestBody(BaseModel):
    """
    Trade evaluation request.

    Range fields are loosely typed on purpose: malformed entries are
    skipped by the service instead of rejecting the whole request.
    """
    model_config = ConfigDict(populate_by_name=True)

    market_id: Optional[str] = Field(default=None, alias="marketId")
    side: Optional[str] = Field(default=None, description="buy or sell")
    range_: Optional[Any] = Field(default=None, alias="range")
    ranges: Optional[List[Any]] = None
    coefficients: Optional[List[Any]] = None
    notional_usd: Optional[Any] = Field(default=None, alias="notionalUSD")
    amount_usd: Optional[Any] = Field(default=None, alias="amountUSD")

    @property
    def amount(self) -> float:
        """amountUSD wins over notionalUSD; neither given means 0."""
        for value in (self.amount_usd, self.notional_usd):
            if isinstance(value, (int, float)) and not isinstance(value, bool):
                return float(value)
        return 0.0


class CreateMarketBody(BaseModel):
    """Market creation request."""
    title: Optional[str] = None
    unit: Optional[str] = None
    category: Optional[str] = None
    description: Optional[str] = None
    expiry: Optional[str] = Field(default=None, description="ISO datetime")
    coefficients: Optional[List[Any]] = None
    ranges: Optional[List[Any]] = None


class AnalyticsBody(BaseModel):
    """Read-only curve queries over a market's prior density."""
    model_config = ConfigDict(populate_by_name=True)

    range_: Optional[List[Any]] = Field(default=None, alias="range")
    x: Optional[float] = None


class PdfPointResponse(BaseModel):
    x: float
    y: float


class StatsResponse(BaseModel):
    mean: float
    variance: float
    skew: float
    kurtosis: float


class ImpliedShiftResponse(BaseModel):
    deltaMean: float
    deltaVariance: float


class TradeResponse(BaseModel):
    """Trade evaluation result."""
    deltaMass: float
    costUSD: float
    feeUSD: float
    newPdf: List[PdfPointResponse]
    newStats: StatsResponse
    impliedShift: ImpliedShiftResponse


class MarketDetailResponse(BaseModel):
    """Market snapshot with its evaluated prior."""
    market: Dict[str, Any]
    pdf: List[PdfPointResponse]
    cdf: List[PdfPointResponse]
    stats: StatsResponse


def _http_error(error: MarketDomainError) -> HTTPException:
    """Translate a domain error into the matching HTTP response."""
    if isinstance(error, ValidationError):
        logger.warning(f"Rejected request: {error.message}")
        return HTTPException(status_code=400, detail=error.message)
    if isinstance(error, NotFound):
        return HTTPException(status_code=404, detail="Market not found")
    if isinstance(error, InvalidParameter):
        logger.warning(f"Invalid parameter: {error.message}")
        return HTTPException(status_code=422, detail=error.message)
    if isinstance(error, UpstreamFailure):
        return HTTPException(
            status_code=502,
            detail={'error': error.message, 'logs': error.logs},
        )
    if not isinstance(error, UnexpectedFailure):
        logger.error(f"Unhandled domain error: {error.message}")
    return HTTPException(status_code=500, detail=error.message)


# ============================================================================
# Endpoints
# ============================================================================

@router.post("/trade", response_model=TradeResponse)
async def evaluate_trade(body: TradeRequestBody, req: Request):
    """
    Price a hypothetical trade and project the resulting density.

    Ranges resolve in order: `ranges`, `range`, `coefficients`, whole domain.
    """
    try:
        if not body.market_id:
            raise ValidationError("marketId is required")

        service = req.app.state.market_service
        result = await service.evaluate_trade(
            market_id=body.market_id,
            side=body.side,
            notional_usd=body.amount,
            ranges=body.ranges,
            range_=body.range_,
            coefficients=body.coefficients,
        )
        return result.to_dict()

    except MarketDomainError as e:
        raise _http_error(e)
    except Exception as e:
        logger.exception(f"Trade evaluation error: {e}")
        raise _http_error(UnexpectedFailure())


@router.get("/markets")
async def list_markets(req: Request):
    """
    List created markets followed by the seeded markets.
    """
    service = req.app.state.market_service
    return [m.to_dict() for m in await service.list_markets()]


@router.post("/markets", status_code=201)
async def create_market(body: CreateMarketBody, req: Request):
    """
    Validate and seed a new market, registering it through the gateway.
    """
    try:
        service = req.app.state.market_service
        market = await service.create_market(
            title=body.title,
            unit=body.unit,
            category=body.category,
            expiry=body.expiry,
            coefficients=body.coefficients,
            description=body.description,
            ranges=body.ranges,
        )
        return market.to_dict()

    except MarketDomainError as e:
        raise _http_error(e)
    except Exception as e:
        logger.exception(f"Market creation error: {e}")
        raise _http_error(UnexpectedFailure("Failed to create market"))


@router.get("/markets/{market_id}", response_model=MarketDetailResponse)
async def get_market(req: Request, market_id: str):
    """
    Get a market together with its prior density and CDF.
    """
    try:
        service = req.app.state.market_service
        market = await service.get_market(market_id)
        pdf = service.market_density(market)

        return {
            'market': market.to_dict(),
            'pdf': [p.to_dict() for p in pdf],
            'cdf': [p.to_dict() for p in pdf_to_cdf(pdf)],
            'stats': market.stats.to_dict(),
        }

    except MarketDomainError as e:
        raise _http_error(e)
    except Exception as e:
        logger.exception(f"Error loading market {market_id}: {e}")
        raise _http_error(UnexpectedFailure())


@router.post("/markets/{market_id}/analytics")
async def market_analytics(req: Request, market_id: str, body: AnalyticsBody):
    """
    Mode, cumulative probability over `range` and liquidity depth at `x`.
    """
    try:
        service = req.app.state.market_service
        return await service.analytics(market_id, range_=body.range_, x=body.x)

    except MarketDomainError as e:
        raise _http_error(e)
    except Exception as e:
        logger.exception(f"Analytics error for {market_id}: {e}")
        raise _http_error(UnexpectedFailure())
