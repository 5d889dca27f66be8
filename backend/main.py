"""
Range Market Engine - FastAPI Application
"""
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger
import uvicorn

from core.config import Settings, settings
from rangemarket.api import router as market_router
from rangemarket.services import (
    GatewayConfig,
    HttpMarketGateway,
    JsonMarketRepository,
    MarketGateway,
    MarketRepository,
    MarketService,
    PricingConfig,
    PriorConfig,
    PriorEvaluator,
    TradeSimulator,
)


def configure_logging(config: Settings):
    """Route loguru output to stderr at the configured level."""
    logger.remove()
    logger.add(sys.stderr, level=config.log_level.upper())


def build_market_service(
    config: Settings,
    repository: Optional[MarketRepository] = None,
    gateway: Optional[MarketGateway] = None,
) -> MarketService:
    """Wire the pricing core and its collaborators from settings."""
    pricing = PricingConfig(
        mass_scale=config.mass_scale,
        slippage_coefficient=config.slippage_coefficient,
        fee_rate=config.fee_rate,
        skew_nudge=config.skew_nudge,
        default_domain_min=config.default_domain_min,
        default_domain_max=config.default_domain_max,
    )
    gateway = gateway or HttpMarketGateway(GatewayConfig(
        base_url=config.gateway_url,
        timeout_seconds=config.gateway_timeout_seconds,
        domain_low=config.default_domain_min,
        domain_high=config.default_domain_max,
    ))
    return MarketService(
        repository=repository or JsonMarketRepository(config.market_store_path),
        gateway=gateway,
        prior_evaluator=PriorEvaluator(PriorConfig(resolution=config.pdf_resolution)),
        simulator=TradeSimulator(pricing),
        max_coefficients=config.max_coefficients,
    )


def create_app(
    config: Settings = settings,
    repository: Optional[MarketRepository] = None,
    gateway: Optional[MarketGateway] = None,
) -> FastAPI:
    """Build the application; tests inject their own repository and gateway."""

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator:
        """Application lifespan manager."""
        logger.info(f"Starting {config.app_name}...")

        app.state.market_service = build_market_service(config, repository, gateway)

        if not config.gateway_url and gateway is None:
            logger.warning("No gateway_url configured, market creation will be rejected")

        logger.info("Application started successfully")

        yield

        logger.info("Shutting down...")
        await app.state.market_service.gateway.close()
        logger.info("Shutdown complete")

    app = FastAPI(
        title=config.app_name,
        description="Range-based prediction market pricing API",
        version=config.version,
        lifespan=lifespan,
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(market_router, prefix="/api/v1")

    @app.get("/health")
    async def health_check():
        """Health check endpoint."""
        return {
            "status": "healthy",
            "version": config.version,
            "environment": config.environment,
        }

    return app


configure_logging(settings)
app = create_app()


if __name__ == "__main__":
    uvicorn.run(
        "main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        workers=1 if settings.debug else settings.workers,
    )
