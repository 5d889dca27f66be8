"""
Application configuration using Pydantic Settings.
"""
from functools import lru_cache
from typing import Optional, List
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Application
    app_name: str = "Range Market Engine"
    version: str = "1.0.0"
    debug: bool = False
    environment: str = "development"
    log_level: str = "INFO"

    # Server
    host: str = "0.0.0.0"
    port: int = 8000
    workers: int = 4

    # Density discretization
    pdf_resolution: int = 200

    # Pricing heuristics
    mass_scale: float = 10000.0
    slippage_coefficient: float = 0.5
    fee_rate: float = 0.003
    skew_nudge: float = 0.1

    # Market creation
    default_domain_min: float = 0.0
    default_domain_max: float = 100.0
    max_coefficients: int = 8

    # Storage
    market_store_path: str = "data/markets.json"

    # On-chain gateway
    gateway_url: Optional[str] = None
    gateway_timeout_seconds: float = 10.0

    # CORS
    cors_origins: List[str] = ["http://localhost:3000", "http://127.0.0.1:3000"]


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


settings = get_settings()
