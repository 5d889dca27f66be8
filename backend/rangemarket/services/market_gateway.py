"""
Market Gateway - Delegates on-chain market registration to an external service
"""
import asyncio
from dataclasses import dataclass, field
from typing import List, Optional

import aiohttp
from loguru import logger


@dataclass
class GatewayConfig:
    """Configuration for the registration gateway."""
    base_url: Optional[str] = None
    timeout_seconds: float = 10.0
    market_fee: int = 0

    # Market parameters forwarded with every registration
    basis_order: int = 3
    domain_low: float = 0.0
    domain_high: float = 100.0
    eps_alpha: float = 1e-8
    tol_coeff_sum: float = 1e-10
    tol_prob_sum: float = 1e-6
    boundary_margin_eta: float = 1e-4
    eps_dens: float = 1e-10
    mu_default: float = 1.0


@dataclass
class GatewayResult:
    """Outcome of a registration attempt: {success, tx} or {success: False, error}."""
    success: bool
    tx: Optional[str] = None
    error: Optional[str] = None
    logs: List[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        if self.success:
            return {'success': True, 'tx': self.tx}
        return {'success': False, 'error': self.error, 'logs': self.logs}


class MarketGateway:
    """Interface for on-chain registration."""

    async def register_market(self, alpha: List[float], expiry_seconds: int) -> GatewayResult:
        raise NotImplementedError

    async def close(self):
        pass


class HttpMarketGateway(MarketGateway):
    """
    Posts new markets to the signing service at `{base_url}/markets`.

    Transport errors and non-2xx responses are reported as failed results,
    never raised; the caller decides how to surface them.
    """

    def __init__(self, config: Optional[GatewayConfig] = None):
        self.config = config or GatewayConfig()
        self._session: Optional[aiohttp.ClientSession] = None

    async def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            timeout = aiohttp.ClientTimeout(total=self.config.timeout_seconds)
            self._session = aiohttp.ClientSession(timeout=timeout)
        return self._session

    def build_payload(self, alpha: List[float], expiry_seconds: int) -> dict:
        return {
            'market_fee': self.config.market_fee,
            'alpha': list(alpha),
            'expiry': int(expiry_seconds),
            'params': {
                'k': self.config.basis_order,
                'l': self.config.domain_low,
                'h': self.config.domain_high,
                'unit_map_kind': 'linear',
                'eps_alpha': self.config.eps_alpha,
                'tol_coeff_sum': self.config.tol_coeff_sum,
                'tol_prob_sum': self.config.tol_prob_sum,
                'boundary_margin_eta': self.config.boundary_margin_eta,
                'eps_dens': self.config.eps_dens,
                'mu_default': self.config.mu_default,
            },
        }

    async def register_market(self, alpha: List[float], expiry_seconds: int) -> GatewayResult:
        if not self.config.base_url:
            return GatewayResult(success=False, error="Missing on-chain gateway configuration")

        url = f"{self.config.base_url.rstrip('/')}/markets"
        payload = self.build_payload(alpha, expiry_seconds)

        try:
            session = await self._get_session()
            async with session.post(url, json=payload) as resp:
                if resp.status >= 300:
                    text = await resp.text()
                    logger.error(f"Gateway rejected market registration: {resp.status} {text[:200]}")
                    return GatewayResult(
                        success=False,
                        error=f"Gateway returned {resp.status}: {resp.reason}",
                    )

                data = await resp.json()
                if not data.get('success', True):
                    return GatewayResult(
                        success=False,
                        error=str(data.get('error') or "On-chain transaction failed"),
                        logs=list(data.get('logs') or []),
                    )

                tx = data.get('tx') or data.get('signature')
                logger.info(f"Registered market on-chain: tx={tx}")
                return GatewayResult(success=True, tx=tx)

        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.error(f"Gateway request failed: {e}")
            return GatewayResult(success=False, error=f"Gateway unreachable: {e}")

    async def close(self):
        if self._session and not self._session.closed:
            await self._session.close()
