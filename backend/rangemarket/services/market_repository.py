"""
Market Repository - Storage collaborator for market snapshots

The pricing core never touches storage directly; routes and the market
service receive a repository instance and only read snapshots from it.
"""
import asyncio
import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from loguru import logger

from ..errors import InvalidParameter, UnexpectedFailure
from ..models.market import Market, StoredMarket


# Demo markets available in every environment
SEED_MARKET_DATA: Tuple[dict, ...] = (
    {
        'id': 'eth-price-2025',
        'title': 'ETH Price on Dec 31, 2025',
        'unit': 'USD',
        'category': 'Crypto',
        'domain': {'min': 0, 'max': 10000},
        'prior': {'kind': 'lognormal', 'params': {'mu': 8.2, 'sigma': 0.5}},
        'liquidityUSD': 125000,
        'vol24hUSD': 8500,
        'resolvesAt': '2025-12-31T23:59:59Z',
        'stats': {'mean': 3800, 'variance': 450000, 'skew': 0.8, 'kurtosis': 3.2},
    },
    {
        'id': 'us-cpi-q2-2025',
        'title': 'US CPI YoY Q2 2025',
        'unit': '%',
        'category': 'Economics',
        'domain': {'min': 0, 'max': 10},
        'prior': {'kind': 'normal', 'params': {'mean': 2.5, 'variance': 0.8}},
        'liquidityUSD': 85000,
        'vol24hUSD': 4200,
        'resolvesAt': '2025-06-30T23:59:59Z',
        'stats': {'mean': 2.5, 'variance': 0.8, 'skew': 0.1, 'kurtosis': 2.9},
    },
    {
        'id': 'global-temp-2035',
        'title': 'Global Temp Anomaly 2035',
        'unit': '°C',
        'category': 'Climate',
        'domain': {'min': 0, 'max': 4},
        'prior': {'kind': 'normal', 'params': {'mean': 1.8, 'variance': 0.3}},
        'liquidityUSD': 65000,
        'vol24hUSD': 2100,
        'resolvesAt': '2035-12-31T23:59:59Z',
        'stats': {'mean': 1.8, 'variance': 0.3, 'skew': 0.2, 'kurtosis': 2.8},
    },
    {
        'id': 'sp500-return-2025',
        'title': 'S&P 500 Annual Return 2025',
        'unit': '%',
        'category': 'Finance',
        'domain': {'min': -40, 'max': 60},
        'prior': {'kind': 'normal', 'params': {'mean': 8, 'variance': 180}},
        'liquidityUSD': 210000,
        'vol24hUSD': 15000,
        'resolvesAt': '2025-12-31T23:59:59Z',
        'stats': {'mean': 8, 'variance': 180, 'skew': -0.1, 'kurtosis': 3.5},
    },
    {
        'id': 'ai-benchmark-2026',
        'title': 'AI Benchmark Score 2026',
        'unit': 'other',
        'category': 'Technology',
        'domain': {'min': 0, 'max': 100},
        'prior': {'kind': 'beta', 'params': {'alpha': 5, 'beta': 2}},
        'liquidityUSD': 95000,
        'vol24hUSD': 6800,
        'resolvesAt': '2026-12-31T23:59:59Z',
        'stats': {'mean': 71.4, 'variance': 120, 'skew': -0.5, 'kurtosis': 2.4},
    },
)


def seed_markets() -> List[Market]:
    return [Market.from_dict(data) for data in SEED_MARKET_DATA]


class MarketRepository:
    """Interface for market storage. All access is awaited."""

    async def list_markets(self) -> List[Market]:
        raise NotImplementedError

    async def get_market(self, market_id: str) -> Optional[Market]:
        raise NotImplementedError

    async def append_market(self, market: StoredMarket) -> StoredMarket:
        raise NotImplementedError


class InMemoryMarketRepository(MarketRepository):
    """
    Seeded markets plus any markets appended during the process lifetime.
    """

    def __init__(self, markets: Optional[Iterable[Market]] = None):
        self._seeded: Tuple[Market, ...] = tuple(seed_markets() if markets is None else markets)
        self._created: Dict[str, StoredMarket] = {}
        self._lock = asyncio.Lock()

    async def list_markets(self) -> List[Market]:
        async with self._lock:
            return list(self._created.values()) + list(self._seeded)

    async def get_market(self, market_id: str) -> Optional[Market]:
        async with self._lock:
            if market_id in self._created:
                return self._created[market_id]
        return next((m for m in self._seeded if m.id == market_id), None)

    async def append_market(self, market: StoredMarket) -> StoredMarket:
        async with self._lock:
            self._created.pop(market.id, None)
            self._created[market.id] = market
        return market


class JsonMarketRepository(MarketRepository):
    """
    Persists created markets to a JSON file shaped {"markets": [...]}.

    Lookups fall through to the seeded markets. The file is created on
    first use; appending an existing id replaces the old record. File I/O
    runs in a worker thread, serialized by an asyncio.Lock.

    An unreadable store is skipped on reads but refused on append, so a
    corrupt file is never overwritten.
    """

    def __init__(self, path: str, seeded: Optional[Sequence[Market]] = None):
        self.path = Path(path)
        self._seeded: Tuple[Market, ...] = tuple(seed_markets() if seeded is None else seeded)
        self._lock = asyncio.Lock()

    async def list_markets(self) -> List[Market]:
        async with self._lock:
            stored = await asyncio.to_thread(self._read)
        return list(stored) + list(self._seeded)

    async def get_market(self, market_id: str) -> Optional[Market]:
        async with self._lock:
            stored = await asyncio.to_thread(self._read)
        for market in stored:
            if market.id == market_id:
                return market
        return next((m for m in self._seeded if m.id == market_id), None)

    async def append_market(self, market: StoredMarket) -> StoredMarket:
        async with self._lock:
            count = await asyncio.to_thread(self._replace, market)
        logger.info(f"Stored market {market.id} ({count} stored)")
        return market

    def _replace(self, market: StoredMarket) -> int:
        markets = [m for m in self._read(strict=True) if m.id != market.id]
        markets.append(market)
        self._write(markets)
        return len(markets)

    def _ensure_store(self):
        if not self.path.exists():
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self._write([])

    def _read(self, strict: bool = False) -> List[StoredMarket]:
        self._ensure_store()
        with open(self.path, 'r', encoding='utf-8') as f:
            try:
                data = json.load(f)
            except json.JSONDecodeError as e:
                return self._unreadable(f"not valid JSON: {e}", strict)

        records = data.get('markets') if isinstance(data, dict) else None
        if not isinstance(records, list):
            return self._unreadable("not an object with a 'markets' list", strict)

        markets = []
        for raw in records:
            try:
                markets.append(StoredMarket.from_dict(raw))
            except (AttributeError, KeyError, TypeError, ValueError, InvalidParameter) as e:
                record_id = raw.get('id') if isinstance(raw, dict) else None
                logger.warning(f"Skipping malformed stored market {record_id!r}: {e}")
        return markets

    def _unreadable(self, reason: str, strict: bool) -> List[StoredMarket]:
        if strict:
            logger.error(f"Refusing to overwrite market store {self.path}: {reason}")
            raise UnexpectedFailure("Market store is unreadable")
        logger.warning(f"Market store {self.path} is {reason}, ignoring it")
        return []

    def _write(self, markets: List[StoredMarket]):
        payload = {
            'markets': [m.to_dict() for m in markets],
            'saved_at': datetime.now(timezone.utc).isoformat(),
        }
        with open(self.path, 'w', encoding='utf-8') as f:
            json.dump(payload, f, indent=2, ensure_ascii=False)
