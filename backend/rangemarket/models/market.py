"""
Market, Domain and Prior Models
"""
import math
from dataclasses import dataclass, field
from enum import Enum
from typing import ClassVar, Dict, List, Optional, Tuple

from ..errors import InvalidParameter


@dataclass(frozen=True)
class Domain:
    """Bounded outcome domain. All densities and ranges live inside one."""
    min: float
    max: float

    def __post_init__(self):
        if not (math.isfinite(self.min) and math.isfinite(self.max)):
            raise InvalidParameter(f"Domain bounds must be finite, got [{self.min}, {self.max}]")
        if self.min >= self.max:
            raise InvalidParameter(f"Domain requires min < max, got [{self.min}, {self.max}]")

    @property
    def width(self) -> float:
        return self.max - self.min

    def contains(self, x: float) -> bool:
        return self.min <= x <= self.max

    @classmethod
    def from_dict(cls, data: dict) -> 'Domain':
        return cls(min=float(data['min']), max=float(data['max']))

    def to_dict(self) -> dict:
        return {'min': self.min, 'max': self.max}


@dataclass(frozen=True)
class PdfPoint:
    """A single density sample. y is density, not probability."""
    x: float
    y: float

    def to_dict(self) -> dict:
        return {'x': self.x, 'y': self.y}


# Discretized density: ascending x, fixed resolution
Density = List[PdfPoint]


class PriorKind(str, Enum):
    NORMAL = "normal"
    LOGNORMAL = "lognormal"
    BETA = "beta"
    UNIFORM = "uniform"


@dataclass(frozen=True)
class PriorSpec:
    """Base of the closed set of prior families."""
    kind: ClassVar[PriorKind]

    @property
    def params(self) -> Dict[str, float]:
        return {}

    def to_dict(self) -> dict:
        return {'kind': self.kind.value, 'params': self.params}

    @staticmethod
    def from_dict(data: dict) -> 'PriorSpec':
        """
        Parse the wire shape {kind, params}.

        Unknown kinds fail instead of falling back to a default family.
        """
        raw_kind = (data or {}).get('kind')
        params = (data or {}).get('params') or {}
        try:
            kind = PriorKind(raw_kind)
        except ValueError:
            raise InvalidParameter(f"Unknown prior kind: {raw_kind!r}")

        try:
            if kind == PriorKind.NORMAL:
                return NormalPrior(mean=float(params['mean']), variance=float(params['variance']))
            if kind == PriorKind.LOGNORMAL:
                return LognormalPrior(mu=float(params['mu']), sigma=float(params['sigma']))
            if kind == PriorKind.BETA:
                return BetaPrior(alpha=float(params['alpha']), beta=float(params['beta']))
            return UniformPrior()
        except KeyError as e:
            raise InvalidParameter(f"Missing parameter {e.args[0]!r} for {kind.value} prior")
        except (TypeError, ValueError):
            raise InvalidParameter(f"Non-numeric parameter for {kind.value} prior")


@dataclass(frozen=True)
class NormalPrior(PriorSpec):
    kind: ClassVar[PriorKind] = PriorKind.NORMAL
    mean: float = 0.0
    variance: float = 1.0

    @property
    def params(self) -> Dict[str, float]:
        return {'mean': self.mean, 'variance': self.variance}


@dataclass(frozen=True)
class LognormalPrior(PriorSpec):
    kind: ClassVar[PriorKind] = PriorKind.LOGNORMAL
    mu: float = 0.0
    sigma: float = 1.0

    @property
    def params(self) -> Dict[str, float]:
        return {'mu': self.mu, 'sigma': self.sigma}


@dataclass(frozen=True)
class BetaPrior(PriorSpec):
    kind: ClassVar[PriorKind] = PriorKind.BETA
    alpha: float = 1.0
    beta: float = 1.0

    @property
    def params(self) -> Dict[str, float]:
        return {'alpha': self.alpha, 'beta': self.beta}


@dataclass(frozen=True)
class UniformPrior(PriorSpec):
    kind: ClassVar[PriorKind] = PriorKind.UNIFORM


@dataclass(frozen=True)
class MarketStats:
    """Summary moments reported for a market."""
    mean: float
    variance: float
    skew: float = 0.0
    kurtosis: float = 3.0

    @classmethod
    def from_dict(cls, data: dict) -> 'MarketStats':
        return cls(
            mean=float(data['mean']),
            variance=float(data['variance']),
            skew=float(data.get('skew', 0.0)),
            kurtosis=float(data.get('kurtosis', 3.0)),
        )

    def to_dict(self) -> dict:
        return {
            'mean': self.mean,
            'variance': self.variance,
            'skew': self.skew,
            'kurtosis': self.kurtosis,
        }


@dataclass(frozen=True)
class Market:
    """
    Read-only market snapshot consumed by the pricing core.
    """
    id: str
    title: str
    unit: str
    category: str
    domain: Domain
    prior: PriorSpec
    stats: MarketStats

    liquidity_usd: float = 0.0
    vol_24h_usd: float = 0.0
    resolves_at: Optional[str] = None
    description: Optional[str] = None

    @classmethod
    def from_dict(cls, data: dict) -> 'Market':
        return cls(
            id=data['id'],
            title=data['title'],
            unit=data['unit'],
            category=data['category'],
            domain=Domain.from_dict(data['domain']),
            prior=PriorSpec.from_dict(data['prior']),
            stats=MarketStats.from_dict(data['stats']),
            liquidity_usd=float(data.get('liquidityUSD', 0.0)),
            vol_24h_usd=float(data.get('vol24hUSD', 0.0)),
            resolves_at=data.get('resolvesAt'),
            description=data.get('description'),
        )

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'title': self.title,
            'unit': self.unit,
            'category': self.category,
            'domain': self.domain.to_dict(),
            'prior': self.prior.to_dict(),
            'liquidityUSD': self.liquidity_usd,
            'vol24hUSD': self.vol_24h_usd,
            'resolvesAt': self.resolves_at,
            'description': self.description,
            'stats': self.stats.to_dict(),
        }


@dataclass(frozen=True)
class StoredMarket(Market):
    """A market created through the service, as persisted by the store."""
    coefficients: List[float] = field(default_factory=list)
    ranges: List[Tuple[float, float]] = field(default_factory=list)
    expiry: Optional[str] = None
    created_at: Optional[str] = None
    tx_signature: Optional[str] = None

    @classmethod
    def from_dict(cls, data: dict) -> 'StoredMarket':
        base = Market.from_dict(data)
        return cls(
            id=base.id,
            title=base.title,
            unit=base.unit,
            category=base.category,
            domain=base.domain,
            prior=base.prior,
            stats=base.stats,
            liquidity_usd=base.liquidity_usd,
            vol_24h_usd=base.vol_24h_usd,
            resolves_at=base.resolves_at,
            description=base.description,
            coefficients=[float(c) for c in data.get('coefficients', [])],
            ranges=[(float(lo), float(hi)) for lo, hi in data.get('ranges', [])],
            expiry=data.get('expiry'),
            created_at=data.get('createdAt'),
            tx_signature=data.get('txSignature'),
        )

    def to_dict(self) -> dict:
        payload = super().to_dict()
        payload.update({
            'coefficients': list(self.coefficients),
            'ranges': [[lo, hi] for lo, hi in self.ranges],
            'expiry': self.expiry,
            'createdAt': self.created_at,
            'txSignature': self.tx_signature,
        })
        return payload
