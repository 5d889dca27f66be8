"""
Domain errors for the range market engine.

Raised from models and services, translated to HTTP responses in the
route layer. No framework imports here.
"""


class MarketDomainError(Exception):
    """Base error for all range market errors."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(self.message)


class ValidationError(MarketDomainError):
    """Missing or malformed request fields."""


class NotFound(MarketDomainError):
    """Raised when a market id is unknown."""

    def __init__(self, market_id: str):
        super().__init__(f"Market not found: {market_id}")
        self.market_id = market_id


class InvalidParameter(MarketDomainError):
    """Prior or domain parameters outside their valid region."""


class UpstreamFailure(MarketDomainError):
    """The on-chain gateway reported a failure."""

    def __init__(self, message: str, logs: list = None):
        super().__init__(message)
        self.logs = logs or []


class UnexpectedFailure(MarketDomainError):
    """Any other fault. The message is safe to show to clients."""

    def __init__(self, message: str = "Internal server error"):
        super().__init__(message)
