"""Exceptions for the market pipeline."""


class MarketError(Exception):
    """Base exception for market pipeline errors."""

    pass


class InsufficientSeedError(MarketError):
    """Raised when the explore seed lacks the fields retrieval requires."""

    def __init__(self, missing: list[str]) -> None:
        self.missing = missing
        super().__init__(f"Insufficient seed (missing {'/'.join(missing)})")


class RetrievalError(MarketError):
    """Raised when the listings provider fails or rejects a request."""

    pass


class RetrievalTimeoutError(RetrievalError):
    """Raised when the listings provider does not answer within the timeout."""

    def __init__(self, timeout_ms: int) -> None:
        self.timeout_ms = timeout_ms
        super().__init__(f"Timeout after {timeout_ms}ms")
