"""Exception hierarchy for the screening engine."""

from typing import Optional


class ScreenerError(Exception):
    """Base class for screener errors."""


class InvalidStrategyError(ScreenerError, ValueError):
    """Raised for a screening type that is not registered."""

    def __init__(self, strategy):
        self.strategy = strategy
        super().__init__(f"Invalid screening type: {strategy}")


class DataUnavailableError(ScreenerError):
    """Upstream market data could not be fetched or came back empty."""

    def __init__(self, market: str, reason: Optional[str] = None):
        self.market = market
        self.reason = reason
        message = f"No candle data for {market}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class InsufficientHistoryError(ScreenerError):
    """Candle series is too short to evaluate."""

    def __init__(self, available: int, required: int):
        self.available = available
        self.required = required
        super().__init__(f"Need at least {required} candles, got {available}")
