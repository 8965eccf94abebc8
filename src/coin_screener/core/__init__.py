"""Core module for the screening engine."""

from .models import Coin, Candle, ScreeningMetrics, ScreeningResult, ScanStats
from .enums import ScreeningType, Condition
from .exceptions import (
    ScreenerError, InvalidStrategyError, DataUnavailableError, InsufficientHistoryError
)
from .state_lock import StateManager, StateLock

__all__ = [
    "Coin",
    "Candle",
    "ScreeningMetrics",
    "ScreeningResult",
    "ScanStats",
    "ScreeningType",
    "Condition",
    "ScreenerError",
    "InvalidStrategyError",
    "DataUnavailableError",
    "InsufficientHistoryError",
    "StateManager",
    "StateLock",
]
