"""
Crypto Market Screener

Screens exchange markets against technical-analysis rules built from daily
candles (Hull moving averages, breakouts, volume surges) and ranks the coins
that qualify.
"""

__version__ = "0.1.0"
__author__ = "Coin Screener Team"

from .core.models import Coin, Candle, ScreeningResult, ScreeningMetrics
from .core.enums import ScreeningType, Condition
from .core.exceptions import InvalidStrategyError
from .screener.orchestrator import ScreeningService

__all__ = [
    "Coin",
    "Candle",
    "ScreeningResult",
    "ScreeningMetrics",
    "ScreeningType",
    "Condition",
    "InvalidStrategyError",
    "ScreeningService",
]
